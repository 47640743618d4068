# Overview: Enumerations shared by models, rules, permissions and the client.

from enum import Enum


class RollStatus(str, Enum):
    IN_STOCK = "in_stock"
    RESERVED = "reserved"
    SOLD = "sold"


class RollDegree(str, Enum):
    A = "A"
    B = "B"
    C = "C"


class CatalogStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    DRAFT = "draft"


class UserRole(str, Enum):
    ADMIN = "admin"
    STOREKEEPER = "storekeeper"
    VIEWER = "viewer"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AuditAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    LOGIN = "login"
    LOGOUT = "logout"


class EntityType(str, Enum):
    USER = "user"
    CATALOG = "catalog"
    ROLL = "roll"


# A roll holding one of these statuses (and not soft-deleted) owns its barcode.
ACTIVE_ROLL_STATUSES = (RollStatus.IN_STOCK.value, RollStatus.RESERVED.value)


def values(enum_cls) -> list[str]:
    return [member.value for member in enum_cls]
