# Overview: Permission system package.
# Re-exports the public API so callers import from `fabricstore.permissions`.

from .categories import PermissionCategory
from .definitions import (
    WILDCARD,
    PERMISSION_DEFINITIONS,
    ROLL_PERMISSIONS,
    CATALOG_PERMISSIONS,
    USER_PERMISSIONS,
    REPORT_PERMISSIONS,
    AUDIT_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import ROLE_PERMISSIONS, ROLE_LABELS, ROLE_DESCRIPTIONS
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    has_permission,
    has_any_permission,
    has_all_permissions,
    get_role_permissions,
)

__all__ = [
    "PermissionCategory",
    "WILDCARD",
    "PERMISSION_DEFINITIONS",
    "ROLL_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "USER_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "AUDIT_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "ROLE_PERMISSIONS",
    "ROLE_LABELS",
    "ROLE_DESCRIPTIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "has_permission",
    "has_any_permission",
    "has_all_permissions",
    "get_role_permissions",
]
