# Overview: Lifecycle & invariant engine. Pure functions, no persistence.

from .roll_rules import (
    VALID_TRANSITIONS,
    validate_status_transition,
    get_allowed_transitions,
    is_final_status,
    is_active_roll,
    check_barcode_available,
    validate_roll_create,
    validate_roll_update,
    calculate_roll_stats,
)
from .catalog_rules import (
    check_immutable_fields,
    validate_catalog_create,
    validate_catalog_update,
    validate_catalog_delete,
    can_modify_catalog,
    calculate_catalog_stats,
    suggest_catalog_code,
)
from .user_rules import (
    validate_password_strength,
    validate_user_create,
    validate_user_update,
)

__all__ = [
    "VALID_TRANSITIONS",
    "validate_status_transition",
    "get_allowed_transitions",
    "is_final_status",
    "is_active_roll",
    "check_barcode_available",
    "validate_roll_create",
    "validate_roll_update",
    "calculate_roll_stats",
    "check_immutable_fields",
    "validate_catalog_create",
    "validate_catalog_update",
    "validate_catalog_delete",
    "can_modify_catalog",
    "calculate_catalog_stats",
    "suggest_catalog_code",
    "validate_password_strength",
    "validate_user_create",
    "validate_user_update",
]
