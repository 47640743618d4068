# Overview: Static role -> permission matrix.

from ..enums import UserRole
from .definitions import WILDCARD


ROLE_PERMISSIONS = {
    # Full access to everything
    UserRole.ADMIN.value: frozenset({WILDCARD}),

    # Manages inventory and catalogs, reads/exports reports
    UserRole.STOREKEEPER.value: frozenset({
        "rolls:read",
        "rolls:create",
        "rolls:update",
        "catalogs:read",
        "catalogs:create",
        "catalogs:update",
        "reports:read",
        "reports:export",
    }),

    # Read-only
    UserRole.VIEWER.value: frozenset({
        "rolls:read",
        "catalogs:read",
        "reports:read",
    }),
}

ROLE_LABELS = {
    UserRole.ADMIN.value: "Administrator",
    UserRole.STOREKEEPER.value: "Storekeeper",
    UserRole.VIEWER.value: "Viewer",
}

ROLE_DESCRIPTIONS = {
    UserRole.ADMIN.value: "Full access to all system resources including user management and system settings",
    UserRole.STOREKEEPER.value: "Can manage inventory, catalogs, and view reports. Cannot manage users or system settings",
    UserRole.VIEWER.value: "Read-only access to inventory, catalogs, and reports",
}
