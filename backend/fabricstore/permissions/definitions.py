# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, label, category)

from .categories import PermissionCategory


# Grants every permission; only the admin role holds it.
WILDCARD = "*"


# -- ROLLS --

ROLL_PERMISSIONS = [
    ("rolls:read", "View Rolls", PermissionCategory.ROLLS),
    ("rolls:create", "Create Rolls", PermissionCategory.ROLLS),
    ("rolls:update", "Edit Rolls", PermissionCategory.ROLLS),
    ("rolls:delete", "Delete Rolls", PermissionCategory.ROLLS),
]


# -- CATALOGS --

CATALOG_PERMISSIONS = [
    ("catalogs:read", "View Catalogs", PermissionCategory.CATALOGS),
    ("catalogs:create", "Create Catalogs", PermissionCategory.CATALOGS),
    ("catalogs:update", "Edit Catalogs", PermissionCategory.CATALOGS),
    ("catalogs:delete", "Delete Catalogs", PermissionCategory.CATALOGS),
]


# -- USERS --

USER_PERMISSIONS = [
    ("users:read", "View Users", PermissionCategory.USERS),
    ("users:create", "Create Users", PermissionCategory.USERS),
    ("users:update", "Edit Users", PermissionCategory.USERS),
    ("users:delete", "Delete Users", PermissionCategory.USERS),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    ("reports:read", "View Reports", PermissionCategory.REPORTS),
    ("reports:create", "Create Reports", PermissionCategory.REPORTS),
    ("reports:export", "Export Reports", PermissionCategory.REPORTS),
]


# -- AUDIT --

AUDIT_PERMISSIONS = [
    ("audit:read", "View Audit Log", PermissionCategory.AUDIT),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    ("system:settings", "Manage Settings", PermissionCategory.SYSTEM),
    ("system:backup", "Create Backups", PermissionCategory.SYSTEM),
    ("system:restore", "Restore Backups", PermissionCategory.SYSTEM),
]


PERMISSION_DEFINITIONS = (
    ROLL_PERMISSIONS
    + CATALOG_PERMISSIONS
    + USER_PERMISSIONS
    + REPORT_PERMISSIONS
    + AUDIT_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
