# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    ROLLS = "ROLLS"
    CATALOGS = "CATALOGS"
    USERS = "USERS"
    REPORTS = "REPORTS"
    AUDIT = "AUDIT"
    SYSTEM = "SYSTEM"
