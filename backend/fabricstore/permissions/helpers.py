# Overview: Permission lookups over the static role table.

from __future__ import annotations

from typing import Iterable

from .definitions import PERMISSION_DEFINITIONS, WILDCARD
from .roles import ROLE_PERMISSIONS


def get_all_permission_codes() -> list[str]:
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category: str) -> list[tuple]:
    """Get all permissions in a category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[2] == category]


def get_permission_definition(code: str) -> dict | None:
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {"code": perm[0], "label": perm[1], "category": perm[2]}
    return None


def validate_permission_code(code: str) -> bool:
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def has_permission(role: str | None, permission: str) -> bool:
    """True if the role holds the wildcard or the exact permission. Unknown roles hold nothing."""
    granted = ROLE_PERMISSIONS.get(role or "", frozenset())
    return WILDCARD in granted or permission in granted


def has_any_permission(role: str | None, permissions: Iterable[str]) -> bool:
    return any(has_permission(role, p) for p in permissions)


def has_all_permissions(role: str | None, permissions: Iterable[str]) -> bool:
    return all(has_permission(role, p) for p in permissions)


def get_role_permissions(role: str) -> list[str]:
    """Concrete permission codes for a role; the wildcard expands to every code."""
    granted = ROLE_PERMISSIONS.get(role, frozenset())
    if WILDCARD in granted:
        return get_all_permission_codes()
    return [code for code in get_all_permission_codes() if code in granted]
