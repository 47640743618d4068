"""
User account rules.

Password policy: 8-100 characters with at least one uppercase letter,
one lowercase letter and one digit. Passwords are never accepted through the
generic update path; use UserService.change_password.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from ..enums import UserRole, UserStatus, values
from ..errors import ValidationError


NAME_PATTERN = re.compile(r"^[^\W\d_]+(?:[\s'-][^\W\d_]*)*$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8
# bcrypt only accepts up to 72 bytes of input
PASSWORD_MAX_BYTES = 72


def validate_password_strength(password: str | None) -> None:
    if not password or len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters", field="password"
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValidationError(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes", field="password"
        )
    if not re.search(r"[A-Z]", password):
        raise ValidationError("Password must contain at least one uppercase letter", field="password")
    if not re.search(r"[a-z]", password):
        raise ValidationError("Password must contain at least one lowercase letter", field="password")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one number", field="password")


def _validate_fields(data: Mapping[str, Any]) -> None:
    if "name" in data:
        name = data["name"] or ""
        if not name:
            raise ValidationError("Name is required", field="name")
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError("Name too long", field="name")
        if not NAME_PATTERN.match(name):
            raise ValidationError(
                "Name can only contain letters, spaces, hyphens, and apostrophes", field="name"
            )

    if "email" in data:
        email = data["email"] or ""
        if len(email) > EMAIL_MAX_LENGTH or not EMAIL_PATTERN.match(email):
            raise ValidationError("Invalid email format", field="email")

    if "role" in data and data["role"] not in values(UserRole):
        raise ValidationError("Invalid role", field="role")

    if "status" in data and data["status"] not in values(UserStatus):
        raise ValidationError("Invalid status", field="status")


def validate_user_create(data: Mapping[str, Any]) -> None:
    for key in ("name", "email", "role"):
        if not data.get(key):
            raise ValidationError(f"{key} is required", field=key)
    _validate_fields(data)
    validate_password_strength(data.get("password"))


def validate_user_update(data: Mapping[str, Any]) -> None:
    if "password" in data:
        raise ValidationError(
            "Password cannot be changed through a profile update", field="password"
        )
    _validate_fields(data)
