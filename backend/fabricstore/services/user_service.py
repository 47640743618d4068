# Overview: Service-layer operations for user accounts; encapsulates business logic and database work.

from __future__ import annotations

import logging

from sqlalchemy import or_

from ..enums import EntityType, UserStatus
from ..errors import AuthError, BusinessRuleError, ConflictError, NotFoundError, ValidationError
from ..models import User
from ..models.common import new_id
from ..rules import validate_user_create, validate_user_update
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload
from .audit_service import diff_fields
from .auth_service import hash_password, verify_password
from .concurrency import commit_or_conflict
from .session_service import revoke_user_sessions

logger = logging.getLogger(__name__)


USER_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "password", "role", "status"}),
    required_on_create=frozenset({"name", "email", "password", "role"}),
    extra_fields=frozenset({"password"}),
)
# `password` is accepted here only so the rules can reject it with a clear message
USER_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"name", "email", "password", "role", "status"}),
    extra_fields=frozenset({"password"}),
)


def _email_conflict(email: str) -> ConflictError:
    return ConflictError(f'Email "{email}" is already registered', "email")


class UserService:
    def __init__(self, session, audit):
        self.session = session
        self.audit = audit

    def _load(self, user_id: str) -> User:
        user = self.session.get(User, user_id)
        if user is None or user.deleted_at is not None:
            raise NotFoundError("User", user_id)
        return user

    def _email_taken(self, email: str, exclude_id: str | None = None) -> bool:
        query = self.session.query(User.id).filter(User.email == email)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def get_all(self, filters: dict | None = None) -> list[User]:
        filters = filters or {}
        query = self.session.query(User).filter(User.deleted_at.is_(None))
        if filters.get("role"):
            query = query.filter(User.role == filters["role"])
        if filters.get("status"):
            query = query.filter(User.status == filters["status"])
        search = (filters.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            query = query.filter(or_(User.name.ilike(like), User.email.ilike(like)))
        return query.order_by(User.name.asc()).all()

    def get_by_id(self, user_id: str) -> User:
        return self._load(user_id)

    def create(self, data: dict, actor_id: str | None) -> User:
        patch = validate_payload(model=User, payload=data, policy=USER_CREATE_POLICY, partial=False)
        validate_user_create(patch)
        password = patch.pop("password")
        patch["email"] = patch["email"].lower()
        patch.setdefault("status", UserStatus.ACTIVE.value)

        if self._email_taken(patch["email"]):
            raise _email_conflict(patch["email"])

        now = utcnow()
        user = User(
            id=new_id(),
            **patch,
            password_hash=hash_password(password),
            created_at=now,
            updated_at=now,
            created_by=actor_id,
            updated_by=actor_id,
        )
        self.session.add(user)

        self.audit.log_create(EntityType.USER.value, user.id, actor_id, user.to_dict())
        commit_or_conflict(self.session, _email_conflict(user.email))

        logger.info("User created id=%s role=%s by=%s", user.id, user.role, actor_id)
        return user

    def update(self, user_id: str, data: dict, actor_id: str | None) -> User:
        user = self._load(user_id)
        patch = validate_payload(model=User, payload=data, policy=USER_UPDATE_POLICY, partial=True)
        validate_user_update(patch)

        if "email" in patch:
            patch["email"] = patch["email"].lower()
            if patch["email"] != user.email and self._email_taken(patch["email"], user.id):
                raise _email_conflict(patch["email"])

        before = {key: getattr(user, key) for key in patch}
        for key, value in patch.items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        user.updated_by = actor_id

        if user.status != UserStatus.ACTIVE.value:
            revoke_user_sessions(self.session, user.id)

        changes = diff_fields(before, patch)
        self.audit.log_update(EntityType.USER.value, user.id, actor_id, changes)
        commit_or_conflict(self.session, _email_conflict(user.email))

        logger.info("User updated id=%s fields=%s by=%s", user.id, sorted(changes), actor_id)
        return user

    def delete(self, user_id: str, actor_id: str | None) -> None:
        user = self._load(user_id)
        if actor_id is not None and user.id == actor_id:
            raise BusinessRuleError(
                "You cannot delete your own account",
                "CANNOT_DELETE_SELF",
                {"userId": user.id},
            )

        now = utcnow()
        user.deleted_at = now
        user.deleted_by = actor_id
        user.updated_at = now
        user.updated_by = actor_id
        revoke_user_sessions(self.session, user.id)

        self.audit.log_delete(EntityType.USER.value, user.id, actor_id)
        commit_or_conflict(self.session)

        logger.info("User deleted id=%s by=%s", user.id, actor_id)

    def change_password(
        self,
        user_id: str,
        current_password: str,
        new_password: str,
        actor_id: str | None = None,
    ) -> None:
        user = self._load(user_id)
        if not current_password or not verify_password(current_password, user.password_hash):
            raise AuthError("Current password is incorrect", "AUTH_INVALID")
        if current_password == new_password:
            raise ValidationError(
                "New password must be different from the current password", field="newPassword"
            )

        user.password_hash = hash_password(new_password)
        user.updated_at = utcnow()
        user.updated_by = actor_id or user.id

        self.audit.log_update(
            EntityType.USER.value, user.id, actor_id or user.id, {"password": "changed"}
        )
        commit_or_conflict(self.session)

        logger.info("Password changed for user id=%s", user.id)
