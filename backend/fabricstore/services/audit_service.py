# Overview: Append-only audit trail; entries are staged in the caller's unit of work.

"""
Audit Service

Every create/update/delete/login/logout writes one AuditLogEntry. The log_*
methods only add the entry to the session; the calling service commits it
together with the mutation so the two are never persisted apart.

Entries are never updated. prune_older_than is the only deletion path.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from ..enums import AuditAction, EntityType, values
from ..errors import DatabaseError, ValidationError
from ..models import AuditLogEntry
from ..time_utils import days_ago, utcnow
from .concurrency import run_with_retry

logger = logging.getLogger(__name__)

MAX_PER_PAGE = 200


def serialize_changes(changes: Any) -> str | None:
    if changes is None:
        return None
    return json.dumps(changes, default=str, sort_keys=True)


def diff_fields(before: dict, after: dict) -> dict:
    """{field: {"from": old, "to": new}} for every key whose value changed."""
    return {
        key: {"from": before.get(key), "to": value}
        for key, value in after.items()
        if before.get(key) != value
    }


class AuditService:
    def __init__(self, session):
        self.session = session

    def _record(
        self,
        entity_type: str,
        entity_id: str,
        action: str,
        user_id: str | None,
        changes: Any = None,
    ) -> AuditLogEntry:
        entry = AuditLogEntry(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            user_id=user_id,
            changes=serialize_changes(changes),
            timestamp=utcnow(),
        )
        self.session.add(entry)
        return entry

    def log_create(self, entity_type: str, entity_id: str, user_id: str | None, data: dict):
        return self._record(entity_type, entity_id, AuditAction.CREATE.value, user_id, data)

    def log_update(self, entity_type: str, entity_id: str, user_id: str | None, changes: dict):
        return self._record(entity_type, entity_id, AuditAction.UPDATE.value, user_id, changes)

    def log_delete(self, entity_type: str, entity_id: str, user_id: str | None):
        return self._record(entity_type, entity_id, AuditAction.DELETE.value, user_id)

    def log_login(self, user_id: str, ip_address: str | None = None):
        return self._record(
            EntityType.USER.value, user_id, AuditAction.LOGIN.value, user_id,
            {"ipAddress": ip_address} if ip_address else None,
        )

    def log_logout(self, user_id: str):
        return self._record(EntityType.USER.value, user_id, AuditAction.LOGOUT.value, user_id)

    def find(self, filters: dict | None = None, page: int = 1, per_page: int = 50):
        """
        Paginated search, newest first.

        Filters: entity_type, entity_id, action, user_id, since, until.
        Returns (entries, total).
        """
        filters = filters or {}
        page = max(page, 1)
        per_page = min(max(per_page, 1), MAX_PER_PAGE)

        if filters.get("entity_type") and filters["entity_type"] not in values(EntityType):
            raise ValidationError("Invalid entityType", field="entityType")
        if filters.get("action") and filters["action"] not in values(AuditAction):
            raise ValidationError("Invalid action", field="action")

        query = self.session.query(AuditLogEntry)
        for key in ("entity_type", "entity_id", "action", "user_id"):
            if filters.get(key):
                query = query.filter(getattr(AuditLogEntry, key) == filters[key])
        if filters.get("since"):
            query = query.filter(AuditLogEntry.timestamp >= filters["since"])
        if filters.get("until"):
            query = query.filter(AuditLogEntry.timestamp <= filters["until"])

        total = query.count()
        entries = (
            query.order_by(AuditLogEntry.timestamp.desc(), AuditLogEntry.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return entries, total

    def find_by_entity(self, entity_type: str, entity_id: str) -> list[AuditLogEntry]:
        return (
            self.session.query(AuditLogEntry)
            .filter_by(entity_type=entity_type, entity_id=entity_id)
            .order_by(AuditLogEntry.timestamp.asc())
            .all()
        )

    def prune_older_than(self, days: int) -> int:
        """Delete entries older than `days` days. Returns the number removed."""
        if days < 1:
            raise ValidationError("Retention must be at least 1 day", field="retentionDays")

        def _op():
            cutoff = days_ago(days)
            removed = (
                self.session.query(AuditLogEntry)
                .filter(AuditLogEntry.timestamp < cutoff)
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return removed

        try:
            removed = run_with_retry(_op, session=self.session)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise DatabaseError("Audit pruning failed") from exc
        logger.info("Pruned %d audit entries older than %d days", removed, days)
        return removed
