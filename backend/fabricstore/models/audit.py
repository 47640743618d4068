from __future__ import annotations

import json

from ..extensions import db
from ..time_utils import to_utc_z, utcnow
from .common import new_id


class AuditLogEntry(db.Model):
    """
    Append-only record of who changed what and when.

    Rows are never updated. The only deletion path is retention pruning
    (AuditService.prune_older_than).
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        db.Index("ix_audit_entity", "entity_type", "entity_id"),
        db.Index("ix_audit_user", "user_id"),
        db.Index("ix_audit_timestamp", "timestamp"),
    )

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    entity_type = db.Column(db.String(20), nullable=False)
    entity_id = db.Column(db.String(36), nullable=False)
    action = db.Column(db.String(20), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)
    # JSON document of the payload / changes
    changes = db.Column(db.Text, nullable=True)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "action": self.action,
            "userId": self.user_id,
            "changes": json.loads(self.changes) if self.changes else None,
            "timestamp": to_utc_z(self.timestamp),
        }
