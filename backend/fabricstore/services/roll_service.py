# Overview: Service-layer operations for rolls; encapsulates business logic and database work.

"""
Roll Service

Orchestrates every roll mutation as: normalize payload -> lifecycle rules ->
barcode availability -> persist -> audit -> single commit.

BARCODE REUSE:
- The availability query below is the friendly fast path.
- uq_rolls_active_barcode (partial unique index) is the authoritative guard;
  a violation on commit is reported as the same CONFLICT.
"""

from __future__ import annotations

import logging

from sqlalchemy import func, or_

from ..enums import ACTIVE_ROLL_STATUSES, EntityType, RollStatus
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Catalog, Roll
from ..models.common import new_id
from ..rules import validate_roll_create, validate_roll_update
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload
from .audit_service import diff_fields
from .concurrency import commit_or_conflict

logger = logging.getLogger(__name__)


_ROLL_WIRE_FIELDS = frozenset({
    "barcode", "catalogId", "color", "degree", "lengthMeters", "status", "location",
})
_ROLL_ALIASES = {"catalogId": "catalog_id", "lengthMeters": "length_meters"}

ROLL_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=_ROLL_WIRE_FIELDS,
    required_on_create=frozenset({"barcode", "catalogId", "color", "degree", "lengthMeters"}),
    aliases=_ROLL_ALIASES,
)
ROLL_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=_ROLL_WIRE_FIELDS,
    aliases=_ROLL_ALIASES,
)

# Column name -> wire name, for audit diffs
_WIRE_NAMES = {v: k for k, v in _ROLL_ALIASES.items()}


def _barcode_conflict(barcode: str, holder: Roll | None = None) -> ConflictError:
    if holder is None:
        return ConflictError(f'Barcode "{barcode}" is already in use on an active roll', "barcode")
    return ConflictError(
        f'Barcode "{barcode}" is already in use on an active roll '
        f"(ID: {holder.id}, Status: {holder.status})",
        "barcode",
    )


class RollService:
    def __init__(self, session, audit):
        self.session = session
        self.audit = audit

    # ------------------------------------------------------------------ reads

    def _active_holder(self, barcode: str, exclude_id: str | None = None) -> Roll | None:
        query = self.session.query(Roll).filter(
            Roll.barcode == barcode,
            Roll.deleted_at.is_(None),
            Roll.status.in_(ACTIVE_ROLL_STATUSES),
        )
        if exclude_id:
            query = query.filter(Roll.id != exclude_id)
        return query.first()

    def _load(self, roll_id: str) -> Roll:
        roll = self.session.get(Roll, roll_id)
        if roll is None or roll.deleted_at is not None:
            raise NotFoundError("Roll", roll_id)
        return roll

    def get_all(self, filters: dict | None = None) -> list[Roll]:
        """
        Filters: catalog, status, degree, color, search (barcode/color/location),
        min_length, max_length, include_deleted. Newest first.
        """
        filters = filters or {}
        query = self.session.query(Roll)

        if not filters.get("include_deleted"):
            query = query.filter(Roll.deleted_at.is_(None))
        if filters.get("catalog"):
            query = query.filter(Roll.catalog_id == filters["catalog"])
        if filters.get("status"):
            query = query.filter(Roll.status == filters["status"])
        if filters.get("degree"):
            query = query.filter(Roll.degree == filters["degree"])
        if filters.get("color"):
            query = query.filter(Roll.color == filters["color"])
        if filters.get("min_length") is not None:
            query = query.filter(Roll.length_meters >= filters["min_length"])
        if filters.get("max_length") is not None:
            query = query.filter(Roll.length_meters <= filters["max_length"])

        search = (filters.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            query = query.filter(or_(
                Roll.barcode.ilike(like),
                Roll.color.ilike(like),
                Roll.location.ilike(like),
            ))

        return query.order_by(Roll.created_at.desc(), Roll.id).all()

    def get_by_id(self, roll_id: str) -> Roll:
        return self._load(roll_id)

    def get_by_barcode(self, barcode: str) -> Roll:
        """Return the active holder of a barcode."""
        roll = self._active_holder(barcode)
        if roll is None:
            raise NotFoundError("Roll", barcode)
        return roll

    def is_barcode_available(self, barcode: str, exclude_id: str | None = None) -> bool:
        return self._active_holder(barcode, exclude_id) is None

    def get_inventory_summary(self) -> list[dict]:
        """Count and total meters per status over non-deleted rolls."""
        rows = (
            self.session.query(
                Roll.status,
                func.count(Roll.id),
                func.coalesce(func.sum(Roll.length_meters), 0.0),
            )
            .filter(Roll.deleted_at.is_(None))
            .group_by(Roll.status)
            .all()
        )
        found = {status: (count, float(total)) for status, count, total in rows}
        return [
            {
                "status": status.value,
                "count": found.get(status.value, (0, 0.0))[0],
                "totalLength": found.get(status.value, (0, 0.0))[1],
            }
            for status in RollStatus
        ]

    def get_colors(self) -> list[str]:
        rows = (
            self.session.query(Roll.color)
            .filter(Roll.deleted_at.is_(None))
            .distinct()
            .order_by(Roll.color)
            .all()
        )
        return [color for (color,) in rows]

    # -------------------------------------------------------------- mutations

    def _require_catalog(self, catalog_id: str) -> None:
        catalog = self.session.get(Catalog, catalog_id)
        if catalog is None or catalog.deleted_at is not None:
            raise ValidationError(
                f"Catalog '{catalog_id}' does not exist",
                field="catalogId",
            )

    def create(self, data: dict, actor_id: str | None) -> Roll:
        patch = validate_payload(model=Roll, payload=data, policy=ROLL_CREATE_POLICY, partial=False)
        validate_roll_create(patch)
        self._require_catalog(patch["catalog_id"])

        status = patch.setdefault("status", RollStatus.IN_STOCK.value)
        if status in ACTIVE_ROLL_STATUSES:
            holder = self._active_holder(patch["barcode"])
            if holder is not None:
                raise _barcode_conflict(patch["barcode"], holder)

        now = utcnow()
        roll = Roll(
            id=new_id(),
            **patch,
            created_at=now,
            updated_at=now,
            created_by=actor_id,
            updated_by=actor_id,
        )
        self.session.add(roll)

        self.audit.log_create(EntityType.ROLL.value, roll.id, actor_id, roll.to_dict())
        commit_or_conflict(self.session, _barcode_conflict(roll.barcode))

        logger.info("Roll created id=%s barcode=%s by=%s", roll.id, roll.barcode, actor_id)
        return roll

    def update(self, roll_id: str, data: dict, actor_id: str | None) -> Roll:
        roll = self._load(roll_id)
        patch = validate_payload(model=Roll, payload=data, policy=ROLL_UPDATE_POLICY, partial=True)
        validate_roll_update(roll, patch)

        if "catalog_id" in patch and patch["catalog_id"] != roll.catalog_id:
            self._require_catalog(patch["catalog_id"])

        # Sold is terminal, so only an active roll can claim a new barcode
        new_barcode = patch.get("barcode", roll.barcode)
        if new_barcode != roll.barcode and roll.status in ACTIVE_ROLL_STATUSES:
            holder = self._active_holder(new_barcode, exclude_id=roll.id)
            if holder is not None:
                raise _barcode_conflict(new_barcode, holder)

        before = {key: getattr(roll, key) for key in patch}
        for key, value in patch.items():
            setattr(roll, key, value)
        roll.updated_at = utcnow()
        roll.updated_by = actor_id

        changes = {
            _WIRE_NAMES.get(key, key): change
            for key, change in diff_fields(before, patch).items()
        }
        self.audit.log_update(EntityType.ROLL.value, roll.id, actor_id, changes)
        commit_or_conflict(self.session, _barcode_conflict(new_barcode))

        logger.info("Roll updated id=%s fields=%s by=%s", roll.id, sorted(changes), actor_id)
        return roll

    def delete(self, roll_id: str, actor_id: str | None) -> None:
        roll = self._load(roll_id)
        now = utcnow()
        roll.deleted_at = now
        roll.deleted_by = actor_id
        roll.updated_at = now
        roll.updated_by = actor_id

        self.audit.log_delete(EntityType.ROLL.value, roll.id, actor_id)
        commit_or_conflict(self.session)

        logger.info("Roll deleted id=%s by=%s", roll.id, actor_id)
