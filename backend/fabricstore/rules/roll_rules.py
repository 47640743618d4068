# Overview: Pure validation rules for rolls (status lifecycle, barcode reuse, fields).

"""
Roll lifecycle rules

STATE MACHINE:
    in_stock <-> reserved
    in_stock  -> sold
    reserved  -> sold

    sold is terminal: no outgoing transitions.
    Requesting the current status is a no-op and always succeeds.

BARCODE REUSE:
    A barcode may appear on many roll records over time, but at most one
    *active* roll (not soft-deleted, status in_stock/reserved) may hold it.
    Selling or deleting the holder releases the barcode.

Nothing here touches the database. Callers load state, call these
functions, and only then persist.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import Any, Iterable, Mapping

from ..enums import ACTIVE_ROLL_STATUSES, RollDegree, RollStatus, values
from ..errors import BusinessRuleError, ConflictError, ValidationError


VALID_TRANSITIONS: dict[str, tuple[str, ...]] = {
    RollStatus.IN_STOCK.value: (RollStatus.RESERVED.value, RollStatus.SOLD.value),
    # A reservation can be cancelled
    RollStatus.RESERVED.value: (RollStatus.IN_STOCK.value, RollStatus.SOLD.value),
    RollStatus.SOLD.value: (),
}

BARCODE_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
BARCODE_MIN_LENGTH = 3
BARCODE_MAX_LENGTH = 50
COLOR_MAX_LENGTH = 50
LOCATION_MAX_LENGTH = 100
MAX_LENGTH_METERS = 10_000

# Only these may change once a roll is sold
SOLD_ROLL_MUTABLE_FIELDS = {"location"}

REQUIRED_ON_CREATE = ("barcode", "catalog_id", "color", "degree", "length_meters")


def validate_status(status: Any) -> None:
    if status not in VALID_TRANSITIONS:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(values(RollStatus))}",
            field="status",
        )


def get_allowed_transitions(status: str) -> list[str]:
    validate_status(status)
    return list(VALID_TRANSITIONS[status])


def is_final_status(status: str) -> bool:
    return not get_allowed_transitions(status)


def validate_status_transition(current: str, requested: str, entity_id: str | None = None) -> None:
    """
    Raise INVALID_STATUS_TRANSITION unless current -> requested is allowed.

    The error carries the entity id, both statuses and the allowed set.
    """
    validate_status(current)
    validate_status(requested)

    if current == requested:
        return

    allowed = VALID_TRANSITIONS[current]
    if requested not in allowed:
        raise BusinessRuleError(
            f'Invalid status transition from "{current}" to "{requested}". '
            f'Allowed transitions from "{current}": {", ".join(allowed) or "none (final state)"}',
            "INVALID_STATUS_TRANSITION",
            {
                "entityId": entity_id,
                "from": current,
                "to": requested,
                "allowed": list(allowed),
            },
        )


def is_active_roll(roll: Mapping[str, Any]) -> bool:
    return roll.get("deletedAt") is None and roll.get("status") in ACTIVE_ROLL_STATUSES


def check_barcode_available(
    barcode: str,
    rolls: Iterable[Mapping[str, Any]],
    exclude_id: str | None = None,
) -> None:
    """
    In-memory form of the barcode reuse rule over API-shaped roll dicts.

    The roll service runs the same predicate as a SQL query; this version is
    what the client cache uses for a local pre-check.
    """
    for roll in rolls:
        if roll.get("barcode") != barcode or roll.get("id") == exclude_id:
            continue
        if is_active_roll(roll):
            raise ConflictError(
                f'Barcode "{barcode}" is already in use on an active roll '
                f'(ID: {roll.get("id")}, Status: {roll.get("status")})',
                "barcode",
            )


def _validate_fields(data: Mapping[str, Any]) -> None:
    if "barcode" in data:
        barcode = data["barcode"] or ""
        if not (BARCODE_MIN_LENGTH <= len(barcode) <= BARCODE_MAX_LENGTH):
            raise ValidationError(
                f"Barcode must be {BARCODE_MIN_LENGTH}-{BARCODE_MAX_LENGTH} characters long",
                field="barcode",
            )
        if not BARCODE_PATTERN.match(barcode):
            raise ValidationError(
                "Barcode can only contain letters, numbers, and hyphens",
                field="barcode",
            )

    if "color" in data:
        color = data["color"] or ""
        if not color:
            raise ValidationError("Color is required", field="color")
        if len(color) > COLOR_MAX_LENGTH:
            raise ValidationError(f"Color cannot exceed {COLOR_MAX_LENGTH} characters", field="color")

    if "degree" in data and data["degree"] not in values(RollDegree):
        raise ValidationError("Degree must be A, B, or C", field="degree")

    if "length_meters" in data:
        length = data["length_meters"]
        if length is None or length <= 0:
            raise ValidationError("Roll length must be greater than 0", field="lengthMeters")
        if length > MAX_LENGTH_METERS:
            raise ValidationError(
                f"Roll length cannot exceed {MAX_LENGTH_METERS} meters",
                field="lengthMeters",
                metadata={"maxLength": MAX_LENGTH_METERS, "provided": length},
            )

    if data.get("location") is not None and len(data["location"]) > LOCATION_MAX_LENGTH:
        raise ValidationError(
            f"Location cannot exceed {LOCATION_MAX_LENGTH} characters", field="location"
        )

    if "catalog_id" in data and not data["catalog_id"]:
        raise ValidationError("Catalog is required", field="catalogId")

    if "status" in data:
        validate_status(data["status"])


def validate_roll_create(data: Mapping[str, Any]) -> None:
    missing = [f for f in REQUIRED_ON_CREATE if data.get(f) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    _validate_fields(data)


def validate_roll_update(current, updates: Mapping[str, Any]) -> None:
    """
    Validate a partial update against the roll's current state.

    Order matters: the status transition is checked before the sold-roll
    freeze so that sold -> in_stock reports INVALID_STATUS_TRANSITION.
    """
    _validate_fields(updates)

    requested = updates.get("status")
    if requested is not None and requested != current.status:
        validate_status_transition(current.status, requested, entity_id=current.id)

    if current.status == RollStatus.SOLD.value:
        invalid = sorted(
            k for k in updates
            if k not in SOLD_ROLL_MUTABLE_FIELDS
            and not (k == "status" and updates[k] == RollStatus.SOLD.value)
        )
        if invalid:
            raise BusinessRuleError(
                "Cannot modify sold rolls except for location",
                "CANNOT_MODIFY_SOLD_ROLL",
                {"invalidFields": invalid, "allowedFields": sorted(SOLD_ROLL_MUTABLE_FIELDS)},
            )


def calculate_roll_stats(rolls: Iterable[Mapping[str, Any]]) -> dict:
    """Totals by status and by catalog over API-shaped roll dicts."""
    by_status = {s: 0 for s in values(RollStatus)}
    by_catalog: Counter = Counter()
    total = 0
    for roll in rolls:
        total += 1
        by_status[roll["status"]] = by_status.get(roll["status"], 0) + 1
        by_catalog[roll["catalogId"]] += 1
    return {"total": total, "byStatus": by_status, "byCatalog": dict(by_catalog)}
