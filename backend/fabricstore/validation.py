from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Float, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: wire (camelCase) names clients may send (security boundary)
    - required_on_create: wire names required for POST
    - aliases: wire name -> model column key, for names that differ
    - extra_fields: writable wire names that are not columns (e.g. "password");
      they pass through as stripped strings
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    aliases: dict[str, str] = field(default_factory=dict)
    extra_fields: frozenset[str] = frozenset()

    def column_for(self, wire_name: str) -> str:
        return self.aliases.get(wire_name, wire_name)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, wire_name: str, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Floats (lengths) - accept ints, floats and numeric strings; reject bools/NaN
    if isinstance(coltype, Float):
        if isinstance(value, bool):
            raise ValidationError(f"{wire_name} must be a number", field=wire_name)
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str):
            stripped = value.strip()
            try:
                number = float(stripped)
            except ValueError:
                raise ValidationError(f"{wire_name} must be a number", field=wire_name)
        else:
            raise ValidationError(f"{wire_name} must be a number", field=wire_name)
        if not math.isfinite(number):
            raise ValidationError(f"{wire_name} must be a finite number", field=wire_name)
        return number

    # Strings / Text
    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{wire_name} must be a string", field=wire_name)
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: Any,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict keyed by *column* names.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                metadata={"fields": missing},
            )

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}", field=k)
        if k not in policy.extra_fields and policy.column_for(k) not in cols:
            raise ValidationError(f"Unknown field: {k}", field=k)

    patch: dict = {}

    for k, raw in payload.items():
        if k in policy.extra_fields:
            if raw is not None and not isinstance(raw, str):
                raise ValidationError(f"{k} must be a string", field=k)
            patch[k] = raw
            continue

        key = policy.column_for(k)
        col = cols[key]

        # NULL handling
        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null", field=k)
            patch[key] = None
            continue

        val = _coerce_value(col, k, raw)

        if isinstance(col.type, (String, Text)) and isinstance(val, str) and val == "":
            # Blank optional text means "clear it"
            if col.nullable:
                patch[key] = None
                continue
            raise ValidationError(f"{k} cannot be blank", field=k)

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(
                    f"{k} exceeds max length {col.type.length}",
                    field=k,
                    metadata={"maxLength": col.type.length},
                )

        patch[key] = val

    return patch
