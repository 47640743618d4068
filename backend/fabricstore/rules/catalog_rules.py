# Overview: Pure validation rules for catalogs (archival/deletion guards, immutable code).

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from ..enums import CatalogStatus, values
from ..errors import BusinessRuleError, ValidationError


CODE_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")
CODE_MIN_LENGTH = 2
CODE_MAX_LENGTH = 20
NAME_LIMITS = (2, 100)
MATERIAL_LIMITS = (2, 50)
DESCRIPTION_MAX_LENGTH = 500

IMMUTABLE_FIELDS = ("code",)


def _check_text(data: Mapping[str, Any], key: str, label: str, limits: tuple[int, int]) -> None:
    if key not in data:
        return
    text = (data[key] or "").strip()
    low, high = limits
    if len(text) < low:
        raise ValidationError(f"{label} must be at least {low} characters long", field=key)
    if len(text) > high:
        raise ValidationError(f"{label} cannot exceed {high} characters", field=key)


def _validate_fields(data: Mapping[str, Any]) -> None:
    _check_text(data, "name", "Catalog name", NAME_LIMITS)
    _check_text(data, "material", "Material", MATERIAL_LIMITS)

    description = data.get("description")
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            f"Description cannot exceed {DESCRIPTION_MAX_LENGTH} characters", field="description"
        )

    if "status" in data and data["status"] not in values(CatalogStatus):
        raise ValidationError(
            f"Invalid status '{data['status']}'. Must be one of: {', '.join(values(CatalogStatus))}",
            field="status",
        )


def validate_catalog_create(data: Mapping[str, Any]) -> None:
    code = (data.get("code") or "").strip()
    if len(code) < CODE_MIN_LENGTH:
        raise ValidationError(
            f"Catalog code must be at least {CODE_MIN_LENGTH} characters long", field="code"
        )
    if len(code) > CODE_MAX_LENGTH:
        raise ValidationError(f"Catalog code cannot exceed {CODE_MAX_LENGTH} characters", field="code")
    if not CODE_PATTERN.match(code):
        raise ValidationError(
            "Catalog code can only contain letters, numbers, and hyphens",
            field="code",
            metadata={"code": code},
        )

    for key in ("name", "material"):
        if not data.get(key):
            raise ValidationError(f"{key} is required", field=key)

    _validate_fields(data)


def check_immutable_fields(current, updates: Mapping[str, Any]) -> None:
    """Fail on the mere presence of an immutable key, whatever its value (null, blank, same)."""
    present = [f for f in IMMUTABLE_FIELDS if f in updates]
    if present:
        raise BusinessRuleError(
            f"Field '{present[0]}' cannot be changed after creation",
            "IMMUTABLE_FIELD",
            {"catalogId": current.id, "field": present[0]},
        )


def validate_catalog_update(current, updates: Mapping[str, Any], active_roll_count: int = 0) -> None:
    """
    Guards for a partial catalog update.

    - `code` is immutable: its mere presence fails, even with the same value.
    - Archiving requires zero active (in_stock/reserved, non-deleted) rolls.
    """
    check_immutable_fields(current, updates)

    _validate_fields(updates)

    if updates.get("status") == CatalogStatus.ARCHIVED.value and active_roll_count > 0:
        raise BusinessRuleError(
            f"Cannot archive catalog with {active_roll_count} active roll(s). "
            "Please sell or remove all rolls first.",
            "CANNOT_ARCHIVE_WITH_ROLLS",
            {
                "catalogId": current.id,
                "catalogName": current.name,
                "activeRollCount": active_roll_count,
            },
        )


def validate_catalog_delete(catalog, roll_count: int) -> None:
    """Any remaining roll reference blocks deletion, whatever its status."""
    if roll_count > 0:
        raise BusinessRuleError(
            f'Cannot delete catalog "{catalog.name}": {roll_count} roll(s) still reference this catalog. '
            "Please remove or reassign all rolls before deleting the catalog.",
            "CATALOG_HAS_ROLLS",
            {"catalogId": catalog.id, "catalogName": catalog.name, "rollCount": roll_count},
        )


def can_modify_catalog(catalog) -> bool:
    return catalog.status != CatalogStatus.ARCHIVED.value


def calculate_catalog_stats(catalogs: Iterable[Mapping[str, Any]]) -> dict:
    by_status = {s: 0 for s in values(CatalogStatus)}
    total = 0
    for catalog in catalogs:
        total += 1
        by_status[catalog["status"]] = by_status.get(catalog["status"], 0) + 1
    return {"total": total, "byStatus": by_status}


def suggest_catalog_code(name: str) -> str:
    """'Premium Cotton 2024!' -> 'PREMIUM-COTTON-2024'"""
    cleaned = re.sub(r"[^A-Z0-9\s]", "", name.strip().upper())
    return re.sub(r"\s+", "-", cleaned)[:CODE_MAX_LENGTH]
