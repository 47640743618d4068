# Overview: Service-layer operations for catalogs; encapsulates business logic and database work.

from __future__ import annotations

import logging

from sqlalchemy import func, or_

from ..enums import ACTIVE_ROLL_STATUSES, CatalogStatus, EntityType
from ..errors import ConflictError, NotFoundError
from ..models import Catalog, Roll
from ..models.common import new_id
from ..rules import (
    check_immutable_fields,
    validate_catalog_create,
    validate_catalog_delete,
    validate_catalog_update,
)
from ..time_utils import utcnow
from ..validation import ModelValidationPolicy, validate_payload
from .audit_service import diff_fields
from .concurrency import commit_or_conflict

logger = logging.getLogger(__name__)


CATALOG_CREATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"code", "name", "material", "description", "status", "image"}),
    required_on_create=frozenset({"code", "name", "material"}),
)
# `code` stays writable so the immutability rule can report IMMUTABLE_FIELD
CATALOG_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields=frozenset({"code", "name", "material", "description", "status", "image"}),
)


def _code_conflict(code: str) -> ConflictError:
    return ConflictError(f'Catalog code "{code}" already exists', "code")


class CatalogService:
    def __init__(self, session, audit):
        self.session = session
        self.audit = audit

    def _load(self, catalog_id: str) -> Catalog:
        catalog = self.session.get(Catalog, catalog_id)
        if catalog is None or catalog.deleted_at is not None:
            raise NotFoundError("Catalog", catalog_id)
        return catalog

    def get_all(self, filters: dict | None = None) -> list[Catalog]:
        filters = filters or {}
        query = self.session.query(Catalog).filter(Catalog.deleted_at.is_(None))

        if filters.get("status"):
            query = query.filter(Catalog.status == filters["status"])

        search = (filters.get("search") or "").strip()
        if search:
            like = f"%{search}%"
            query = query.filter(or_(
                Catalog.code.ilike(like),
                Catalog.name.ilike(like),
                Catalog.material.ilike(like),
            ))

        return query.order_by(Catalog.name.asc()).all()

    def get_by_id(self, catalog_id: str) -> Catalog:
        return self._load(catalog_id)

    def get_by_code(self, code: str) -> Catalog:
        catalog = (
            self.session.query(Catalog)
            .filter(Catalog.code == code.strip().upper(), Catalog.deleted_at.is_(None))
            .first()
        )
        if catalog is None:
            raise NotFoundError("Catalog", code)
        return catalog

    def get_materials(self) -> list[str]:
        rows = (
            self.session.query(Catalog.material)
            .filter(Catalog.deleted_at.is_(None))
            .distinct()
            .order_by(Catalog.material)
            .all()
        )
        return [material for (material,) in rows]

    def get_roll_count(self, catalog_id: str) -> int:
        """Every roll referencing the catalog, soft-deleted ones included."""
        return (
            self.session.query(func.count(Roll.id))
            .filter(Roll.catalog_id == catalog_id)
            .scalar()
        )

    def get_active_roll_count(self, catalog_id: str) -> int:
        return (
            self.session.query(func.count(Roll.id))
            .filter(
                Roll.catalog_id == catalog_id,
                Roll.deleted_at.is_(None),
                Roll.status.in_(ACTIVE_ROLL_STATUSES),
            )
            .scalar()
        )

    def create(self, data: dict, actor_id: str | None) -> Catalog:
        patch = validate_payload(
            model=Catalog, payload=data, policy=CATALOG_CREATE_POLICY, partial=False
        )
        validate_catalog_create(patch)
        patch["code"] = patch["code"].upper()
        patch.setdefault("status", CatalogStatus.ACTIVE.value)

        # Codes stay reserved by soft-deleted catalogs (column-level unique)
        if self.session.query(Catalog.id).filter(Catalog.code == patch["code"]).first():
            raise _code_conflict(patch["code"])

        now = utcnow()
        catalog = Catalog(
            id=new_id(),
            **patch,
            created_at=now,
            updated_at=now,
            created_by=actor_id,
            updated_by=actor_id,
        )
        self.session.add(catalog)

        self.audit.log_create(EntityType.CATALOG.value, catalog.id, actor_id, catalog.to_dict())
        commit_or_conflict(self.session, _code_conflict(catalog.code))

        logger.info("Catalog created id=%s code=%s by=%s", catalog.id, catalog.code, actor_id)
        return catalog

    def update(self, catalog_id: str, data: dict, actor_id: str | None) -> Catalog:
        catalog = self._load(catalog_id)
        # Before payload validation, so a null/blank/oversized code still reports IMMUTABLE_FIELD
        if isinstance(data, dict):
            check_immutable_fields(catalog, data)
        patch = validate_payload(
            model=Catalog, payload=data, policy=CATALOG_UPDATE_POLICY, partial=True
        )

        active = 0
        if patch.get("status") == CatalogStatus.ARCHIVED.value:
            active = self.get_active_roll_count(catalog.id)
        validate_catalog_update(catalog, patch, active)

        before = {key: getattr(catalog, key) for key in patch}
        for key, value in patch.items():
            setattr(catalog, key, value)
        catalog.updated_at = utcnow()
        catalog.updated_by = actor_id

        changes = diff_fields(before, patch)
        self.audit.log_update(EntityType.CATALOG.value, catalog.id, actor_id, changes)
        commit_or_conflict(self.session)

        logger.info("Catalog updated id=%s fields=%s by=%s", catalog.id, sorted(changes), actor_id)
        return catalog

    def delete(self, catalog_id: str, actor_id: str | None) -> None:
        catalog = self._load(catalog_id)
        validate_catalog_delete(catalog, self.get_roll_count(catalog.id))

        now = utcnow()
        catalog.deleted_at = now
        catalog.deleted_by = actor_id
        catalog.updated_at = now
        catalog.updated_by = actor_id

        self.audit.log_delete(EntityType.CATALOG.value, catalog.id, actor_id)
        commit_or_conflict(self.session)

        logger.info("Catalog deleted id=%s by=%s", catalog.id, actor_id)
