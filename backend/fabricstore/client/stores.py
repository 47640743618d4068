# Overview: Client-side stores binding an optimistic cache to an API resource.

from __future__ import annotations

from ..errors import AppError
from ..rules import calculate_catalog_stats, calculate_roll_stats, check_barcode_available
from .api import ApiError, Resource
from .cache import OptimisticCache


class EntityStore:
    """
    Cached collection with loading/error state.

    Mutations go through the optimistic cache; the last failure is kept in
    `error` and re-raised to the caller.
    """

    def __init__(self, resource: Resource):
        self.resource = resource
        self.cache = OptimisticCache()
        self.loading = False
        self.error: ApiError | None = None

    @property
    def items(self) -> list[dict]:
        return self.cache.items

    def get(self, entity_id: str) -> dict | None:
        return self.cache.get(entity_id)

    def by_status(self, status: str) -> list[dict]:
        return [item for item in self.items if item.get("status") == status]

    def clear_error(self) -> None:
        self.error = None

    async def fetch_all(self, filters: dict | None = None) -> list[dict]:
        self.loading = True
        self.error = None
        try:
            records = await self.resource.get_all(filters)
        except ApiError as exc:
            self.error = exc
            raise
        finally:
            self.loading = False
        self.cache.replace_all(records)
        return self.items

    async def _tracked(self, coro):
        self.error = None
        try:
            return await coro
        except ApiError as exc:
            self.error = exc
            raise

    async def create(self, data: dict) -> dict:
        return await self._tracked(
            self.cache.optimistic_create(data, lambda: self.resource.create(data))
        )

    async def update(self, entity_id: str, patch: dict) -> dict:
        return await self._tracked(
            self.cache.optimistic_update(
                entity_id, patch, lambda: self.resource.update(entity_id, patch)
            )
        )

    async def delete(self, entity_id: str) -> None:
        await self._tracked(
            self.cache.optimistic_delete(entity_id, lambda: self.resource.delete(entity_id))
        )


class RollStore(EntityStore):
    def by_catalog(self, catalog_id: str) -> list[dict]:
        return [roll for roll in self.items if roll.get("catalogId") == catalog_id]

    def stats(self) -> dict:
        return calculate_roll_stats(self.items)

    def _precheck_barcode(self, barcode: str | None, exclude_id: str | None = None) -> None:
        """Reject a barcode already held by a cached active roll before any optimistic write."""
        if not barcode:
            return
        try:
            check_barcode_available(barcode, self.items, exclude_id=exclude_id)
        except AppError as exc:
            self.error = ApiError(exc.message, exc.code, exc.status_code, exc.metadata)
            raise self.error from exc

    async def create(self, data: dict) -> dict:
        if data.get("status", "in_stock") != "sold":
            self._precheck_barcode(data.get("barcode"))
        return await super().create(data)

    async def update(self, entity_id: str, patch: dict) -> dict:
        current = self.get(entity_id)
        if current is not None and patch.get("barcode") not in (None, current.get("barcode")):
            self._precheck_barcode(patch["barcode"], exclude_id=entity_id)
        return await super().update(entity_id, patch)


class CatalogStore(EntityStore):
    def active(self) -> list[dict]:
        return self.by_status("active")

    def by_code(self, code: str) -> dict | None:
        code = code.upper()
        return next((c for c in self.items if c.get("code") == code), None)

    def stats(self) -> dict:
        return calculate_catalog_stats(self.items)
