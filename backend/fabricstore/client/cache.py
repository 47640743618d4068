# Overview: Optimistic entity cache with snapshot rollback.

"""
Optimistic cache

Each mutation:
    1. deep-copies the record's current state (the `before` snapshot)
    2. applies the speculative change synchronously and marks the id pending
    3. awaits the remote call
    4. success -> the authoritative record replaces the guess
       failure -> the snapshot is restored exactly, the error re-raised
    5. pending is cleared

OVERLAPPING MUTATIONS ON ONE ID:
Pending mutations are kept per id, oldest first, each with its own snapshot.
Only the newest pending mutation may write to the cache when it settles.
An older one settling hands its outcome forward instead:
    - failure: its `before` becomes the next mutation's `before`
    - success: the authoritative record becomes the next mutation's `before`
When the newest mutation succeeds while older ones are still in flight, those
older ones are superseded and settle without touching the cache.
So the newest rollback always restores the last state the server confirmed
(or the original), and a stale rollback never clobbers a newer write.
"""

from __future__ import annotations

import copy
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

logger = logging.getLogger(__name__)

Remote = Callable[[], Awaitable[Any]]

_temp_ids = itertools.count(1)


@dataclass(eq=False)
class _Pending:
    kind: str
    before: dict | None
    position: int
    superseded: bool = False


class OptimisticCache:
    """In-memory mirror of a collection, keyed by `id`, in display order."""

    def __init__(self, items: Iterable[dict] = ()):
        self._items: dict[str, dict] = {}
        self._pending: dict[str, list[_Pending]] = {}
        self.replace_all(items)

    # ------------------------------------------------------------------ state

    @property
    def items(self) -> list[dict]:
        return list(self._items.values())

    def get(self, entity_id: str) -> dict | None:
        return self._items.get(entity_id)

    def __contains__(self, entity_id: str) -> bool:
        return entity_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def is_pending(self, entity_id: str) -> bool:
        return bool(self._pending.get(entity_id))

    @property
    def pending_ids(self) -> set[str]:
        return {k for k, v in self._pending.items() if v}

    def replace_all(self, items: Iterable[dict]) -> None:
        """Load authoritative data. Records with in-flight mutations keep their optimistic view."""
        fresh = {item["id"]: copy.deepcopy(item) for item in items}
        for entity_id in self.pending_ids:
            if entity_id in self._items:
                fresh[entity_id] = self._items[entity_id]
        self._items = fresh

    # -------------------------------------------------------------- internals

    def _position(self, entity_id: str) -> int:
        for index, key in enumerate(self._items):
            if key == entity_id:
                return index
        return len(self._items)

    def _put(self, entity_id: str, record: dict, position: int | None = None) -> None:
        if entity_id in self._items or position is None:
            self._items[entity_id] = record
            return
        entries = list(self._items.items())
        entries.insert(min(position, len(entries)), (entity_id, record))
        self._items = dict(entries)

    def _write(self, entity_id: str, record: dict | None, position: int) -> None:
        if record is None:
            self._items.pop(entity_id, None)
        else:
            self._put(entity_id, copy.deepcopy(record), position)

    def _begin(self, entity_id: str, kind: str) -> _Pending:
        current = self._items.get(entity_id)
        entry = _Pending(
            kind=kind,
            before=copy.deepcopy(current),
            position=self._position(entity_id),
        )
        self._pending.setdefault(entity_id, []).append(entry)
        return entry

    def _settle(self, entity_id: str, entry: _Pending, outcome: dict | None, confirmed: bool) -> None:
        """Write `outcome` if `entry` is the newest pending mutation, otherwise hand it forward."""
        queue = self._pending[entity_id]
        index = queue.index(entry)
        queue.pop(index)

        if entry.superseded:
            pass
        elif index < len(queue):
            queue[index].before = copy.deepcopy(outcome)
            queue[index].position = entry.position
        else:
            self._write(entity_id, outcome, entry.position)
            if confirmed:
                for older in queue:
                    older.superseded = True

        if not queue:
            del self._pending[entity_id]

    async def _run(self, entity_id: str, entry: _Pending, remote: Remote, authoritative):
        try:
            result = await remote()
        except BaseException as exc:
            logger.warning(
                "Rolling back optimistic %s of %s: %s", entry.kind, entity_id, exc
            )
            self._settle(entity_id, entry, entry.before, confirmed=False)
            raise
        self._settle(entity_id, entry, authoritative(result), confirmed=True)
        return result

    # -------------------------------------------------------------- mutations

    async def optimistic_create(self, data: dict, remote: Remote) -> dict:
        """
        Insert `data` at the top under a temporary id, then swap in the server record.

        The server record lands at the same position under its real id.
        """
        temp_id = f"temp-{next(_temp_ids)}"
        entry = _Pending(kind="create", before=None, position=0)
        self._pending[temp_id] = [entry]
        self._put(temp_id, {**copy.deepcopy(data), "id": temp_id}, 0)

        try:
            result = await remote()
        except BaseException as exc:
            logger.warning("Rolling back optimistic create %s: %s", temp_id, exc)
            self._items.pop(temp_id, None)
            raise
        finally:
            self._pending.pop(temp_id, None)

        position = self._position(temp_id)
        self._items.pop(temp_id, None)
        self._put(result["id"], copy.deepcopy(result), position)
        return result

    async def optimistic_update(self, entity_id: str, patch: dict, remote: Remote) -> dict:
        current = self._items.get(entity_id)
        if current is None:
            # Nothing cached to speculate on
            result = await remote()
            self._put(entity_id, copy.deepcopy(result))
            return result

        entry = self._begin(entity_id, "update")
        self._items[entity_id] = {**copy.deepcopy(current), **copy.deepcopy(patch)}
        return await self._run(entity_id, entry, remote, lambda result: result)

    async def optimistic_delete(self, entity_id: str, remote: Remote) -> Any:
        if entity_id not in self._items:
            return await remote()

        entry = self._begin(entity_id, "delete")
        self._items.pop(entity_id)
        return await self._run(entity_id, entry, remote, lambda result: None)
