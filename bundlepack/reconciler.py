"""Reconciler: converge the stored chunk set onto the desired chunk set.

Planning is pure. For every desired chunk:

* an actual chunk at the same key with the same content is left alone;
* an actual chunk at the same key with different content is replaced,
  delete first, then create, so a key never holds two versions;
* a missing key is created.

Actual chunks left unclaimed after that pass are stale and deleted.

Applying is sequential and not transactional. The first failing call
aborts the run with a RemoteStoreError; whatever was already applied
stays applied, and re-running the whole reconciliation converges from
there. Deleting an already-absent chunk counts as success.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from bundlepack.errors import ChunkNameCollisionError, RemoteStoreError
from bundlepack.models.chunk import Chunk, ChunkKey
from bundlepack.observability.logging import get_logger
from bundlepack.store.base import ChunkStore

if TYPE_CHECKING:
    import structlog

_log = get_logger("reconciler")


class ActionType(StrEnum):
    """Kind of change applied to one chunk key."""

    CREATE = "create"
    REPLACE = "replace"
    DELETE = "delete"


@dataclass(frozen=True)
class ChunkAction:
    """One planned change. ``actual`` is set for REPLACE and DELETE, ``desired`` for CREATE and REPLACE."""

    type: ActionType
    key: ChunkKey
    desired: Chunk | None = None
    actual: Chunk | None = None


@dataclass
class ReconcilePlan:
    """Ordered actions plus the keys already in the desired state."""

    actions: list[ChunkAction] = field(default_factory=list)
    unchanged: list[ChunkKey] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.actions

    @property
    def creates(self) -> int:
        return sum(1 for a in self.actions if a.type in (ActionType.CREATE, ActionType.REPLACE))

    @property
    def deletes(self) -> int:
        return sum(1 for a in self.actions if a.type in (ActionType.DELETE, ActionType.REPLACE))


@dataclass
class ReconcileResult:
    """Counts of what one reconciliation applied.

    A replace counts once in ``replaced`` and once each in ``created``
    and ``deleted``.
    """

    created: int = 0
    deleted: int = 0
    replaced: int = 0
    unchanged: int = 0
    already_absent: int = 0


def plan_reconcile(actual: Iterable[Chunk], desired: Iterable[Chunk]) -> ReconcilePlan:
    """Compute the minimal action list converging *actual* onto *desired*.

    Raises:
        ChunkNameCollisionError: *desired* holds two chunks at one key.
    """
    remaining: dict[ChunkKey, Chunk] = {chunk.key: chunk for chunk in actual}
    plan = ReconcilePlan()
    seen: dict[ChunkKey, Chunk] = {}

    for want in desired:
        key = want.key
        if key in seen:
            raise ChunkNameCollisionError(key, seen[key].object_sha256, want.object_sha256)
        seen[key] = want

        have = remaining.pop(key, None)
        if have is None:
            plan.actions.append(ChunkAction(ActionType.CREATE, key, desired=want))
        elif have.same_content(want):
            plan.unchanged.append(key)
        else:
            plan.actions.append(ChunkAction(ActionType.REPLACE, key, desired=want, actual=have))

    for key, stale in remaining.items():
        plan.actions.append(ChunkAction(ActionType.DELETE, key, actual=stale))
    return plan


class Reconciler:
    """Applies reconcile plans against a ChunkStore.

    At most one reconciler may run per Bundle at a time; nothing here
    locks against a concurrent run.
    """

    def __init__(self, store: ChunkStore, log: structlog.stdlib.BoundLogger | None = None) -> None:
        self._store = store
        self._log = log or _log

    async def reconcile(self, actual: Iterable[Chunk], desired: Iterable[Chunk]) -> ReconcileResult:
        """Plan and apply in one call."""
        return await self.apply(plan_reconcile(actual, desired))

    async def apply(self, plan: ReconcilePlan) -> ReconcileResult:
        result = ReconcileResult(unchanged=len(plan.unchanged))

        for action in plan.actions:
            if action.type is ActionType.CREATE:
                assert action.desired is not None
                await self._create(action.desired)
                result.created += 1
                self._log.info("chunk_created", chunk=str(action.key), sha256=action.desired.object_sha256)

            elif action.type is ActionType.REPLACE:
                assert action.desired is not None and action.actual is not None
                if not await self._delete(action.actual):
                    result.already_absent += 1
                await self._create(action.desired)
                result.deleted += 1
                result.created += 1
                result.replaced += 1
                self._log.info(
                    "chunk_replaced",
                    chunk=str(action.key),
                    old_sha256=action.actual.object_sha256,
                    sha256=action.desired.object_sha256,
                )

            else:
                assert action.actual is not None
                if not await self._delete(action.actual):
                    result.already_absent += 1
                result.deleted += 1
                self._log.info("chunk_deleted", chunk=str(action.key), sha256=action.actual.object_sha256)

        self._log.info(
            "reconcile_complete",
            created=result.created,
            deleted=result.deleted,
            replaced=result.replaced,
            unchanged=result.unchanged,
        )
        return result

    async def _create(self, chunk: Chunk) -> None:
        try:
            await self._store.create_chunk(chunk)
        except Exception as exc:
            raise RemoteStoreError("create", chunk.key, exc) from exc

    async def _delete(self, chunk: Chunk) -> bool:
        try:
            existed = await self._store.delete_chunk(chunk)
        except Exception as exc:
            raise RemoteStoreError("delete", chunk.key, exc) from exc
        if not existed:
            self._log.info("chunk_delete_not_found", chunk=str(chunk.key))
        return existed
