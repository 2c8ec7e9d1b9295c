"""In-memory ChunkStore with owner-based cascading delete.

Records every mutating call in ``operations`` so callers can inspect the
exact create/delete sequence a reconciliation produced.
"""

from __future__ import annotations

import copy
import uuid
from typing import Any

from bundlepack.errors import StoreConflictError, StoreNotFoundError
from bundlepack.models.bundle import Bundle
from bundlepack.models.chunk import Chunk, ChunkKey
from bundlepack.store.base import ChunkStore


class InMemoryStore(ChunkStore):
    """Dict-backed store keyed by ``(namespace, name)``.

    ``failures`` maps ``(operation, chunk_name)`` to an exception raised the
    next time that call happens; each entry fires once.
    """

    def __init__(self) -> None:
        self._bundles: dict[tuple[str, str], Bundle] = {}
        self._pods: dict[tuple[str, str], dict[str, Any]] = {}
        self._chunks: dict[ChunkKey, Chunk] = {}
        self.operations: list[tuple[str, ChunkKey]] = []
        self.failures: dict[tuple[str, str], Exception] = {}

    # ------------------------------------------------------------------
    # Seeding helpers
    # ------------------------------------------------------------------

    def add_bundle(self, bundle: Bundle) -> Bundle:
        if not bundle.uid:
            bundle = Bundle(
                name=bundle.name,
                namespace=bundle.namespace,
                image=bundle.image,
                uid=str(uuid.uuid4()),
                api_version=bundle.api_version,
                kind=bundle.kind,
            )
        self._bundles[(bundle.namespace, bundle.name)] = bundle
        return bundle

    def add_pod(self, namespace: str, name: str, pod: dict[str, Any]) -> None:
        self._pods[(namespace, name)] = copy.deepcopy(pod)

    def put_chunk(self, chunk: Chunk) -> None:
        """Store *chunk* directly, bypassing the operation log."""
        self._chunks[chunk.key] = chunk

    @property
    def chunks(self) -> dict[ChunkKey, Chunk]:
        return dict(self._chunks)

    # ------------------------------------------------------------------
    # ChunkStore
    # ------------------------------------------------------------------

    async def get_bundle(self, namespace: str, name: str) -> Bundle:
        try:
            return self._bundles[(namespace, name)]
        except KeyError:
            raise StoreNotFoundError(f"bundle {namespace}/{name} not found", status=404) from None

    async def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self._pods[(namespace, name)])
        except KeyError:
            raise StoreNotFoundError(f"pod {namespace}/{name} not found", status=404) from None

    async def list_chunks(self, namespace: str, labels: dict[str, str]) -> list[Chunk]:
        return [
            chunk
            for key, chunk in self._chunks.items()
            if key.namespace == namespace and all(chunk.labels.get(k) == v for k, v in labels.items())
        ]

    async def create_chunk(self, chunk: Chunk) -> None:
        self._maybe_fail("create", chunk)
        if chunk.key in self._chunks:
            raise StoreConflictError(f"configmap {chunk.key} already exists", status=409)
        self.operations.append(("create", chunk.key))
        self._chunks[chunk.key] = chunk

    async def delete_chunk(self, chunk: Chunk) -> bool:
        self._maybe_fail("delete", chunk)
        self.operations.append(("delete", chunk.key))
        return self._chunks.pop(chunk.key, None) is not None

    # ------------------------------------------------------------------
    # Lifecycle ownership
    # ------------------------------------------------------------------

    def delete_bundle(self, namespace: str, name: str) -> list[ChunkKey]:
        """Remove a Bundle and cascade to every chunk it owns."""
        bundle = self._bundles.pop((namespace, name), None)
        if bundle is None:
            raise StoreNotFoundError(f"bundle {namespace}/{name} not found", status=404)
        owned = [key for key, chunk in self._chunks.items() if chunk.is_owned_by(bundle.uid)]
        for key in owned:
            del self._chunks[key]
        return owned

    def _maybe_fail(self, operation: str, chunk: Chunk) -> None:
        exc = self.failures.pop((operation, chunk.name), None)
        if exc is not None:
            raise exc
