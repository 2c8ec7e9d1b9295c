"""Abstract remote object store used by the unpacker and reconciler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from bundlepack.models.bundle import Bundle
from bundlepack.models.chunk import Chunk


class ChunkStore(ABC):
    """Declarative object store holding Bundles, pods and chunks.

    Implementations raise ``StoreNotFoundError`` from the getters when the
    object is absent, ``StoreConflictError`` from ``create_chunk`` when the
    key is taken, and ``StoreError`` for any other failure.
    """

    @abstractmethod
    async def get_bundle(self, namespace: str, name: str) -> Bundle:
        """Return the Bundle at ``namespace/name``."""

    @abstractmethod
    async def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        """Return the pod at ``namespace/name`` as a camelCase dict."""

    @abstractmethod
    async def list_chunks(self, namespace: str, labels: dict[str, str]) -> list[Chunk]:
        """Return every chunk in *namespace* carrying all of *labels*."""

    @abstractmethod
    async def create_chunk(self, chunk: Chunk) -> None:
        """Create *chunk*, including its owner references."""

    @abstractmethod
    async def delete_chunk(self, chunk: Chunk) -> bool:
        """Delete *chunk*.

        Returns:
            True  -- the chunk existed and was deleted.
            False -- the chunk was already gone.
        """

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the store."""
