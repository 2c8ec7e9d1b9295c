"""Remote object store layer for bundlepack.

Exports:
    ChunkStore      -- Abstract store interface consumed by the unpacker.
    InMemoryStore   -- Dict-backed store with owner-based cascading delete.
    KubernetesStore -- kubernetes-asyncio backed store (imported lazily).
"""

from bundlepack.store.base import ChunkStore
from bundlepack.store.memory import InMemoryStore

__all__ = ["ChunkStore", "InMemoryStore"]
