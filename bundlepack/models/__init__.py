"""Core data structures for bundlepack."""

from bundlepack.models.bundle import Bundle, ManifestObject, ObjectReference, OwnerReference
from bundlepack.models.chunk import Chunk, ChunkKey, EncodedObject
from bundlepack.models.config import BundlePackConfig

__all__ = [
    "Bundle",
    "BundlePackConfig",
    "Chunk",
    "ChunkKey",
    "EncodedObject",
    "ManifestObject",
    "ObjectReference",
    "OwnerReference",
]
