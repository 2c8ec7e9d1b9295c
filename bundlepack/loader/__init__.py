"""Manifest loading for bundlepack.

Exposes:
    load_manifests   -- Decode every entry of a ManifestSource, in order.
    ManifestSource   -- ABC for flat, read-only named-entry sources.
    DirectorySource  -- Top level of a filesystem directory.
    MemorySource     -- In-memory entries (tests, embedding).
"""

from bundlepack.loader.manifests import decode_stream, load_manifests
from bundlepack.loader.sources import DirectorySource, ManifestSource, MemorySource

__all__ = ["DirectorySource", "ManifestSource", "MemorySource", "decode_stream", "load_manifests"]
