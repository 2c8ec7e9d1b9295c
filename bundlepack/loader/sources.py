"""Read-only, flat manifest sources.

A source yields ``(entry_name, data)`` pairs in a stable order. Nested
directories are not descended into.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Mapping
from pathlib import Path


class ManifestSource(ABC):
    """Abstract flat collection of named manifest entries."""

    @abstractmethod
    def entries(self) -> Iterator[tuple[str, bytes]]:
        """Yield ``(name, data)`` for every file entry, in name order."""


class DirectorySource(ManifestSource):
    """Manifest entries read from the top level of a directory."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def entries(self) -> Iterator[tuple[str, bytes]]:
        for path in sorted(self._root.iterdir(), key=lambda p: p.name):
            if path.is_dir():
                continue
            yield path.name, path.read_bytes()


class MemorySource(ManifestSource):
    """Manifest entries held in memory; names ending in ``/`` are directories."""

    def __init__(self, files: Mapping[str, bytes | str]) -> None:
        self._files = dict(files)

    def entries(self) -> Iterator[tuple[str, bytes]]:
        for name in sorted(self._files):
            if name.endswith("/"):
                continue
            data = self._files[name]
            yield name, data.encode("utf-8") if isinstance(data, str) else data
