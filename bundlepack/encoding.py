"""Canonical encoding, content hashing and compression of manifest objects.

The canonical form is block-style YAML with every mapping's keys sorted,
so the same logical object always yields the same bytes regardless of
the key order it was decoded with. The gzip header carries a zero mtime
and the "unknown" OS byte on every interpreter, so the compressed form is
deterministic too.
"""

from __future__ import annotations

import gzip
import hashlib
import io
from typing import Any

import yaml

from bundlepack.models.bundle import ManifestObject
from bundlepack.models.chunk import EncodedObject

_GZIP_LEVEL = 9


def canonical_bytes(content: dict[str, Any]) -> bytes:
    """Serialize *content* to its canonical YAML byte form."""
    return yaml.safe_dump(
        content,
        encoding="utf-8",
        allow_unicode=True,
        sort_keys=True,
        default_flow_style=False,
    )


def content_hash(data: bytes) -> str:
    """Hex-encoded SHA-256 of *data*."""
    return hashlib.sha256(data).hexdigest()


def compress(data: bytes) -> bytes:
    buf = io.BytesIO()
    with gzip.GzipFile(fileobj=buf, mode="wb", compresslevel=_GZIP_LEVEL, mtime=0) as gz:
        gz.write(data)
    return buf.getvalue()


def decompress(data: bytes) -> bytes:
    return gzip.decompress(data)


def encode_object(obj: ManifestObject) -> EncodedObject:
    """Encode one manifest object into canonical bytes, hash and gzip copy."""
    canonical = canonical_bytes(obj.content)
    return EncodedObject(
        canonical=canonical,
        sha256=content_hash(canonical),
        compressed=compress(canonical),
    )
