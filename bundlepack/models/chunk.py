"""Chunk data structures and their ConfigMap wire shape.

A Chunk is one immutable, content-addressed ConfigMap holding a single
manifest object. Chunks are created and deleted, never updated.
"""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from bundlepack.models.bundle import OwnerReference

# Keys of Chunk.data
DATA_BUNDLE_IMAGE = "bundle-image"
DATA_OBJECT_SHA256 = "object-sha256"
DATA_OBJECT_KIND = "object-kind"
DATA_OBJECT_API_VERSION = "object-apiversion"
DATA_OBJECT_NAME = "object-name"
DATA_OBJECT_NAMESPACE = "object-namespace"

# Key of Chunk.binary_data
BINARY_OBJECT = "object"


class ChunkKey(NamedTuple):
    """Identity of a chunk in the store."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class EncodedObject:
    """Canonical bytes of one manifest object, their hash and gzip copy."""

    canonical: bytes
    sha256: str
    compressed: bytes


@dataclass(frozen=True)
class Chunk:
    """Canonical chunk representation.

    Produced by the desired-state builder or parsed from a listed ConfigMap.
    Two chunks at the same key are interchangeable iff ``same_content`` holds.
    """

    name: str
    namespace: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    data: dict[str, str] = field(default_factory=dict)
    binary_data: dict[str, bytes] = field(default_factory=dict)
    owner_references: tuple[OwnerReference, ...] = ()
    uid: str = field(default="", compare=False)

    @property
    def key(self) -> ChunkKey:
        return ChunkKey(self.namespace, self.name)

    @property
    def object_sha256(self) -> str:
        return self.data.get(DATA_OBJECT_SHA256, "")

    def same_content(self, other: Chunk) -> bool:
        """Structural equality over labels, annotations, data and binary data.

        Missing maps and empty maps compare equal; owner references and
        server-assigned fields are not part of the content.
        """
        return (
            _map_equal(self.labels, other.labels)
            and _map_equal(self.annotations, other.annotations)
            and _map_equal(self.data, other.data)
            and _map_equal(self.binary_data, other.binary_data)
        )

    def is_owned_by(self, uid: str) -> bool:
        return any(ref.uid == uid for ref in self.owner_references)

    def to_configmap(self) -> dict[str, Any]:
        """Render the chunk as an immutable ConfigMap body."""
        metadata: dict[str, Any] = {
            "name": self.name,
            "namespace": self.namespace,
            "labels": dict(self.labels),
        }
        if self.annotations:
            metadata["annotations"] = dict(self.annotations)
        if self.owner_references:
            metadata["ownerReferences"] = [ref.to_dict() for ref in self.owner_references]
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": metadata,
            "immutable": True,
            "data": dict(self.data),
            "binaryData": {k: base64.b64encode(v).decode("ascii") for k, v in self.binary_data.items()},
        }

    @classmethod
    def from_configmap(cls, raw: dict[str, Any]) -> Chunk:
        """Parse a ConfigMap dict (camelCase, base64 binaryData) into a Chunk."""
        metadata = raw.get("metadata") or {}
        binary: dict[str, bytes] = {}
        for k, v in (raw.get("binaryData") or {}).items():
            if isinstance(v, bytes):
                binary[k] = v
                continue
            try:
                binary[k] = base64.b64decode(v, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"configmap {metadata.get('name')!r}: binaryData[{k!r}] is not base64") from exc
        return cls(
            name=str(metadata.get("name", "")),
            namespace=str(metadata.get("namespace", "")),
            labels=dict(metadata.get("labels") or {}),
            annotations=dict(metadata.get("annotations") or {}),
            data=dict(raw.get("data") or {}),
            binary_data=binary,
            owner_references=tuple(OwnerReference.from_dict(r) for r in metadata.get("ownerReferences") or []),
            uid=str(metadata.get("uid", "") or ""),
        )


def _map_equal(a: dict[str, Any] | None, b: dict[str, Any] | None) -> bool:
    a = a or {}
    b = b or {}
    if len(a) != len(b):
        return False
    return all(k in b and b[k] == v for k, v in a.items())
