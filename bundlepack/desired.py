"""Desired-state builder: one chunk per manifest object.

Chunk names are ``bundle-object-<bundle>-<first 8 hex chars of sha256>``.
Two distinct objects sharing that prefix cannot both be stored, so the
builder refuses the whole set instead of silently dropping one.
"""

from __future__ import annotations

from collections.abc import Iterable

from bundlepack.encoding import encode_object
from bundlepack.errors import ChunkNameCollisionError
from bundlepack.models.bundle import Bundle, ManifestObject, OwnerReference
from bundlepack.models.chunk import (
    BINARY_OBJECT,
    DATA_BUNDLE_IMAGE,
    DATA_OBJECT_API_VERSION,
    DATA_OBJECT_KIND,
    DATA_OBJECT_NAME,
    DATA_OBJECT_NAMESPACE,
    DATA_OBJECT_SHA256,
    Chunk,
    ChunkKey,
)

CHUNK_NAME_PREFIX = "bundle-object-"
HASH_PREFIX_LEN = 8
DEFAULT_LABEL_KEY = "kuberpak.io/bundle-name"


def chunk_labels(bundle_name: str, label_key: str = DEFAULT_LABEL_KEY) -> dict[str, str]:
    """Labels that tag every chunk of *bundle_name* and select them back."""
    return {label_key: bundle_name}


def chunk_name(bundle_name: str, sha256: str) -> str:
    return f"{CHUNK_NAME_PREFIX}{bundle_name}-{sha256[:HASH_PREFIX_LEN]}"


def controller_reference(bundle: Bundle) -> OwnerReference:
    """Owner reference that lets the store garbage-collect chunks with their Bundle."""
    return OwnerReference(
        api_version=bundle.api_version,
        kind=bundle.kind,
        name=bundle.name,
        uid=bundle.uid,
        controller=True,
        block_owner_deletion=True,
    )


def build_desired_chunks(
    bundle: Bundle,
    resolved_image: str,
    objects: Iterable[ManifestObject],
    label_key: str = DEFAULT_LABEL_KEY,
) -> list[Chunk]:
    """Build the desired chunk set, in object order.

    Raises:
        ChunkNameCollisionError: two objects map to the same chunk key.
    """
    owner = controller_reference(bundle)
    chunks: list[Chunk] = []
    seen: dict[ChunkKey, ManifestObject] = {}

    for obj in objects:
        encoded = encode_object(obj)
        chunk = Chunk(
            name=chunk_name(bundle.name, encoded.sha256),
            namespace=bundle.namespace,
            labels=chunk_labels(bundle.name, label_key),
            data={
                DATA_BUNDLE_IMAGE: resolved_image,
                DATA_OBJECT_SHA256: encoded.sha256,
                DATA_OBJECT_KIND: obj.kind,
                DATA_OBJECT_API_VERSION: obj.api_version,
                DATA_OBJECT_NAME: obj.name,
                DATA_OBJECT_NAMESPACE: obj.namespace,
            },
            binary_data={BINARY_OBJECT: encoded.compressed},
            owner_references=(owner,),
        )
        previous = seen.get(chunk.key)
        if previous is not None:
            raise ChunkNameCollisionError(chunk.key, _describe(previous), _describe(obj))
        seen[chunk.key] = obj
        chunks.append(chunk)
    return chunks


def _describe(obj: ManifestObject) -> str:
    ref = f"{obj.kind} {obj.namespace}/{obj.name}" if obj.namespace else f"{obj.kind} {obj.name}"
    return f"{ref} from {obj.source}" if obj.source else ref
