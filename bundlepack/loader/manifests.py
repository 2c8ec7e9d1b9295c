"""Manifest loader: decode every entry of a source into ManifestObjects.

An entry holds a stream of zero or more YAML documents, or, when its first
non-blank character is ``{``, a stream of concatenated JSON objects.
Decoded content is kept JSON-compatible: timestamps stay the strings they
were written as and mapping keys are strings. The first malformed document
aborts the load; a partial object list is never returned.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from bundlepack.errors import ManifestDecodeError
from bundlepack.loader.sources import ManifestSource
from bundlepack.models.bundle import ManifestObject
from bundlepack.observability.logging import get_logger

_log = get_logger("loader")

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
_JSON_WHITESPACE = " \t\r\n"


class _ManifestLoader(yaml.SafeLoader):
    """SafeLoader without implicit timestamp resolution."""


_ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_manifests(source: ManifestSource) -> list[ManifestObject]:
    """Return every manifest object in *source*, preserving per-entry document order.

    Raises:
        ManifestDecodeError: on the first document that cannot be decoded.
    """
    objects: list[ManifestObject] = []
    for name, data in source.entries():
        decoded = decode_stream(name, data)
        _log.debug("manifest_entry_loaded", entry=name, objects=len(decoded))
        objects.extend(decoded)
    return objects


def decode_stream(name: str, data: bytes) -> list[ManifestObject]:
    """Decode one entry's document stream.

    Empty documents (bare ``---`` separators, JSON ``null``) carry no object
    and are skipped.
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestDecodeError(name, f"not valid UTF-8: {exc}") from exc

    if text.lstrip(_JSON_WHITESPACE).startswith("{"):
        docs = _json_documents(name, text)
    else:
        docs = _yaml_documents(name, text)
    return [
        ManifestObject(content=_validate(name, index, doc), source=name)
        for index, doc in docs
        if doc is not None
    ]


def _yaml_documents(name: str, text: str) -> list[tuple[int, Any]]:
    docs: list[tuple[int, Any]] = []
    try:
        for doc in yaml.load_all(text, Loader=_ManifestLoader):
            docs.append((len(docs), doc))
    except yaml.YAMLError as exc:
        raise ManifestDecodeError(name, str(exc), document_index=len(docs)) from exc
    return docs


def _json_documents(name: str, text: str) -> list[tuple[int, Any]]:
    decoder = json.JSONDecoder()
    docs: list[tuple[int, Any]] = []
    pos = 0
    while True:
        while pos < len(text) and text[pos] in _JSON_WHITESPACE:
            pos += 1
        if pos == len(text):
            return docs
        try:
            doc, pos = decoder.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            raise ManifestDecodeError(name, str(exc), document_index=len(docs)) from exc
        docs.append((len(docs), doc))


def _validate(name: str, index: int, doc: Any) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise ManifestDecodeError(name, f"expected a mapping, got {type(doc).__name__}", document_index=index)
    for field_name in ("kind", "apiVersion"):
        value = doc.get(field_name)
        if not isinstance(value, str) or not value:
            raise ManifestDecodeError(name, f"object {field_name!r} is missing", document_index=index)
    metadata = doc.get("metadata")
    if metadata is not None and not isinstance(metadata, dict):
        raise ManifestDecodeError(name, "metadata must be a mapping", document_index=index)
    try:
        return _json_compatible(doc)
    except ValueError as exc:
        raise ManifestDecodeError(name, str(exc), document_index=index) from exc


def _json_compatible(value: Any) -> Any:
    """Copy *value* with every mapping key rendered as a string.

    Raises:
        ValueError: if two keys of one mapping render to the same string.
    """
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            key = _key(k)
            if key in out:
                raise ValueError(f"duplicate mapping key {key!r}")
            out[key] = _json_compatible(v)
        return out
    if isinstance(value, list):
        return [_json_compatible(v) for v in value]
    return value


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    if key is None:
        return "null"
    return str(key)
