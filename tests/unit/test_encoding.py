"""Tests for canonical encoding, hashing and compression."""

from __future__ import annotations

import gzip
import hashlib
from typing import Any

import yaml
from hypothesis import given, settings
from hypothesis import strategies as st

from bundlepack.encoding import canonical_bytes, compress, content_hash, decompress, encode_object
from bundlepack.models.bundle import ManifestObject


def _service(port: int = 80) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": "web", "namespace": "default", "labels": {"app": "web", "tier": "front"}},
        "spec": {"ports": [{"port": port, "protocol": "TCP"}], "selector": {"app": "web"}},
    }


def _reversed_keys(value: Any) -> Any:
    """Same logical value with every mapping's insertion order reversed."""
    if isinstance(value, dict):
        return {k: _reversed_keys(value[k]) for k in reversed(list(value))}
    if isinstance(value, list):
        return [_reversed_keys(v) for v in value]
    return value


# ---------------------------------------------------------------------------
# Determinism
# ---------------------------------------------------------------------------


class TestDeterminism:
    def test_same_object_encodes_identically(self) -> None:
        a = encode_object(ManifestObject(content=_service()))
        b = encode_object(ManifestObject(content=_service()))
        assert a == b

    def test_key_order_does_not_change_encoding(self) -> None:
        a = encode_object(ManifestObject(content=_service()))
        b = encode_object(ManifestObject(content=_reversed_keys(_service())))
        assert a.canonical == b.canonical
        assert a.sha256 == b.sha256
        assert a.compressed == b.compressed

    def test_source_name_does_not_change_encoding(self) -> None:
        a = encode_object(ManifestObject(content=_service(), source="a.yaml"))
        b = encode_object(ManifestObject(content=_service(), source="b.yaml"))
        assert a == b

    def test_canonical_form_sorts_keys(self) -> None:
        assert canonical_bytes({"b": 1, "a": {"d": 2, "c": 3}}) == b"a:\n  c: 3\n  d: 2\nb: 1\n"

    def test_gzip_header_carries_no_timestamp(self) -> None:
        data = compress(b"payload")
        assert data[4:8] == b"\x00\x00\x00\x00"
        assert data[9] == 0xFF
        assert compress(b"payload") == data

    @given(
        content=st.recursive(
            st.none() | st.booleans() | st.integers() | st.text(alphabet="abcxyz -:é", max_size=12),
            lambda children: st.lists(children, max_size=4)
            | st.dictionaries(st.text(alphabet="abcdefgh", min_size=1, max_size=6), children, max_size=4),
            max_leaves=20,
        )
    )
    @settings(max_examples=100)
    def test_any_key_order_encodes_identically(self, content: Any) -> None:
        document = {"apiVersion": "v1", "kind": "ConfigMap", "data": content}
        assert canonical_bytes(document) == canonical_bytes(_reversed_keys(document))


# ---------------------------------------------------------------------------
# Hash and payload
# ---------------------------------------------------------------------------


class TestHashAndPayload:
    def test_hash_is_sha256_of_canonical_bytes(self) -> None:
        encoded = encode_object(ManifestObject(content=_service()))
        assert encoded.sha256 == hashlib.sha256(encoded.canonical).hexdigest()
        assert encoded.sha256 == content_hash(encoded.canonical)
        assert len(encoded.sha256) == 64

    def test_changed_content_changes_hash(self) -> None:
        a = encode_object(ManifestObject(content=_service(80)))
        b = encode_object(ManifestObject(content=_service(8080)))
        assert a.sha256 != b.sha256

    def test_compressed_payload_is_gzip_of_canonical_bytes(self) -> None:
        encoded = encode_object(ManifestObject(content=_service()))
        assert gzip.decompress(encoded.compressed) == encoded.canonical
        assert decompress(encoded.compressed) == encoded.canonical

    def test_canonical_bytes_decode_back_to_the_object(self) -> None:
        encoded = encode_object(ManifestObject(content=_service()))
        assert yaml.safe_load(encoded.canonical) == _service()
