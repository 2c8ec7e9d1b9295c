"""Bundle and manifest object data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

BUNDLE_API_VERSION = "olm.operatorframework.io/v1alpha1"
BUNDLE_KIND = "Bundle"


@dataclass(frozen=True)
class Bundle:
    """The logical package being unpacked.

    Owned by an external controller; read-only to bundlepack.
    """

    name: str
    namespace: str
    image: str
    uid: str = ""
    api_version: str = BUNDLE_API_VERSION
    kind: str = BUNDLE_KIND

    @classmethod
    def from_resource(cls, raw: dict[str, Any]) -> Bundle:
        """Build a Bundle from a raw custom resource dict."""
        metadata = raw.get("metadata") or {}
        spec = raw.get("spec") or {}
        return cls(
            name=str(metadata.get("name", "")),
            namespace=str(metadata.get("namespace", "")),
            image=str(spec.get("image", "")),
            uid=str(metadata.get("uid", "")),
            api_version=str(raw.get("apiVersion", BUNDLE_API_VERSION)),
            kind=str(raw.get("kind", BUNDLE_KIND)),
        )


@dataclass(frozen=True)
class OwnerReference:
    """Lifecycle-ownership link from a chunk to its Bundle."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> OwnerReference:
        return cls(
            api_version=str(raw.get("apiVersion", "")),
            kind=str(raw.get("kind", "")),
            name=str(raw.get("name", "")),
            uid=str(raw.get("uid", "")),
            controller=bool(raw.get("controller", False)),
            block_owner_deletion=bool(raw.get("blockOwnerDeletion", False)),
        )


@dataclass(frozen=True)
class ObjectReference:
    """Identifies one manifest object by kind, apiVersion, namespace and name."""

    kind: str
    api_version: str
    namespace: str
    name: str


@dataclass(frozen=True)
class ManifestObject:
    """A decoded manifest document.

    ``content`` is the full document as decoded; ``source`` names the
    manifest entry it came from. Immutable: nothing downstream of the
    loader may mutate ``content``.
    """

    content: dict[str, Any]
    source: str = field(default="", compare=False)

    @property
    def kind(self) -> str:
        return str(self.content.get("kind", ""))

    @property
    def api_version(self) -> str:
        return str(self.content.get("apiVersion", ""))

    @property
    def name(self) -> str:
        return str(self._metadata.get("name", "") or "")

    @property
    def namespace(self) -> str:
        return str(self._metadata.get("namespace", "") or "")

    @property
    def _metadata(self) -> dict[str, Any]:
        metadata = self.content.get("metadata")
        return metadata if isinstance(metadata, dict) else {}

    def reference(self) -> ObjectReference:
        return ObjectReference(
            kind=self.kind,
            api_version=self.api_version,
            namespace=self.namespace,
            name=self.name,
        )
