"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class UnpackConfig:
    """Identifies the bundle being unpacked and where its manifests live."""

    namespace: str = ""
    pod_name: str = ""
    bundle_name: str = ""
    manifests_dir: str = ""

    def missing(self) -> list[str]:
        """Return the names of required parameters that are still empty."""
        return [name for name in ("namespace", "pod_name", "bundle_name", "manifests_dir") if not getattr(self, name)]


@dataclass
class StoreConfig:
    """Remote object store configuration."""

    label_key: str = "kuberpak.io/bundle-name"
    bundle_group: str = "olm.operatorframework.io"
    bundle_version: str = "v1alpha1"
    bundle_plural: str = "bundles"
    request_timeout: int = 30


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class BundlePackConfig:
    """Top-level bundlepack configuration."""

    unpack: UnpackConfig = field(default_factory=UnpackConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    log: LogConfig = field(default_factory=LogConfig)
