"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from bundlepack.models.config import BundlePackConfig, LogConfig, StoreConfig, UnpackConfig

_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"BUNDLEPACK_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_label_key(value: str) -> str:
    prefix, _, name = value.rpartition("/")
    if not name or len(name) > 63 or not re.match(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$", name):
        raise ValueError(f"Invalid label key: {value}")
    if prefix and not all(_DNS_LABEL.match(part) for part in prefix.split(".")):
        raise ValueError(f"Invalid label key prefix: {value}")
    return value


def load_config() -> BundlePackConfig:
    """Load configuration from BUNDLEPACK_* environment variables."""
    return BundlePackConfig(
        unpack=UnpackConfig(
            namespace=_env("NAMESPACE", ""),
            pod_name=_env("POD_NAME", ""),
            bundle_name=_env("BUNDLE_NAME", ""),
            manifests_dir=_env("MANIFESTS_DIR", ""),
        ),
        store=StoreConfig(
            label_key=_validate_label_key(_env("LABEL_KEY", "kuberpak.io/bundle-name")),
            bundle_group=_env("BUNDLE_GROUP", "olm.operatorframework.io"),
            bundle_version=_env("BUNDLE_VERSION", "v1alpha1"),
            bundle_plural=_env("BUNDLE_PLURAL", "bundles"),
            request_timeout=_env_int("REQUEST_TIMEOUT", 30, min_val=1, max_val=300),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
