"""Shared fixtures for bundlepack integration tests.

Wires an Unpacker to an InMemoryStore seeded with a Bundle and its unpack
pod, and a manifests directory under tmp_path, so tests can run the full
pipeline repeatedly without a cluster.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from bundlepack.models.bundle import Bundle
from bundlepack.models.config import UnpackConfig
from bundlepack.store.memory import InMemoryStore
from bundlepack.unpacker import Unpacker

NAMESPACE = "olm"
BUNDLE_NAME = "mybundle"
POD_NAME = "mybundle-unpack"
IMAGE = "quay.io/acme/mybundle:v1.2.0"
DIGEST = "quay.io/acme/mybundle@sha256:" + "c" * 64
LABEL_KEY = "kuberpak.io/bundle-name"


# ---------------------------------------------------------------------------
# Manifest factories
# ---------------------------------------------------------------------------


def make_deployment(name: str = "web", image: str = "nginx:1.25", replicas: int = 2) -> dict[str, Any]:
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {"name": name, "namespace": "default", "labels": {"app": name}},
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": {"app": name}},
            "template": {
                "metadata": {"labels": {"app": name}},
                "spec": {"containers": [{"name": name, "image": image}]},
            },
        },
    }


def make_service(name: str = "web", port: int = 80) -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": name, "namespace": "default"},
        "spec": {"selector": {"app": name}, "ports": [{"port": port, "targetPort": 8080}]},
    }


def write_manifests(directory: Path, files: dict[str, list[dict[str, Any]]]) -> None:
    """Replace the directory's manifests with *files* (name -> documents)."""
    for existing in directory.iterdir():
        if existing.is_file():
            existing.unlink()
    for name, documents in files.items():
        (directory / name).write_text(yaml.safe_dump_all(documents, sort_keys=False))


def unpack_pod(image_id: str = DIGEST) -> dict[str, Any]:
    return {
        "metadata": {"name": POD_NAME, "namespace": NAMESPACE},
        "status": {
            "initContainerStatuses": [{"name": "unpack", "image": IMAGE, "imageID": image_id}],
            "containerStatuses": [{"name": "pause", "image": "registry.k8s.io/pause:3.9", "imageID": "pause@sha"}],
        },
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def manifests_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "manifests"
    directory.mkdir()
    return directory


@pytest.fixture()
def store() -> InMemoryStore:
    s = InMemoryStore()
    s.add_bundle(Bundle(name=BUNDLE_NAME, namespace=NAMESPACE, image=IMAGE))
    s.add_pod(NAMESPACE, POD_NAME, unpack_pod())
    return s


@pytest.fixture()
def bundle(store: InMemoryStore) -> Bundle:
    return store._bundles[(NAMESPACE, BUNDLE_NAME)]


@pytest.fixture()
def unpack_config(manifests_dir: Path) -> UnpackConfig:
    return UnpackConfig(
        namespace=NAMESPACE,
        pod_name=POD_NAME,
        bundle_name=BUNDLE_NAME,
        manifests_dir=str(manifests_dir),
    )


@pytest.fixture()
def unpacker(store: InMemoryStore, unpack_config: UnpackConfig) -> Unpacker:
    return Unpacker(store, unpack_config, label_key=LABEL_KEY)
