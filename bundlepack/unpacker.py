"""Unpack pipeline: Bundle + manifests in, converged chunk set out.

Steps, in order: get the Bundle, resolve its image digest from the
unpack pod, load and decode the manifests, build the desired chunks,
list the chunks already stored for the Bundle, reconcile. Every step
before the reconcile is read-only, so a decode or digest failure never
touches the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from bundlepack.desired import DEFAULT_LABEL_KEY, build_desired_chunks, chunk_labels
from bundlepack.digest import resolve_image_digest
from bundlepack.errors import RemoteStoreError
from bundlepack.loader import DirectorySource, ManifestSource, load_manifests
from bundlepack.models.bundle import ObjectReference
from bundlepack.models.config import UnpackConfig
from bundlepack.observability.logging import get_logger
from bundlepack.reconciler import ReconcileResult, Reconciler
from bundlepack.store.base import ChunkStore


@dataclass
class UnpackResult:
    """What a successful run did."""

    resolved_image: str
    objects: list[ObjectReference] = field(default_factory=list)
    reconcile: ReconcileResult = field(default_factory=ReconcileResult)


class Unpacker:
    """Runs one unpack of one Bundle.

    Args:
        store:     Remote object store (injected; never global).
        config:    Namespace, pod, bundle and manifests directory.
        source:    Manifest source; defaults to ``config.manifests_dir``.
        label_key: Label key tagging chunks with their Bundle name.
    """

    def __init__(
        self,
        store: ChunkStore,
        config: UnpackConfig,
        source: ManifestSource | None = None,
        label_key: str = DEFAULT_LABEL_KEY,
    ) -> None:
        self._store = store
        self._config = config
        self._source = source or DirectorySource(config.manifests_dir)
        self._label_key = label_key
        self._log = get_logger("unpacker").bind(bundle=config.bundle_name, namespace=config.namespace)

    async def run(self) -> UnpackResult:
        cfg = self._config

        self._log.info("getting bundle")
        try:
            bundle = await self._store.get_bundle(cfg.namespace, cfg.bundle_name)
        except Exception as exc:
            raise RemoteStoreError("get", f"bundle {cfg.namespace}/{cfg.bundle_name}", exc) from exc

        self._log.info("getting image digest", image=bundle.image)
        try:
            pod = await self._store.get_pod(cfg.namespace, cfg.pod_name)
        except Exception as exc:
            raise RemoteStoreError("get", f"pod {cfg.namespace}/{cfg.pod_name}", exc) from exc
        resolved_image = resolve_image_digest(pod, bundle.image)

        self._log.info("loading objects")
        objects = load_manifests(self._source)
        refs = [obj.reference() for obj in objects]

        self._log.info("building desired chunks", objects=len(objects))
        desired = build_desired_chunks(bundle, resolved_image, objects, label_key=self._label_key)

        self._log.info("listing actual chunks")
        labels = chunk_labels(cfg.bundle_name, self._label_key)
        try:
            actual = await self._store.list_chunks(cfg.namespace, labels)
        except Exception as exc:
            raise RemoteStoreError("list", f"configmaps {cfg.namespace} {labels}", exc) from exc

        self._log.info("reconciling chunks", desired=len(desired), actual=len(actual))
        result = await Reconciler(self._store, log=self._log).reconcile(actual, desired)

        return UnpackResult(resolved_image=resolved_image, objects=refs, reconcile=result)
