"""Process bootstrap for one unpack run.

Order: logging → Kubernetes client → store → unpacker → close client.
Any failure is logged once here, with its context, and turned into a
non-zero exit status. Re-running the job is the retry.
"""

from __future__ import annotations

from typing import Any

from bundlepack.errors import (
    BundlePackError,
    ChunkNameCollisionError,
    DigestUnresolvedError,
    ManifestDecodeError,
    RemoteStoreError,
    StoreError,
)
from bundlepack.models.config import BundlePackConfig
from bundlepack.observability.logging import get_logger, setup_logging
from bundlepack.store.base import ChunkStore
from bundlepack.unpacker import UnpackResult, Unpacker

EXIT_OK = 0
EXIT_FAILURE = 1


async def build_kubernetes_store(config: BundlePackConfig) -> ChunkStore:
    """Configure kubernetes-asyncio from in-cluster config or kubeconfig."""
    log = get_logger("app")
    try:
        # Imported lazily; kubernetes-asyncio probes the environment on import.
        import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

        try:
            k8s_config.load_incluster_config()
            log.info("k8s client configured from in-cluster service account")
        except k8s_config.ConfigException:
            await k8s_config.load_kube_config()
            log.info("k8s client configured from kubeconfig")
        api_client = k8s_client.ApiClient()
    except Exception as exc:
        raise StoreError(f"could not get client: {exc}") from exc

    from bundlepack.store.kubernetes import KubernetesStore

    return KubernetesStore(api_client, config.store)


async def run_unpack(config: BundlePackConfig, store: ChunkStore | None = None) -> UnpackResult:
    """Run one unpack against *store*, building a Kubernetes store if none is given."""
    owned = store is None
    if store is None:
        store = await build_kubernetes_store(config)
    try:
        unpacker = Unpacker(store, config.unpack, label_key=config.store.label_key)
        return await unpacker.run()
    finally:
        if owned:
            await store.close()


def _error_context(exc: BaseException) -> dict[str, Any]:
    context: dict[str, Any] = {"error_type": type(exc).__name__}
    if isinstance(exc, RemoteStoreError):
        context.update(operation=exc.operation, key=str(exc.key), cause=str(exc.cause))
    elif isinstance(exc, ManifestDecodeError):
        context.update(source=exc.source, document=exc.document_index)
    elif isinstance(exc, DigestUnresolvedError):
        context.update(image=exc.image)
    elif isinstance(exc, ChunkNameCollisionError):
        context.update(key=str(exc.key))
    return context


async def main(config: BundlePackConfig, store: ChunkStore | None = None) -> int:
    """Run an unpack and return the process exit status."""
    setup_logging(config.log.level)
    log = get_logger("app").bind(bundle=config.unpack.bundle_name, namespace=config.unpack.namespace)

    try:
        result = await run_unpack(config, store)
    except BundlePackError as exc:
        log.error("unpack failed", error=str(exc), **_error_context(exc))
        return EXIT_FAILURE
    except Exception as exc:
        log.error("unpack failed", error=str(exc), exc_info=True, **_error_context(exc))
        return EXIT_FAILURE

    log.info(
        "unpack complete",
        image=result.resolved_image,
        objects=len(result.objects),
        created=result.reconcile.created,
        deleted=result.reconcile.deleted,
        unchanged=result.reconcile.unchanged,
    )
    return EXIT_OK
