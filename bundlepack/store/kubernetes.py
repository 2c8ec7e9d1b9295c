"""ChunkStore backed by the Kubernetes API via kubernetes-asyncio.

Chunks are ConfigMaps; Bundles are namespaced custom resources. Owner
references on each ConfigMap let the API server's garbage collector
remove chunks when their Bundle is deleted.
"""

from __future__ import annotations

from typing import Any

from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]
from kubernetes_asyncio.client.rest import ApiException  # type: ignore[import-untyped]

from bundlepack.errors import StoreConflictError, StoreError, StoreNotFoundError
from bundlepack.models.bundle import Bundle
from bundlepack.models.chunk import Chunk
from bundlepack.models.config import StoreConfig
from bundlepack.observability.logging import get_logger
from bundlepack.store.base import ChunkStore

_log = get_logger("store.kubernetes")

_HTTP_NOT_FOUND = 404
_HTTP_CONFLICT = 409


def label_selector(labels: dict[str, str]) -> str:
    """Render an equality-based label selector, keys sorted."""
    return ",".join(f"{k}={v}" for k, v in sorted(labels.items()))


def _translate(exc: ApiException, what: str) -> StoreError:
    if exc.status == _HTTP_NOT_FOUND:
        return StoreNotFoundError(f"{what} not found", status=exc.status)
    if exc.status == _HTTP_CONFLICT:
        return StoreConflictError(f"{what} already exists", status=exc.status)
    return StoreError(f"{what}: {exc.status} {exc.reason}", status=exc.status)


class KubernetesStore(ChunkStore):
    """Kubernetes implementation of ChunkStore.

    Args:
        api_client: A configured ``kubernetes_asyncio.client.ApiClient``.
        config:     Bundle resource coordinates and request timeout.
    """

    def __init__(self, api_client: k8s_client.ApiClient, config: StoreConfig | None = None) -> None:
        self._api_client = api_client
        self._config = config or StoreConfig()
        self._core = k8s_client.CoreV1Api(api_client)
        self._custom = k8s_client.CustomObjectsApi(api_client)

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        return self._api_client.sanitize_for_serialization(obj)  # type: ignore[no-any-return]

    async def get_bundle(self, namespace: str, name: str) -> Bundle:
        cfg = self._config
        try:
            raw = await self._custom.get_namespaced_custom_object(
                cfg.bundle_group,
                cfg.bundle_version,
                namespace,
                cfg.bundle_plural,
                name,
                _request_timeout=cfg.request_timeout,
            )
        except ApiException as exc:
            raise _translate(exc, f"bundle {namespace}/{name}") from exc
        return Bundle.from_resource(raw)

    async def get_pod(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            pod = await self._core.read_namespaced_pod(name, namespace, _request_timeout=self._config.request_timeout)
        except ApiException as exc:
            raise _translate(exc, f"pod {namespace}/{name}") from exc
        return self._to_dict(pod)

    async def list_chunks(self, namespace: str, labels: dict[str, str]) -> list[Chunk]:
        selector = label_selector(labels)
        try:
            resp = await self._core.list_namespaced_config_map(
                namespace,
                label_selector=selector,
                _request_timeout=self._config.request_timeout,
            )
        except ApiException as exc:
            raise _translate(exc, f"configmaps in {namespace} ({selector})") from exc
        chunks = [Chunk.from_configmap(self._to_dict(cm)) for cm in resp.items or []]
        _log.debug("chunks_listed", namespace=namespace, selector=selector, count=len(chunks))
        return chunks

    async def create_chunk(self, chunk: Chunk) -> None:
        try:
            await self._core.create_namespaced_config_map(
                chunk.namespace,
                body=chunk.to_configmap(),
                _request_timeout=self._config.request_timeout,
            )
        except ApiException as exc:
            raise _translate(exc, f"configmap {chunk.key}") from exc

    async def delete_chunk(self, chunk: Chunk) -> bool:
        try:
            await self._core.delete_namespaced_config_map(
                chunk.name,
                chunk.namespace,
                _request_timeout=self._config.request_timeout,
            )
        except ApiException as exc:
            if exc.status == _HTTP_NOT_FOUND:
                return False
            raise _translate(exc, f"configmap {chunk.key}") from exc
        return True

    async def close(self) -> None:
        await self._api_client.close()
