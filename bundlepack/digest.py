"""Resolve a bundle image reference to the digest the kubelet pulled."""

from __future__ import annotations

from typing import Any

from bundlepack.errors import DigestUnresolvedError


def resolve_image_digest(pod: dict[str, Any], image: str) -> str:
    """Return the ``imageID`` reported for *image* in *pod*'s status.

    Init container statuses are searched before regular container
    statuses; the first status whose ``image`` matches and whose
    ``imageID`` is non-empty wins.

    Raises:
        DigestUnresolvedError: no matching status has reported an imageID yet.
    """
    status = pod.get("status") or {}
    for field_name in ("initContainerStatuses", "containerStatuses"):
        for container in status.get(field_name) or []:
            if container.get("image") == image and container.get("imageID"):
                return str(container["imageID"])
    raise DigestUnresolvedError(image)
