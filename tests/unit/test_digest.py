"""Tests for image digest resolution from pod status."""

from __future__ import annotations

import pytest

from bundlepack.digest import resolve_image_digest
from bundlepack.errors import DigestUnresolvedError

_IMAGE = "quay.io/acme/bundle:v1"


def _status(image: str, image_id: str) -> dict[str, str]:
    return {"name": "c", "image": image, "imageID": image_id}


class TestResolveImageDigest:
    def test_init_container_status_wins(self) -> None:
        pod = {
            "status": {
                "initContainerStatuses": [_status(_IMAGE, "init-digest")],
                "containerStatuses": [_status(_IMAGE, "main-digest")],
            }
        }
        assert resolve_image_digest(pod, _IMAGE) == "init-digest"

    def test_falls_back_to_container_statuses(self) -> None:
        pod = {
            "status": {
                "initContainerStatuses": [_status("busybox", "busybox-digest")],
                "containerStatuses": [_status(_IMAGE, "main-digest")],
            }
        }
        assert resolve_image_digest(pod, _IMAGE) == "main-digest"

    def test_empty_image_id_is_skipped(self) -> None:
        pod = {
            "status": {
                "initContainerStatuses": [_status(_IMAGE, "")],
                "containerStatuses": [_status(_IMAGE, "main-digest")],
            }
        }
        assert resolve_image_digest(pod, _IMAGE) == "main-digest"

    def test_no_matching_status_raises(self) -> None:
        pod = {"status": {"containerStatuses": [_status("other:latest", "other-digest")]}}
        with pytest.raises(DigestUnresolvedError) as exc_info:
            resolve_image_digest(pod, _IMAGE)
        assert exc_info.value.image == _IMAGE

    @pytest.mark.parametrize("pod", [{}, {"status": None}, {"status": {"containerStatuses": None}}])
    def test_pod_without_statuses_raises(self, pod: dict) -> None:
        with pytest.raises(DigestUnresolvedError):
            resolve_image_digest(pod, _IMAGE)
