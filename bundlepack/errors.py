"""Exception hierarchy for bundlepack.

Every failure that reaches the top level is one of these. The CLI logs it
with its context and exits non-zero; re-running the unpack is the retry.
"""

from __future__ import annotations


class BundlePackError(Exception):
    """Base class for all bundlepack errors."""


class ManifestDecodeError(BundlePackError):
    """A manifest document could not be decoded. Raised before any remote mutation."""

    def __init__(self, source: str, reason: str, document_index: int | None = None) -> None:
        where = source if document_index is None else f"{source} (document {document_index})"
        super().__init__(f"decode manifest {where}: {reason}")
        self.source = source
        self.document_index = document_index
        self.reason = reason


class DigestUnresolvedError(BundlePackError):
    """The pod has not yet reported a resolved digest for the bundle image."""

    def __init__(self, image: str) -> None:
        super().__init__(f"image digest for image {image!r} not found")
        self.image = image


class ChunkNameCollisionError(BundlePackError):
    """Two desired objects map to the same chunk key."""

    def __init__(self, key: object, first: str, second: str) -> None:
        super().__init__(f"chunk {key} would hold both {first} and {second}")
        self.key = key
        self.first = first
        self.second = second


class StoreError(BundlePackError):
    """A remote store call failed.

    ``status`` carries the HTTP status code when the store is an API server.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class StoreNotFoundError(StoreError):
    """The requested object does not exist in the remote store."""


class StoreConflictError(StoreError):
    """An object already exists at the key being created."""


class RemoteStoreError(BundlePackError):
    """A remote store operation failed; aborts the current run."""

    def __init__(self, operation: str, key: object, cause: BaseException) -> None:
        super().__init__(f"{operation} {key}: {cause}")
        self.operation = operation
        self.key = key
        self.cause = cause
