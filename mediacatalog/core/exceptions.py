"""
Error taxonomy for the catalog service.

Every error a caller can see is a ``CatalogServiceError``; the API layer
renders it as ``{"success": false, "error": message, "code": code}`` with
``status_code``.
Storage client failures are a separate family (``StorageError``) that only the
ingestion orchestrator handles, translating them into ``StorageUploadFailed``.
"""

from typing import Optional


class CatalogServiceError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class BackendUnavailable(CatalogServiceError):
    """Database not ready"""

    code = "BACKEND_UNAVAILABLE"
    status_code = 503


class Unauthorized(CatalogServiceError):
    """Unauthorized"""

    code = "UNAUTHORIZED"
    status_code = 401


class InvalidInput(CatalogServiceError):
    """Invalid input"""

    code = "INVALID_INPUT"
    status_code = 400


class InvalidIdentifier(CatalogServiceError):
    """Invalid video id"""

    code = "INVALID_IDENTIFIER"
    status_code = 400


class NotFound(CatalogServiceError):
    """Video not found"""

    code = "NOT_FOUND"
    status_code = 404


class StorageUploadFailed(CatalogServiceError):
    """Video upload failed"""

    code = "STORAGE_UPLOAD_FAILED"
    status_code = 500


class CatalogWriteFailed(CatalogServiceError):
    """Failed to save video"""

    code = "CATALOG_WRITE_FAILED"
    status_code = 500

    def __init__(self, message: Optional[str] = None, compensated: bool = False) -> None:
        super().__init__(message)
        self.compensated = compensated


class StorageError(Exception):
    """Base class for object storage failures."""

    retryable = False

    def __init__(self, message: str, key: Optional[str] = None, original_error: Optional[Exception] = None) -> None:
        self.message = message
        self.key = key
        self.original_error = original_error
        detail = message if key is None else f"{message} (key={key})"
        super().__init__(detail)


class StorageNetworkError(StorageError):
    """Connection failure or timeout talking to the storage backend."""

    retryable = True


class StorageRejected(StorageError):
    """The storage backend refused the object."""


class PayloadTooLarge(StorageError):
    """Payload exceeds the configured ceiling; no network call was made."""
