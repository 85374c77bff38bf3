"""Error types raised by the scanning and collection services."""


class MarbleCatalogError(Exception):
    """Base error carrying a machine-readable code."""

    code = "INTERNAL_ERROR"


class AuthRequired(MarbleCatalogError):
    """Raised when an operation needs an authenticated owner."""

    code = "AUTH_REQUIRED"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ValidationFailed(MarbleCatalogError):
    """Raised when caller input violates a precondition."""

    code = "VALIDATION_FAILED"


class SessionNotFound(MarbleCatalogError):
    """Raised when a scan session is missing or owned by someone else."""

    code = "SESSION_NOT_FOUND"


class SessionNotActive(MarbleCatalogError):
    """Raised when a terminal session is asked to accept more photos."""

    code = "SESSION_NOT_ACTIVE"


class UploadFailed(MarbleCatalogError):
    """Raised when object storage rejects a photo upload."""

    code = "UPLOAD_FAILED"


class RecognitionFailed(MarbleCatalogError):
    """Raised when the recognition call fails or returns an unusable body."""

    code = "RECOGNITION_FAILED"


class PersistenceFailed(MarbleCatalogError):
    """Raised when a row cannot be written to or read from the store."""

    code = "PERSISTENCE_FAILED"
