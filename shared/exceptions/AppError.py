"""Error taxonomy shared by clients, services and the HTTP layer.

Every error carries the message that is safe to return to the caller and the
HTTP status code the API layer answers with.
"""


class AppError(Exception):
    """Base class for all expected application failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    """A required field is missing or malformed. Never retried."""

    status_code = 400


class NotFoundError(AppError):
    """A referenced upload does not exist."""

    status_code = 404


class ExtractionFailedError(AppError):
    """The document body is unreadable, corrupt or of an unsupported type."""

    status_code = 500


class EmbeddingUnavailableError(AppError):
    """The embedding provider is unreachable, timed out or returned malformed data."""

    status_code = 500


class DimensionMismatchError(EmbeddingUnavailableError):
    """Two vectors that must share a dimensionality do not."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}.")
        self.expected = expected
        self.actual = actual


class StoreError(AppError):
    """The document catalog or the vector store failed to read or write."""

    status_code = 500
