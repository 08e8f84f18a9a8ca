from enum import StrEnum


class ErrorKind(StrEnum):
    """Machine-readable error kinds returned to clients in the ``type`` field."""

    MALFORMED_BODY = "malformed_body"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    INTERNAL = "internal"


class ApiError(Exception):
    """Base class for errors whose message is safe to show to the client.

    Every subclass carries an ``ErrorKind``. Messages must not contain
    sensitive information.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class MalformedBodyError(ApiError):
    """Raised when a request body cannot be decoded."""

    kind = ErrorKind.MALFORMED_BODY

    def __init__(self, message: str = "Malformed request body") -> None:
        super().__init__(message)


class PayloadTooLargeError(ApiError):
    """Raised when a request body exceeds the configured ceiling."""

    kind = ErrorKind.PAYLOAD_TOO_LARGE

    def __init__(self, limit: int) -> None:
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit


class PipelineOrderError(RuntimeError):
    """Raised at startup when middleware stages are registered in an invalid order."""
