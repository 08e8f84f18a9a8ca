import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from messagemind.errors import ApiError, ErrorKind

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.MALFORMED_BODY: 400,
    ErrorKind.PAYLOAD_TOO_LARGE: 413,
    ErrorKind.INTERNAL: 500,
}


def api_error_response(exc: ApiError) -> JSONResponse:
    """Map an ApiError to its status code and a ``{error, type}`` body."""
    status_code = STATUS_BY_KIND.get(exc.kind, 500)
    return JSONResponse(status_code=status_code, content={"error": exc.message, "type": exc.kind.value})


def internal_error_response(exc: BaseException, expose_details: bool) -> JSONResponse:
    """Generic 500 response; the fault text is included only when ``expose_details`` is set."""
    content = {"error": "Internal server error"}
    if expose_details:
        content["message"] = str(exc)
    return JSONResponse(status_code=500, content=content)


async def api_error_handler(_: Request, exc: Exception) -> Response:
    """Handle ApiError subclasses raised from route handlers."""
    if not isinstance(exc, ApiError):
        raise exc
    logger.info("api_error", kind=exc.kind.value, message=exc.message)
    return api_error_response(exc)
