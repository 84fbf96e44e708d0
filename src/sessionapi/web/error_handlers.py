import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from sessionapi.errors import AuthenticationError, CsrfTokenError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


def create_json_error_response(status_code: int, message: str, error_type: str | None = None) -> JSONResponse:
    """Create JSON error response with optional type for machine parsing."""
    content = {"message": message}
    if error_type:
        content["type"] = error_type
    return JSONResponse(status_code=status_code, content=content)


def user_error_status(exc: Exception) -> tuple[int, str]:
    """Map a UserError to its HTTP status code and machine-readable type."""
    if isinstance(exc, CsrfTokenError):
        return 401, "csrf_token_error"
    if isinstance(exc, AuthenticationError):
        return 401, "authentication_error"
    if isinstance(exc, NotFoundError):
        return 404, "not_found"
    if isinstance(exc, ValidationError):
        return 400, "validation_error"
    # Default for any other UserError subclass
    return 400, "bad_request"


async def user_error_handler(request: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    status_code, error_type = user_error_status(exc)
    logger.debug("user_error", path=request.url.path, status_code=status_code, error_type=error_type)
    return create_json_error_response(status_code=status_code, message=str(exc), error_type=error_type)


async def general_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", path=request.url.path, error=str(exc))
    return create_json_error_response(
        status_code=500, message="An unexpected error occurred.", error_type="internal_server_error"
    )
