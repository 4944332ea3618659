from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from portal.config import settings
from portal.core.exceptions import PortalError
import logging

logger = logging.getLogger(__name__)


async def portal_exception_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.detail}")
    else:
        logger.info(f"{exc.__class__.__name__} on {request.method} {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.detail},
        headers=exc.headers,
    )


def _describe_validation_errors(errors) -> str:
    messages = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        field = ".".join(loc)
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "invalid value"))
    return "; ".join(messages) or "Invalid request"


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors like any other: 400 with a readable message."""
    logger.warning(f"Validation error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": _describe_validation_errors(exc.errors())},
    )


async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"success": False, "message": "Internal server error"})
    return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})
