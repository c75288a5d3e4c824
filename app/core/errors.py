"""
Central error handling for ELRA leave backend

Domain errors subclass HTTPException so services can raise them directly and
the handlers below render every failure as ``{"success": false, "message": ...}``.
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class WorkflowError(HTTPException):
    """Base class for leave workflow failures"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=type(self).status_code, detail=detail)


class LeaveValidationError(WorkflowError):
    """Bad date range, past date or missing field"""

    status_code = status.HTTP_400_BAD_REQUEST


class Forbidden(WorkflowError):
    """Role, ownership or approval-authority failure"""

    status_code = status.HTTP_403_FORBIDDEN


class NotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidState(WorkflowError):
    """Operation not allowed for the request's current status"""

    status_code = status.HTTP_400_BAD_REQUEST


class NoApproverFound(WorkflowError):
    """Approval chain resolution reached a dead end"""

    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(WorkflowError):
    """Overlapping Pending/Approved request for the same employee"""

    status_code = status.HTTP_409_CONFLICT


def _error_body(request: Request, status_code: int, message) -> dict:
    return {
        "success": False,
        "message": message,
        "status_code": status_code,
        "path": str(request.url.path)
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Handle HTTPException (and every WorkflowError) with the failure envelope

    Args:
        request: FastAPI request object
        exc: HTTPException instance

    Returns:
        JSONResponse with error details
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc.status_code, exc.detail),
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle RequestValidationError as a 400 ValidationError

    Does not leak internal validation details in production.
    """
    from app.core.config import settings

    content = _error_body(request, status.HTTP_400_BAD_REQUEST, "Validation error: Invalid request data")
    if settings.APP_ENV != "prod":
        # ctx may carry exception instances that are not JSON serializable
        errors = []
        for e in exc.errors():
            err = dict(e)
            if "ctx" in err and isinstance(err["ctx"], dict):
                err["ctx"] = {
                    k: (str(v) if not isinstance(v, (str, int, float, bool, type(None))) else v)
                    for k, v in err["ctx"].items()
                }
            errors.append(err)
        content["errors"] = errors

    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions with the failure envelope

    Does not leak internal error details in production.
    """
    from app.core.config import settings

    logger.error("Unhandled exception: %s", exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(request, 500, "Internal server error")
        )

    content = _error_body(request, 500, str(exc))
    if settings.APP_ENV == "local":
        content["traceback"] = traceback.format_exc()
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content)
