"""Exception handlers producing the ``{"error": {code, message, details}}`` body."""

import logging
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from ..exceptions import DocwardException, ErrorCode

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"


def _error_body(code: ErrorCode, message: str, details: dict) -> dict:
    return {"error": {"code": code.value, "message": message, "details": details}}


async def docward_exception_handler(request: Request, exc: DocwardException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Client errors (4xx) keep their code, message and details. Server errors
    keep their code but the message is replaced with a generic one and the
    details stay in the log.

    Args:
        request: FastAPI request object
        exc: DocwardException instance

    Returns:
        JSONResponse with error details
    """
    log_extra = {
        "error_code": exc.error_code.value,
        "path": request.url.path,
        "method": request.method,
        "details": exc.details,
        "status_code": exc.status_code,
    }

    if exc.status_code >= 500:
        logger.error(f"DocwardException: {exc.error_code.value}: {exc.message}", extra=log_extra)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.error_code, GENERIC_SERVER_ERROR, {}),
        )

    logger.warning(f"DocwardException: {exc.error_code.value}", extra=log_extra)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters become 400 VALIDATION_ERROR."""
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "errors": errors},
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(ErrorCode.VALIDATION_ERROR, "Invalid request", {"errors": errors}),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected is logged with its traceback and hidden from the client."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(ErrorCode.INTERNAL_ERROR, GENERIC_SERVER_ERROR, {}),
    )
