# =============================================================================================
# APP/CORE/HANDLERS.PY - EXCEPTION → HTTP RESPONSE MAPPING
# =============================================================================================
# Every failure leaves the API in the same envelope:
#
#     {"ok": false, "msg": "Currency XYZ not found"}
#
# MAPPING:
# - CurrencyAppError subclasses → their own status_code and message
# - RequestValidationError      → 400 "Validation failed" (+ field errors)
#                                 400 "Bad request." when the JSON body does not parse
# - HTTPException               → its status and detail
# - anything else               → 500 "Internal server error", logged with traceback,
#                                 message never sent to the client
# =============================================================================================

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from app.core.errors import CurrencyAppError

logger = structlog.get_logger(__name__)


def _error(status_code: int, msg: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "msg": msg, **extra})


async def app_error_handler(request: Request, exc: CurrencyAppError) -> JSONResponse:
    """Domain errors raised by services and dependencies."""
    logger.info(
        "request_rejected",
        code=exc.code,
        status=exc.status_code,
        path=request.url.path,
    )
    return _error(exc.status_code, exc.message)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return _error(status.HTTP_400_BAD_REQUEST, "Bad request.")

    # Drop the echoed input/context so passwords never come back in an error body
    cleaned = [{"loc": err.get("loc"), "msg": err.get("msg"), "type": err.get("type")} for err in errors]
    return _error(status.HTTP_400_BAD_REQUEST, "Validation failed", errors=jsonable_encoder(cleaned))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "msg": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_error", path=request.url.path, exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CurrencyAppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
