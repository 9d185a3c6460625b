import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from pydantic import ValidationError as PydanticValidationError
from punchclock.utils.errors import ServiceError

logger = logging.getLogger(__name__)


def error_response(status_code: int, code: str, message, details=None) -> JSONResponse:
    error = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.info("%s %s -> %s %s: %s", request.method, request.url.path, exc.status_code, exc.code, exc.message)
    return error_response(exc.status_code, exc.code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return error_response(400, "VALIDATION_ERROR", "Invalid request.", details)


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Last line of defence: anything not handled above becomes a 500 with
    the traceback logged and nothing internal sent to the client."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)

        except PydanticValidationError as ve:
            logger.error("Unhandled model validation error on %s %s", request.method, request.url.path, exc_info=ve)
            return error_response(500, "INTERNAL_ERROR", "An internal error occurred.")

        except Exception as e:
            logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, e)
            return error_response(500, "INTERNAL_ERROR", "An internal error occurred.")
