"""Error taxonomy for the ledger core plus FastAPI exception handlers.

Services raise the `LedgerError` subclasses below; the handlers translate them
into `{"error": <code>, "detail": <message>}` JSON bodies.
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("app.errors")


class LedgerError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class QueryValidationError(LedgerError):
    """Rejected input: bad month/year, malformed enum value, inverted range."""

    status_code = status.HTTP_400_BAD_REQUEST
    error = "validation_error"


class UnsupportedCurrencyError(QueryValidationError):
    def __init__(self, currency: str):
        super().__init__(f"unsupported currency '{currency}'")
        self.currency = currency


class CategoryNotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "category_not_found"

    def __init__(self, name: str):
        super().__init__(f'Category "{name}" not found')
        self.name = name


class ExchangeRateConfigError(LedgerError):
    error = "rate_config_error"


class StorageUnavailableError(LedgerError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "storage_unavailable"


def ledger_error_handler(request: Request, exc: LedgerError):  # type: ignore
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.error, "detail": exc.message},
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        detail = f"No route for {request.method} {request.url.path}"
        code = "not_found"
    else:
        detail = exc.detail
        code = "http_error"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": code, "detail": detail},
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
