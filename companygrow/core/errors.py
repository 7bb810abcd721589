import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from companygrow.core.config import ENVIRONMENT

log = logging.getLogger("errors")

# código por defecto según status cuando se lanza un HTTPException "pelado"
DEFAULT_CODES = {
    400: "BAD_REQUEST",
    401: "INVALID_TOKEN",
    403: "INSUFFICIENT_PERMISSIONS",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "AUTH_RATE_LIMIT_EXCEEDED",
}


class ApiError(HTTPException):
    """HTTPException con código de error estable para el cliente."""

    def __init__(self, status_code: int, message: str, code: str, field: str | None = None, headers: dict | None = None):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.code = code
        self.field = field


def not_found(what: str) -> ApiError:
    """404 estándar: not_found("Course") -> COURSE_NOT_FOUND."""
    return ApiError(404, f"{what} not found", f"{what.upper().replace(' ', '_')}_NOT_FOUND")


def error_body(message: str, code: str, **extra) -> dict:
    err = {"message": message, "code": code}
    err.update({k: v for k, v in extra.items() if v is not None})
    return {"success": False, "error": err}


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = getattr(exc, "code", None)
    if code is None:
        if exc.status_code == 404 and request.url.path.startswith("/api"):
            # ruta inexistente vs. recurso inexistente
            code = "ROUTE_NOT_FOUND" if exc.detail == "Not Found" else "NOT_FOUND"
        else:
            code = DEFAULT_CODES.get(exc.status_code, "HTTP_ERROR")
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    if code == "ROUTE_NOT_FOUND":
        message = f"Route {request.method} {request.url.path} not found"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message, code, field=getattr(exc, "field", None)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path")),
            "message": e.get("msg"),
        }
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=error_body("Validation failed", "VALIDATION_ERROR", details=jsonable_encoder(details)),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    log.warning("integrity error on %s: %s", request.url.path, exc.orig)
    return JSONResponse(
        status_code=409,
        content=error_body("Resource already exists", "DUPLICATE_RESOURCE"),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content=error_body(
            "Too many authentication attempts, please try again later",
            "AUTH_RATE_LIMIT_EXCEEDED",
        ),
        headers={"Retry-After": str(getattr(exc, "retry_after", 900))},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    details = str(exc) if ENVIRONMENT == "development" else None
    return JSONResponse(
        status_code=500,
        content=error_body("Internal server error", "INTERNAL_SERVER_ERROR", details=details),
    )


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
