"""Error Handlers — global exception handlers for the ORCID++ API.

Invariants:
    - OrcidPlusError → structured JSON with error code, message, severity
    - RequestValidationError → field-level error details (400, not 422)
    - Unknown routes → 404 listing the available endpoints
    - Exception (catch-all) → never leaks internal details

Design Decisions:
    - Layered handlers: domain (OrcidPlusError), validation (Pydantic), routing
      (Starlette HTTPException), catch-all (Exception)
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import OrcidPlusError, ErrorSeverity

logger = logging.getLogger(__name__)

_HTTP_METHODS = {"GET", "POST", "PUT", "PATCH", "DELETE"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(OrcidPlusError)
    async def orcid_plus_error_handler(request: Request, exc: OrcidPlusError):
        """Handle all ORCID++ domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "status_code": exc.http_status,
                "orcid_id": exc.context.orcid_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_http_error_handler(app: FastAPI) -> None:

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Routing-level errors (unknown path, wrong method)."""
        body = {
            "error": {
                "code": "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR",
                "message": (
                    "Endpoint not found" if exc.status_code == 404
                    else str(exc.detail)
                ),
                "category": "resource_not_found" if exc.status_code == 404 else "validation",
                "severity": ErrorSeverity.WARNING.value,
                "requested": f"{request.method} {request.url.path}",
            },
        }
        if exc.status_code == 404:
            body["error"]["available_endpoints"] = list_endpoints(request.app)
        return JSONResponse(
            status_code=exc.status_code, content=body, headers=exc.headers,
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def list_endpoints(app: FastAPI) -> dict[str, str]:
    """'METHOD /path' → summary for every API operation in the OpenAPI schema.

    Read from app.openapi() rather than app.routes: included routers are not
    guaranteed to be flattened into app.routes.
    """
    endpoints = {}
    for path, operations in app.openapi().get("paths", {}).items():
        if not path.startswith("/api/"):
            continue
        for method, operation in sorted(operations.items()):
            if method.upper() not in _HTTP_METHODS:
                continue
            endpoints[f"{method.upper()} {path}"] = operation.get("summary", "")
    return endpoints


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
