import logging
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from inspection_hub.store import StoreError

logger = logging.getLogger(__name__)


def _error_payload(code: str, message: str, details):
    return {"code": code, "message": message, "details": details}


class DomainError(HTTPException):
    """HTTPException with a structured ``{code, message, details}`` detail."""

    status_code_default = 500
    code = "error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            detail=_error_payload(self.code, message, details),
        )
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class NotFoundError(DomainError):
    status_code_default = 404
    code = "not_found"


class PermissionDeniedError(DomainError):
    status_code_default = 403
    code = "permission_denied"


class InUseError(DomainError):
    status_code_default = 409
    code = "status_in_use"


class ConflictError(DomainError):
    status_code_default = 409
    code = "conflict"


class OperationInProgressError(ConflictError):
    code = "operation_in_progress"


class ValidationFailedError(DomainError):
    status_code_default = 400
    code = "invalid_request"


class PartialFailureError(DomainError):
    """A multi-step cascade failed after some of its steps were applied.

    Nothing is rolled back; ``details`` names the operation, the client and the
    step that failed together with what had already been done.
    """

    status_code_default = 502
    code = "partial_failure"

    @property
    def step(self) -> str | None:
        return self.details.get("step")


def register_error_handlers(app) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        detail = exc.detail
        code = f"http_{exc.status_code}"
        message = "Request failed"
        details = None
        if isinstance(detail, dict):
            code = detail.get("code", code)
            message = detail.get("message", message)
            details = detail.get("details")
        elif isinstance(detail, str):
            message = detail
        else:
            details = detail
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_payload(code, message, details),
        )

    @app.exception_handler(StoreError)
    async def store_exception_handler(request: Request, exc: StoreError):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content=_error_payload("not_found", exc.message, None),
            )
        logger.error(
            "Entity store error on %s %s: %s", request.method, request.url.path, exc
        )
        return JSONResponse(
            status_code=502,
            content=_error_payload("store_error", "Entity store request failed", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ):
        # ctx may hold raw Exception objects which are not JSON-serialisable.
        errors = [
            {k: str(v) if k == "ctx" else v for k, v in err.items() if k != "url"}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content=_error_payload("validation_error", "Validation error", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=_error_payload("internal_error", "Internal server error", None),
        )
