"""HTTP error taxonomy.

Every error the API reports is an `ApiError` (a FastAPI `HTTPException`), so
FastAPI's own machinery turns it into a response; `install_error_handlers`
only normalizes the body to `{"message": ...}`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from workforce_api.db import integrity_kind


def _debug(msg: str) -> None:
    print(f"[errors] {msg}")


class ApiError(HTTPException):
    status_code = 500
    kind = "Error"

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=type(self).status_code, detail=message, headers=headers)
        if kind:
            self.kind = kind

    @property
    def message(self) -> str:
        return str(self.detail)


class ValidationError(ApiError):
    status_code = 400
    kind = "ValidationError"


class Unauthorized(ApiError):
    status_code = 401
    kind = "Unauthorized"

    def __init__(self, message: str = "Unauthorized", *, kind: Optional[str] = None):
        super().__init__(message, kind=kind, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ApiError):
    status_code = 403
    kind = "Forbidden"


class NotFound(ApiError):
    status_code = 404
    kind = "NotFound"


class Conflict(ApiError):
    status_code = 409
    kind = "Conflict"


class InternalError(ApiError):
    status_code = 500
    kind = "InternalError"


@contextmanager
def storage_errors(
    action: str,
    *,
    duplicate_message: str = "Record already exists",
    in_use_message: str = "Record is still referenced by other records",
) -> Iterator[None]:
    """Convert storage faults raised inside the block into ApiErrors.

    `action` completes the generic 500 message, e.g. "fetching employees".
    Unique violations become 409, foreign-key violations become 409 on delete
    and 400 otherwise, other constraint violations 400. Anything unexpected
    is logged here and reported as a generic 500.
    """
    try:
        yield
    except HTTPException:
        raise
    except Exception as e:
        kind = integrity_kind(e)
        if kind == "unique":
            raise Conflict(duplicate_message, kind="DuplicateKey") from e
        if kind == "foreign_key":
            if action.startswith("deleting"):
                raise Conflict(in_use_message, kind="InUse") from e
            raise ValidationError("Referenced record does not exist", kind="InvalidReference") from e
        if kind is not None:
            raise ValidationError("Invalid field value", kind="ConstraintViolation") from e

        _debug(f"Error {action}: {type(e).__name__}: {e}")
        raise InternalError(f"Error {action}") from e


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first: Dict[str, Any] = errors[0]
    loc = [str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path")]
    msg = str(first.get("msg") or "Invalid value")
    if loc:
        return f"Invalid field {'.'.join(loc)}: {msg}"
    return f"Invalid request: {msg}"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"message": _first_validation_message(exc)})

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})
