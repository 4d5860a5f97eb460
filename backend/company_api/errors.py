"""Failure taxonomy and its translation to HTTP responses.

Services and repositories raise the typed errors below; they never build
HTTP responses. `register_exception_handlers` installs the single place
where failures become status codes and the uniform
`{"status": <int>, "message": <str>}` payload.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("company_api.errors")

GENERIC_ERROR_MESSAGE = "An unexpected error occurred"


class DomainError(Exception):
    """Base class for failures raised by the service and repository layers."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    """No entity exists for the given identifier."""
    status_code = 404

    def __init__(self, entity_type: str = "Resource", entity_id: Any = None):
        if entity_id is None:
            message = f"{entity_type} not found"
        else:
            message = f"{entity_type} not found with id: {entity_id}"
        super().__init__(message)
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationFailedError(DomainError):
    """One or more fields violate their constraints.

    `errors` is a list of `{"field": ..., "message": ...}` dicts.
    """
    status_code = 400

    def __init__(self, errors: List[Dict[str, str]]):
        joined = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Validation failed: {joined}" if joined else "Validation failed")
        self.errors = errors

    @classmethod
    def from_request_error(cls, exc: RequestValidationError) -> "ValidationFailedError":
        """Flatten FastAPI's validation errors into field/message pairs.

        The location prefix (`body`, `path`, `query`) is dropped so the
        field reads as the client sent it.
        """
        errors = []
        for err in exc.errors():
            loc = [str(p) for p in err.get("loc", ())]
            if loc and loc[0] in ("body", "path", "query", "header"):
                loc = loc[1:]
            errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "invalid value")})
        return cls(errors)


class DuplicateEmailError(DomainError):
    """A user with this email address already exists."""
    status_code = 400

    def __init__(self, email: str):
        super().__init__(f"User with email {email} already exists")
        self.email = email


class StorageUnavailableError(DomainError):
    """The persistence store could not be reached.

    The underlying detail is kept for logs only; clients get the generic
    message.
    """
    status_code = 500

    def __init__(self, detail: str = ""):
        super().__init__(GENERIC_ERROR_MESSAGE)
        self.detail = detail


def error_payload(status: int, message: str, errors: Optional[List[Dict[str, str]]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"status": status, "message": message}
    if errors is not None:
        body["errors"] = errors
    return body


def _domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if isinstance(exc, StorageUnavailableError):
        logger.error("storage_unavailable %s %s: %s", request.method, request.url.path, exc.detail)
    elif exc.status_code >= 500:
        logger.error("domain_error %s %s: %s", request.method, request.url.path, exc.message)
    errors = exc.errors if isinstance(exc, ValidationFailedError) else None
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc.status_code, exc.message, errors))


def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _domain_error_handler(request, ValidationFailedError.from_request_error(exc))


def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = "Resource not found"
    elif exc.status_code >= 500:
        message = GENERIC_ERROR_MESSAGE
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc.status_code, message),
        headers=getattr(exc, "headers", None),
    )


def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Full traceback goes to the log; the response never carries internals.
    # Runs outside the request middleware, so the request id is attached here.
    req_id = getattr(request.state, "request_id", None)
    logger.error(
        "unhandled_exception %s %s request_id=%s", request.method, request.url.path, req_id, exc_info=exc
    )
    headers = {"X-Request-ID": req_id} if req_id else None
    return JSONResponse(status_code=500, content=error_payload(500, GENERIC_ERROR_MESSAGE), headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
