"""Error Handlers: every failure leaves the API in the DiasporaConnectError envelope.

Invariants:
    - DiasporaConnectError -> its own http_status and to_response() body
    - RequestValidationError -> 400 INVALID_REQUEST with the first validator message
      ("Amount must be greater than zero") and the offending camelCase field
    - stripe.StripeError escaping StripeGateway -> 502 PAYMENT_PROVIDER_ERROR
    - GoogleAPICallError escaping translate_errors -> 503 DATASTORE_ERROR
    - Anything else -> 500 INTERNAL_ERROR, no exception text in the body

Design Decisions:
    - Vendor exceptions are converted to the same domain errors the adapters raise,
      so clients see one envelope whichever layer failed
    - Log level follows http_status: warning below 500, error from 500
"""

import logging

import stripe
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from google.api_core.exceptions import GoogleAPICallError

from diaspora_connect.core.errors import (
    DatastoreError,
    DiasporaConnectError,
    ErrorCategory,
    ErrorSeverity,
    InvalidRequestError,
    PaymentProviderError,
)

logger = logging.getLogger(__name__)

REQUEST_PARTS = ("body", "query", "path", "header", "cookie")
GENERIC_MESSAGE = "Invalid request data"
UNEXPECTED_MESSAGE = "An unexpected error occurred"

# pydantic error type -> message, for errors no validator worded itself
TYPE_MESSAGES = {
    "missing": "{field} is required",
    "json_invalid": "Request body is not valid JSON",
    "model_attributes_type": "Request body must be a JSON object",
    "dict_type": "Request body must be a JSON object",
}


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DiasporaConnectError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(stripe.StripeError, stripe_error_handler)
    app.add_exception_handler(GoogleAPICallError, datastore_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


# ─── Handlers ───────────────────────────────────────────────────

async def domain_error_handler(request: Request, exc: DiasporaConnectError):
    return _respond(request, exc)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    error = InvalidRequestError(*validation_summary(errors))
    body = error.to_response()
    body["error"]["details"] = [
        {"field": wire_field(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in errors
    ]
    return _respond(request, error, body)


async def stripe_error_handler(request: Request, exc: stripe.StripeError):
    return _respond(request, PaymentProviderError(exc.user_message or str(exc), exc.code))


async def datastore_error_handler(request: Request, exc: GoogleAPICallError):
    logger.error(f"Firestore error escaped a repository: {exc}")
    return _respond(
        request, DatastoreError("Firestore API error", f"{request.method} {request.url.path}"),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )
    error = DiasporaConnectError(
        UNEXPECTED_MESSAGE, "INTERNAL_ERROR", ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
    )
    return JSONResponse(status_code=error.http_status, content=error.to_response())


# ─── Helpers ────────────────────────────────────────────────────

def wire_field(loc) -> str | None:
    """("body", "userEmail") -> "userEmail"; model-level errors have no field."""
    parts = [str(p) for p in loc]
    if parts and parts[0] in REQUEST_PARTS:
        parts = parts[1:]
    return ".".join(parts) or None


def validation_summary(errors) -> tuple[str, str | None]:
    """(message, field) for the response headline.

    A validator's own ValueError text wins ("Name is required"); otherwise the
    first error is worded from TYPE_MESSAGES, falling back to GENERIC_MESSAGE.
    """
    for e in errors:
        ctx_error = (e.get("ctx") or {}).get("error")
        if isinstance(ctx_error, ValueError):
            return str(ctx_error), wire_field(e["loc"])
    if not errors:
        return GENERIC_MESSAGE, None
    first = errors[0]
    field = wire_field(first["loc"])
    template = TYPE_MESSAGES.get(first["type"])
    if template is None or ("{field}" in template and not field):
        return GENERIC_MESSAGE, field
    return template.format(field=field), field


def _respond(
    request: Request, error: DiasporaConnectError, body: dict | None = None,
) -> JSONResponse:
    log = logger.warning if error.http_status < 500 else logger.error
    log(
        f"{error.code} on {request.method} {request.url.path}: {error.message}",
        extra={"error_code": error.code, "path": request.url.path},
    )
    return JSONResponse(status_code=error.http_status, content=body or error.to_response())
