"""Application exceptions and the handlers that render them.

Every catalog failure is a BuyNestException carrying an HTTP status and a
stable error code. Handlers turn them (and framework / database errors)
into one response envelope:

    {"error": {"code": "...", "message": "...", "details": {...}}}

Validation, authorization, not-found and duplicate errors are always raised
before anything is written. DeliveryFailedError and StorageFailureError may
follow a write, so their details name the entity and the stage reached.
"""

import logging
import traceback
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BuyNestException(Exception):
    """Base exception for BuyNest catalog errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: dict | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class UnauthorizedError(BuyNestException):
    """Capability check failed (caller is not an admin)."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code="UNAUTHORIZED",
        )


# ── Validation ───────────────────────────────────────────────

class ValidationFailedError(BuyNestException):
    """Malformed input, rejected before any mutation."""

    def __init__(self, message: str, error_code: str = "VALIDATION_FAILED", details: dict | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            details=details,
        )


class MissingFieldError(ValidationFailedError):
    def __init__(self, fields: list[str]):
        self.fields = fields
        super().__init__(
            message=f"{_join_fields(fields)} {'is' if len(fields) == 1 else 'are'} required",
            error_code="MISSING_FIELD",
            details={"fields": fields},
        )


class InvalidIdentifierFragmentError(ValidationFailedError):
    def __init__(self, field: str, fragment: object):
        self.field = field
        self.fragment = fragment
        super().__init__(
            message=f"{field} must contain digits only",
            error_code="INVALID_IDENTIFIER_FRAGMENT",
            details={"field": field, "value": str(fragment)},
        )


class InvalidPhoneFormatError(ValidationFailedError):
    def __init__(self, value: str):
        super().__init__(
            message="Phone number must be exactly 10 digits",
            error_code="INVALID_PHONE_FORMAT",
            details={"field": "contactNo", "value": value},
        )


class StockLimitExceededError(ValidationFailedError):
    def __init__(self, product_id: str, stock: int, amount: int, limit: int):
        super().__init__(
            message=f"Adding {amount} units would take {product_id} past the stock limit of {limit}",
            error_code="STOCK_LIMIT_EXCEEDED",
            details={"productId": product_id, "stock": stock, "amount": amount, "limit": limit},
        )


# ── Lookups ──────────────────────────────────────────────────

class ResourceNotFoundError(BuyNestException):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str, error_code: str = "RESOURCE_NOT_FOUND", message: str | None = None):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=message or f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            details={"resource": resource, "identifier": identifier},
        )


class ProductNotFoundError(ResourceNotFoundError):
    def __init__(self, product_id: str):
        super().__init__("Product", product_id, error_code="PRODUCT_NOT_FOUND")


class SupplierNotFoundError(ResourceNotFoundError):
    def __init__(self, identifier: str, message: str | None = None):
        super().__init__("Supplier", identifier, error_code="SUPPLIER_NOT_FOUND", message=message)


class DuplicateIdentifierError(BuyNestException):
    """A minted identifier is already taken (pre-check or unique index)."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            message=f"{resource} identifier already exists: {identifier}",
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_IDENTIFIER",
            details={"resource": resource, "identifier": identifier},
        )


# ── Post-write failures ──────────────────────────────────────

class DeliveryFailedError(BuyNestException):
    """Email transport reported non-success. Not retried here."""

    def __init__(
        self,
        product_id: str,
        supplier_id: str,
        status_code: int | None,
        reason: str | None = None,
    ):
        self.product_id = product_id
        self.supplier_id = supplier_id
        self.delivery_status = status_code
        super().__init__(
            message="Failed to notify supplier",
            status_code=status.HTTP_502_BAD_GATEWAY,
            error_code="DELIVERY_FAILED",
            details={
                "stage": "email_delivery",
                "product_id": product_id,
                "supplier_id": supplier_id,
                "delivery_status": status_code,
                "reason": reason,
            },
        )


class StorageFailureError(BuyNestException):
    """Storage collaborator fault, reported with the entity and stage reached."""

    def __init__(self, entity: str, identifier: str, stage: str, reason: str | None = None):
        self.entity = entity
        self.identifier = identifier
        self.stage = stage
        super().__init__(
            message=f"Storage failure while processing {entity} {identifier} ({stage})",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error_code="STORAGE_FAILURE",
            details={
                "entity": entity,
                "identifier": identifier,
                "stage": stage,
                "reason": reason,
            },
        )


def _join_fields(fields: list[str]) -> str:
    if len(fields) <= 1:
        return "".join(fields)
    return ", ".join(fields[:-1]) + " and " + fields[-1]


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Create standardized error response.

    Format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }
    """
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


async def buynest_exception_handler(
    request: Request,
    exc: BuyNestException,
) -> JSONResponse:
    """Handle BuyNest domain exceptions."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s - %s",
        exc.error_code,
        request.method,
        request.url.path,
        exc.message,
        extra={"error_code": exc.error_code, "details": exc.details},
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI HTTP exceptions."""
    if exc.status_code >= 500:
        logger.error(
            f"HTTP {exc.status_code}: {exc.detail}",
            extra={
                "path": request.url.path,
                "method": request.method,
            },
        )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Handle Pydantic validation errors."""
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle integrity errors that escaped the catalog store."""
    logger.error(
        f"Database integrity error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)

    if "unique" in error_msg.lower():
        message = "A record with this value already exists"
        error_code = "DUPLICATE_RECORD"
    elif "foreign key" in error_msg.lower():
        message = "Referenced record does not exist"
        error_code = "FOREIGN_KEY_VIOLATION"
    else:
        message = "Database constraint violation"
        error_code = "INTEGRITY_ERROR"

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message=message,
        error_code=error_code,
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    logger.error(
        f"Database operational error on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {str(exc)}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc(),
        },
        exc_info=True,
    )

    # Don't expose internal details
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(BuyNestException, buynest_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
