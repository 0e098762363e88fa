"""HTTP mappings for checkout failures.

Protean's own handlers cover the generic domain exceptions; the ones here
give step, payment and submission failures the status codes and bodies the
checkout client expects.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.integrations.fastapi import register_exception_handlers

from checkout.errors import (
    FieldValidationError,
    IncompleteCheckoutError,
    PaymentError,
    SubmissionNetworkError,
)

logger = structlog.get_logger(__name__)


async def field_validation_handler(request: Request, exc: FieldValidationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"errors": exc.messages})


async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"errors": exc.messages})


async def incomplete_checkout_handler(request: Request, exc: IncompleteCheckoutError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": str(exc)})


async def payment_error_handler(request: Request, exc: PaymentError) -> JSONResponse:
    logger.info("Payment failed", path=request.url.path, code=exc.code)
    return JSONResponse(status_code=402, content=exc.to_dict())


async def submission_error_handler(request: Request, exc: SubmissionNetworkError) -> JSONResponse:
    logger.warning("Order submission unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=503,
        content={"error": str(exc) or "Order service unavailable", "retryable": exc.retryable},
    )


def register_checkout_exception_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then the checkout-specific ones on top."""
    register_exception_handlers(app)
    app.add_exception_handler(ValidationError, validation_handler)
    app.add_exception_handler(FieldValidationError, field_validation_handler)
    app.add_exception_handler(IncompleteCheckoutError, incomplete_checkout_handler)
    app.add_exception_handler(PaymentError, payment_error_handler)
    app.add_exception_handler(SubmissionNetworkError, submission_error_handler)
