"""FastAPI exception handlers for converting OrderingError to HTTP responses.

Every failure leaves the API as the same JSON body (ErrorResponse):

- 400 Bad Request: invalid input, invalid webhook signature, order mismatch
- 402 Payment Required: the Checkout Session is not paid
- 500 Internal Server Error: Stripe, email or configuration failures

Usage:
    from ordering_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_402_PAYMENT_REQUIRED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from ordering.models.errors import ErrorCode, ErrorResponse, OrderingError

logger = logging.getLogger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    # Invalid input -> 400 Bad Request
    ErrorCode.INVALID_INPUT: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_ACTION: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.ORDER_MISMATCH: HTTP_400_BAD_REQUEST,
    ErrorCode.TOTAL_MISMATCH: HTTP_400_BAD_REQUEST,
    # Unpaid session -> 402 Payment Required
    ErrorCode.PAYMENT_NOT_CONFIRMED: HTTP_402_PAYMENT_REQUIRED,
    # Downstream failures -> 500
    ErrorCode.STRIPE_API_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.SESSION_VERIFICATION_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.EMAIL_DELIVERY_FAILED: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.CONFIGURATION_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 500."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_500_INTERNAL_SERVER_ERROR)


async def ordering_error_handler(request: Request, exc: OrderingError) -> JSONResponse:
    """Convert an OrderingError into its JSON error response."""
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.__cause__)

    return JSONResponse(
        status_code=status_code,
        content=exc.to_response().model_dump(mode="json"),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request body/query validation failures as 400 INVALID_INPUT."""
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    body = ErrorResponse.from_code(ErrorCode.INVALID_INPUT, details={"errors": errors})
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content=body.model_dump(mode="json"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Keep framework errors (404, 405) in the standard error shape."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error_code": None, "message": str(exc.detail), "details": None},
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic 500 response.

    The traceback is logged; the client only sees a generic message.
    """
    logger.exception("Unhandled exception: %s", exc)

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error_code": "ERR_INTERNAL",
            "message": "An unexpected error occurred",
            "details": None,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(OrderingError, ordering_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
