"""
Centralized error handlers for FastAPI.

Maps exchange domain errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from coindarks.domain.exchange.errors import (
    AuthenticationRequiredError,
    ExchangeDomainError,
    InvalidPairError,
    InventoryItemNotFoundError,
    KycRequiredError,
    MinimumOrderError,
    NoDestinationError,
    NoRateError,
    OrderCreationError,
    PairAlreadyExistsError,
    PairNotFoundError,
    PermissionDeniedError,
    RateUnavailableError,
    StoreUnavailableError,
    WalletNotFoundError,
)

logger = logging.getLogger(__name__)

HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_422 = 422
HTTP_500 = 500
HTTP_503 = 503


def _error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(exc: RequestValidationError) -> str:
    """Summarize the first validation error as ``field: reason``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    reason = first.get("msg", "invalid value")
    return f"{field}: {reason}" if field else reason


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle malformed bodies, headers and path parameters."""
        message = _validation_message(exc)
        logger.info("Rejected request to %s: %s", request.url.path, message)
        return _error_response(HTTP_422, message)

    @app.exception_handler(AuthenticationRequiredError)
    async def handle_authentication_required(
        _request: Request, exc: AuthenticationRequiredError
    ) -> JSONResponse:
        return _error_response(HTTP_401, exc.message)

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(
        request: Request, exc: PermissionDeniedError
    ) -> JSONResponse:
        """Handle admin routes called by non-admins."""
        logger.warning("Permission denied on %s", request.url.path)
        return _error_response(HTTP_403, exc.message)

    @app.exception_handler(KycRequiredError)
    async def handle_kyc_required(
        _request: Request, exc: KycRequiredError
    ) -> JSONResponse:
        """Handle orders from users without approved KYC."""
        logger.info("Order refused, KYC not approved for user %s", exc.user_id)
        return _error_response(HTTP_403, exc.message)

    @app.exception_handler(NoRateError)
    async def handle_no_rate(_request: Request, exc: NoRateError) -> JSONResponse:
        """Handle assets with no direct or USD-quoted pair."""
        logger.warning("No rate for asset %s", exc.asset)
        return _error_response(HTTP_404, exc.message)

    @app.exception_handler(RateUnavailableError)
    async def handle_rate_unavailable(
        _request: Request, exc: RateUnavailableError
    ) -> JSONResponse:
        """Handle a final rate that is zero or negative."""
        logger.warning("Rate unavailable for %s (rate=%s)", exc.pair, exc.rate)
        return _error_response(HTTP_503, exc.message)

    @app.exception_handler(MinimumOrderError)
    async def handle_minimum_order(
        _request: Request, exc: MinimumOrderError
    ) -> JSONResponse:
        return _error_response(HTTP_422, exc.message)

    @app.exception_handler(InvalidPairError)
    async def handle_invalid_pair(
        _request: Request, exc: InvalidPairError
    ) -> JSONResponse:
        return _error_response(HTTP_422, exc.message)

    @app.exception_handler(NoDestinationError)
    async def handle_no_destination(
        _request: Request, exc: NoDestinationError
    ) -> JSONResponse:
        """Handle a settlement currency without an active admin wallet."""
        logger.error("No active admin wallet for %s", exc.currency)
        return _error_response(HTTP_409, exc.message)

    @app.exception_handler(PairAlreadyExistsError)
    async def handle_pair_exists(
        _request: Request, exc: PairAlreadyExistsError
    ) -> JSONResponse:
        return _error_response(HTTP_409, exc.message)

    for not_found in (PairNotFoundError, WalletNotFoundError, InventoryItemNotFoundError):

        @app.exception_handler(not_found)
        async def handle_not_found(
            _request: Request, exc: ExchangeDomainError
        ) -> JSONResponse:
            return _error_response(HTTP_404, exc.message)

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(
        _request: Request, exc: StoreUnavailableError
    ) -> JSONResponse:
        """Handle an unreachable database."""
        logger.error("Store unavailable: %s", exc.reason)
        return _error_response(HTTP_503, "Service temporarily unavailable")

    @app.exception_handler(OrderCreationError)
    async def handle_order_creation(
        _request: Request, exc: OrderCreationError
    ) -> JSONResponse:
        """Handle order persistence failures."""
        logger.error("Order creation failed: %s", exc.reason)
        return _error_response(HTTP_500, exc.message)

    @app.exception_handler(ExchangeDomainError)
    async def handle_exchange_domain(
        _request: Request, exc: ExchangeDomainError
    ) -> JSONResponse:
        """Catch-all for unhandled exchange domain errors."""
        logger.error("Unhandled exchange domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(
        _request: Request, exc: Exception
    ) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
