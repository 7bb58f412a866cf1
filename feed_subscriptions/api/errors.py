"""Translation of service errors into HTTP responses."""

from fastapi import HTTPException

from feed_subscriptions.exceptions import ErrorCode, SubscriptionServiceError
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.services.token_ledger import LedgerError

logger = get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.ALREADY_INITIALIZED: 409,
    ErrorCode.UNAUTHORIZED: 403,
    ErrorCode.SUBSCRIPTION_NOT_FOUND: 404,
    ErrorCode.NOT_INITIALIZED: 409,
    ErrorCode.INVALID_AMOUNT: 400,
    ErrorCode.INVALID_HEARTBEAT: 400,
    ErrorCode.INVALID_THRESHOLD: 400,
    ErrorCode.WEBHOOK_TOO_LONG: 400,
    ErrorCode.INVALID_SUBSCRIPTION_STATUS: 409,
}


def service_error_to_http(error: SubscriptionServiceError) -> HTTPException:
    """Build an HTTPException carrying the stable error code."""
    status_code = STATUS_BY_CODE.get(error.code, 400)
    logger.warning(
        "service_error",
        error=error.code.name,
        code=int(error.code),
        status_code=status_code,
        message=error.message,
    )
    return HTTPException(
        status_code=status_code,
        detail={
            "error": error.code.name.lower(),
            "code": int(error.code),
            "message": error.message,
        },
    )


def ledger_error_to_http(error: LedgerError) -> HTTPException:
    logger.warning("ledger_error", error_type=type(error).__name__, message=str(error))
    return HTTPException(
        status_code=402,
        detail={
            "error": "ledger_error",
            "code": None,
            "message": str(error),
        },
    )


def invalid_request(error: ValueError) -> HTTPException:
    logger.error("invalid_request", error=str(error))
    return HTTPException(
        status_code=400,
        detail={
            "error": "invalid_request",
            "code": None,
            "message": str(error),
        },
    )
