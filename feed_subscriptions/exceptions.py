"""Service error hierarchy.

Every error a caller can observe carries a stable numeric code so HTTP clients
and event consumers can branch on it without parsing messages.
"""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Stable error codes reported to callers."""

    ALREADY_INITIALIZED = 0  # Contract config already set
    UNAUTHORIZED = 1  # Caller did not prove control of the required address
    SUBSCRIPTION_NOT_FOUND = 2  # No subscription with that id
    NOT_INITIALIZED = 3  # Contract config not set yet
    INVALID_AMOUNT = 4  # Amount zero or below the required fee
    INVALID_HEARTBEAT = 5  # Heartbeat below the minimum interval
    INVALID_THRESHOLD = 6  # Threshold outside (0, 1000]
    WEBHOOK_TOO_LONG = 7  # Webhook payload above the size limit
    INVALID_SUBSCRIPTION_STATUS = 8  # Operation not allowed in current status


class SubscriptionServiceError(Exception):
    """Base exception for all subscription service errors."""

    code: ErrorCode

    def __init__(self, message: str = ""):
        super().__init__(message or self.code.name.lower())

    @property
    def message(self) -> str:
        return str(self)


class AlreadyInitializedError(SubscriptionServiceError):
    """Raised when the contract config is initialized twice."""

    code = ErrorCode.ALREADY_INITIALIZED


class UnauthorizedError(SubscriptionServiceError):
    """Raised when the caller cannot prove control of an address."""

    code = ErrorCode.UNAUTHORIZED


class SubscriptionNotFoundError(SubscriptionServiceError):
    """Raised when a subscription is not found in the registry."""

    code = ErrorCode.SUBSCRIPTION_NOT_FOUND


class NotInitializedError(SubscriptionServiceError):
    """Raised when an operation needs the contract config and it is missing."""

    code = ErrorCode.NOT_INITIALIZED


class InvalidAmountError(SubscriptionServiceError):
    code = ErrorCode.INVALID_AMOUNT


class InvalidHeartbeatError(SubscriptionServiceError):
    code = ErrorCode.INVALID_HEARTBEAT


class InvalidThresholdError(SubscriptionServiceError):
    code = ErrorCode.INVALID_THRESHOLD


class WebhookTooLongError(SubscriptionServiceError):
    code = ErrorCode.WEBHOOK_TOO_LONG


class InvalidSubscriptionStatusError(SubscriptionServiceError):
    """Raised when an operation is invalid for the current subscription status."""

    code = ErrorCode.INVALID_SUBSCRIPTION_STATUS
