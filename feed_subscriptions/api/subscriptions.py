"""Subscription API.

Implements:
- POST /subscriptions - Create a subscription with an initial deposit
- GET /subscriptions/{subscription_id} - Read a subscription
- POST /subscriptions/{subscription_id}/deposit - Add funds (any payer)
- POST /subscriptions/{subscription_id}/cancel - Cancel and refund (owner only)
"""

from fastapi import APIRouter, HTTPException

from feed_subscriptions.api.errors import ledger_error_to_http, service_error_to_http
from feed_subscriptions.exceptions import SubscriptionServiceError
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models import (
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    DepositRequest,
    SubscriptionResponse,
)
from feed_subscriptions.models.api_request import CancelSubscriptionResponse
from feed_subscriptions.services.subscription_service import get_subscription_service
from feed_subscriptions.services.token_ledger import LedgerError

logger = get_logger(__name__)
router = APIRouter(tags=["Subscriptions API"], prefix="/subscriptions")
service = get_subscription_service()


def _to_http(error: Exception) -> HTTPException:
    if isinstance(error, SubscriptionServiceError):
        return service_error_to_http(error)
    return ledger_error_to_http(error)


@router.post(
    "",
    response_model=CreateSubscriptionResponse,
    status_code=201,
    summary="Create subscription",
)
def create_subscription(request: CreateSubscriptionRequest) -> CreateSubscriptionResponse:
    """Create a subscription funded by ``amount``.

    One activation fee is burned; the rest becomes the balance.

    Raises:
        400: Invalid amount, heartbeat, threshold or webhook
        402: Owner cannot fund the deposit
        403: Caller is not the owner
        409: Contract not initialized
    """
    logger.info(
        "create_subscription_request",
        owner=request.owner,
        amount=request.amount,
        heartbeat=request.heartbeat,
        threshold=request.threshold,
    )
    try:
        subscription_id, subscription = service.create_subscription(request.to_params(), request.amount)
    except (SubscriptionServiceError, LedgerError) as e:
        raise _to_http(e)

    return CreateSubscriptionResponse(
        subscription_id=subscription_id,
        subscription=SubscriptionResponse.from_record(subscription),
        message="Subscription created successfully",
    )


@router.get("/{subscription_id}", response_model=SubscriptionResponse, summary="Get subscription")
def get_subscription(subscription_id: int) -> SubscriptionResponse:
    try:
        subscription = service.get_subscription(subscription_id)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)
    return SubscriptionResponse.from_record(subscription)


@router.post(
    "/{subscription_id}/deposit",
    response_model=SubscriptionResponse,
    summary="Deposit funds",
)
def deposit(subscription_id: int, request: DepositRequest) -> SubscriptionResponse:
    """Add funds; a suspended subscription is reactivated if the amount covers one fee.

    Raises:
        400: Amount is 0 or below the reactivation fee
        402: Payer cannot fund the deposit
        403: Caller is not the payer
        404: Subscription not found
        409: Subscription is cancelled
    """
    logger.info("deposit_request", payer=request.payer, amount=request.amount)
    try:
        subscription = service.deposit(request.payer, subscription_id, request.amount)
    except (SubscriptionServiceError, LedgerError) as e:
        raise _to_http(e)
    return SubscriptionResponse.from_record(subscription)


@router.post(
    "/{subscription_id}/cancel",
    response_model=CancelSubscriptionResponse,
    summary="Cancel subscription",
)
def cancel(subscription_id: int) -> CancelSubscriptionResponse:
    """Cancel an active subscription and refund the balance to the owner.

    Raises:
        403: Caller is not the owner
        404: Subscription not found
        409: Subscription is not active
    """
    logger.info("cancel_request")
    try:
        subscription, refunded = service.cancel(subscription_id)
    except (SubscriptionServiceError, LedgerError) as e:
        raise _to_http(e)

    return CancelSubscriptionResponse(
        subscription=SubscriptionResponse.from_record(subscription),
        refunded=refunded,
        message="Subscription cancelled",
    )
