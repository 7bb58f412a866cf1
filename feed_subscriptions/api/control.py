"""Control API for test orchestration and local service management.

Implements:
- POST /control/ledger/mint - Mint tokens to an address
- GET /control/ledger/{address} - Read a ledger balance
- POST /control/time/advance - Fast-forward virtual time
- POST /control/time/set - Jump to a timestamp
- POST /control/time/reset - Back to real time
- GET /control/events - Recent published events
- GET /control/subscriptions - List all subscriptions
- GET /control/status - Service status and statistics
- POST /control/reset - Reset all state
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException

from feed_subscriptions.api.errors import invalid_request, ledger_error_to_http
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models import AdvanceTimeRequest, SetTimeRequest, SubscriptionResponse
from feed_subscriptions.models.api_request import (
    BalanceResponse,
    EventsResponse,
    MintRequest,
    ResetResponse,
    StatusResponse,
    TimeResponse,
)
from feed_subscriptions.services.subscription_service import get_subscription_service
from feed_subscriptions.services.token_ledger import LedgerError

logger = get_logger(__name__)
router = APIRouter(tags=["Control API"], prefix="/control")
service = get_subscription_service()


@router.post("/ledger/mint", response_model=BalanceResponse, summary="Mint test tokens")
def mint_tokens(request: MintRequest) -> BalanceResponse:
    """Create tokens out of thin air so test accounts can fund subscriptions."""
    logger.info("mint_request", to_address=request.address, amount=request.amount)
    try:
        balance = service.context.ledger.mint(request.address, request.amount)
    except LedgerError as e:
        raise ledger_error_to_http(e)
    return BalanceResponse(address=request.address, balance=balance)


@router.get("/ledger/{address}", response_model=BalanceResponse, summary="Get ledger balance")
def get_balance(address: str) -> BalanceResponse:
    return BalanceResponse(address=address, balance=service.context.ledger.balance(address))


@router.post("/time/advance", response_model=TimeResponse, summary="Advance virtual time")
def advance_time(request: AdvanceTimeRequest) -> TimeResponse:
    """Advance the virtual clock.

    Nothing is charged automatically; call ``POST /contract/charge`` afterwards.

    Raises:
        400: Invalid time parameters
    """
    logger.info("advance_time_request", days=request.days, hours=request.hours, minutes=request.minutes)
    try:
        result = service.context.clock.advance_time(
            days=request.days, hours=request.hours, minutes=request.minutes
        )
    except ValueError as e:
        raise invalid_request(e)

    return TimeResponse(
        **result,
        message=f"Advanced time by {request.days} days, {request.hours} hours, {request.minutes} minutes",
    )


@router.post("/time/set", response_model=TimeResponse, summary="Set virtual time")
def set_time(request: SetTimeRequest) -> TimeResponse:
    """Jump the virtual clock forward to a timestamp.

    Raises:
        400: Timestamp is before the current virtual time
    """
    logger.info("set_time_request", timestamp_millis=request.timestamp_millis)
    try:
        result = service.context.clock.set_time(request.timestamp_millis)
    except ValueError as e:
        raise invalid_request(e)
    return TimeResponse(**result, message="Virtual time set")


@router.post("/time/reset", response_model=TimeResponse, summary="Reset virtual time")
def reset_time() -> TimeResponse:
    logger.info("reset_time_request")
    result = service.context.clock.reset_time()
    return TimeResponse(**result, message="Time reset to real current time")


@router.get("/events", response_model=EventsResponse, summary="List recent events")
def list_events(limit: Optional[int] = None, name: Optional[str] = None) -> EventsResponse:
    """Recent notifications, oldest first, optionally filtered by event name."""
    events = service.context.dispatcher.history(limit=limit, name=name)
    return EventsResponse(count=len(events), events=events)


@router.get(
    "/subscriptions",
    response_model=List[SubscriptionResponse],
    summary="List all subscriptions (debug only)",
)
def list_subscriptions() -> List[SubscriptionResponse]:
    return [SubscriptionResponse.from_record(s) for s in service.context.subscriptions.get_all()]


@router.get("/status", response_model=StatusResponse, summary="Get service status")
def get_status() -> StatusResponse:
    """Current virtual time, initialization state and statistics."""
    logger.debug("get_status_request")

    ctx = service.context
    try:
        return StatusResponse(
            status="running",
            current_time_millis=ctx.now(),
            time_offset_millis=ctx.clock.offset_millis,
            initialized=ctx.config_store.is_initialized(),
            pubsub_enabled=ctx.dispatcher.is_enabled(),
            subscriptions=ctx.subscriptions.get_statistics(),
            ledger=ctx.ledger.get_statistics(),
            events_recorded=len(ctx.dispatcher.history()),
        )
    except Exception as e:
        logger.error("get_status_failed", error=str(e))
        raise HTTPException(
            status_code=500,
            detail={
                "error": "internal_error",
                "code": None,
                "message": str(e),
            },
        )


@router.post("/reset", response_model=ResetResponse, summary="Reset service state")
def reset_service() -> ResetResponse:
    """Clear configuration, subscriptions, balances, events and virtual time."""
    logger.info("reset_service_request")
    service.reset()
    logger.info("reset_service_success")
    return ResetResponse(message="Service state reset successfully")
