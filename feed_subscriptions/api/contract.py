"""Contract administration API.

Implements:
- GET /contract - Contract configuration and version
- POST /contract/config - One-time initialization (caller must be the admin)
- PUT /contract/fee - Change the per-day fee
- POST /contract/charge - Charge a batch of subscriptions
- POST /contract/trigger - Record a heartbeat/trigger round
- POST /contract/upgrade - Record a new code hash
"""

from fastapi import APIRouter

from feed_subscriptions.api.errors import (
    invalid_request,
    ledger_error_to_http,
    service_error_to_http,
)
from feed_subscriptions.exceptions import SubscriptionServiceError
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models import (
    ChargeRequest,
    ConfigRequest,
    ContractInfoResponse,
    SetFeeRequest,
    TriggerRequest,
    UpgradeRequest,
)
from feed_subscriptions.models.api_request import UpgradeResponse
from feed_subscriptions.models.contract_config import ContractConfig
from feed_subscriptions.services.billing_engine import ChargeResult
from feed_subscriptions.services.subscription_service import get_subscription_service
from feed_subscriptions.services.token_ledger import LedgerError

logger = get_logger(__name__)
router = APIRouter(tags=["Contract API"], prefix="/contract")
service = get_subscription_service()


@router.get("", response_model=ContractInfoResponse, summary="Get contract info")
def get_contract_info() -> ContractInfoResponse:
    """Current configuration, protocol version and custody address."""
    ctx = service.context
    initialized = ctx.config_store.is_initialized()
    return ContractInfoResponse(
        initialized=initialized,
        admin=service.admin(),
        token=service.token() if initialized else None,
        fee=service.fee() if initialized else None,
        last_subscription_id=ctx.config_store.get_last_subscription_id(),
        version=service.version(),
        contract_address=ctx.contract_address,
        code_hash=ctx.deployer.current_code_hash,
    )


@router.post(
    "/config",
    response_model=ContractConfig,
    status_code=201,
    summary="Initialize contract",
)
def config_contract(request: ConfigRequest) -> ContractConfig:
    """Initialize admin, token and fee. Works exactly once.

    Raises:
        403: Caller is not the admin address
        409: Already initialized
    """
    logger.info("config_request", admin=request.admin, token=request.token, fee=request.fee)
    try:
        return service.config(admin=request.admin, token=request.token, fee=request.fee)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)


@router.put("/fee", summary="Set per-day fee")
def set_fee(request: SetFeeRequest) -> dict:
    """Replace the fee used by the next charge, deposit or create."""
    logger.info("set_fee_request", fee=request.fee)
    try:
        service.set_fee(request.fee)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)
    return {"fee": request.fee, "message": "Fee updated"}


@router.post("/charge", response_model=ChargeResult, summary="Charge subscriptions")
def charge(request: ChargeRequest) -> ChargeResult:
    """Charge elapsed days for each id. Unknown or inactive ids are skipped.

    Raises:
        403: Caller is not the admin
        402: Custody cannot cover the burn
    """
    logger.info("charge_request", count=len(request.subscription_ids))
    try:
        return service.charge(request.subscription_ids)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)
    except LedgerError as e:
        raise ledger_error_to_http(e)


@router.post("/trigger", summary="Record heartbeat/trigger round")
def trigger(request: TriggerRequest) -> dict:
    logger.info(
        "trigger_request",
        timestamp=request.timestamp,
        heartbeats=len(request.heartbeat_ids),
        triggers=len(request.trigger_ids),
    )
    try:
        service.trigger(request.timestamp, request.heartbeat_ids, request.trigger_ids)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)
    return {"timestamp": request.timestamp, "message": "Trigger recorded"}


@router.post("/upgrade", response_model=UpgradeResponse, summary="Update contract code")
def upgrade(request: UpgradeRequest) -> UpgradeResponse:
    """Record a new code hash.

    Raises:
        400: code_hash is not 64 hex chars
        403: Caller is not the admin
    """
    logger.info("upgrade_request")
    try:
        deployment = service.update_contract(request.code_hash)
    except SubscriptionServiceError as e:
        raise service_error_to_http(e)
    except ValueError as e:
        raise invalid_request(e)

    return UpgradeResponse(
        code_hash=deployment.code_hash,
        deployed_at_millis=deployment.deployed_at_millis,
        message="Contract code updated",
    )
