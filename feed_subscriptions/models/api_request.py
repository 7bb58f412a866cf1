"""API request and response models for the HTTP layer."""

from typing import List, Optional

from pydantic import Base64Bytes, BaseModel, ConfigDict, Field, field_validator

from feed_subscriptions.utils.address import validate_address

from .contract_config import ConfigData
from .events import ServiceNotification
from .subscription import Subscription, SubscriptionInitParams, TickerAsset


def _check_address(value: str) -> str:
    if not validate_address(value):
        raise ValueError(f"Invalid address: {value!r}")
    return value


# Contract administration


class ConfigRequest(ConfigData):
    """Request to initialize the contract."""

    check_addresses = field_validator("admin", "token")(_check_address)


class SetFeeRequest(BaseModel):
    fee: int = Field(..., ge=0, description="New per-day fee")


class ChargeRequest(BaseModel):
    """Request to charge a batch of subscriptions."""

    subscription_ids: List[int] = Field(..., description="Ids to charge, in order")

    class Config:
        json_schema_extra = {"example": {"subscription_ids": [1, 2, 3]}}


class TriggerRequest(BaseModel):
    """Heartbeat/trigger round reported by the price-feed side."""

    timestamp: int = Field(..., ge=0, description="Round timestamp (Unix millis)")
    heartbeat_ids: List[int] = Field(default_factory=list)
    trigger_ids: List[int] = Field(default_factory=list)


class UpgradeRequest(BaseModel):
    code_hash: str = Field(..., description="New code hash, 64 hex chars")


class ContractInfoResponse(BaseModel):
    """Current contract configuration and version."""

    initialized: bool
    admin: Optional[str] = None
    token: Optional[str] = None
    fee: Optional[int] = None
    last_subscription_id: int = 0
    version: int
    contract_address: str = Field(..., description="Custody address holding deposits")
    code_hash: Optional[str] = Field(None, description="Current code hash, if upgraded")


class UpgradeResponse(BaseModel):
    code_hash: str
    deployed_at_millis: int
    message: str


# Subscriptions


class CreateSubscriptionRequest(BaseModel):
    """Request to create a subscription funded by an initial deposit."""

    owner: str = Field(..., description="Owner address, must match the caller")
    base: TickerAsset
    quote: TickerAsset
    threshold: int = Field(..., ge=0, description="Deviation threshold in percent, (0, 1000]")
    heartbeat: int = Field(..., ge=0, description="Heartbeat in minutes, at least 5")
    webhook: Base64Bytes = Field(default=b"", description="Opaque webhook payload, base64 encoded")
    amount: int = Field(..., ge=0, description="Initial deposit in smallest token units")

    check_owner = field_validator("owner")(_check_address)

    class Config:
        json_schema_extra = {
            "example": {
                "owner": "GOWNER...",
                "base": {"asset": {"kind": "other", "symbol": "BTC"}, "source": "exchanges"},
                "quote": {"asset": {"kind": "other", "symbol": "USD"}, "source": "exchanges"},
                "threshold": 10,
                "heartbeat": 5,
                "webhook": "aHR0cHM6Ly9leGFtcGxlLmNvbS9ob29r",
                "amount": 200,
            }
        }

    def to_params(self) -> SubscriptionInitParams:
        return SubscriptionInitParams(
            owner=self.owner,
            base=self.base,
            quote=self.quote,
            threshold=self.threshold,
            heartbeat=self.heartbeat,
            webhook=self.webhook,
        )


class DepositRequest(BaseModel):
    payer: str = Field(..., description="Paying address, must match the caller")
    amount: int = Field(..., ge=0, description="Amount to deposit")

    check_payer = field_validator("payer")(_check_address)


class SubscriptionResponse(BaseModel):
    """Subscription record as returned over HTTP."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: int
    owner: str
    base: TickerAsset
    quote: TickerAsset
    threshold: int
    heartbeat: int
    webhook: bytes = Field(..., description="Webhook payload, base64 encoded in JSON")
    balance: int
    status: str = Field(..., description="ACTIVE, SUSPENDED or CANCELLED")
    updated: int
    last_notification: Optional[int] = None

    @classmethod
    def from_record(cls, subscription: Subscription) -> "SubscriptionResponse":
        return cls(
            id=subscription.id,
            owner=subscription.owner,
            base=subscription.base,
            quote=subscription.quote,
            threshold=subscription.threshold,
            heartbeat=subscription.heartbeat,
            webhook=subscription.webhook,
            balance=subscription.balance,
            status=subscription.status.name,
            updated=subscription.updated,
            last_notification=subscription.last_notification,
        )


class CreateSubscriptionResponse(BaseModel):
    subscription_id: int
    subscription: SubscriptionResponse
    message: str


class CancelSubscriptionResponse(BaseModel):
    subscription: SubscriptionResponse
    refunded: int
    message: str


# Local control


class MintRequest(BaseModel):
    address: str = Field(..., description="Receiving address")
    amount: int = Field(..., ge=0)

    check_address = field_validator("address")(_check_address)


class BalanceResponse(BaseModel):
    address: str
    balance: int


class AdvanceTimeRequest(BaseModel):
    """Request to advance virtual time."""

    days: int = Field(default=0, ge=0)
    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)

    class Config:
        json_schema_extra = {"example": {"days": 2, "hours": 0, "minutes": 0}}


class SetTimeRequest(BaseModel):
    timestamp_millis: int = Field(..., ge=0, description="Unix timestamp in milliseconds")


class TimeResponse(BaseModel):
    old_time_millis: int
    new_time_millis: int
    time_advanced_millis: Optional[int] = None
    message: str


class EventsResponse(BaseModel):
    count: int
    events: List[ServiceNotification]


class StatusResponse(BaseModel):
    """Service status and statistics."""

    status: str
    current_time_millis: int
    time_offset_millis: int
    initialized: bool
    pubsub_enabled: bool
    subscriptions: dict
    ledger: dict
    events_recorded: int


class ResetResponse(BaseModel):
    message: str
