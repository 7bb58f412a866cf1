"""Pydantic models for API requests, responses, and domain objects."""

# Subscription models
from .subscription import (
    SubscriptionStatus,
    StellarAsset,
    OtherAsset,
    TickerAsset,
    SubscriptionInitParams,
    Subscription,
)

# Contract configuration
from .contract_config import ConfigData, ContractConfig

# Event models
from .events import (
    SubscriptionCreatedEvent,
    DepositEvent,
    ChargedEvent,
    SuspendedEvent,
    CancelledEvent,
    HeartbeatEvent,
    TriggeredEvent,
    ServiceNotification,
)

# Settings models
from .settings import PubSubConfig, AuthConfig, ServiceConfig, SettingsFile

# API request/response models
from .api_request import (
    ConfigRequest,
    SetFeeRequest,
    ChargeRequest,
    TriggerRequest,
    UpgradeRequest,
    ContractInfoResponse,
    CreateSubscriptionRequest,
    CreateSubscriptionResponse,
    DepositRequest,
    SubscriptionResponse,
    AdvanceTimeRequest,
    SetTimeRequest,
)

__all__ = [
    # Subscription models
    "SubscriptionStatus",
    "StellarAsset",
    "OtherAsset",
    "TickerAsset",
    "SubscriptionInitParams",
    "Subscription",
    # Contract configuration
    "ConfigData",
    "ContractConfig",
    # Event models
    "SubscriptionCreatedEvent",
    "DepositEvent",
    "ChargedEvent",
    "SuspendedEvent",
    "CancelledEvent",
    "HeartbeatEvent",
    "TriggeredEvent",
    "ServiceNotification",
    # Settings models
    "PubSubConfig",
    "AuthConfig",
    "ServiceConfig",
    "SettingsFile",
    # API models
    "ConfigRequest",
    "SetFeeRequest",
    "ChargeRequest",
    "TriggerRequest",
    "UpgradeRequest",
    "ContractInfoResponse",
    "CreateSubscriptionRequest",
    "CreateSubscriptionResponse",
    "DepositRequest",
    "SubscriptionResponse",
    "AdvanceTimeRequest",
    "SetTimeRequest",
]
