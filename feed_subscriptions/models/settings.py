"""Service settings models.

Models from settings.yaml configuration.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class PubSubConfig(BaseModel):
    """Pub/Sub configuration from settings.yaml."""

    enabled: bool = Field(default=False, description="Forward events to Pub/Sub")
    project_id: str = Field(..., description="GCP project ID")
    topic: str = Field(..., description="Pub/Sub topic name")
    default_subscription: str = Field(..., description="Default subscription name")
    publish_timeout_seconds: float = Field(default=5.0, description="Wait time for publish futures")


class AuthConfig(BaseModel):
    """Caller authorization configuration."""

    mode: Literal["api_key", "trusted_caller", "allow_all"] = Field(
        default="api_key",
        description=(
            "'api_key' checks a per-address key, 'trusted_caller' accepts the caller header "
            "as proof, 'allow_all' skips authorization"
        ),
    )
    api_keys: dict[str, str] = Field(default_factory=dict, description="Address -> API key")

    class Config:
        json_schema_extra = {
            "example": {
                "mode": "api_key",
                "api_keys": {"GADMIN...": "admin-secret"},
            }
        }


class ServiceConfig(BaseModel):
    """Core service behavior configuration."""

    contract_address: Optional[str] = Field(
        None, description="Custody address holding deposited funds (generated when empty)"
    )
    subscription_ttl_days: Optional[int] = Field(
        None, ge=1, description="Storage TTL extended on every subscription write; None keeps records forever"
    )
    event_history_size: int = Field(default=1000, ge=1, description="Events kept in memory for inspection")


class SettingsFile(BaseModel):
    """Complete settings.yaml configuration."""

    pubsub: PubSubConfig
    auth: AuthConfig = Field(default_factory=AuthConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)
