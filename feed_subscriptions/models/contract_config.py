"""Contract-wide configuration models."""

from pydantic import BaseModel, Field


class ConfigData(BaseModel):
    """Parameters accepted by the one-time contract initialization."""

    admin: str = Field(..., description="Admin address")
    token: str = Field(..., description="Token (ledger) reference used for deposits and burns")
    fee: int = Field(..., ge=0, description="Per-day fee in smallest token units")

    class Config:
        json_schema_extra = {
            "example": {
                "admin": "GADMIN...",
                "token": "CTOKEN...",
                "fee": 100,
            }
        }


class ContractConfig(ConfigData):
    """Snapshot of the persisted contract configuration."""

    last_subscription_id: int = Field(default=0, ge=0, description="Last assigned subscription id")
