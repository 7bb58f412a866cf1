"""Subscription record, status state machine and asset descriptors."""

from enum import IntEnum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from feed_subscriptions.exceptions import InvalidSubscriptionStatusError


class SubscriptionStatus(IntEnum):
    """Subscription lifecycle status."""

    ACTIVE = 0  # Balance covers the fee, billed daily
    SUSPENDED = 1  # Balance fell below one fee, frozen until a reactivation deposit
    CANCELLED = 2  # Terminal, balance refunded to the owner


# Legal lifecycle transitions. CANCELLED has no way out.
ALLOWED_TRANSITIONS: dict[SubscriptionStatus, frozenset[SubscriptionStatus]] = {
    SubscriptionStatus.ACTIVE: frozenset({SubscriptionStatus.SUSPENDED, SubscriptionStatus.CANCELLED}),
    SubscriptionStatus.SUSPENDED: frozenset({SubscriptionStatus.ACTIVE}),
    SubscriptionStatus.CANCELLED: frozenset(),
}


def can_transition(old_status: SubscriptionStatus, new_status: SubscriptionStatus) -> bool:
    """Check whether a status transition is legal."""
    return new_status in ALLOWED_TRANSITIONS[old_status]


class StellarAsset(BaseModel):
    """Asset issued on the ledger, referenced by its contract address."""

    kind: Literal["stellar"] = "stellar"
    address: str = Field(..., description="Asset contract address")


class OtherAsset(BaseModel):
    """External asset referenced by its ticker symbol."""

    kind: Literal["other"] = "other"
    symbol: str = Field(..., description="Ticker symbol (e.g., BTC)")


Asset = Annotated[Union[StellarAsset, OtherAsset], Field(discriminator="kind")]


class TickerAsset(BaseModel):
    """Asset descriptor paired with the price source it is read from."""

    asset: Asset
    source: str = Field(..., description="Price source identifier")


class SubscriptionInitParams(BaseModel):
    """Owner-supplied parameters for a new subscription."""

    owner: str = Field(..., description="Owner address")
    base: TickerAsset
    quote: TickerAsset
    threshold: int = Field(..., description="Deviation threshold in percent")
    heartbeat: int = Field(..., description="Heartbeat interval in minutes")
    webhook: bytes = Field(default=b"", description="Opaque webhook payload")


class Subscription(BaseModel):
    """Persisted subscription record."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: int = Field(..., ge=1, description="Subscription id")
    owner: str = Field(..., description="Owner address")
    base: TickerAsset
    quote: TickerAsset
    threshold: int
    heartbeat: int
    webhook: bytes = Field(default=b"")
    balance: int = Field(default=0, ge=0, description="Balance in smallest token units")
    status: SubscriptionStatus = Field(default=SubscriptionStatus.ACTIVE)
    updated: int = Field(..., description="Last charge timestamp (Unix millis), the billing anchor")
    last_notification: Optional[int] = Field(
        None, description="Last heartbeat/trigger timestamp (Unix millis)"
    )

    @property
    def is_active(self) -> bool:
        return self.status == SubscriptionStatus.ACTIVE

    def set_status(self, new_status: SubscriptionStatus, reason: Optional[str] = None) -> None:
        """Move the subscription to a new status and log the transition.

        Args:
            new_status: Target status
            reason: Reason for the change

        Raises:
            InvalidSubscriptionStatusError: If the transition is not allowed
        """
        from feed_subscriptions.state_logger import log_subscription_status_change

        old_status = self.status
        if old_status == new_status:
            return
        if not can_transition(old_status, new_status):
            raise InvalidSubscriptionStatusError(
                f"Cannot move subscription {self.id} from {old_status.name} to {new_status.name}"
            )
        self.status = new_status
        log_subscription_status_change(
            subscription_id=self.id,
            old_status=old_status.name,
            new_status=new_status.name,
            reason=reason,
            owner=self.owner,
        )

    def credit(self, amount: int, reason: str) -> None:
        """Add funds to the balance and log the change."""
        from feed_subscriptions.state_logger import log_balance_change

        if amount < 0:
            raise ValueError("Credit amount must be non-negative")
        old_balance = self.balance
        self.balance = old_balance + amount
        log_balance_change(self.id, old_balance, self.balance, reason)

    def debit(self, amount: int, reason: str) -> None:
        """Remove funds from the balance and log the change.

        Raises:
            ValueError: If amount is negative or exceeds the balance
        """
        from feed_subscriptions.state_logger import log_balance_change

        if amount < 0 or amount > self.balance:
            raise ValueError(f"Cannot debit {amount} from balance {self.balance}")
        old_balance = self.balance
        self.balance = old_balance - amount
        log_balance_change(self.id, old_balance, self.balance, reason)
