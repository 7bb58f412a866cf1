"""Subscription event models published on the event bus.

Each event name has its own model; the ``name`` field is the discriminator.
``ServiceNotification`` is the envelope that goes out to Pub/Sub.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .subscription import Subscription

EVENT_TOPIC = "subs"


class SubscriptionCreatedEvent(BaseModel):
    name: Literal["created"] = "created"
    subscription_id: int
    subscription: Subscription


class DepositEvent(BaseModel):
    name: Literal["deposit"] = "deposit"
    subscription_id: int
    amount: int
    owner: str = Field(..., description="Subscription owner, used as an indexing key")
    subscription: Subscription


class ChargedEvent(BaseModel):
    name: Literal["charged"] = "charged"
    timestamp: int
    subscription_ids: list[int] = Field(..., description="Full batch as supplied by the caller")


class SuspendedEvent(BaseModel):
    name: Literal["suspended"] = "suspended"
    subscription_ids: list[int]


class CancelledEvent(BaseModel):
    name: Literal["cancelled"] = "cancelled"
    subscription_id: int
    refunded: int = Field(default=0, description="Balance returned to the owner")


class HeartbeatEvent(BaseModel):
    name: Literal["heartbeat"] = "heartbeat"
    timestamp: int
    subscription_ids: list[int]


class TriggeredEvent(BaseModel):
    name: Literal["triggered"] = "triggered"
    timestamp: int
    subscription_ids: list[int]


SubscriptionEvent = Annotated[
    Union[
        SubscriptionCreatedEvent,
        DepositEvent,
        ChargedEvent,
        SuspendedEvent,
        CancelledEvent,
        HeartbeatEvent,
        TriggeredEvent,
    ],
    Field(discriminator="name"),
]


def event_owner(event: BaseModel) -> Optional[str]:
    """Return the owner address an event is keyed by, if any."""
    return getattr(event, "owner", None)


class ServiceNotification(BaseModel):
    """Root message published to Pub/Sub."""

    version: str = Field(default="1.0", description="Notification version")
    topic: str = Field(default=EVENT_TOPIC, description="Event topic")
    event_time_millis: int = Field(..., description="Event timestamp (Unix millis)")
    event: SubscriptionEvent

    class Config:
        json_schema_extra = {
            "example": {
                "version": "1.0",
                "topic": "subs",
                "event_time_millis": 1700000000000,
                "event": {
                    "name": "charged",
                    "timestamp": 1700000000000,
                    "subscription_ids": [1, 2, 3],
                },
            }
        }
