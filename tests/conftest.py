"""Shared fixtures: an in-process service with a fixed clock and static authorization."""

import pytest

from feed_subscriptions.models.settings import PubSubConfig, ServiceConfig, SettingsFile
from feed_subscriptions.models.subscription import OtherAsset, SubscriptionInitParams, TickerAsset
from feed_subscriptions.services.access_control import StaticAuthVerifier
from feed_subscriptions.services.context import ServiceContext
from feed_subscriptions.services.subscription_service import SubscriptionService
from feed_subscriptions.services.time_controller import TimeController
from feed_subscriptions.utils.address import generate_address, generate_contract_address

START_TIME_MILLIS = 1_700_000_000_000
FEE = 100


@pytest.fixture
def settings():
    """Settings with Pub/Sub disabled."""
    return SettingsFile(
        pubsub=PubSubConfig(
            enabled=False,
            project_id="test-project",
            topic="test-topic",
            default_subscription="test-subscription",
        ),
        service=ServiceConfig(event_history_size=100),
    )


@pytest.fixture
def clock():
    return TimeController(start_time_millis=START_TIME_MILLIS)


@pytest.fixture
def verifier():
    return StaticAuthVerifier()


@pytest.fixture
def context(settings, verifier, clock):
    return ServiceContext.build(settings, verifier=verifier, clock=clock)


@pytest.fixture
def service(context):
    return SubscriptionService(context)


@pytest.fixture
def admin():
    return generate_address()


@pytest.fixture
def owner():
    return generate_address()


@pytest.fixture
def token():
    return generate_contract_address()


@pytest.fixture
def initialized_service(service, verifier, admin, owner, token):
    """Service configured with fee 100; owner holds 1000 tokens and is authorized."""
    verifier.grant(admin)
    service.config(admin=admin, token=token, fee=FEE)
    service.context.ledger.mint(owner, 1000)
    verifier.grant(owner)
    return service


@pytest.fixture
def make_params(owner):
    """Factory for valid subscription parameters."""

    def _make(**overrides):
        values = {
            "owner": owner,
            "base": TickerAsset(asset=OtherAsset(symbol="BTC"), source="exchanges"),
            "quote": TickerAsset(asset=OtherAsset(symbol="USD"), source="exchanges"),
            "threshold": 10,
            "heartbeat": 5,
            "webhook": b"https://example.com/hook",
        }
        values.update(overrides)
        return SubscriptionInitParams(**values)

    return _make
