"""Unit tests for the subscription lifecycle engine (create, deposit, cancel, get)."""

import pytest

from feed_subscriptions.exceptions import (
    InvalidAmountError,
    InvalidHeartbeatError,
    InvalidSubscriptionStatusError,
    InvalidThresholdError,
    NotInitializedError,
    SubscriptionNotFoundError,
    UnauthorizedError,
    WebhookTooLongError,
)
from feed_subscriptions.models.subscription import SubscriptionStatus
from feed_subscriptions.services.token_ledger import InsufficientBalanceError

START_TIME_MILLIS = 1_700_000_000_000


class TestCreateSubscription:
    """Test subscription creation and its validation order."""

    def test_create_burns_activation_fee(self, initialized_service, make_params, owner):
        service = initialized_service
        ctx = service.context

        subscription_id, subscription = service.create_subscription(make_params(), 200)

        assert subscription_id == 1
        assert subscription.balance == 100
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.updated == START_TIME_MILLIS
        assert subscription.last_notification is None
        assert ctx.ledger.balance(owner) == 800
        assert ctx.ledger.balance(ctx.contract_address) == 100
        assert ctx.ledger.total_burned == 100

    def test_ids_are_sequential(self, initialized_service, make_params):
        first_id, _ = initialized_service.create_subscription(make_params(), 100)
        second_id, _ = initialized_service.create_subscription(make_params(), 100)

        assert (first_id, second_id) == (1, 2)
        assert initialized_service.context.config_store.get_last_subscription_id() == 2

    def test_amount_equal_to_fee_gives_zero_balance(self, initialized_service, make_params):
        _, subscription = initialized_service.create_subscription(make_params(), 100)

        assert subscription.balance == 0
        assert subscription.is_active

    def test_record_is_persisted(self, initialized_service, make_params):
        subscription_id, created = initialized_service.create_subscription(make_params(), 300)

        assert initialized_service.get_subscription(subscription_id).model_dump() == created.model_dump()

    def test_created_event_published(self, initialized_service, make_params):
        subscription_id, _ = initialized_service.create_subscription(make_params(), 200)

        events = initialized_service.context.dispatcher.history(name="created")
        assert len(events) == 1
        assert events[0].event.subscription_id == subscription_id
        assert events[0].event.subscription.balance == 100

    def test_not_initialized(self, service, make_params):
        with pytest.raises(NotInitializedError):
            service.create_subscription(make_params(), 200)

    def test_owner_must_be_authorized(self, initialized_service, make_params, verifier, owner):
        verifier.revoke(owner)

        with pytest.raises(UnauthorizedError):
            initialized_service.create_subscription(make_params(), 200)

    def test_amount_below_fee(self, initialized_service, make_params):
        with pytest.raises(InvalidAmountError):
            initialized_service.create_subscription(make_params(), 99)

    @pytest.mark.parametrize("heartbeat", [0, 4])
    def test_heartbeat_too_small(self, initialized_service, make_params, heartbeat):
        with pytest.raises(InvalidHeartbeatError):
            initialized_service.create_subscription(make_params(heartbeat=heartbeat), 200)

    @pytest.mark.parametrize("threshold", [-1, 0, 1001])
    def test_threshold_out_of_range(self, initialized_service, make_params, threshold):
        with pytest.raises(InvalidThresholdError):
            initialized_service.create_subscription(make_params(threshold=threshold), 200)

    def test_threshold_upper_bound_allowed(self, initialized_service, make_params):
        _, subscription = initialized_service.create_subscription(make_params(threshold=1000), 200)
        assert subscription.threshold == 1000

    def test_webhook_too_long(self, initialized_service, make_params):
        with pytest.raises(WebhookTooLongError):
            initialized_service.create_subscription(make_params(webhook=b"x" * 2049), 200)

    def test_webhook_at_limit_allowed(self, initialized_service, make_params):
        _, subscription = initialized_service.create_subscription(make_params(webhook=b"x" * 2048), 200)
        assert len(subscription.webhook) == 2048

    def test_amount_checked_before_heartbeat(self, initialized_service, make_params):
        with pytest.raises(InvalidAmountError):
            initialized_service.create_subscription(make_params(heartbeat=1, threshold=0), 1)

    def test_failed_validation_leaves_no_state(self, initialized_service, make_params, owner):
        ctx = initialized_service.context

        with pytest.raises(InvalidThresholdError):
            initialized_service.create_subscription(make_params(threshold=0), 200)

        assert ctx.ledger.balance(owner) == 1000
        assert ctx.config_store.get_last_subscription_id() == 0
        assert ctx.subscriptions.count() == 0
        assert ctx.dispatcher.history(name="created") == []

    def test_owner_cannot_fund(self, initialized_service, make_params, owner):
        ctx = initialized_service.context

        with pytest.raises(InsufficientBalanceError):
            initialized_service.create_subscription(make_params(), 5000)

        assert ctx.ledger.balance(owner) == 1000
        assert ctx.config_store.get_last_subscription_id() == 0


class TestDeposit:
    """Test deposits into active, suspended and cancelled subscriptions."""

    @pytest.fixture
    def payer(self, initialized_service, verifier):
        payer = "GPAYER" + "A" * 50
        initialized_service.context.ledger.mint(payer, 500)
        verifier.grant(payer)
        return payer

    @pytest.fixture
    def subscription_id(self, initialized_service, make_params):
        subscription_id, _ = initialized_service.create_subscription(make_params(), 200)
        return subscription_id

    def test_deposit_to_active_credits_full_amount(self, initialized_service, subscription_id, payer):
        subscription = initialized_service.deposit(payer, subscription_id, 50)

        assert subscription.balance == 150
        assert subscription.status == SubscriptionStatus.ACTIVE
        assert initialized_service.context.ledger.balance(payer) == 450

    def test_deposit_event_carries_owner(self, initialized_service, subscription_id, payer, owner):
        initialized_service.deposit(payer, subscription_id, 50)

        events = initialized_service.context.dispatcher.history(name="deposit")
        assert len(events) == 1
        assert events[0].event.owner == owner
        assert events[0].event.amount == 50

    def test_zero_amount(self, initialized_service, subscription_id, payer):
        with pytest.raises(InvalidAmountError):
            initialized_service.deposit(payer, subscription_id, 0)

    def test_unknown_subscription(self, initialized_service, payer):
        with pytest.raises(SubscriptionNotFoundError):
            initialized_service.deposit(payer, 99, 10)

    def test_payer_must_be_authorized(self, initialized_service, subscription_id):
        with pytest.raises(UnauthorizedError):
            initialized_service.deposit("GSTRANGER", subscription_id, 10)

    def test_not_initialized(self, service, owner, verifier):
        verifier.grant(owner)
        with pytest.raises(NotInitializedError):
            service.deposit(owner, 1, 10)

    def test_reactivation(self, initialized_service, subscription_id, payer, clock):
        ctx = initialized_service.context
        clock.advance_time(days=2)
        initialized_service.charge([subscription_id])
        assert ctx.subscriptions.get(subscription_id).status == SubscriptionStatus.SUSPENDED
        burned_before = ctx.ledger.total_burned

        subscription = initialized_service.deposit(payer, subscription_id, 250)

        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.balance == 150
        assert subscription.updated == clock.get_current_time_millis()
        assert ctx.ledger.total_burned == burned_before + 100

    def test_reactivation_requires_one_fee(self, initialized_service, subscription_id, payer, clock):
        clock.advance_time(days=2)
        initialized_service.charge([subscription_id])

        with pytest.raises(InvalidAmountError):
            initialized_service.deposit(payer, subscription_id, 99)

        subscription = initialized_service.get_subscription(subscription_id)
        assert subscription.status == SubscriptionStatus.SUSPENDED
        assert initialized_service.context.ledger.balance(payer) == 500

    def test_deposit_to_cancelled(self, initialized_service, subscription_id, payer):
        initialized_service.cancel(subscription_id)

        with pytest.raises(InvalidSubscriptionStatusError):
            initialized_service.deposit(payer, subscription_id, 100)


class TestCancel:
    """Test cancellation and refunds."""

    @pytest.fixture
    def subscription_id(self, initialized_service, make_params):
        subscription_id, _ = initialized_service.create_subscription(make_params(), 300)
        return subscription_id

    def test_cancel_refunds_balance(self, initialized_service, subscription_id, owner):
        ctx = initialized_service.context

        subscription, refunded = initialized_service.cancel(subscription_id)

        assert refunded == 200
        assert subscription.balance == 0
        assert subscription.status == SubscriptionStatus.CANCELLED
        assert ctx.ledger.balance(owner) == 900
        assert ctx.ledger.balance(ctx.contract_address) == 0

    def test_cancelled_record_is_kept(self, initialized_service, subscription_id):
        initialized_service.cancel(subscription_id)

        assert initialized_service.get_subscription(subscription_id).status == SubscriptionStatus.CANCELLED

    def test_cancel_event(self, initialized_service, subscription_id):
        initialized_service.cancel(subscription_id)

        events = initialized_service.context.dispatcher.history(name="cancelled")
        assert [(e.event.subscription_id, e.event.refunded) for e in events] == [(subscription_id, 200)]

    def test_only_owner_can_cancel(self, initialized_service, subscription_id, verifier, owner):
        verifier.revoke(owner)

        with pytest.raises(UnauthorizedError):
            initialized_service.cancel(subscription_id)

    def test_cancel_twice(self, initialized_service, subscription_id):
        initialized_service.cancel(subscription_id)

        with pytest.raises(InvalidSubscriptionStatusError):
            initialized_service.cancel(subscription_id)

    def test_cancel_suspended_rejected(self, initialized_service, subscription_id, clock):
        clock.advance_time(days=3)
        initialized_service.charge([subscription_id])

        with pytest.raises(InvalidSubscriptionStatusError):
            initialized_service.cancel(subscription_id)

    def test_cancel_unknown(self, initialized_service):
        with pytest.raises(SubscriptionNotFoundError):
            initialized_service.cancel(42)


class TestGetSubscription:
    def test_not_initialized(self, service):
        with pytest.raises(NotInitializedError):
            service.get_subscription(1)

    def test_unknown_id(self, initialized_service):
        with pytest.raises(SubscriptionNotFoundError):
            initialized_service.get_subscription(1)
