"""Unit tests for SubscriptionStore."""

import pytest

from feed_subscriptions.exceptions import SubscriptionNotFoundError
from feed_subscriptions.models.subscription import (
    OtherAsset,
    StellarAsset,
    Subscription,
    SubscriptionStatus,
    TickerAsset,
)
from feed_subscriptions.repositories.storage import InMemoryStorage
from feed_subscriptions.repositories.subscription_store import SubscriptionStore
from feed_subscriptions.services.time_controller import TimeController
from feed_subscriptions.utils.time_units import MILLIS_PER_DAY


@pytest.fixture
def clock():
    return TimeController(start_time_millis=1_700_000_000_000)


@pytest.fixture
def store(clock):
    return SubscriptionStore(InMemoryStorage(clock=clock.get_current_time_millis))


def make_subscription(subscription_id=1, owner="GOWNER1", status=SubscriptionStatus.ACTIVE, balance=100):
    return Subscription(
        id=subscription_id,
        owner=owner,
        base=TickerAsset(asset=StellarAsset(address="CASSET"), source="oracle"),
        quote=TickerAsset(asset=OtherAsset(symbol="USD"), source="oracle"),
        threshold=10,
        heartbeat=5,
        webhook=b"\x00\xffhook",
        balance=balance,
        status=status,
        updated=1_700_000_000_000,
    )


class TestSubscriptionStoreBasics:
    """Test save/find/get/delete."""

    def test_save_and_get(self, store):
        store.save(make_subscription())

        subscription = store.get(1)

        assert subscription.owner == "GOWNER1"
        assert subscription.webhook == b"\x00\xffhook"
        assert subscription.base.asset.address == "CASSET"
        assert subscription.quote.asset.symbol == "USD"

    def test_get_missing_raises(self, store):
        with pytest.raises(SubscriptionNotFoundError):
            store.get(42)

    def test_find_missing_returns_none(self, store):
        assert store.find(42) is None

    def test_reads_return_fresh_copies(self, store):
        store.save(make_subscription())

        copy = store.get(1)
        copy.balance = 0

        assert store.get(1).balance == 100

    def test_delete(self, store):
        store.save(make_subscription())

        assert store.delete(1) is True
        assert 1 not in store

    def test_contains_and_len(self, store):
        store.save(make_subscription(1))
        store.save(make_subscription(2))

        assert 1 in store
        assert len(store) == 2


class TestSubscriptionStoreQueries:
    """Test listing and statistics."""

    def test_get_all_sorted(self, store):
        for subscription_id in (3, 1, 2):
            store.save(make_subscription(subscription_id))

        assert [s.id for s in store.get_all()] == [1, 2, 3]

    def test_get_by_owner(self, store):
        store.save(make_subscription(1, owner="GA"))
        store.save(make_subscription(2, owner="GB"))

        assert [s.id for s in store.get_by_owner("GB")] == [2]

    def test_get_by_status(self, store):
        store.save(make_subscription(1, status=SubscriptionStatus.SUSPENDED))
        store.save(make_subscription(2))

        assert [s.id for s in store.get_by_status(SubscriptionStatus.SUSPENDED)] == [1]

    def test_statistics(self, store):
        store.save(make_subscription(1, owner="GA", balance=50))
        store.save(make_subscription(2, owner="GA", status=SubscriptionStatus.SUSPENDED, balance=10))
        store.save(make_subscription(3, owner="GB", status=SubscriptionStatus.CANCELLED, balance=0))

        stats = store.get_statistics()

        assert stats == {
            "total_subscriptions": 3,
            "unique_owners": 2,
            "active": 1,
            "suspended": 1,
            "cancelled": 1,
            "total_balance": 60,
        }


class TestSubscriptionStoreTtl:
    """Test storage lifetime of subscription records."""

    def test_record_expires_without_writes(self, clock):
        store = SubscriptionStore(
            InMemoryStorage(clock=clock.get_current_time_millis),
            ttl_millis=30 * MILLIS_PER_DAY,
        )
        store.save(make_subscription())

        clock.advance_time(days=31)

        assert store.find(1) is None

    def test_write_extends_lifetime(self, clock):
        store = SubscriptionStore(
            InMemoryStorage(clock=clock.get_current_time_millis),
            ttl_millis=30 * MILLIS_PER_DAY,
        )
        store.save(make_subscription())

        clock.advance_time(days=20)
        store.save(store.get(1))
        clock.advance_time(days=20)

        assert store.find(1) is not None
