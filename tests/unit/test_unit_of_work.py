"""Unit tests for call atomicity."""

import threading
from unittest.mock import Mock

import pytest

from feed_subscriptions.models.events import SuspendedEvent
from feed_subscriptions.repositories.storage import InMemoryStorage
from feed_subscriptions.services.token_ledger import InMemoryTokenLedger
from feed_subscriptions.services.unit_of_work import UnitOfWork


@pytest.fixture
def storage():
    return InMemoryStorage(clock=lambda: 0)


@pytest.fixture
def ledger():
    ledger = InMemoryTokenLedger()
    ledger.mint("GALICE", 100)
    return ledger


@pytest.fixture
def dispatcher():
    return Mock()


@pytest.fixture
def unit_of_work(storage, ledger, dispatcher):
    return UnitOfWork(storage, ledger, dispatcher)


class TestCommit:
    def test_events_published_after_commit_in_order(self, unit_of_work, dispatcher):
        first = SuspendedEvent(subscription_ids=[1])
        second = SuspendedEvent(subscription_ids=[2])

        with unit_of_work.call("op") as scope:
            scope.emit(first)
            scope.emit(second)
            dispatcher.publish.assert_not_called()

        assert [c.args[0] for c in dispatcher.publish.call_args_list] == [first, second]

    def test_publish_runs_after_lock_released(self, unit_of_work, dispatcher):
        lock_free = []

        def try_lock():
            acquired = unit_of_work._lock.acquire(blocking=False)
            if acquired:
                unit_of_work._lock.release()
            lock_free.append(acquired)

        def publish(event):
            worker = threading.Thread(target=try_lock)
            worker.start()
            worker.join(timeout=5)

        dispatcher.publish.side_effect = publish

        with unit_of_work.call("op") as scope:
            scope.emit(SuspendedEvent(subscription_ids=[1]))

        assert lock_free == [True]

    def test_changes_kept(self, unit_of_work, storage, ledger):
        with unit_of_work.call("op"):
            storage.set("key", "value")
            ledger.transfer("GALICE", "GBOB", 40)

        assert storage.get("key") == "value"
        assert ledger.balance("GBOB") == 40


class TestRollback:
    def test_failure_restores_state(self, unit_of_work, storage, ledger, dispatcher):
        storage.set("key", "before")

        with pytest.raises(RuntimeError):
            with unit_of_work.call("op") as scope:
                storage.set("key", "after")
                ledger.burn("GALICE", 60)
                scope.emit(SuspendedEvent(subscription_ids=[1]))
                raise RuntimeError("boom")

        assert storage.get("key") == "before"
        assert ledger.balance("GALICE") == 100
        assert ledger.total_burned == 0
        dispatcher.publish.assert_not_called()

    def test_next_call_starts_clean(self, unit_of_work, dispatcher):
        with pytest.raises(ValueError):
            with unit_of_work.call("failing") as scope:
                scope.emit(SuspendedEvent(subscription_ids=[1]))
                raise ValueError("bad")

        with unit_of_work.call("ok") as scope:
            scope.emit(SuspendedEvent(subscription_ids=[2]))

        assert dispatcher.publish.call_count == 1


class TestNesting:
    def test_nested_call_joins_outer(self, unit_of_work, storage, dispatcher):
        with pytest.raises(RuntimeError):
            with unit_of_work.call("outer") as outer:
                with unit_of_work.call("inner") as inner:
                    assert inner is outer
                    storage.set("key", "inner")
                    inner.emit(SuspendedEvent(subscription_ids=[1]))
                raise RuntimeError("outer failed")

        assert storage.get("key") is None
        dispatcher.publish.assert_not_called()
