"""Call atomicity for service operations.

A call either commits every storage write, ledger movement and event, or
none of them. Calls are serialized by a re-entrant lock, so nested calls
join the outer one. Events of a committed call are published after the lock
is released.
"""

import threading
from contextlib import contextmanager
from typing import Iterator, List, Optional

from pydantic import BaseModel

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.repositories.storage import InMemoryStorage
from feed_subscriptions.services.event_dispatcher import EventDispatcher
from feed_subscriptions.services.token_ledger import InMemoryTokenLedger

logger = get_logger(__name__)


class CallScope:
    """Collects events emitted during one call."""

    def __init__(self, operation: str):
        self.operation = operation
        self.events: List[BaseModel] = []

    def emit(self, event: BaseModel) -> None:
        self.events.append(event)


class UnitOfWork:
    """Snapshots storage and ledger around a call and defers event publishing.

    Args:
        storage: Storage to snapshot
        ledger: Token ledger to snapshot
        dispatcher: Receives buffered events after a successful call
    """

    def __init__(
            self,
            storage: InMemoryStorage,
            ledger: InMemoryTokenLedger,
            dispatcher: EventDispatcher,
    ):
        self._storage = storage
        self._ledger = ledger
        self._dispatcher = dispatcher
        self._lock = threading.RLock()
        self._scope: Optional[CallScope] = None

    @contextmanager
    def call(self, operation: str) -> Iterator[CallScope]:
        """Run one service call atomically.

        Any exception restores the snapshots, drops buffered events and is
        re-raised unchanged.
        """
        with self._lock:
            if self._scope is not None:
                yield self._scope
                return

            scope = CallScope(operation)
            storage_snapshot = self._storage.snapshot()
            ledger_snapshot = self._ledger.snapshot()
            self._scope = scope
            try:
                yield scope
            except Exception as e:
                self._storage.restore(storage_snapshot)
                self._ledger.restore(ledger_snapshot)
                logger.info(
                    "call_reverted",
                    operation=operation,
                    error_type=type(e).__name__,
                    discarded_events=len(scope.events),
                )
                raise
            finally:
                self._scope = None

        # Publishing may wait on Pub/Sub, so it happens outside the call lock
        for event in scope.events:
            self._dispatcher.publish(event)
