"""Heartbeat and trigger notifications.

The price-feed side decides which subscriptions are due; this module stamps
them and republishes the batches. Balances and statuses are never touched.
"""

from typing import List

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.events import HeartbeatEvent, TriggeredEvent
from feed_subscriptions.services.context import ServiceContext

logger = get_logger(__name__)


class TriggerDispatcher:
    def __init__(self, context: ServiceContext):
        self.context = context

    def _stamp(self, subscription_ids: List[int], timestamp: int) -> int:
        stamped = 0
        for subscription_id in subscription_ids:
            subscription = self.context.subscriptions.find(subscription_id)
            if subscription is None:
                continue
            subscription.last_notification = timestamp
            self.context.subscriptions.save(subscription)
            stamped += 1
        return stamped

    def trigger(self, timestamp: int, heartbeat_ids: List[int], trigger_ids: List[int]) -> None:
        """Record a heartbeat/trigger round.

        Known ids get ``last_notification = timestamp``; unknown ids are
        ignored. Events carry the id lists as given and are only emitted for
        non-empty lists.

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller is not the admin
        """
        ctx = self.context
        with ctx.unit_of_work.call("trigger") as scope:
            ctx.admin_gateway.require_admin()

            stamped = self._stamp(heartbeat_ids, timestamp) + self._stamp(trigger_ids, timestamp)

            if heartbeat_ids:
                scope.emit(HeartbeatEvent(timestamp=timestamp, subscription_ids=list(heartbeat_ids)))
            if trigger_ids:
                scope.emit(TriggeredEvent(timestamp=timestamp, subscription_ids=list(trigger_ids)))

            logger.info(
                "trigger_recorded",
                timestamp=timestamp,
                heartbeats=len(heartbeat_ids),
                triggers=len(trigger_ids),
                stamped=stamped,
            )
