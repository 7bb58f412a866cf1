"""Subscription event publishing.

Responsibilities:
- Wrap events into ServiceNotification envelopes
- Keep a bounded in-memory history for inspection
- Forward notifications to a Google Cloud Pub/Sub topic when enabled
- Manage Pub/Sub client lifecycle
"""

import time
from collections import deque
from threading import RLock
from typing import Callable, Deque, List, Optional

from google.cloud import pubsub_v1
from pydantic import BaseModel

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.events import ServiceNotification, event_owner
from feed_subscriptions.models.settings import PubSubConfig

logger = get_logger(__name__)


class EventDispatcher:
    """Dispatches subscription events to the in-process history and Pub/Sub.

    Publishing failures are logged and never propagate: a committed call is
    not undone because the bus was unavailable.

    Args:
        pubsub_config: Pub/Sub settings (defaults to the global configuration)
        clock: callable returning current time in milliseconds
        history_size: number of notifications kept in memory
    """

    def __init__(
            self,
            pubsub_config: Optional[PubSubConfig] = None,
            clock: Optional[Callable[[], int]] = None,
            history_size: int = 1000,
    ):
        if pubsub_config is None:
            from feed_subscriptions.config import get_config
            pubsub_config = get_config().pubsub

        self._lock = RLock()
        self._config = pubsub_config
        self._clock = clock or (lambda: int(time.time() * 1000))
        self._history: Deque[ServiceNotification] = deque(maxlen=history_size)
        self._publisher: Optional[pubsub_v1.PublisherClient] = None
        self._topic_path: Optional[str] = None
        self._enabled = False

        self._initialize()

    def _initialize(self) -> None:
        """Init pub/sub publisher from config"""
        self._enabled = self._config.enabled
        if not self._enabled:
            logger.info("event_dispatcher_pubsub_disabled", message="Events are kept in memory only")
            return

        try:
            self._publisher = pubsub_v1.PublisherClient()
            self._topic_path = self._publisher.topic_path(self._config.project_id, self._config.topic)
            self._ensure_topic_exists()
            self._ensure_subscription_exists()

            logger.info(
                "event_dispatcher_initialized",
                project_id=self._config.project_id,
                topic=self._config.topic,
                topic_path=self._topic_path,
            )
        except Exception as e:
            logger.error(
                "event_dispatcher_init_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            self._enabled = False

    def _ensure_topic_exists(self) -> None:
        """Ensure Pub/Sub topic exists, create if it doesn't."""
        try:
            self._publisher.get_topic(request={"topic": self._topic_path})
            logger.info("pubsub_topic_exists", topic_path=self._topic_path)
        except Exception:
            topic = self._publisher.create_topic(request={"name": self._topic_path})
            logger.info("pubsub_topic_created", topic_path=topic.name)

    def _ensure_subscription_exists(self) -> None:
        """Ensure the default Pub/Sub subscription exists, create if it doesn't."""
        subscriber = pubsub_v1.SubscriberClient()
        subscription_path = subscriber.subscription_path(
            self._config.project_id, self._config.default_subscription
        )
        try:
            subscriber.get_subscription(request={"subscription": subscription_path})
            logger.info("pubsub_subscription_exists", subscription_path=subscription_path)
        except Exception:
            subscription = subscriber.create_subscription(
                request={"name": subscription_path, "topic": self._topic_path}
            )
            logger.info(
                "pubsub_subscription_created",
                subscription_path=subscription.name,
                topic=self._topic_path,
            )

    def is_enabled(self) -> bool:
        """Check if Pub/Sub forwarding is enabled and the client is initialized."""
        return self._enabled and self._publisher is not None

    def publish(self, event: BaseModel) -> bool:
        """Publish a subscription event.

        Args:
            event: One of the event models from ``models.events``

        Returns:
            True if forwarded to Pub/Sub, False if only recorded in memory
        """
        notification = ServiceNotification(event_time_millis=self._clock(), event=event)

        with self._lock:
            self._history.append(notification)

        logger.info("subscription_event_recorded", event_name=notification.event.name)

        if not self.is_enabled():
            return False

        try:
            self._publish_notification(notification)
            return True
        except Exception as e:
            logger.error(
                "subscription_event_publish_failed",
                event_name=notification.event.name,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            return False

    def _publish_notification(self, notification: ServiceNotification) -> None:
        """Publish a notification to Pub/Sub and wait for the message id.

        Raises:
            RuntimeError: If the publisher is not initialized
        """
        if not self._publisher or not self._topic_path:
            raise RuntimeError("Publisher is not initialized")

        attributes = {
            "topic": notification.topic,
            "event_name": notification.event.name,
        }
        owner = event_owner(notification.event)
        if owner:
            attributes["owner"] = owner

        future = self._publisher.publish(
            self._topic_path,
            notification.model_dump_json().encode("utf-8"),
            **attributes,
        )
        message_id = future.result(timeout=self._config.publish_timeout_seconds)
        logger.debug("pubsub_message_published", message_id=message_id)

    def history(self, limit: Optional[int] = None, name: Optional[str] = None) -> List[ServiceNotification]:
        """Recent notifications, oldest first.

        Args:
            limit: keep only the last ``limit`` notifications
            name: filter by event name
        """
        with self._lock:
            notifications = list(self._history)
        if name:
            notifications = [n for n in notifications if n.event.name == name]
        if limit is not None:
            notifications = notifications[-limit:] if limit > 0 else []
        return notifications

    def clear_history(self) -> None:
        with self._lock:
            self._history.clear()

    def shutdown(self) -> None:
        """Shutdown the event dispatcher and close connections."""
        with self._lock:
            if self._publisher:
                logger.info("event_dispatcher_shutting_down")
                self._publisher = None
                self._topic_path = None
                logger.info("event_dispatcher_shutdown_complete")
