"""Subscription registry - keyed storage for subscription records.

Every component reads and writes subscriptions through this registry. Records
are serialized on write and parsed on read, so callers always work on their
own copy and must save it back.
"""

from typing import Dict, List, Optional

from feed_subscriptions.exceptions import SubscriptionNotFoundError
from feed_subscriptions.models.subscription import Subscription, SubscriptionStatus
from feed_subscriptions.repositories.storage import InMemoryStorage

SUBSCRIPTION_KEY_PREFIX = "subscription:"


def subscription_key(subscription_id: int) -> str:
    return f"{SUBSCRIPTION_KEY_PREFIX}{subscription_id}"


class SubscriptionStore:
    """Registry of subscription records keyed by id.

    Args:
        storage: Key-value storage substrate
        ttl_millis: Storage lifetime extended on every write; None keeps records forever
    """

    def __init__(self, storage: InMemoryStorage, ttl_millis: Optional[int] = None):
        self._storage = storage
        self._ttl_millis = ttl_millis

    def find(self, subscription_id: int) -> Optional[Subscription]:
        """Find subscription by id (returns None if not found)."""
        raw = self._storage.get(subscription_key(subscription_id))
        if raw is None:
            return None
        return Subscription.model_validate_json(raw)

    def get(self, subscription_id: int) -> Subscription:
        """Get subscription by id.

        Raises:
            SubscriptionNotFoundError: If id not found
        """
        subscription = self.find(subscription_id)
        if subscription is None:
            raise SubscriptionNotFoundError(f"Subscription not found: {subscription_id}")
        return subscription

    def save(self, subscription: Subscription) -> None:
        """Insert or overwrite a subscription and extend its storage TTL."""
        self._storage.set(
            subscription_key(subscription.id),
            subscription.model_dump_json(),
            ttl_millis=self._ttl_millis,
        )

    def delete(self, subscription_id: int) -> bool:
        """Delete a subscription (returns success status)."""
        return self._storage.delete(subscription_key(subscription_id))

    def exists(self, subscription_id: int) -> bool:
        return self._storage.has(subscription_key(subscription_id))

    def get_all(self) -> List[Subscription]:
        """Get all subscriptions ordered by id."""
        subscriptions = []
        for key in self._storage.keys(SUBSCRIPTION_KEY_PREFIX):
            raw = self._storage.get(key)
            if raw is not None:
                subscriptions.append(Subscription.model_validate_json(raw))
        return sorted(subscriptions, key=lambda s: s.id)

    def get_by_owner(self, owner: str) -> List[Subscription]:
        """Get all subscriptions created by an owner."""
        return [s for s in self.get_all() if s.owner == owner]

    def get_by_status(self, status: SubscriptionStatus) -> List[Subscription]:
        """Get all subscriptions in a specific status."""
        return [s for s in self.get_all() if s.status == status]

    def count(self) -> int:
        return len(self._storage.keys(SUBSCRIPTION_KEY_PREFIX))

    def get_statistics(self) -> Dict[str, int]:
        """Get registry statistics.

        Returns:
            Dictionary with:
            - total_subscriptions: Total number of subscriptions
            - unique_owners: Number of unique owners
            - active / suspended / cancelled: Counts per status
            - total_balance: Sum of all balances
        """
        subscriptions = self.get_all()
        return {
            "total_subscriptions": len(subscriptions),
            "unique_owners": len({s.owner for s in subscriptions}),
            "active": sum(1 for s in subscriptions if s.status == SubscriptionStatus.ACTIVE),
            "suspended": sum(1 for s in subscriptions if s.status == SubscriptionStatus.SUSPENDED),
            "cancelled": sum(1 for s in subscriptions if s.status == SubscriptionStatus.CANCELLED),
            "total_balance": sum(s.balance for s in subscriptions),
        }

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, subscription_id: int) -> bool:
        return self.exists(subscription_id)

    def __repr__(self) -> str:
        return f"SubscriptionStore(subscriptions={self.count()})"
