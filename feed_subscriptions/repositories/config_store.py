"""Contract config store - scalar configuration slots on top of storage.

One storage slot per field: admin, fee, token and the last assigned
subscription id. The config is initialized once and never expires.
"""

from typing import Optional

from feed_subscriptions.exceptions import NotInitializedError
from feed_subscriptions.models.contract_config import ContractConfig
from feed_subscriptions.repositories.storage import InMemoryStorage

ADMIN_KEY = "config:admin"
FEE_KEY = "config:fee"
TOKEN_KEY = "config:token"
LAST_SUBSCRIPTION_ID_KEY = "config:last_subscription_id"


class ConfigStore:
    """Typed access to the contract configuration slots."""

    def __init__(self, storage: InMemoryStorage):
        self._storage = storage

    def is_initialized(self) -> bool:
        """Contract is initialized once an admin is set."""
        return self._storage.has(ADMIN_KEY)

    def require_initialized(self) -> None:
        """Raise NotInitializedError if the contract has no config yet."""
        if not self.is_initialized():
            raise NotInitializedError("Contract is not initialized")

    def get_admin(self) -> Optional[str]:
        return self._storage.get(ADMIN_KEY)

    def set_admin(self, admin: str) -> None:
        self._storage.set(ADMIN_KEY, admin)

    def get_fee(self) -> int:
        """Get the per-day fee.

        Raises:
            NotInitializedError: If no fee is stored
        """
        value = self._storage.get(FEE_KEY)
        if value is None:
            raise NotInitializedError("Fee is not configured")
        return int(value)

    def set_fee(self, fee: int) -> None:
        if fee < 0:
            raise ValueError("Fee must be non-negative")
        self._storage.set(FEE_KEY, str(fee))

    def get_token(self) -> str:
        """Get the token reference.

        Raises:
            NotInitializedError: If no token is stored
        """
        value = self._storage.get(TOKEN_KEY)
        if value is None:
            raise NotInitializedError("Token is not configured")
        return value

    def set_token(self, token: str) -> None:
        self._storage.set(TOKEN_KEY, token)

    def get_last_subscription_id(self) -> int:
        value = self._storage.get(LAST_SUBSCRIPTION_ID_KEY)
        return int(value) if value is not None else 0

    def set_last_subscription_id(self, subscription_id: int) -> None:
        self._storage.set(LAST_SUBSCRIPTION_ID_KEY, str(subscription_id))

    def next_subscription_id(self) -> int:
        """Increment the id counter and return the new id."""
        subscription_id = self.get_last_subscription_id() + 1
        self.set_last_subscription_id(subscription_id)
        return subscription_id

    def get_contract_config(self) -> ContractConfig:
        """Snapshot of the whole configuration.

        Raises:
            NotInitializedError: If the contract is not initialized
        """
        self.require_initialized()
        return ContractConfig(
            admin=self.get_admin(),
            token=self.get_token(),
            fee=self.get_fee(),
            last_subscription_id=self.get_last_subscription_id(),
        )
