"""Service facade exposing every subscription operation.

One ``SubscriptionService`` owns one ``ServiceContext`` and the engines built
on it. The HTTP layer and in-process callers go through this facade.
"""

from typing import List, Optional, Tuple

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.contract_config import ConfigData, ContractConfig
from feed_subscriptions.models.settings import SettingsFile
from feed_subscriptions.models.subscription import Subscription, SubscriptionInitParams
from feed_subscriptions.services.access_control import AuthorizationVerifier
from feed_subscriptions.services.billing_engine import BillingEngine, ChargeResult
from feed_subscriptions.services.context import ServiceContext
from feed_subscriptions.services.contract_admin import ContractAdmin
from feed_subscriptions.services.deployer import CodeDeployment
from feed_subscriptions.services.subscription_engine import SubscriptionEngine
from feed_subscriptions.services.time_controller import TimeController
from feed_subscriptions.services.trigger_dispatcher import TriggerDispatcher

logger = get_logger(__name__)


class SubscriptionService:
    """Balance-funded subscription service.

    Args:
        context: Wired collaborators shared by all engines
    """

    def __init__(self, context: ServiceContext):
        self.context = context
        self.contract = ContractAdmin(context)
        self.lifecycle = SubscriptionEngine(context)
        self.billing = BillingEngine(context)
        self.triggers = TriggerDispatcher(context)

    @classmethod
    def from_settings(
            cls,
            settings: SettingsFile,
            verifier: Optional[AuthorizationVerifier] = None,
            clock: Optional[TimeController] = None,
    ) -> "SubscriptionService":
        return cls(ServiceContext.build(settings, verifier=verifier, clock=clock))

    # Admin

    def config(self, admin: str, token: str, fee: int) -> ContractConfig:
        return self.contract.config(ConfigData(admin=admin, token=token, fee=fee))

    def set_fee(self, fee: int) -> None:
        self.contract.set_fee(fee)

    def trigger(self, timestamp: int, heartbeat_ids: List[int], trigger_ids: List[int]) -> None:
        self.triggers.trigger(timestamp, heartbeat_ids, trigger_ids)

    def update_contract(self, code_hash: str) -> CodeDeployment:
        return self.contract.update_contract(code_hash)

    def charge(self, subscription_ids: List[int]) -> ChargeResult:
        return self.billing.charge(subscription_ids)

    # Public

    def create_subscription(self, params: SubscriptionInitParams, amount: int) -> Tuple[int, Subscription]:
        return self.lifecycle.create_subscription(params, amount)

    def deposit(self, payer: str, subscription_id: int, amount: int) -> Subscription:
        return self.lifecycle.deposit(payer, subscription_id, amount)

    def cancel(self, subscription_id: int) -> Tuple[Subscription, int]:
        return self.lifecycle.cancel(subscription_id)

    def get_subscription(self, subscription_id: int) -> Subscription:
        return self.lifecycle.get_subscription(subscription_id)

    def admin(self) -> Optional[str]:
        return self.contract.admin()

    def fee(self) -> int:
        return self.contract.fee()

    def token(self) -> str:
        return self.contract.token()

    def version(self) -> int:
        return self.contract.version()

    def reset(self) -> None:
        """Drop all state: storage, balances, events, deployments and virtual time.

        Collaborators are cleared in place so references held elsewhere stay valid.
        """
        ctx = self.context
        with ctx.unit_of_work.call("reset"):
            ctx.storage.clear()
            ctx.ledger.clear()
            ctx.ledger.token = None
            ctx.deployer.clear()
            ctx.clock.reset_time()
        ctx.dispatcher.clear_history()
        logger.info("subscription_service_reset")


# Global service instance
_service_instance: Optional[SubscriptionService] = None


def get_subscription_service() -> SubscriptionService:
    """Get global subscription service instance (singleton).

    Built from the global configuration on first use.
    """
    global _service_instance
    if _service_instance is None:
        from feed_subscriptions.config import get_config
        _service_instance = SubscriptionService.from_settings(get_config().settings)
    return _service_instance


def reset_subscription_service() -> None:
    """Reset the global service state in place (testing/control API)."""
    if _service_instance is not None:
        _service_instance.reset()
