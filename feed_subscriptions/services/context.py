"""Explicit service wiring.

``ServiceContext`` bundles every collaborator a service call needs, so engines
receive their dependencies instead of reaching for module globals.
"""

from dataclasses import dataclass
from typing import Optional

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.settings import SettingsFile
from feed_subscriptions.repositories.config_store import ConfigStore
from feed_subscriptions.repositories.storage import InMemoryStorage
from feed_subscriptions.repositories.subscription_store import SubscriptionStore
from feed_subscriptions.services.access_control import (
    AdminGateway,
    AllowAllAuthVerifier,
    AuthorizationVerifier,
    CallerAuthVerifier,
)
from feed_subscriptions.services.deployer import CodeDeployer
from feed_subscriptions.services.event_dispatcher import EventDispatcher
from feed_subscriptions.services.time_controller import TimeController
from feed_subscriptions.services.token_ledger import InMemoryTokenLedger
from feed_subscriptions.services.unit_of_work import UnitOfWork
from feed_subscriptions.utils.address import generate_contract_address
from feed_subscriptions.utils.time_units import days_to_millis

logger = get_logger(__name__)


@dataclass
class ServiceContext:
    """Collaborators shared by all engines of one service instance."""

    settings: SettingsFile
    clock: TimeController
    storage: InMemoryStorage
    config_store: ConfigStore
    subscriptions: SubscriptionStore
    ledger: InMemoryTokenLedger
    verifier: AuthorizationVerifier
    admin_gateway: AdminGateway
    dispatcher: EventDispatcher
    deployer: CodeDeployer
    unit_of_work: UnitOfWork
    contract_address: str

    def now(self) -> int:
        """Current service time in milliseconds."""
        return self.clock.get_current_time_millis()

    @classmethod
    def build(
            cls,
            settings: SettingsFile,
            verifier: Optional[AuthorizationVerifier] = None,
            clock: Optional[TimeController] = None,
    ) -> "ServiceContext":
        """Create a fully wired context from settings.

        Args:
            settings: Parsed settings file
            verifier: Authorization verifier (defaults to request-bound caller credentials)
            clock: Virtual clock (defaults to a clock starting at wall time)
        """
        clock = clock or TimeController()
        storage = InMemoryStorage(clock=clock.get_current_time_millis)
        config_store = ConfigStore(storage)

        ttl_days = settings.service.subscription_ttl_days
        subscriptions = SubscriptionStore(
            storage,
            ttl_millis=days_to_millis(ttl_days) if ttl_days else None,
        )

        ledger = InMemoryTokenLedger()
        if verifier is None:
            if settings.auth.mode == "allow_all":
                verifier = AllowAllAuthVerifier()
            else:
                verifier = CallerAuthVerifier(settings.auth)
        dispatcher = EventDispatcher(
            pubsub_config=settings.pubsub,
            clock=clock.get_current_time_millis,
            history_size=settings.service.event_history_size,
        )
        contract_address = settings.service.contract_address or generate_contract_address()

        context = cls(
            settings=settings,
            clock=clock,
            storage=storage,
            config_store=config_store,
            subscriptions=subscriptions,
            ledger=ledger,
            verifier=verifier,
            admin_gateway=AdminGateway(config_store, verifier),
            dispatcher=dispatcher,
            deployer=CodeDeployer(clock=clock.get_current_time_millis),
            unit_of_work=UnitOfWork(storage, ledger, dispatcher),
            contract_address=contract_address,
        )

        logger.info(
            "service_context_built",
            contract_address=contract_address,
            verifier=type(verifier).__name__,
            pubsub_enabled=dispatcher.is_enabled(),
        )
        return context
