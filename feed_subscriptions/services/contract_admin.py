"""Contract administration: one-time init, fee changes, code upgrades, reads."""

from typing import Optional

from feed_subscriptions.exceptions import AlreadyInitializedError
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.contract_config import ConfigData, ContractConfig
from feed_subscriptions.services.context import ServiceContext
from feed_subscriptions.services.deployer import CodeDeployment
from feed_subscriptions.state_logger import log_fee_change

logger = get_logger(__name__)

PROTOCOL_VERSION = "1.0.0"


class ContractAdmin:
    """Admin-side operations on the contract configuration."""

    def __init__(self, context: ServiceContext):
        self.context = context

    def config(self, config: ConfigData) -> ContractConfig:
        """Initialize the contract once.

        The caller must prove control of ``config.admin``. The ledger is bound
        to ``config.token`` and the id counter starts at 0.

        Raises:
            UnauthorizedError: If the caller does not control the admin address
            AlreadyInitializedError: If the contract was already initialized
        """
        ctx = self.context
        with ctx.unit_of_work.call("config"):
            ctx.verifier.require_auth(config.admin)
            if ctx.config_store.is_initialized():
                raise AlreadyInitializedError("Contract is already initialized")

            ctx.config_store.set_admin(config.admin)
            ctx.config_store.set_fee(config.fee)
            ctx.config_store.set_token(config.token)
            ctx.config_store.set_last_subscription_id(0)
            ctx.ledger.token = config.token

            logger.info("contract_initialized", admin=config.admin, token=config.token, fee=config.fee)
            return ctx.config_store.get_contract_config()

    def set_fee(self, fee: int) -> None:
        """Replace the per-day fee. Applies from the next charge, deposit or create.

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller is not the admin
            ValueError: If fee is negative
        """
        ctx = self.context
        with ctx.unit_of_work.call("set_fee"):
            ctx.admin_gateway.require_admin()
            old_fee = ctx.config_store.get_fee()
            ctx.config_store.set_fee(fee)
            log_fee_change(old_fee, fee)

    def update_contract(self, code_hash: str) -> CodeDeployment:
        """Hand a new code hash to the deployer.

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller is not the admin
            ValueError: If code_hash is not 64 hex chars
        """
        ctx = self.context
        with ctx.unit_of_work.call("update_contract"):
            ctx.admin_gateway.require_admin()
            return ctx.deployer.update_current_code(code_hash)

    def admin(self) -> Optional[str]:
        return self.context.config_store.get_admin()

    def fee(self) -> int:
        return self.context.config_store.get_fee()

    def token(self) -> str:
        return self.context.config_store.get_token()

    @staticmethod
    def version() -> int:
        """Protocol major version."""
        return int(PROTOCOL_VERSION.split(".")[0])
