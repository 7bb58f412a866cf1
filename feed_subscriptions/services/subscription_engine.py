"""Subscription lifecycle engine.

Responsibilities:
- Validate and create subscriptions funded by an initial deposit
- Credit deposits and reactivate suspended subscriptions
- Cancel subscriptions and refund the remaining balance
- Read subscriptions through the registry
"""

from typing import Tuple

from feed_subscriptions.exceptions import (
    InvalidAmountError,
    InvalidHeartbeatError,
    InvalidSubscriptionStatusError,
    InvalidThresholdError,
    WebhookTooLongError,
)
from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.events import (
    CancelledEvent,
    DepositEvent,
    SubscriptionCreatedEvent,
)
from feed_subscriptions.models.subscription import (
    Subscription,
    SubscriptionInitParams,
    SubscriptionStatus,
)
from feed_subscriptions.services.context import ServiceContext

logger = get_logger(__name__)

MIN_HEARTBEAT = 5  # minutes
MAX_THRESHOLD = 1000  # percent
MAX_WEBHOOK_SIZE = 2048  # bytes
MIN_FEE_FACTOR = 1


class SubscriptionEngine:
    """Create, fund and cancel subscriptions.

    Every operation runs as one unit of work: validation happens before any
    ledger movement, and a failure anywhere leaves storage and ledger as they
    were before the call.
    """

    def __init__(self, context: ServiceContext):
        self.context = context

    def activation_fee(self) -> int:
        """Fee burned when a subscription is created or reactivated."""
        return self.context.config_store.get_fee() * MIN_FEE_FACTOR

    def _validate_params(self, params: SubscriptionInitParams, amount: int, activation_fee: int) -> None:
        if amount < activation_fee:
            raise InvalidAmountError(f"Amount {amount} is below the activation fee {activation_fee}")
        if params.heartbeat < MIN_HEARTBEAT:
            raise InvalidHeartbeatError(f"Heartbeat must be at least {MIN_HEARTBEAT} minutes")
        if params.threshold <= 0 or params.threshold > MAX_THRESHOLD:
            raise InvalidThresholdError(f"Threshold must be in (0, {MAX_THRESHOLD}]")
        if len(params.webhook) > MAX_WEBHOOK_SIZE:
            raise WebhookTooLongError(f"Webhook exceeds {MAX_WEBHOOK_SIZE} bytes")

    def create_subscription(self, params: SubscriptionInitParams, amount: int) -> Tuple[int, Subscription]:
        """Create a new subscription funded by ``amount``.

        The full amount moves from the owner into custody, then one activation
        fee is burned; the rest becomes the subscription balance.

        Args:
            params: Owner, assets, threshold, heartbeat and webhook
            amount: Initial deposit in smallest token units

        Returns:
            Tuple of (subscription id, stored record)

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller does not control the owner address
            InvalidAmountError: If amount is below the activation fee
            InvalidHeartbeatError: If heartbeat is below 5 minutes
            InvalidThresholdError: If threshold is 0 or above 1000
            WebhookTooLongError: If the webhook exceeds 2048 bytes
            LedgerError: If the owner cannot fund the deposit
        """
        ctx = self.context
        with ctx.unit_of_work.call("create_subscription") as scope:
            ctx.config_store.require_initialized()
            ctx.verifier.require_auth(params.owner)

            activation_fee = self.activation_fee()
            self._validate_params(params, amount, activation_fee)

            ctx.ledger.transfer(params.owner, ctx.contract_address, amount)
            if activation_fee > 0:
                ctx.ledger.burn(ctx.contract_address, activation_fee)

            subscription_id = ctx.config_store.next_subscription_id()
            subscription = Subscription(
                id=subscription_id,
                owner=params.owner,
                base=params.base,
                quote=params.quote,
                threshold=params.threshold,
                heartbeat=params.heartbeat,
                webhook=params.webhook,
                balance=amount - activation_fee,
                status=SubscriptionStatus.ACTIVE,
                updated=ctx.now(),
            )
            ctx.subscriptions.save(subscription)
            scope.emit(SubscriptionCreatedEvent(subscription_id=subscription_id, subscription=subscription))

            logger.info(
                "subscription_created",
                subscription_id=subscription_id,
                owner=params.owner,
                amount=amount,
                activation_fee=activation_fee,
                balance=subscription.balance,
            )
            return subscription_id, subscription

    def deposit(self, payer: str, subscription_id: int, amount: int) -> Subscription:
        """Add funds to a subscription. Anyone may pay.

        A suspended subscription needs at least one current fee; that fee is
        burned, the remainder credited, and billing restarts from now.

        Returns:
            Updated subscription record

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller does not control the payer address
            InvalidAmountError: If amount is 0, or below the fee for a suspended subscription
            SubscriptionNotFoundError: If the subscription does not exist
            InvalidSubscriptionStatusError: If the subscription is cancelled
            LedgerError: If the payer cannot fund the deposit
        """
        ctx = self.context
        with ctx.unit_of_work.call("deposit") as scope:
            ctx.config_store.require_initialized()
            ctx.verifier.require_auth(payer)
            if amount <= 0:
                raise InvalidAmountError("Deposit amount must be positive")

            subscription = ctx.subscriptions.get(subscription_id)
            if subscription.status == SubscriptionStatus.CANCELLED:
                raise InvalidSubscriptionStatusError(f"Subscription {subscription_id} is cancelled")

            burn_amount = 0
            if subscription.status == SubscriptionStatus.SUSPENDED:
                burn_amount = self.activation_fee()
                if amount < burn_amount:
                    raise InvalidAmountError(
                        f"Reactivation requires at least {burn_amount}, got {amount}"
                    )

            ctx.ledger.transfer(payer, ctx.contract_address, amount)
            if burn_amount > 0:
                ctx.ledger.burn(ctx.contract_address, burn_amount)

            subscription.credit(amount - burn_amount, reason="deposit")
            if subscription.status == SubscriptionStatus.SUSPENDED:
                subscription.set_status(SubscriptionStatus.ACTIVE, reason="reactivated_by_deposit")
                subscription.updated = ctx.now()

            ctx.subscriptions.save(subscription)
            scope.emit(
                DepositEvent(
                    subscription_id=subscription_id,
                    amount=amount,
                    owner=subscription.owner,
                    subscription=subscription,
                )
            )

            logger.info(
                "subscription_deposit",
                subscription_id=subscription_id,
                payer=payer,
                amount=amount,
                burned=burn_amount,
                balance=subscription.balance,
            )
            return subscription

    def cancel(self, subscription_id: int) -> Tuple[Subscription, int]:
        """Cancel an active subscription and refund its balance to the owner.

        Returns:
            Tuple of (cancelled record with balance 0, refunded amount)

        Raises:
            NotInitializedError: If the contract is not initialized
            SubscriptionNotFoundError: If the subscription does not exist
            UnauthorizedError: If the caller is not the owner
            InvalidSubscriptionStatusError: If the subscription is not active
        """
        ctx = self.context
        with ctx.unit_of_work.call("cancel") as scope:
            ctx.config_store.require_initialized()
            subscription = ctx.subscriptions.get(subscription_id)
            ctx.verifier.require_auth(subscription.owner)

            if subscription.status != SubscriptionStatus.ACTIVE:
                raise InvalidSubscriptionStatusError(
                    f"Only active subscriptions can be cancelled, status is {subscription.status.name}"
                )

            refunded = subscription.balance
            if refunded > 0:
                ctx.ledger.transfer(ctx.contract_address, subscription.owner, refunded)
                subscription.debit(refunded, reason="cancel_refund")
            subscription.set_status(SubscriptionStatus.CANCELLED, reason="cancelled_by_owner")

            ctx.subscriptions.save(subscription)
            scope.emit(CancelledEvent(subscription_id=subscription_id, refunded=refunded))

            logger.info(
                "subscription_cancelled",
                subscription_id=subscription_id,
                owner=subscription.owner,
                refunded=refunded,
            )
            return subscription, refunded

    def get_subscription(self, subscription_id: int) -> Subscription:
        """Get a subscription by id.

        Raises:
            NotInitializedError: If the contract is not initialized
            SubscriptionNotFoundError: If the subscription does not exist
        """
        self.context.config_store.require_initialized()
        return self.context.subscriptions.get(subscription_id)
