"""Batch charging of subscription balances.

For each id the engine bills whole elapsed days at the current fee, clamps
the charge to the available balance and suspends subscriptions that can no
longer cover one more day. Ids that cannot be charged are skipped, never
failed, so one bad id does not block the rest of the batch.
"""

from typing import List

from pydantic import BaseModel, Field

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.models.events import ChargedEvent, SuspendedEvent
from feed_subscriptions.models.subscription import SubscriptionStatus
from feed_subscriptions.services.context import ServiceContext
from feed_subscriptions.utils.time_units import elapsed_days

logger = get_logger(__name__)


class ChargeResult(BaseModel):
    """Summary of one charge batch."""

    timestamp: int = Field(..., description="Charge time (Unix millis)")
    total_charged: int = Field(default=0, description="Units burned from custody")
    charged_ids: List[int] = Field(default_factory=list)
    suspended_ids: List[int] = Field(default_factory=list)
    skipped_ids: List[int] = Field(default_factory=list)


class BillingEngine:
    """Charges daily fees from subscription balances."""

    def __init__(self, context: ServiceContext):
        self.context = context

    def charge(self, subscription_ids: List[int]) -> ChargeResult:
        """Charge a batch of subscriptions in the given order.

        Skipped without error: unknown ids, subscriptions that are not
        active, and subscriptions charged less than a day ago. When
        anything was charged, ``charged`` (with the whole batch) and
        ``suspended`` (if any) events are emitted and the total is burned
        from custody.

        Args:
            subscription_ids: Ids to charge; duplicates are tolerated

        Returns:
            ChargeResult for the batch

        Raises:
            NotInitializedError: If the contract is not initialized
            UnauthorizedError: If the caller is not the admin
            LedgerError: If custody cannot cover the burn (whole batch reverts)
        """
        ctx = self.context
        with ctx.unit_of_work.call("charge") as scope:
            ctx.admin_gateway.require_admin()
            now = ctx.now()
            fee = ctx.config_store.get_fee()
            result = ChargeResult(timestamp=now)

            for subscription_id in subscription_ids:
                subscription = ctx.subscriptions.find(subscription_id)
                if subscription is None or subscription.status != SubscriptionStatus.ACTIVE:
                    result.skipped_ids.append(subscription_id)
                    continue

                days = elapsed_days(subscription.updated, now)
                if days == 0:
                    result.skipped_ids.append(subscription_id)
                    continue

                amount = min(days * fee, subscription.balance)
                subscription.debit(amount, reason="daily_charge")
                subscription.updated = now
                if subscription.balance < fee:
                    subscription.set_status(SubscriptionStatus.SUSPENDED, reason="insufficient_balance")
                    result.suspended_ids.append(subscription_id)
                ctx.subscriptions.save(subscription)

                result.total_charged += amount
                result.charged_ids.append(subscription_id)
                logger.debug(
                    "subscription_charged",
                    subscription_id=subscription_id,
                    days=days,
                    amount=amount,
                    balance=subscription.balance,
                )

            if result.total_charged == 0:
                logger.info("charge_batch_empty", requested=len(subscription_ids))
                return result

            scope.emit(ChargedEvent(timestamp=now, subscription_ids=list(subscription_ids)))
            if result.suspended_ids:
                scope.emit(SuspendedEvent(subscription_ids=list(result.suspended_ids)))
            ctx.ledger.burn(ctx.contract_address, result.total_charged)

            logger.info(
                "charge_batch_completed",
                total_charged=result.total_charged,
                charged=len(result.charged_ids),
                suspended=len(result.suspended_ids),
                skipped=len(result.skipped_ids),
            )
            return result
