"""Simple state change logging for subscriptions and contract settings.

Tracks state transitions with before/after values for debugging and auditing.
"""

from typing import Any, Optional

from feed_subscriptions.logging_config import get_logger

logger = get_logger(__name__)


def log_subscription_status_change(
    subscription_id: int,
    old_status: Any,
    new_status: Any,
    reason: Optional[str] = None,
    **extra_context: Any,
) -> None:
    """Log subscription status change.

    Args:
        subscription_id: Subscription id
        old_status: Previous status value
        new_status: New status value
        reason: Reason for status change
        **extra_context: Additional context (owner, balance, etc.)
    """
    logger.info(
        "subscription_status_changed",
        subscription_id=subscription_id,
        old_status=str(old_status),
        new_status=str(new_status),
        reason=reason,
        **extra_context,
    )


def log_balance_change(
    subscription_id: int,
    old_balance: int,
    new_balance: int,
    reason: str,
    **extra_context: Any,
) -> None:
    """Log subscription balance change.

    Args:
        subscription_id: Subscription id
        old_balance: Balance before the change
        new_balance: Balance after the change
        reason: Reason for change (deposit, charge, refund, ...)
        **extra_context: Additional context
    """
    logger.info(
        "balance_changed",
        subscription_id=subscription_id,
        old_balance=old_balance,
        new_balance=new_balance,
        delta=new_balance - old_balance,
        reason=reason,
        **extra_context,
    )


def log_fee_change(old_fee: Optional[int], new_fee: int, **extra_context: Any) -> None:
    """Log a change of the per-day fee."""
    logger.info(
        "fee_changed",
        old_fee=old_fee,
        new_fee=new_fee,
        **extra_context,
    )
