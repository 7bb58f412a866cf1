"""Utility functions and helpers for the subscription service."""

from feed_subscriptions.utils.address import (
    generate_address,
    generate_contract_address,
    normalize_code_hash,
    validate_address,
)
from feed_subscriptions.utils.time_units import (
    MILLIS_PER_DAY,
    MILLIS_PER_HOUR,
    MILLIS_PER_MINUTE,
    days_to_millis,
    elapsed_days,
    to_millis,
)

__all__ = [
    # Addresses
    "generate_address",
    "generate_contract_address",
    "validate_address",
    "normalize_code_hash",
    # Time units
    "MILLIS_PER_DAY",
    "MILLIS_PER_HOUR",
    "MILLIS_PER_MINUTE",
    "days_to_millis",
    "elapsed_days",
    "to_millis",
]
