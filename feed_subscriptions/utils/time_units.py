"""Time unit constants and billing-cycle arithmetic.

All timestamps in the service are Unix milliseconds. Billing works in whole
days: a partial day never bills.
"""

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE
MILLIS_PER_DAY = 24 * MILLIS_PER_HOUR


def elapsed_days(since_millis: int, now_millis: int) -> int:
    """Count whole days elapsed between two timestamps.

    Args:
        since_millis: Start of the billing cycle (Unix millis)
        now_millis: Current time (Unix millis)

    Returns:
        Number of full days elapsed; 0 if less than a day passed or if
        ``now_millis`` is before ``since_millis``

    Examples:
        >>> elapsed_days(0, MILLIS_PER_DAY - 1)
        0
        >>> elapsed_days(0, 2 * MILLIS_PER_DAY + 5)
        2
    """
    if now_millis <= since_millis:
        return 0
    return (now_millis - since_millis) // MILLIS_PER_DAY


def days_to_millis(days: int) -> int:
    """Convert whole days to milliseconds."""
    return days * MILLIS_PER_DAY


def to_millis(days: int = 0, hours: int = 0, minutes: int = 0) -> int:
    """Convert a days/hours/minutes offset to milliseconds.

    Raises:
        ValueError: If any component is negative
    """
    if days < 0 or hours < 0 or minutes < 0:
        raise ValueError("Time components must be non-negative")
    return days * MILLIS_PER_DAY + hours * MILLIS_PER_HOUR + minutes * MILLIS_PER_MINUTE
