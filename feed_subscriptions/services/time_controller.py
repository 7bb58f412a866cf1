"""Virtual clock for time manipulation and fast-forwarding.

Responsibilities:
- Maintain virtual current time in milliseconds
- Advance time (days, hours, minutes) so billing cycles can elapse on demand
- Set or reset the clock

Charging is never triggered by the clock itself: the admin calls charge.
"""

import threading
import time
from typing import Optional

from feed_subscriptions.logging_config import get_logger
from feed_subscriptions.utils.time_units import to_millis

logger = get_logger(__name__)


class TimeController:
    """Virtual clock used as the service's notion of "now".

    Args:
        start_time_millis: initial virtual time, defaults to real current time
    """

    def __init__(self, start_time_millis: Optional[int] = None) -> None:
        self._lock = threading.RLock()
        self._virtual_time_millis = (
            start_time_millis if start_time_millis is not None else int(time.time() * 1000)
        )
        self._time_offset_millis = 0

        logger.info(
            "time_controller_initialized",
            virtual_time_millis=self._virtual_time_millis,
        )

    def get_current_time_millis(self) -> int:
        """Get the current virtual time in milliseconds."""
        with self._lock:
            return self._virtual_time_millis

    @property
    def offset_millis(self) -> int:
        """Total amount the clock was moved away from real time."""
        with self._lock:
            return self._time_offset_millis

    def advance_time(self, days: int = 0, hours: int = 0, minutes: int = 0) -> dict:
        """Advance virtual time.

        Args:
            days: number of days to advance
            hours: number of hours to advance
            minutes: number of minutes to advance

        Returns:
            Dictionary with old_time_millis, new_time_millis and time_advanced_millis

        Raises:
            ValueError: if any value is negative
        """
        if days < 0 or hours < 0 or minutes < 0:
            raise ValueError("Cannot advance time backwards, negative values are not allowed")

        milliseconds_to_advance = to_millis(days=days, hours=hours, minutes=minutes)

        with self._lock:
            old_time = self._virtual_time_millis
            self._virtual_time_millis += milliseconds_to_advance
            self._time_offset_millis += milliseconds_to_advance
            new_time = self._virtual_time_millis

        if milliseconds_to_advance:
            logger.info(
                "time_advanced",
                old_time_millis=old_time,
                new_time_millis=new_time,
                days=days,
                hours=hours,
                minutes=minutes,
            )

        return {
            "old_time_millis": old_time,
            "new_time_millis": new_time,
            "time_advanced_millis": milliseconds_to_advance,
        }

    def set_time(self, timestamp_millis: int) -> dict:
        """Set virtual time to a specific timestamp.

        Args:
            timestamp_millis: Unix timestamp in milliseconds to set

        Returns:
            Dictionary with old_time_millis and new_time_millis

        Raises:
            ValueError: If timestamp is before current virtual time
        """
        with self._lock:
            old_time = self._virtual_time_millis
            if timestamp_millis < old_time:
                raise ValueError(
                    f"Cannot set time backwards, current: {old_time}, requested: {timestamp_millis}"
                )
            self._virtual_time_millis = timestamp_millis
            self._time_offset_millis += timestamp_millis - old_time

        logger.info(
            "time_set",
            old_time_millis=old_time,
            new_time_millis=timestamp_millis,
        )

        return {
            "old_time_millis": old_time,
            "new_time_millis": timestamp_millis,
        }

    def reset_time(self) -> dict:
        """Reset virtual time back to real current time."""
        with self._lock:
            old_time = self._virtual_time_millis
            real_current_time = int(time.time() * 1000)
            self._virtual_time_millis = real_current_time
            self._time_offset_millis = 0

        logger.info(
            "time_reset",
            old_time_millis=old_time,
            new_time_millis=real_current_time,
        )

        return {
            "old_time_millis": old_time,
            "new_time_millis": real_current_time,
        }
