"""Unit tests for TimeController service."""

import time

import pytest

from feed_subscriptions.services.time_controller import TimeController
from feed_subscriptions.utils.time_units import MILLIS_PER_DAY, MILLIS_PER_HOUR, MILLIS_PER_MINUTE

START = 1_700_000_000_000


@pytest.fixture
def controller():
    return TimeController(start_time_millis=START)


class TestTimeControllerBasics:
    def test_starts_at_given_time(self, controller):
        assert controller.get_current_time_millis() == START
        assert controller.offset_millis == 0

    def test_defaults_to_real_time(self):
        before = int(time.time() * 1000)
        controller = TimeController()
        after = int(time.time() * 1000)

        assert before <= controller.get_current_time_millis() <= after

    def test_time_does_not_move_by_itself(self, controller):
        first = controller.get_current_time_millis()
        time.sleep(0.01)
        assert controller.get_current_time_millis() == first


class TestAdvanceTime:
    def test_advance_days(self, controller):
        result = controller.advance_time(days=2)

        assert result["old_time_millis"] == START
        assert result["new_time_millis"] == START + 2 * MILLIS_PER_DAY
        assert result["time_advanced_millis"] == 2 * MILLIS_PER_DAY

    def test_advance_mixed_units(self, controller):
        controller.advance_time(days=1, hours=2, minutes=3)

        expected = START + MILLIS_PER_DAY + 2 * MILLIS_PER_HOUR + 3 * MILLIS_PER_MINUTE
        assert controller.get_current_time_millis() == expected
        assert controller.offset_millis == expected - START

    def test_advance_zero_is_noop(self, controller):
        controller.advance_time()
        assert controller.get_current_time_millis() == START

    def test_negative_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.advance_time(days=-1)


class TestSetAndReset:
    def test_set_time_forward(self, controller):
        controller.set_time(START + 5000)

        assert controller.get_current_time_millis() == START + 5000
        assert controller.offset_millis == 5000

    def test_set_time_backwards_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.set_time(START - 1)

    def test_reset_returns_to_real_time(self, controller):
        controller.advance_time(days=30)

        result = controller.reset_time()

        assert result["old_time_millis"] == START + 30 * MILLIS_PER_DAY
        assert controller.offset_millis == 0
        assert abs(controller.get_current_time_millis() - int(time.time() * 1000)) < 5000
