"""Tests for structured logging functionality.

Tests logging configuration, context binding and the custom processors.
"""

import os

import pytest
import structlog

from feed_subscriptions.logging_config import (
    add_app_context,
    bind_context,
    clear_context,
    configure_logging,
    drop_debug_in_production,
    get_logger,
    shorten_addresses,
    unbind_context,
)

LONG_ADDRESS = "G" + "A" * 55


@pytest.fixture(scope="module")
def setup_logging():
    """Configure logging for all tests in this module."""
    log_format = os.getenv("LOG_FORMAT", "console")
    configure_logging(log_level=os.getenv("LOG_LEVEL", "INFO"), json_format=log_format.lower() == "json")
    yield


@pytest.fixture(autouse=True)
def cleanup_context():
    """Ensure context is cleared before and after each test."""
    clear_context()
    yield
    clear_context()


class TestBasicLogging:
    """Smoke-test each level through the configured pipeline."""

    def test_all_levels(self, setup_logging):
        logger = get_logger("test.basic")

        logger.debug("debug_message", level_name="debug")
        logger.info("info_message", owner=LONG_ADDRESS)
        logger.warning("warning_message", subscription_id=1)
        logger.error("error_message", error="boom")

    def test_json_format(self):
        configure_logging(log_level="INFO", json_format=True)
        get_logger("test.json").info("json_message", amount=100)


class TestProcessors:
    """Test the custom processors directly."""

    def test_add_app_context(self):
        event_dict = add_app_context(None, "info", {"event": "x"})
        assert event_dict["app"] == "feed-subscriptions"

    def test_shorten_long_addresses(self):
        event_dict = shorten_addresses(
            None,
            "info",
            {"event": "x", "owner": LONG_ADDRESS, "to_address": LONG_ADDRESS},
        )

        assert event_dict["owner"] == "GAAAAAAA..."
        assert event_dict["to_address"] == "GAAAAAAA..."

    def test_short_values_untouched(self):
        event_dict = shorten_addresses(None, "info", {"event": "x", "owner": "GSHORT", "amount": 5})

        assert event_dict["owner"] == "GSHORT"
        assert event_dict["amount"] == 5

    def test_non_address_fields_untouched(self):
        event_dict = shorten_addresses(None, "info", {"event": "x", "message": LONG_ADDRESS})
        assert event_dict["message"] == LONG_ADDRESS

    def test_debug_dropped_outside_debug_mode(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "INFO")

        with pytest.raises(structlog.DropEvent):
            drop_debug_in_production(None, "debug", {"event": "x"})

    def test_debug_kept_in_debug_mode(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        assert drop_debug_in_production(None, "debug", {"event": "x"}) == {"event": "x"}


class TestContextualLogging:
    """Test logging with bound context."""

    def test_bound_context_is_merged(self):
        bind_context(request_id="req-1", subscription_id=7)

        context = structlog.contextvars.get_contextvars()

        assert context["request_id"] == "req-1"
        assert context["subscription_id"] == 7

    def test_unbind_context(self):
        bind_context(request_id="req-1", caller="GCALLER")
        unbind_context("caller")

        context = structlog.contextvars.get_contextvars()

        assert context == {"request_id": "req-1"}

    def test_clear_context(self):
        bind_context(request_id="req-1")
        clear_context()

        assert structlog.contextvars.get_contextvars() == {}
