import logging

import pytest
from pydantic import ValidationError

from core.config import BookingSettings, LoggingSettings, Settings
from core.logging_config import add_service_context, resolve_level


def test_nested_env_overrides(monkeypatch):
    monkeypatch.setenv("GRPC__PORT", "6001")
    monkeypatch.setenv("BOOKING__DEFAULT_CURRENCY", "eur")
    monkeypatch.setenv("BOOKING__TAX_RATE_PERCENT", "13")
    s = Settings()
    assert s.grpc.port == 6001
    assert s.booking.default_currency == "EUR"
    assert s.booking.tax_rate_percent == 13


@pytest.mark.parametrize("value", ["CA", "C4D", "ÉUR"])
def test_default_currency_must_be_three_letters(value):
    with pytest.raises(ValidationError):
        BookingSettings(default_currency=value)


def test_negative_fare_settings_are_rejected():
    with pytest.raises(ValidationError):
        BookingSettings(base_fare_cents_per_segment=-1)


def test_log_format_is_checked():
    assert LoggingSettings(format="JSON").format == "json"
    with pytest.raises(ValidationError):
        LoggingSettings(format="xml")


def test_records_carry_service_identity():
    event = add_service_context(None, "info", {"event": "booking_created", "env": "ci"})
    assert event["service"]
    assert event["version"]
    assert event["env"] == "ci"


def test_level_defaults_to_info_without_debug():
    assert resolve_level() == logging.INFO
