"""Tests for logging configuration."""

from ventafacil.config import Settings, configure_logging, get_logger
from ventafacil.config.logging import app_context_processor


def test_app_context_added():
    settings = Settings(app_name="POS Test", environment="staging")
    processor = app_context_processor(settings)

    event = processor(None, "info", {"event": "sale_committed"})

    assert event["app"] == "POS Test"
    assert event["environment"] == "staging"
    assert event["version"] == settings.app_version


def test_app_context_does_not_override_fields():
    processor = app_context_processor(Settings())

    event = processor(None, "info", {"event": "x", "environment": "custom"})

    assert event["environment"] == "custom"


def test_configure_and_log(isolated_settings):
    configure_logging(isolated_settings)
    get_logger("ventafacil.test").info("logging_configured", value=1)
