"""Tests for logging configuration."""

import logging

import pytest
from pydantic import ValidationError

from nutriwise.app_logging import LOGGER_NAME, configure_logging
from nutriwise.config import Settings


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_sets_level() -> None:
    configure_logging(logging.DEBUG)

    assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG

    configure_logging()


def test_configure_logging_accepts_level_names() -> None:
    logger = configure_logging("debug")

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.DEBUG

    configure_logging()


def test_log_level_setting_is_normalized(settings: Settings) -> None:
    configured = Settings(**{**settings.model_dump(), "log_level": "warning"})

    assert configured.log_level == "WARNING"


def test_log_level_setting_rejects_unknown_names(settings: Settings) -> None:
    with pytest.raises(ValidationError):
        Settings(**{**settings.model_dump(), "log_level": "chatty"})
