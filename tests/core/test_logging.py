"""Tests for structlog configuration."""

from __future__ import annotations

import logging
from collections.abc import Generator

import pytest
from pytest_mock import MockerFixture

from library_catalog.core import logging as catalog_logging
from library_catalog.core.config import Settings
from library_catalog.core.exceptions import ConfigurationError
from library_catalog.core.logging import (
    SERVICE_NAME,
    add_service_info,
    configure_from_settings,
    configure_logging,
    get_logger,
    reset_logging,
    resolve_log_level,
)


@pytest.fixture(autouse=True)
def _reset() -> Generator[None, None, None]:
    reset_logging()
    yield
    reset_logging()


class TestConfigureLogging:
    def test_sets_configured_flag(self) -> None:
        configure_logging("DEBUG")

        assert catalog_logging._configured is True

    def test_second_call_is_noop(self, mocker: MockerFixture) -> None:
        configure_logging()
        spy = mocker.spy(catalog_logging.structlog, "configure")

        configure_logging(json_output=True)

        spy.assert_not_called()

    def test_reset_clears_flag(self) -> None:
        configure_logging()
        reset_logging()

        assert catalog_logging._configured is False


class TestProcessors:
    def test_add_service_info(self) -> None:
        event = add_service_info(None, "info", {"event": "x"})  # type: ignore[arg-type]

        assert event == {"event": "x", "service": SERVICE_NAME}

    def test_get_logger_returns_bindable_logger(self) -> None:
        logger = get_logger("tests")

        assert hasattr(logger.bind(book_id=1), "info")


class TestLogLevels:
    def test_names_are_case_insensitive(self) -> None:
        assert resolve_log_level("debug") == logging.DEBUG
        assert resolve_log_level(" Warning ") == logging.WARNING

    def test_unknown_level_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown log level"):
            resolve_log_level("LOUD")

    def test_configure_rejects_unknown_level(self) -> None:
        with pytest.raises(ConfigurationError):
            configure_logging("LOUD")

        assert catalog_logging._configured is False

    def test_configure_from_settings(self) -> None:
        configure_from_settings(Settings(log_level="ERROR", _env_file=None))

        assert catalog_logging._configured is True
