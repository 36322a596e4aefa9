"""Test the package logger configuration."""
import importlib
import logging

import pytest

from string_calculator.common import logger as logger_module


@pytest.fixture
def restore_level():
    """Put the package logger back to its level after the test."""
    previous = logger_module.logger.level
    yield
    logger_module.logger.setLevel(previous)


@pytest.mark.parametrize("value,expected", [
    ("debug", logging.DEBUG),
    (" INFO ", logging.INFO),
    ("error", logging.ERROR),
])
def test_level_from_env(monkeypatch, restore_level, value, expected) -> None:
    """The level is read from the environment, case-insensitively."""
    monkeypatch.setenv(logger_module.LOG_LEVEL_ENV, value)
    importlib.reload(logger_module)

    assert logger_module.logger.level == expected


@pytest.mark.parametrize("value", ["loud", "", "Level 5"])
def test_unknown_level_falls_back_to_warning(monkeypatch, restore_level, value) -> None:
    """An unknown level name does not break the import and falls back to WARNING."""
    monkeypatch.setenv(logger_module.LOG_LEVEL_ENV, value)
    importlib.reload(logger_module)

    assert logger_module.logger.level == logging.WARNING
    assert logger_module.level_from_env() == logging.WARNING


def test_reload_keeps_single_handler(monkeypatch, restore_level) -> None:
    """Reloading the module does not stack handlers."""
    monkeypatch.delenv(logger_module.LOG_LEVEL_ENV, raising=False)
    importlib.reload(logger_module)
    importlib.reload(logger_module)

    assert len(logger_module.logger.handlers) == 1
    assert logger_module.logger.level == logging.WARNING


def test_set_level_rejects_unknown_name(restore_level) -> None:
    """set_level validates the level name."""
    with pytest.raises(ValueError):
        logger_module.set_level("loud")
