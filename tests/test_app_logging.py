"""Tests for logging configuration."""

import logging

import pytest

from library_portal.app_logging import PACKAGE_LOGGER, configure_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.handlers.clear()
    yield logger
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


def test_repeated_setup_keeps_one_handler(package_logger) -> None:
    configure_logging()
    configure_logging(logging.WARNING)

    assert len(package_logger.handlers) == 1
    assert package_logger.level == logging.WARNING
    assert package_logger.propagate is False


def test_level_names_are_case_insensitive(package_logger) -> None:
    logger = configure_logging("debug")

    assert logger is package_logger
    assert logger.level == logging.DEBUG


def test_module_loggers_inherit_package_level(package_logger) -> None:
    configure_logging("warning")

    child = logging.getLogger("library_portal.services.auth")

    assert not child.isEnabledFor(logging.INFO)
    assert child.isEnabledFor(logging.WARNING)
