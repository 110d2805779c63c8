"""Shared fixtures for AssocFlow tests."""

import logging

import numpy as np
import pytest


@pytest.fixture(autouse=True)
def restore_package_logging():
    """setup_logging installs handlers on the package logger; undo them."""
    package_logger = logging.getLogger("assocflow")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    for handler in package_logger.handlers:
        if handler not in handlers:
            handler.close()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


@pytest.fixture
def rng():
    return np.random.default_rng(12345)


@pytest.fixture
def small_reference():
    return frozenset(range(1, 201))
