"""
Shared fixtures for dicebag tests.
"""

import logging

import pytest

from dicebag.core.config import reset_config


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() so handlers bound to captured streams do not leak."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


@pytest.fixture
def fresh_config():
    """Make get_config() re-read the environment before and after a test."""
    reset_config()
    yield
    reset_config()
