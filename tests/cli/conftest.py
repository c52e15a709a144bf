"""CLI test fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    """main() reconfigures the root logger; put it back after each test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
