"""
Global pytest configuration and fixtures.
"""

import logging

import pytest


@pytest.fixture(autouse=True)
def weibo_auth_debug_logging(caplog: pytest.LogCaptureFixture) -> None:
    """Capture the package's debug output so failures show the full flow."""
    caplog.set_level(logging.DEBUG, logger="weibo_auth")
