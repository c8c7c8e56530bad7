"""Pytest configuration and fixtures."""

import os

import pytest

from app.core.config import get_settings


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables.

    Provider keys are removed so no test reaches a real service unless it
    patches one in.
    """
    os.environ["COMPLIANCE_ENV"] = "test"
    for key in ("BRAVE_API_KEY", "JINA_API_KEY", "OPENAI_API_KEY"):
        os.environ.pop(key, None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
