"""
Pytest configuration for media-catalog tests.

Configures pytest-anyio to use only the asyncio backend (excludes trio).
"""

import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"
