"""
Pytest configuration for codexsun tests.

This file ensures that the src directory is in the Python path
so that tests can import from codexsun, and provides shared fixtures.
"""
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Add src directory to Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from codexsun.core.config import Settings  # noqa: E402
from codexsun.main import build_app  # noqa: E402


@pytest.fixture
def settings():
    """Settings with the default providers and a wildcard CORS policy"""
    return Settings(host="127.0.0.1", port=0)


@pytest_asyncio.fixture
async def app(settings):
    return await build_app(settings)


@pytest_asyncio.fixture
async def async_client(app):
    """HTTP client bound to the app in-process"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
