"""
Pytest configuration and shared fixtures for translate proxy tests.
"""
import os
import sys
import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core import BaseUpstreamClient, UpstreamConfig
from translation.translator import Translator

TEST_UPSTREAM_URL = "http://upstream.test/translate"


@pytest.fixture
def upstream_config():
    """Default retry policy pointed at a fake upstream."""
    return UpstreamConfig(url=TEST_UPSTREAM_URL, task_name="test")


@pytest.fixture
def upstream_client(upstream_config):
    return BaseUpstreamClient(upstream_config)


@pytest.fixture
def send_mock():
    """Replace the network call; side_effect drives each attempt."""
    with patch.object(BaseUpstreamClient, "_send", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def sleep_mock():
    """Record backoff waits without sleeping."""
    with patch("core.upstream_client_base.asyncio.sleep", new_callable=AsyncMock) as mock:
        yield mock


@pytest.fixture
def fast_translator():
    """Translator with the real retry policy but no backoff delay."""
    client = BaseUpstreamClient(UpstreamConfig(url=TEST_UPSTREAM_URL, backoff_ms=0, task_name="test"))
    return Translator(client)


@pytest.fixture
def test_client(fast_translator, send_mock):
    """Create a test client for the FastAPI app with a stubbed upstream."""
    from main import app

    with patch("translation.service.get_translator", return_value=fast_translator):
        with TestClient(app) as client:
            yield client
