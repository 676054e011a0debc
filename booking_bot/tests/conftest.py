"""
Test configuration and fixtures for booking bot tests.

Mocks Redis client and configuration for isolated testing, and provides
stub recognizers for clock-relative date tests.
"""

from datetime import datetime
from fnmatch import fnmatch
from typing import List

import pytest
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient

from booking_bot.app import app
from booking_bot.config import BookingConfig
from booking_bot.models import DateTimeResolution, NumberResolution
from booking_bot.recognizers import RecognitionError


# Fixed "now" used by flow and validation tests
FIXED_NOW = datetime(2026, 3, 10, 9, 0, 0)


class StubNumberRecognizer:
    """Returns canned number resolutions"""

    def __init__(self, values: List[str]):
        self.values = values

    def recognize(self, text):
        return [NumberResolution(text=value, value=value) for value in self.values]


class StubDateTimeRecognizer:
    """Returns canned date-time resolutions"""

    def __init__(self, resolutions: List[DateTimeResolution]):
        self.resolutions = resolutions

    def recognize(self, text, reference):
        return list(self.resolutions)


class FailingRecognizer:
    """Raises like a recognizer that choked on its input"""

    def recognize(self, text, reference=None):
        raise RecognitionError("recognizer failure")


@pytest.fixture
def test_config():
    """Test configuration fixture"""
    return BookingConfig(
        redis_url="redis://localhost:6379",
        session_ttl=1800,
        log_state_transitions=False
    )


@pytest.fixture
def mock_redis_client():
    """Mock Redis client for testing"""
    mock_client = AsyncMock()
    # Store for session data persistence across calls
    stored_data = {}

    async def mock_get(key):
        return stored_data.get(key)

    async def mock_setex(key, ttl, value):
        stored_data[key] = value
        return True

    async def mock_delete(*keys):
        deleted = 0
        for key in keys:
            if key in stored_data:
                del stored_data[key]
                deleted += 1
        return deleted

    async def mock_incr(key):
        stored_data[key] = str(int(stored_data.get(key, 0)) + 1)
        return int(stored_data[key])

    async def mock_scan(cursor, match="*", count=100):
        return 0, [key for key in list(stored_data) if fnmatch(key, match)]

    mock_client.get.side_effect = mock_get
    mock_client.setex.side_effect = mock_setex
    mock_client.delete.side_effect = mock_delete
    mock_client.incr.side_effect = mock_incr
    mock_client.scan.side_effect = mock_scan
    mock_client.ping.return_value = True
    mock_client.ttl.return_value = 1800
    mock_client.stored_data = stored_data
    return mock_client


@pytest.fixture
def client(mock_redis_client, test_config):
    """FastAPI test client with mocked dependencies"""
    with patch('booking_bot.app.redis_client', mock_redis_client), \
         patch('booking_bot.app.config', test_config):
        yield TestClient(app)


@pytest.fixture
def stateless_client(test_config):
    """FastAPI test client running without Redis"""
    with patch('booking_bot.app.redis_client', None), \
         patch('booking_bot.app.config', test_config):
        yield TestClient(app)
