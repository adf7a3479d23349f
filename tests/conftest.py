"""
Pytest configuration and shared fixtures for PersonaRank Chat API tests.
"""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from personarank.config import Settings
from personarank.models.chat import ChatMessage
from personarank.models.ranking import RankedResponseItem
from personarank.services.chat_service import ChatService


@pytest.fixture
def test_settings():
    """Create test settings with environment variables for testing."""
    test_env = {
        "GOOGLE_API_KEY": "test-google-api-key",
        "GEMINI_MODEL": "gemini-2.0-flash",
        "DEFAULT_INPUT_LANGUAGE": "en-US",
        "DEBUG_LOGGING_DEV": "false",
        "DEBUG_LOGGING_PROD": "false",
    }

    with patch.dict(os.environ, test_env):
        yield Settings()


@pytest.fixture
def settings_without_key():
    """Settings with the API credential missing."""
    return Settings(google_api_key=None)


@pytest.fixture
def mock_backend():
    """Create a mock generative backend for testing."""
    backend = Mock()
    backend.model = "gemini-2.0-flash"
    backend.generate_json = AsyncMock(return_value=[
        {"modelName": "Gemma", "responseText": "4", "accuracy": 0.95},
        {"modelName": "Qwen", "responseText": "four", "accuracy": 0.8},
    ])
    return backend


@pytest.fixture
def chat_service(test_settings, mock_backend):
    """ChatService wired to the mock backend."""
    return ChatService(test_settings, backend=mock_backend)


@pytest.fixture
def sample_conversation():
    """Six messages covering every history line format."""
    start = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
    return [
        ChatMessage(role="user", content="First question", timestamp=start),
        ChatMessage(role="assistant", type="text", content="First answer", timestamp=start + timedelta(seconds=1)),
        ChatMessage.user("What is in this picture?", "data:image/png;base64,iVBORw0KGgo=").model_copy(
            update={"timestamp": start + timedelta(seconds=2)}
        ),
        ChatMessage(
            role="assistant",
            type="single_model_response",
            content=RankedResponseItem(model_name="Gemma", response_text="A cat on a sofa.", accuracy=0.9),
            timestamp=start + timedelta(seconds=3),
        ),
        ChatMessage(role="assistant", type="error", content="AI interaction failed: timeout",
                    timestamp=start + timedelta(seconds=4)),
        ChatMessage(role="user", content="Try again please", timestamp=start + timedelta(seconds=5)),
    ]
