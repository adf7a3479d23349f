"""
Unit tests for the Gemini backend wrapper.
"""

from unittest.mock import AsyncMock, Mock, patch

import pytest

from personarank.errors import ConfigurationError
from personarank.services.genai_backend import GeminiBackend, parse_json_text
from personarank.utils.data_uri import parse_data_uri

pytestmark = pytest.mark.unit


def _response(text):
    part = Mock()
    part.text = text
    response = Mock()
    response.candidates = [Mock()]
    response.candidates[0].content.parts = [part]
    response.usage_metadata = None
    return response


class TestParseJsonText:
    """Test class for parse_json_text."""

    def test_plain_json(self):
        assert parse_json_text('[{"modelName": "Gemma"}]') == [{"modelName": "Gemma"}]

    def test_code_fence_is_stripped(self):
        assert parse_json_text('```json\n{"transcribedText": "hi"}\n```') == {"transcribedText": "hi"}

    @pytest.mark.parametrize("text", [None, "", "   ", "not json", '{"unterminated": '])
    def test_unparseable_returns_none(self, text):
        assert parse_json_text(text) is None


class TestGeminiBackend:
    """Test class for GeminiBackend."""

    def test_missing_key_raises_on_first_use(self):
        backend = GeminiBackend(api_key=None)

        with pytest.raises(ConfigurationError, match="Missing API key"):
            _ = backend.client

    @pytest.mark.asyncio
    async def test_generate_json_sends_json_mode_request(self):
        with patch("personarank.services.genai_backend.genai.Client") as client_cls:
            client = client_cls.return_value
            client.aio.models.generate_content = AsyncMock(return_value=_response('{"transcribedText": "hello"}'))
            backend = GeminiBackend(api_key="test-key", model="gemini-2.0-flash", temperature=0.2)

            result = await backend.generate_json(
                "Transcribe this",
                [parse_data_uri("data:audio/webm;base64,GkXfo0AgQoaBAUL3gQFC8oEEQvOBCEKCQAR3ZWJt")],
            )

        assert result == {"transcribedText": "hello"}
        client_cls.assert_called_once_with(api_key="test-key")
        kwargs = client.aio.models.generate_content.await_args.kwargs
        assert kwargs["model"] == "gemini-2.0-flash"
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].temperature == 0.2
        parts = kwargs["contents"][0].parts
        assert parts[0].text == "Transcribe this"
        assert parts[1].inline_data.mime_type == "audio/webm"

    @pytest.mark.asyncio
    async def test_generate_json_returns_none_for_non_json(self):
        with patch("personarank.services.genai_backend.genai.Client") as client_cls:
            client_cls.return_value.aio.models.generate_content = AsyncMock(return_value=_response("Sorry, I can't."))
            backend = GeminiBackend(api_key="test-key")

            assert await backend.generate_json("q") is None

    @pytest.mark.asyncio
    async def test_sdk_errors_propagate(self):
        with patch("personarank.services.genai_backend.genai.Client") as client_cls:
            client_cls.return_value.aio.models.generate_content = AsyncMock(side_effect=RuntimeError("quota"))
            backend = GeminiBackend(api_key="test-key")

            with pytest.raises(RuntimeError, match="quota"):
                await backend.generate_json("q")
