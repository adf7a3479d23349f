"""
Unit tests for ChatService orchestration: ranking round, conversation turns
and transcription.
"""

from unittest.mock import patch

import pytest

from personarank.errors import AIInteractionError, ConfigurationError, ConversationBusyError
from personarank.models.chat import ConversationState
from personarank.models.ranking import RankedResponseItem
from personarank.services.chat_service import (
    GENERIC_ERROR_MESSAGE,
    MISSING_API_KEY_MESSAGE,
    NO_SUITABLE_RESPONSE_MESSAGE,
    ChatService,
)
from personarank.services import history
from personarank.services.history import BEGINNING_OF_CONVERSATION

pytestmark = pytest.mark.unit

PNG_DATA_URI = "data:image/png;base64,iVBORw0KGgo="
AUDIO_DATA_URI = "data:audio/webm;codecs=opus;base64,GkXfo0AgQoaBAUL3gQFC8oEEQvOBCEKCQAR3ZWJt"


class TestGetRankedResponse:
    """Test class for ChatService.get_ranked_response."""

    @pytest.mark.asyncio
    async def test_empty_history_selects_best_item(self, chat_service, mock_backend):
        with patch("personarank.services.chat_service.summarize_history", wraps=history.summarize_history) as summarize:
            top = await chat_service.get_ranked_response("What's 2+2?", [])

        summarize.assert_called_once_with([])
        prompt, _ = mock_backend.generate_json.await_args.args
        assert BEGINNING_OF_CONVERSATION in prompt
        assert top == RankedResponseItem(model_name="Gemma", response_text="4", accuracy=0.95)

    @pytest.mark.asyncio
    async def test_missing_key_raises_before_network_call(self, settings_without_key, mock_backend):
        service = ChatService(settings_without_key, backend=mock_backend)

        with pytest.raises(ConfigurationError, match="Missing API key"):
            await service.get_ranked_response("What's 2+2?", [])

        mock_backend.generate_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_failure_becomes_ai_interaction_error(self, chat_service, mock_backend):
        mock_backend.generate_json.side_effect = RuntimeError("connection reset")

        with pytest.raises(AIInteractionError, match="AI interaction failed: connection reset"):
            await chat_service.get_ranked_response("hello", [])

    @pytest.mark.asyncio
    async def test_no_items_returns_none(self, chat_service, mock_backend):
        mock_backend.generate_json.return_value = {"not": "a ranking"}
        assert await chat_service.get_ranked_response("hello", []) is None

    @pytest.mark.asyncio
    async def test_history_window_is_applied(self, chat_service, mock_backend, sample_conversation):
        await chat_service.get_ranked_response("follow up", sample_conversation)

        prompt, _ = mock_backend.generate_json.await_args.args
        assert "First question" not in prompt
        assert "Assistant (recommended Gemma): A cat on a sofa." in prompt
        assert "User: What is in this picture? [Image Attached]" in prompt

    @pytest.mark.asyncio
    async def test_default_language_is_used_when_missing(self, chat_service, mock_backend):
        await chat_service.get_ranked_response("hello", [])
        prompt, _ = mock_backend.generate_json.await_args.args
        assert "en-US" in prompt


class TestConversationTurns:
    """Test class for process_chat / respond."""

    @pytest.mark.asyncio
    async def test_successful_turn_appends_ranked_response(self, chat_service):
        state = await chat_service.process_chat(ConversationState(), "What's 2+2?")

        assert state.status == "idle"
        assert state.last_outcome == "success"
        assert [m.role for m in state.messages] == ["user", "assistant"]
        reply = state.messages[-1]
        assert reply.type == "single_model_response"
        assert reply.content.model_name == "Gemma"

    @pytest.mark.asyncio
    async def test_image_turn_keeps_payload(self, chat_service, mock_backend):
        state = await chat_service.process_chat(ConversationState(), "What is this?", image_data_uri=PNG_DATA_URI)

        assert state.messages[0].content.image_data_uri == PNG_DATA_URI
        _, media = mock_backend.generate_json.await_args.args
        assert media[0].mime_type == "image/png"

    @pytest.mark.asyncio
    async def test_no_suitable_response_is_informational(self, chat_service, mock_backend):
        mock_backend.generate_json.return_value = None
        state = await chat_service.process_chat(ConversationState(), "hello")

        assert state.last_outcome == "no_suitable_response"
        assert state.messages[-1].type == "text"
        assert state.messages[-1].content == NO_SUITABLE_RESPONSE_MESSAGE

    @pytest.mark.asyncio
    async def test_backend_failure_appends_error_message(self, chat_service, mock_backend):
        mock_backend.generate_json.side_effect = RuntimeError("boom")
        state = await chat_service.process_chat(ConversationState(), "hello")

        assert state.status == "idle"
        assert state.last_outcome == "error"
        assert state.messages[-1].type == "error"
        assert state.messages[-1].content == GENERIC_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_missing_key_appends_configuration_error(self, settings_without_key, mock_backend):
        service = ChatService(settings_without_key, backend=mock_backend)
        state = await service.process_chat(ConversationState(), "hello")

        assert state.messages[-1].type == "error"
        assert state.messages[-1].content == MISSING_API_KEY_MESSAGE
        mock_backend.generate_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_history_excludes_pending_user_message(self, chat_service, mock_backend):
        first = await chat_service.process_chat(ConversationState(), "first")
        await chat_service.process_chat(first, "second")

        prompt, _ = mock_backend.generate_json.await_args.args
        assert "User: first" in prompt
        assert "Assistant (recommended Gemma): 4" in prompt
        assert "User: second" not in prompt

    def test_fail_turn_closes_outstanding_turn(self, chat_service):
        awaiting = chat_service.start_turn(ConversationState(), "hello")
        state = chat_service.fail_turn(awaiting)

        assert state.status == "idle"
        assert state.last_outcome == "error"
        assert state.messages[-1].content == GENERIC_ERROR_MESSAGE

    def test_start_turn_rejects_while_awaiting(self, chat_service):
        awaiting = chat_service.start_turn(ConversationState(), "first")

        with pytest.raises(ConversationBusyError):
            chat_service.start_turn(awaiting, "second")


class TestTranscribeAudio:
    """Test class for ChatService.transcribe_audio."""

    @pytest.mark.asyncio
    async def test_returns_transcript(self, chat_service, mock_backend):
        mock_backend.generate_json.return_value = {"transcribedText": "  hello world "}

        assert await chat_service.transcribe_audio(AUDIO_DATA_URI) == "hello world"
        _, media = mock_backend.generate_json.await_args.args
        assert media[0].mime_type == "audio/webm"

    @pytest.mark.asyncio
    async def test_missing_key_returns_none_without_raising(self, settings_without_key, mock_backend):
        service = ChatService(settings_without_key, backend=mock_backend)

        assert await service.transcribe_audio(AUDIO_DATA_URI) is None
        mock_backend.generate_json.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_field_returns_empty_string(self, chat_service, mock_backend):
        mock_backend.generate_json.return_value = {"text": "wrong key"}
        assert await chat_service.transcribe_audio(AUDIO_DATA_URI) == ""

    @pytest.mark.asyncio
    async def test_backend_failure_returns_none(self, chat_service, mock_backend):
        mock_backend.generate_json.side_effect = RuntimeError("unavailable")
        assert await chat_service.transcribe_audio(AUDIO_DATA_URI) is None

    @pytest.mark.asyncio
    async def test_invalid_payload_returns_none(self, chat_service, mock_backend):
        assert await chat_service.transcribe_audio("not a data uri") is None
        mock_backend.generate_json.assert_not_awaited()
