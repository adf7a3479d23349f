"""
Chat Service

This service orchestrates the chat flow: it summarizes the conversation,
runs the persona ranking call, selects the top response and records the
outcome in the conversation state.
"""

import logging
from typing import Any, Optional, Sequence, Union

from ..config import Settings
from ..errors import AIInteractionError, ConfigurationError, PersonaRankError
from ..models.chat import ChatMessage, ConversationState, UserMessagePayload
from ..models.ranking import PersonaSpec, RankedResponseItem
from ..personas import DEFAULT_PERSONAS
from ..utils.debug_logger import debug_logger
from .conversation import begin_turn, complete_turn, pending_user_message
from .genai_backend import GeminiBackend
from .history import summarize_history
from .ranking_service import RankingService, select_top_response
from .transcription_service import TranscriptionService

logger = logging.getLogger(__name__)

MISSING_API_KEY_MESSAGE = "Server configuration error: Missing API key."
NO_SUITABLE_RESPONSE_MESSAGE = "I couldn't find a suitable response to that. Could you try rephrasing your question?"
GENERIC_ERROR_MESSAGE = "Sorry, something went wrong while generating a response. Please try again."


class ChatService:
    """Service for orchestrating chat interactions"""

    def __init__(self,
                 settings: Settings,
                 backend: Optional[GeminiBackend] = None,
                 personas: Sequence[PersonaSpec] = DEFAULT_PERSONAS):
        """Initialize the chat service with dependencies"""
        self.settings = settings
        self.backend = backend or GeminiBackend(
            api_key=settings.google_api_key,
            model=settings.gemini_model,
            temperature=settings.temperature,
        )
        self.ranking_service = RankingService(self.backend, personas)
        self.transcription_service = TranscriptionService(self.backend)

    def _require_api_key(self) -> None:
        if not self.settings.has_api_key:
            logger.error("GOOGLE_API_KEY is not set.")
            raise ConfigurationError(MISSING_API_KEY_MESSAGE)

    async def get_ranked_response(self,
                                  user_input: Union[str, UserMessagePayload],
                                  history: Sequence[ChatMessage],
                                  input_language: Optional[str] = None,
                                  request_id: Optional[str] = None,
                                  request: Optional[Any] = None) -> Optional[RankedResponseItem]:
        """
        Run one ranking round and return the winning response

        Args:
            user_input: The user's text, or text plus image
            history: Messages before this turn, oldest first
            input_language: Optional language hint
            request_id: Unique request identifier for tracing
            request: Optional FastAPI request object for timing

        Returns:
            The top-ranked response, or None when the backend produced nothing usable

        Raises:
            ConfigurationError: if the API key is missing (raised before any network call)
            DataUriError: if the attached image cannot be decoded
            AIInteractionError: if the backend call fails
        """
        self._require_api_key()

        if isinstance(user_input, UserMessagePayload):
            user_text, image_data_uri = user_input.text, user_input.image_data_uri
        else:
            user_text, image_data_uri = user_input, None

        history_context = summarize_history(history)
        debug_logger.log_chat(
            request_id,
            f"Ranking query '{user_text[:50]}{'...' if len(user_text) > 50 else ''}' with {len(history)} prior messages",
            request
        )

        try:
            items = await self.ranking_service.rank_responses(
                user_text=user_text,
                history_context=history_context,
                image_data_uri=image_data_uri,
                input_language=input_language or self.settings.default_input_language,
                request_id=request_id,
                request=request,
            )
        except PersonaRankError:
            raise
        except Exception as e:
            logger.error("Error while fetching ranked responses: %s", e)
            raise AIInteractionError(f"AI interaction failed: {e}") from e

        if not items:
            logger.warning("No ranked responses received from the backend.")
            return None

        top_response = select_top_response(items)
        debug_logger.log_chat(
            request_id,
            f"Top response from {top_response.model_name} with accuracy {top_response.accuracy:.2f}",
            request
        )
        return top_response

    def start_turn(self, state: ConversationState, text: str, image_data_uri: Optional[str] = None) -> ConversationState:
        """
        Append the user's message and mark the conversation as awaiting a response

        Raises:
            ConversationBusyError: if a response is still outstanding
        """
        return begin_turn(state, ChatMessage.user(text, image_data_uri))

    async def respond(self,
                      state: ConversationState,
                      input_language: Optional[str] = None,
                      request_id: Optional[str] = None,
                      request: Optional[Any] = None) -> ConversationState:
        """
        Produce the assistant reply for the outstanding turn

        Every failure becomes an assistant message; this method does not raise
        for backend or configuration problems.
        """
        user_message = pending_user_message(state)
        history = state.messages[:-1]

        try:
            top_response = await self.get_ranked_response(
                user_message.content,
                history,
                input_language=input_language,
                request_id=request_id,
                request=request,
            )
        except ConfigurationError as e:
            return self.fail_turn(state, str(e))
        except Exception as e:
            logger.error("Chat turn failed: %s", e)
            return self.fail_turn(state)

        if top_response is None:
            return complete_turn(state, ChatMessage.assistant_text(NO_SUITABLE_RESPONSE_MESSAGE), "no_suitable_response")

        return complete_turn(state, ChatMessage.ranked_response(top_response), "success")

    def fail_turn(self, state: ConversationState, message: str = GENERIC_ERROR_MESSAGE) -> ConversationState:
        """Close the outstanding turn with an error message"""
        return complete_turn(state, ChatMessage.error(message), "error")

    async def process_chat(self,
                           state: ConversationState,
                           text: str,
                           image_data_uri: Optional[str] = None,
                           input_language: Optional[str] = None,
                           request_id: Optional[str] = None,
                           request: Optional[Any] = None) -> ConversationState:
        """
        Process a chat interaction end-to-end

        Returns:
            The conversation state after the assistant's reply
        """
        awaiting = self.start_turn(state, text, image_data_uri)
        return await self.respond(awaiting, input_language, request_id, request)

    async def transcribe_audio(self,
                               audio_data_uri: str,
                               request_id: Optional[str] = None,
                               request: Optional[Any] = None) -> Optional[str]:
        """
        Transcribe recorded audio

        Returns:
            The transcript ("" when nothing was recognised), or None when
            transcription is unavailable or failed
        """
        if not self.settings.has_api_key:
            logger.error("GOOGLE_API_KEY is not set for transcription.")
            return None

        try:
            return await self.transcription_service.transcribe(audio_data_uri, request_id, request)
        except Exception as e:
            logger.error("Error while transcribing audio: %s", e)
            return None
