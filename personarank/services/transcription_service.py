"""
Transcription Service

Sends recorded audio to the generative backend and returns the transcript.
"""

import logging
from typing import Any, Optional

from ..utils.data_uri import parse_data_uri, require_mime_prefix
from ..utils.debug_logger import debug_logger
from .genai_backend import GeminiBackend
from .prompt_engineering import PromptEngineer, prompt_engineer as default_prompt_engineer

logger = logging.getLogger(__name__)


def extract_transcript(raw: Any) -> str:
    """Read `transcribedText` from the backend output; empty string if absent"""
    if isinstance(raw, dict) and isinstance(raw.get("transcribedText"), str):
        return raw["transcribedText"].strip()
    logger.warning("Transcription output did not contain a transcript: %s", str(raw)[:200])
    return ""


class TranscriptionService:
    """Service for audio transcription"""

    def __init__(self, backend: GeminiBackend, prompt_engineer: Optional[PromptEngineer] = None):
        self.backend = backend
        self.prompt_engineer = prompt_engineer or default_prompt_engineer

    async def transcribe(self, audio_data_uri: str, request_id: Optional[str] = None, request: Optional[Any] = None) -> str:
        """
        Transcribe an audio data URI

        Returns:
            The transcript, or "" when the backend did not provide one

        Raises:
            DataUriError: if the payload is not an audio data URI
        """
        audio = require_mime_prefix(parse_data_uri(audio_data_uri), "audio/")
        debug_logger.log_transcribe(request_id, f"Transcribing {len(audio.data)} bytes of {audio.mime_type}", request)

        raw = await self.backend.generate_json(self.prompt_engineer.build_transcription_prompt(), [audio])
        transcript = extract_transcript(raw)

        debug_logger.log_transcribe(request_id, f"Transcript length: {len(transcript)} characters", request)
        return transcript
