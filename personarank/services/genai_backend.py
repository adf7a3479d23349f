"""
Generative backend for PersonaRank Chat

Wraps the Google GenAI SDK. Every model call in the application goes through
`GeminiBackend.generate_json`, which sends a prompt plus optional media parts
in JSON mode and returns the decoded JSON value (or None when the model
returned nothing parseable).
"""

import json
import logging
import re
from typing import Any, Optional, Sequence

from google import genai
from google.genai import types

from ..errors import ConfigurationError
from ..utils.data_uri import DataUri

logger = logging.getLogger(__name__)

# Default safety settings - relaxed so ordinary questions are not blocked
DEFAULT_SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_ONLY_HIGH"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_ONLY_HIGH"),
]

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


def parse_json_text(text: Optional[str]) -> Any:
    """
    Decode the model's JSON text

    Tolerates a surrounding Markdown code fence. Returns None for empty or
    invalid JSON instead of raising.
    """
    if not text or not text.strip():
        return None

    body = text.strip()
    fenced = _CODE_FENCE.match(body)
    if fenced:
        body = fenced.group("body")

    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        logger.warning("Backend returned invalid JSON (%s): %s", e, body[:200])
        return None


class GeminiBackend:
    """
    Google Gemini backend.

    The SDK client is created on first use so that the application can start
    (and report a configuration error) without an API key.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gemini-2.0-flash",
        temperature: float = 0.7,
        **client_kwargs: Any
    ):
        """
        Args:
            api_key: Google AI API key
            model: Gemini model name
            temperature: Sampling temperature
            **client_kwargs: Additional kwargs for genai.Client
        """
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._client_kwargs = client_kwargs
        self._client: Optional[genai.Client] = None

    @property
    def model(self) -> str:
        return self._model

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self._api_key:
                raise ConfigurationError("Server configuration error: Missing API key.")
            self._client = genai.Client(api_key=self._api_key, **self._client_kwargs)
        return self._client

    def _build_contents(self, prompt: str, media: Sequence[DataUri]) -> list:
        parts = [types.Part(text=prompt)]
        for item in media:
            parts.append(types.Part.from_bytes(data=item.data, mime_type=item.mime_type))
        return [types.Content(role="user", parts=parts)]

    def _extract_content(self, response) -> str:
        """Join the text parts of the first candidate, or fall back to response.text"""
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                texts = [part.text for part in candidate.content.parts if getattr(part, "text", None)]
                if texts:
                    return "".join(texts)

        try:
            return response.text or ""
        except (ValueError, AttributeError):
            return ""

    async def generate_json(self, prompt: str, media: Sequence[DataUri] = ()) -> Any:
        """
        Send one JSON-mode request

        Args:
            prompt: Prompt text
            media: Decoded image/audio payloads sent as inline parts

        Returns:
            Decoded JSON value, or None when the model output is empty or not JSON

        Raises:
            ConfigurationError: if no API key is configured
            Exception: SDK and network errors are propagated to the caller
        """
        config = types.GenerateContentConfig(
            temperature=self._temperature,
            response_mime_type="application/json",
            safety_settings=DEFAULT_SAFETY_SETTINGS,
        )

        response = await self.client.aio.models.generate_content(
            model=self._model,
            contents=self._build_contents(prompt, media),
            config=config,
        )

        if response.usage_metadata:
            logger.debug(
                "Gemini token usage - prompt: %s, completion: %s",
                response.usage_metadata.prompt_token_count or 0,
                response.usage_metadata.candidates_token_count or 0,
            )

        return parse_json_text(self._extract_content(response))
