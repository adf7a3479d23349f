"""
Chat-related data models

These models define chat messages, the per-session conversation state and
the request/response bodies of the web API.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .ranking import RankedResponseItem


Role = Literal["user", "assistant"]
MessageType = Literal["text", "single_model_response", "error"]
ConversationStatus = Literal["idle", "awaiting_response"]
TurnOutcome = Literal["success", "no_suitable_response", "error"]


def _new_message_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserMessagePayload(BaseModel):
    """User turn content when an image accompanies the text"""
    model_config = ConfigDict(frozen=True)

    text: str
    image_data_uri: Optional[str] = None


MessageContent = Union[RankedResponseItem, UserMessagePayload, str]


class ChatMessage(BaseModel):
    """A single chat turn. Never mutated after creation."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_message_id)
    role: Role
    type: MessageType = "text"
    content: MessageContent
    timestamp: datetime = Field(default_factory=_utcnow)

    @classmethod
    def user(cls, text: str, image_data_uri: Optional[str] = None) -> "ChatMessage":
        if image_data_uri:
            return cls(role="user", content=UserMessagePayload(text=text, image_data_uri=image_data_uri))
        return cls(role="user", content=text)

    @classmethod
    def assistant_text(cls, text: str) -> "ChatMessage":
        return cls(role="assistant", type="text", content=text)

    @classmethod
    def ranked_response(cls, item: RankedResponseItem) -> "ChatMessage":
        return cls(role="assistant", type="single_model_response", content=item)

    @classmethod
    def error(cls, text: str) -> "ChatMessage":
        return cls(role="assistant", type="error", content=text)

    @property
    def display_text(self) -> str:
        """Plain text shown in the chat bubble"""
        if isinstance(self.content, RankedResponseItem):
            return self.content.response_text
        if isinstance(self.content, UserMessagePayload):
            return self.content.text
        return self.content


class ConversationState(BaseModel):
    """
    Conversation owned by one browser session.

    Transitions live in `services.conversation`; each returns a new state.
    """
    model_config = ConfigDict(frozen=True)

    messages: Tuple[ChatMessage, ...] = ()
    status: ConversationStatus = "idle"
    last_outcome: Optional[TurnOutcome] = None

    @property
    def is_busy(self) -> bool:
        return self.status == "awaiting_response"


class ChatResponse(BaseModel):
    """Response model for chat interactions"""
    messages: List[ChatMessage]
    status: ConversationStatus
    outcome: Optional[TurnOutcome] = None
    top_response: Optional[RankedResponseItem] = None


class TranscriptionResponse(BaseModel):
    """Response model for audio transcription"""
    text: Optional[str] = None
    success: bool
    message: Optional[str] = None
