"""
Data models for PersonaRank Chat

This module contains all Pydantic models for data validation and serialization.
"""

from .chat import (
    ChatMessage,
    ChatResponse,
    ConversationState,
    TranscriptionResponse,
    UserMessagePayload,
)
from .ranking import PersonaSpec, RankedResponseItem, RankingResult

__all__ = [
    "ChatMessage",
    "ChatResponse",
    "ConversationState",
    "PersonaSpec",
    "RankedResponseItem",
    "RankingResult",
    "TranscriptionResponse",
    "UserMessagePayload",
]
