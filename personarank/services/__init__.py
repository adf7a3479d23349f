"""
Services layer for PersonaRank Chat

This module contains all business logic services that handle
the core functionality of the application.
"""

from .chat_service import ChatService
from .history import summarize_history
from .prompt_engineering import prompt_engineer
from .ranking_service import RankingService, parse_ranking_output, select_top_response
from .session_store import SessionStore
from .transcription_service import TranscriptionService

__all__ = [
    "ChatService",
    "RankingService",
    "SessionStore",
    "TranscriptionService",
    "parse_ranking_output",
    "prompt_engineer",
    "select_top_response",
    "summarize_history",
]
