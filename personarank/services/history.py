"""
Conversation history summarizer

Turns the tail of a conversation into the plain-text context block that is
embedded in the ranking prompt. Older turns are dropped, not summarized.
"""

from typing import Optional, Sequence

from ..models.chat import ChatMessage, UserMessagePayload
from ..models.ranking import RankedResponseItem


HISTORY_WINDOW = 4

BEGINNING_OF_CONVERSATION = "This is the beginning of the conversation."
NO_SUITABLE_CONTEXT = "No suitable conversation history context to display."
UNSUPPORTED_USER_MESSAGE = "User: [Unsupported message format]"


def render_message(message: ChatMessage) -> Optional[str]:
    """
    Render one message as a history line

    Returns None when assistant content does not fit the message type.
    """
    content = message.content

    if message.role == "user":
        if isinstance(content, UserMessagePayload):
            line = f"User: {content.text}"
            if content.image_data_uri:
                line += " [Image Attached]"
            return line
        if isinstance(content, str):
            return f"User: {content}"
        return UNSUPPORTED_USER_MESSAGE

    if message.type == "single_model_response":
        if isinstance(content, RankedResponseItem):
            return f"Assistant (recommended {content.model_name}): {content.response_text}"
        return None

    if not isinstance(content, str):
        return None
    if message.type == "error":
        return f'Assistant: (System note: I previously encountered an error: "{content}")'
    return f"Assistant: {content}"


def summarize_history(messages: Sequence[ChatMessage], window: int = HISTORY_WINDOW) -> str:
    """
    Build the conversation context string for the ranking prompt

    Args:
        messages: All prior messages, oldest first
        window: Number of trailing messages to keep

    Returns:
        One line per renderable message, or a fixed sentinel
    """
    if not messages:
        return BEGINNING_OF_CONVERSATION

    lines = [render_message(message) for message in list(messages)[-window:]]
    context = "\n".join(line for line in lines if line is not None)

    if not context.strip():
        return NO_SUITABLE_CONTEXT
    return context
