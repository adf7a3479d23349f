"""
Conversation state transitions

idle -> awaiting_response -> (success | no_suitable_response | error) -> idle

Every function returns a new ConversationState; nothing is mutated.
"""

from typing import Tuple

from ..errors import ConversationBusyError
from ..models.chat import ChatMessage, ConversationState, TurnOutcome


def _append(messages: Tuple[ChatMessage, ...], message: ChatMessage) -> Tuple[ChatMessage, ...]:
    if any(existing.id == message.id for existing in messages):
        raise ValueError(f"Duplicate message id: {message.id}")
    # Display order must never go back in time
    if messages and message.timestamp < messages[-1].timestamp:
        message = message.model_copy(update={"timestamp": messages[-1].timestamp})
    return messages + (message,)


def begin_turn(state: ConversationState, user_message: ChatMessage) -> ConversationState:
    """
    Record a user submission and wait for the assistant

    Raises:
        ConversationBusyError: if a previous turn has not completed
    """
    if state.is_busy:
        raise ConversationBusyError("A response is still being generated. Please wait for it before sending another message.")
    if user_message.role != "user":
        raise ValueError("A turn must start with a user message")

    return ConversationState(
        messages=_append(state.messages, user_message),
        status="awaiting_response",
        last_outcome=None,
    )


def complete_turn(state: ConversationState, assistant_message: ChatMessage, outcome: TurnOutcome) -> ConversationState:
    """Append the assistant's reply and return to idle"""
    if not state.is_busy:
        raise ValueError("No turn is awaiting a response")
    if assistant_message.role != "assistant":
        raise ValueError("A turn must complete with an assistant message")

    return ConversationState(
        messages=_append(state.messages, assistant_message),
        status="idle",
        last_outcome=outcome,
    )


def pending_user_message(state: ConversationState) -> ChatMessage:
    """The user message of the outstanding turn"""
    if not state.is_busy or not state.messages:
        raise ValueError("No turn is awaiting a response")
    return state.messages[-1]


def reset_conversation() -> ConversationState:
    """Discard all messages"""
    return ConversationState()
