"""
Exceptions raised by PersonaRank services.

Routes and the chat orchestrator catch these at their boundary and turn them
into chat messages or HTTP responses.
"""


class PersonaRankError(Exception):
    """Base class for application errors"""


class ConfigurationError(PersonaRankError):
    """Required configuration (such as the API key) is missing"""


class AIInteractionError(PersonaRankError):
    """The generative backend call failed"""


class DataUriError(PersonaRankError):
    """An image or audio payload is not a valid base64 data URI"""


class ConversationBusyError(PersonaRankError):
    """A new turn was submitted while a response is still outstanding"""
