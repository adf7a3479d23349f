"""
Session Middleware for PersonaRank Chat

Provides cookie-based session management. The session id keys the
in-memory conversation store; the cookie is refreshed on every request so
an active conversation does not expire.
"""

import logging
import random
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from ..config import get_settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "session_id"

# Human-readable word prefixes for session IDs
WORDS = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot",
         "golf", "hotel", "india", "juliet", "kilo", "lima", "mike"]


def generate_session_id() -> str:
    """Generate a human-readable session ID with word prefix and UUID"""
    return f"web-{random.choice(WORDS)}-{uuid.uuid4()}"


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Middleware that manages user sessions using HTTP cookies.

    - Generates unique session IDs for new users
    - Refreshes session cookies on every request
    - Makes session_id available via request.state.session_id
    """

    async def dispatch(self, request, call_next):
        settings = get_settings()
        try:
            session_id = request.cookies.get(SESSION_COOKIE)
            if not session_id:
                session_id = generate_session_id()
                if settings.debug:
                    logger.debug(f"Generated new session_id: {session_id}")

            request.state.session_id = session_id
            response: Response = await call_next(request)

            max_age = settings.session_ttl_minutes * 60
            response.set_cookie(
                SESSION_COOKIE,
                session_id,
                httponly=True,
                samesite="lax",
                max_age=max_age
            )
            return response

        except Exception as e:
            logger.exception(f"Exception in session middleware for {request.url.path}: {e}")
            return JSONResponse(
                status_code=500,
                content={"error": "Session middleware error", "path": str(request.url.path)}
            )
