"""
Web routes for PersonaRank Chat

This module contains all FastAPI routes for the web interface.
HTMX requests (HX-Request header) get HTML fragments, everything else JSON.
"""

import functools
import html
import inspect
import logging
import uuid
from pathlib import Path
from typing import Optional

import markdown
from fastapi import APIRouter, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates

from ..analytics.posthog_client import capture_event, flush_events
from ..config import get_settings
from ..errors import ConversationBusyError, DataUriError
from ..models.chat import ChatMessage, ChatResponse, ConversationState, TranscriptionResponse
from ..models.ranking import RankedResponseItem
from ..personas import DEFAULT_PERSONAS, persona_names
from ..services import ChatService, SessionStore
from ..services.prompt_engineering import SUPPORTED_LANGUAGES
from ..utils.data_uri import parse_data_uri, require_mime_prefix, to_data_uri
from ..utils.debug_logger import debug_logger

logger = logging.getLogger(__name__)

# Initialize router
router = APIRouter()

# Templates setup
BASE_DIR = Path(__file__).parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

# Initialize services
settings = get_settings()
chat_service = ChatService(settings)
session_store = SessionStore(settings.session_ttl_minutes)

TRANSCRIPTION_UNAVAILABLE_MESSAGE = "Voice input is unavailable right now."
TRANSCRIPTION_EMPTY_MESSAGE = "Could not understand the audio. Please try again."


def track_event(event_name: str):
    """
    Decorator to capture a PostHog event when a route is hit.
    Works for sync and async routes, and includes simple route kwargs.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            if inspect.iscoroutinefunction(func):
                response = await func(*args, **kwargs)
            else:
                response = func(*args, **kwargs)

            request: Optional[Request] = kwargs.get("request") or next(
                (a for a in args if isinstance(a, Request)), None
            )
            if request is None:
                return response

            props = {
                "path": str(request.url.path),
                "method": request.method,
                "status_code": getattr(response, "status_code", 200),
            }
            # Uploads and other objects are not serializable event properties
            props.update({
                k: v for k, v in kwargs.items()
                if isinstance(v, (str, int, float, bool)) and k not in ("text", "image_data_uri", "audio_data_uri")
            })
            text = kwargs.get("text")
            if isinstance(text, str):
                props["text_length"] = len(text)

            distinct_id = getattr(request.state, "session_id", None)
            if capture_event(event_name=event_name, properties=props, distinct_id=distinct_id):
                flush_events()
            return response
        return wrapper
    return decorator


def is_htmx(request: Request) -> bool:
    return bool(request.headers.get("HX-Request"))


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())[:8]


def _session_id(request: Request) -> str:
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        raise HTTPException(status_code=400, detail="session_id is required")
    return session_id


def notification(request: Request, message: str, status_code: int):
    """Transient, non-fatal notification; never touches the conversation"""
    if is_htmx(request):
        return HTMLResponse(
            f'<div class="notification" role="alert">{html.escape(message)}</div>',
            status_code=status_code,
        )
    return JSONResponse(status_code=status_code, content={"detail": message})


def render_markdown(text: str) -> str:
    try:
        return markdown.markdown(html.escape(text), extensions=["nl2br"])
    except Exception as e:
        logger.warning(f"Markdown conversion failed for chat response: {e}")
        return html.escape(text)


def render_message_fragment(message: ChatMessage) -> str:
    """HTML for one chat bubble"""
    if message.role == "user":
        attachment = ""
        if getattr(message.content, "image_data_uri", None):
            attachment = f'<img class="attachment" src="{html.escape(message.content.image_data_uri, quote=True)}" alt="Attached image">'
        return (
            f'<div class="message message-user" id="msg-{message.id}">'
            f'<div class="bubble">{html.escape(message.display_text)}{attachment}</div></div>'
        )

    badge = ""
    if isinstance(message.content, RankedResponseItem):
        item = message.content
        badge = (
            f'<div class="badge">Recommended: {html.escape(item.model_name)} '
            f'({item.accuracy * 100:.0f}% accuracy)</div>'
        )
    css = "message-error" if message.type == "error" else "message-bot"
    return (
        f'<div class="message {css}" id="msg-{message.id}">'
        f'{badge}<div class="bubble">{render_markdown(message.display_text)}</div></div>'
    )


async def resolve_data_uri(upload: Optional[UploadFile], data_uri: Optional[str], kind: str) -> Optional[str]:
    """
    Accept a file upload or a data URI form field and return a validated data URI

    Raises:
        DataUriError: if the payload cannot be encoded or is not of the expected kind
    """
    prefix = f"{kind}/"
    if upload is not None and upload.filename:
        data = await upload.read()
        content_type = (upload.content_type or "").split(";")[0].strip()
        if not content_type.startswith(prefix):
            raise DataUriError(f"Expected a {kind} file, got {content_type or 'unknown type'}")
        return to_data_uri(data, content_type)

    if data_uri:
        require_mime_prefix(parse_data_uri(data_uri), prefix)
        return data_uri.strip()

    return None


async def run_turn(session_id: str,
                   awaiting: ConversationState,
                   input_language: Optional[str] = None,
                   request_id: Optional[str] = None,
                   request: Optional[Request] = None) -> Optional[ConversationState]:
    """
    Answer the outstanding turn and store the result

    Returns None when the session was reset while the turn ran; the
    result is dropped in that case. If the turn is interrupted (for example
    cancelled), it is closed with an error message before re-raising.
    """
    try:
        state = await chat_service.respond(awaiting, input_language, request_id, request)
    except BaseException:
        session_store.replace(session_id, awaiting, chat_service.fail_turn(awaiting))
        raise

    if not session_store.replace(session_id, awaiting, state):
        debug_logger.log_route(request_id, f"Session {session_id} was reset during the turn, dropping reply", request)
        return None
    return state


@router.get("/", response_class=HTMLResponse)
@track_event("page_home")
def index(request: Request) -> HTMLResponse:
    """Serve the chat page; a page load starts a new conversation"""
    session_id = getattr(request.state, "session_id", None)
    if session_id:
        session_store.reset(session_id)
    return templates.TemplateResponse(request, "chat.html", {
        "languages": SUPPORTED_LANGUAGES,
        "default_language": settings.default_input_language,
        "personas": persona_names(DEFAULT_PERSONAS),
    })


@router.post("/chat")
@track_event("chat_message")
async def chat(
    request: Request,
    text: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    image_data_uri: Optional[str] = Form(None),
    input_language: Optional[str] = Form(None),
):
    """
    Handle one chat turn

    - 400 when neither text nor image is given
    - 409 while the previous turn is still being answered
    - 422 when the image cannot be encoded
    """
    session_id = _session_id(request)
    request_id = _request_id(request)
    text = (text or "").strip()

    try:
        image_uri = await resolve_data_uri(image, image_data_uri, "image")
    except DataUriError as e:
        debug_logger.log_route(request_id, f"Rejected image: {e}", request)
        return notification(request, f"Could not read the image: {e}", 422)

    if not text and not image_uri:
        raise HTTPException(status_code=400, detail="text or image is required")

    try:
        state = chat_service.start_turn(session_store.get(session_id), text, image_uri)
    except ConversationBusyError as e:
        return notification(request, str(e), 409)
    session_store.save(session_id, state)

    debug_logger.log_route(request_id, f"Processing chat turn for session {session_id}", request)
    state = await run_turn(session_id, state, input_language, request_id, request)
    if state is None:
        if is_htmx(request):
            return HTMLResponse("")
        current = session_store.get(session_id)
        return ChatResponse(messages=list(current.messages), status=current.status)

    if capture_event("chat_outcome", {"outcome": state.last_outcome}, distinct_id=session_id):
        flush_events()

    user_message, reply = state.messages[-2], state.messages[-1]
    if is_htmx(request):
        return HTMLResponse(render_message_fragment(user_message) + render_message_fragment(reply))

    return ChatResponse(
        messages=list(state.messages),
        status=state.status,
        outcome=state.last_outcome,
        top_response=reply.content if isinstance(reply.content, RankedResponseItem) else None,
    )


@router.post("/transcribe", response_model=TranscriptionResponse)
@track_event("transcription")
async def transcribe(
    request: Request,
    audio: Optional[UploadFile] = File(None),
    audio_data_uri: Optional[str] = Form(None),
):
    """Transcribe recorded audio into text for the chat input"""
    request_id = _request_id(request)

    try:
        audio_uri = await resolve_data_uri(audio, audio_data_uri, "audio")
    except DataUriError as e:
        return JSONResponse(
            status_code=422,
            content=TranscriptionResponse(success=False, message=f"Could not read the recording: {e}").model_dump(),
        )
    if not audio_uri:
        raise HTTPException(status_code=400, detail="audio is required")

    transcript = await chat_service.transcribe_audio(audio_uri, request_id, request)
    if transcript is None:
        return TranscriptionResponse(success=False, message=TRANSCRIPTION_UNAVAILABLE_MESSAGE)
    if not transcript:
        return TranscriptionResponse(text="", success=False, message=TRANSCRIPTION_EMPTY_MESSAGE)
    return TranscriptionResponse(text=transcript, success=True)


@router.post("/reset")
@track_event("conversation_reset")
async def reset(request: Request):
    """Discard the session's conversation"""
    state = session_store.reset(_session_id(request))
    if is_htmx(request):
        return HTMLResponse("")
    return ChatResponse(messages=list(state.messages), status=state.status)
