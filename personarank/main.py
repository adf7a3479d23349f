"""
PersonaRank Chat FastAPI Application

This is the main FastAPI application entry point.
It sets up the app, middleware, and includes all routes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .analytics import capture_event
from .config import get_settings
from .middleware.session import SessionMiddleware
from .middleware.timing import TimingMiddleware
from .web.routes import router as web_router

logging.basicConfig(level=logging.DEBUG if get_settings().debug else logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Report configuration problems early and capture server start"""
    settings = get_settings()
    if not settings.has_api_key:
        logger.warning("GOOGLE_API_KEY is not set; chat turns will fail with a configuration error")
    capture_event("server_start", {"app_version": __version__, "model": settings.gemini_model})
    yield


app = FastAPI(
    title="PersonaRank Chat API",
    version=__version__,
    description="Chat application that simulates several model personas, ranks their answers and returns the best one",
    lifespan=lifespan,
)

# Session middleware runs inside timing middleware (last added runs first)
app.add_middleware(SessionMiddleware)
app.add_middleware(TimingMiddleware)

app.include_router(web_router)


@app.get("/health")
def health_check():
    """Health check endpoint for monitoring"""
    settings = get_settings()
    return {
        "status": "healthy",
        "service": "personarank-chat-api",
        "model": settings.gemini_model,
        "api_key_configured": settings.has_api_key,
    }
