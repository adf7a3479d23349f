import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


class Settings(BaseModel):
    google_api_key: Optional[str] = Field(default_factory=lambda: os.getenv("GOOGLE_API_KEY") or None)
    gemini_model: str = Field(default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash"))
    default_input_language: str = Field(default_factory=lambda: os.getenv("DEFAULT_INPUT_LANGUAGE", "en-US"))
    temperature: float = Field(default_factory=lambda: float(os.getenv("GEMINI_TEMPERATURE", "0.7")))
    session_ttl_minutes: int = Field(default_factory=lambda: int(os.getenv("SESSION_TTL_MINUTES", "30")))
    debug: bool = Field(default_factory=lambda: _env_flag("DEBUG_LOGGING"))

    @property
    def has_api_key(self) -> bool:
        return bool(self.google_api_key and self.google_api_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
