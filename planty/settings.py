# planty/settings.py
# Centralized configuration for the service and the client.

from __future__ import annotations

import os
from functools import lru_cache


class Settings:
    """
    All configuration is read from environment variables when the object is built.
    Do NOT commit secrets; put GEMINI_API_KEY in a local .env or your host's variables.
    """

    def __init__(self) -> None:
        # --- External model ---
        self.GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")

        # --- Paths (relative to the working directory unless absolute) ---
        self.PROMPTS_DIR: str = os.getenv("PROMPTS_DIR", "prompts")

        # --- Client ---
        self.PLANTY_URL: str = os.getenv("PLANTY_URL", "http://127.0.0.1:8000")
        self.CAMERA_INDEX: int = int(os.getenv("CAMERA_INDEX", "0"))

        # --- Misc ---
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.PORT: int = int(os.getenv("PORT", "8000"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached accessor for settings.
    Usage:
        from planty.settings import get_settings
        st = get_settings()
    """
    return Settings()
