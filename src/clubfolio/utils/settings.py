"""Centralized settings utilities."""

from __future__ import annotations

import os

from clubfolio.config import Settings, load_settings


def safe_load_settings() -> Settings:
    """
    Load settings with graceful fallback.

    If .env is unreadable (e.g., sandbox) or a value fails validation, construct
    Settings directly from environment variables, keeping defaults for anything
    that does not parse.
    """
    try:
        return load_settings()
    except Exception:
        defaults = Settings.model_construct()

        def _float(name: str, default: float) -> float:
            try:
                return float(os.getenv(name, str(default)))
            except ValueError:
                return default

        def _int(name: str, default: int) -> int:
            try:
                return int(os.getenv(name, str(default)))
            except ValueError:
                return default

        return Settings.model_construct(
            OPENAI_API_KEY=os.getenv("OPENAI_API_KEY"),
            OPENAI_MODEL=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            OPENAI_BASE_URL=os.getenv("OPENAI_BASE_URL"),
            CLUB_DATA_PATH=os.getenv("CLUB_DATA_PATH", "data/club_data.json"),
            CLUB_RISK_FREE_RATE=_float("CLUB_RISK_FREE_RATE", defaults.CLUB_RISK_FREE_RATE),
            CLUB_MIN_HISTORY_POINTS=_int("CLUB_MIN_HISTORY_POINTS", defaults.CLUB_MIN_HISTORY_POINTS),
            CLUB_BOOTSTRAP_SHARE_VALUE=_float("CLUB_BOOTSTRAP_SHARE_VALUE", defaults.CLUB_BOOTSTRAP_SHARE_VALUE),
        )
