from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Advisory text service (OpenAI-compatible chat completions).
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_BASE_URL: str | None = None

    # Persisted club snapshot (JSON).
    CLUB_DATA_PATH: str = "data/club_data.json"

    # Analytics knobs
    CLUB_RISK_FREE_RATE: float = 0.02
    # Stored histories shorter than this are treated as stale and regenerated on load.
    CLUB_MIN_HISTORY_POINTS: int = 50
    # Unit price used for the very first deposit, before any shares exist.
    CLUB_BOOTSTRAP_SHARE_VALUE: float = 100.0

    # Backwards-compatible snake_case accessors used across the codebase.
    @property
    def openai_api_key(self) -> str | None:
        return self.OPENAI_API_KEY

    @property
    def openai_model(self) -> str:
        return self.OPENAI_MODEL

    @property
    def club_data_path(self) -> str:
        return self.CLUB_DATA_PATH

    @property
    def risk_free_rate(self) -> float:
        return float(self.CLUB_RISK_FREE_RATE)

    @property
    def min_history_points(self) -> int:
        return int(self.CLUB_MIN_HISTORY_POINTS)

    @property
    def bootstrap_share_value(self) -> float:
        return float(self.CLUB_BOOTSTRAP_SHARE_VALUE)


def load_settings() -> Settings:
    return Settings()
