"""
config/settings.py
──────────────────
Centralised settings loaded from .env via pydantic-settings.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Server
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"

    # Data
    data_dir: Path = Path("./data")
    directory_file: str = ""           # optional CSV of counterpart entries
    matching_tables_file: str = ""     # optional JSON overriding lookup tables

    # Algorithm
    top_k_matches: int = Field(10, ge=1)
    min_match_score: float = Field(60.0, ge=0, le=100)
    scoring_strategy: Literal["additive", "proximity_blend"] = "additive"

    # OpenAI via LangChain (optional: no key means no oracle)
    openai_api_key: str = Field(default="", alias="OPENAI_API_KEY")
    ai_model: str = "gpt-4o-mini"
    ai_temperature: float = Field(0.7, ge=0, le=2)
    ai_timeout_seconds: float = Field(8.0, gt=0)
    ai_candidate_count: int = Field(3, ge=1, le=10)

    # Logging
    log_level: str = "INFO"
    log_file: Path = Path("./logs/app.log")

    @property
    def directory_path(self) -> Path | None:
        return self.data_dir / self.directory_file if self.directory_file else None

    @property
    def matching_tables_path(self) -> Path | None:
        return self.data_dir / self.matching_tables_file if self.matching_tables_file else None

    @property
    def ai_enabled(self) -> bool:
        return bool(self.openai_api_key)


@lru_cache
def get_settings() -> Settings:
    return Settings()
