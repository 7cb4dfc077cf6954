from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Values may be provided via environment variables. This keeps configuration
    decoupled from code and simplifies packaging.
    """

    model_config = SettingsConfigDict(env_prefix="AUDIONOTES_", case_sensitive=False)

    # HTTP
    cors_allow_origins: str = Field("*", description="Comma-separated origins")

    # Recognition provider
    assemblyai_api_key: Optional[str] = Field(None, description="AssemblyAI streaming API key")
    streaming_url: str = "wss://streaming.assemblyai.com/v3/ws"
    sample_rate: int = 16000
    format_turns: bool = True
    shutdown_grace_s: float = Field(5.0, description="Seconds to wait for upstream Termination on close")
    summarize_on_session_end: bool = True

    # Analytics
    keywords_path: Optional[str] = Field(None, description="JSON keyword table replacing the defaults")
    short_text_words: int = 30
    summary_ratio: float = 0.3
    summary_min_segments: int = 2
    summary_max_segments: int = 5
    key_point_limit: int = Field(5, ge=1, le=10)
    action_item_limit: int = Field(5, ge=1, le=10)
    chunk_words: int = Field(15, ge=15, le=25)
    duplicate_threshold: float = Field(0.4, ge=0.0, le=1.0)
    containment_threshold: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Also drop segments mostly contained in a note line; off when unset"
    )
    topic_limit: int = 20
    related_limit: int = 6
    new_info_limit: int = 5


def load_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
