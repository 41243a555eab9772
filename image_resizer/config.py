from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Destination ──────────────────────────────────────────────────────────
    dest_bucket: str = "dest-bucket"
    thumbnail_prefix: str = "thumbnails/"

    # ── AWS ───────────────────────────────────────────────────────────────────
    aws_region: str = "us-east-1"

    # ── Encoding ─────────────────────────────────────────────────────────────
    jpeg_quality: int = Field(80, ge=1, le=95)

    # ── Logging ──────────────────────────────────────────────────────────────
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Return a cached Settings instance so it is only parsed once per container."""
    return Settings()
