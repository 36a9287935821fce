"""
Configuration management.

Centralized environment variable management and validation.
"""

from typing import Literal, Optional
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Provider credentials (validated only when present so tests and local runs can start without them)
    openai_api_key: Optional[str] = None
    replicate_api_token: Optional[str] = None

    # Supabase configuration (optional durable storage + database sink)
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_dir: str = "logs"

    # Job polling
    job_poll_interval_seconds: float = 4.0
    job_timeout_seconds: float = 600.0

    # OpenAI video endpoint
    openai_base_url: str = "https://api.openai.com/v1"
    sora_model: str = "sora-2"
    sora_size: str = "1280x720"

    # Replicate models
    tts_model: str = "resemble-ai/chatterbox"
    lower_third_model: str = "ideogram-ai/ideogram-v2"
    background_removal_model: str = "cjwbw/rembg"
    preview_image_model: str = "google/nano-banana"

    # Duration windows per segment category, in seconds
    studio_min_duration: int = 6
    studio_max_duration: int = 12
    studio_default_duration: int = 10
    broll_min_duration: int = 5
    broll_max_duration: int = 10
    broll_default_duration: int = 5

    # Voice references for speech synthesis
    voice_base_url: str = "http://localhost:8000/audio"

    # Local media output
    generated_dir: str = "generated"
    public_base_url: str = "http://localhost:8000"

    # Run state snapshots (JSON files) and the character directory
    state_dir: Optional[str] = None
    characters_file: Optional[str] = None

    # Finished API runs kept for status lookups
    max_finished_runs: int = 50

    # FFmpeg
    ffmpeg_timeout_seconds: int = 300

    # Outbound transfer queue (durable storage uploads)
    transfer_max_concurrency: int = 2
    transfer_pacing_seconds: float = 0.2
    storage_bucket: str = "broadcast-assets"

    # Feature flags
    persist_assets: bool = False
    generate_previews: bool = True
    remove_lower_third_background: bool = False

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate OpenAI API key format."""
        if v is None or v == "":
            return None
        if not v.startswith("sk-"):
            raise ConfigError("OPENAI_API_KEY must start with 'sk-'")
        if len(v) < 20:
            raise ConfigError("OPENAI_API_KEY appears to be invalid")
        return v

    @field_validator("replicate_api_token")
    @classmethod
    def validate_replicate_api_token(cls, v: Optional[str]) -> Optional[str]:
        """Validate Replicate API token format."""
        if v is None or v == "":
            return None
        if not v.startswith("r8_"):
            raise ConfigError("REPLICATE_API_TOKEN must start with 'r8_'")
        if len(v) < 20:
            raise ConfigError("REPLICATE_API_TOKEN appears to be invalid")
        return v

    @field_validator("supabase_url")
    @classmethod
    def validate_supabase_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Supabase URL format."""
        if v is None or v == "":
            return None
        if not v.startswith(("http://", "https://")):
            raise ConfigError("SUPABASE_URL must be a valid HTTP/HTTPS URL")
        return v

    @field_validator("openai_base_url", "public_base_url", "voice_base_url")
    @classmethod
    def validate_http_url(cls, v: str) -> str:
        """Validate that service URLs are HTTP(S)."""
        if not v.startswith(("http://", "https://")):
            raise ConfigError(f"{v!r} must be a valid HTTP/HTTPS URL")
        return v.rstrip("/")

    @field_validator("transfer_max_concurrency")
    @classmethod
    def validate_transfer_max_concurrency(cls, v: int) -> int:
        """Outbound transfers are capped at two concurrent jobs."""
        if not 1 <= v <= 2:
            raise ConfigError("TRANSFER_MAX_CONCURRENCY must be 1 or 2")
        return v

    @field_validator("job_poll_interval_seconds", "job_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ConfigError("Polling interval and timeout must be positive")
        return v

    @model_validator(mode="after")
    def validate_duration_windows(self) -> "Settings":
        """Each duration window must be non-empty and contain its default."""
        windows = {
            "studio": (self.studio_min_duration, self.studio_default_duration, self.studio_max_duration),
            "broll": (self.broll_min_duration, self.broll_default_duration, self.broll_max_duration),
        }
        for name, (low, default, high) in windows.items():
            if low <= 0 or low > high:
                raise ConfigError(f"Invalid {name} duration window: {low}-{high}")
            if not low <= default <= high:
                raise ConfigError(f"{name} default duration {default} outside {low}-{high}")
        return self

    @property
    def supabase_enabled(self) -> bool:
        """Whether Supabase storage and database are configured."""
        return bool(self.supabase_url and self.supabase_service_key)


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
