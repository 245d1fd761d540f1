import os
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when a turn cannot start because configuration is incomplete."""


class Settings(BaseSettings):
    """
    Application settings with validation.
    Uses Pydantic Settings for automatic env var loading and type validation.
    """

    # --- Model Configuration ---
    coordinator_model: str = Field(
        default="gemini-2.5-flash",
        description="Fast model used to classify intent and refine the prompt",
    )

    agent_model: str = Field(
        default="gemini-2.5-flash",
        description="Text model used by the AIP, APK and PDM agents",
    )

    image_model: str = Field(
        default="gemini-2.5-flash-image",
        description="Image generation model used by the PAVM agent",
    )

    coordinator_temperature: float = Field(
        default=0.1,
        description="Sampling temperature for routing (low for stable decisions)",
        ge=0.0,
        le=1.0,
    )

    image_aspect_ratio: str = Field(
        default="1:1",
        description="Aspect ratio requested from the image model",
    )

    # --- Gateway Configuration ---
    llm_timeout: int = Field(
        default=60,
        description="Timeout in seconds for each model call",
        ge=5,
        le=300,
    )
    llm_max_retries: int = Field(
        default=1,
        description="Attempts per model call (1 means single shot)",
        ge=1,
        le=5,
    )

    # --- Conversation Display ---
    handover_delay: float = Field(
        default=0.8,
        description="Pause in seconds after routing so the handover is readable",
        ge=0.0,
        le=5.0,
    )
    idle_reset_delay: float = Field(
        default=3.0,
        description="Seconds before the active agent display returns to the coordinator",
        ge=0.0,
        le=60.0,
    )
    max_display_sources: int = Field(
        default=3,
        description="Grounding sources rendered under a response",
        ge=1,
        le=20,
    )
    image_output_dir: str | None = Field(
        default=None,
        description="Directory where the console saves generated images",
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Root log level")
    structured_logs: bool = Field(
        default=False, description="Emit JSON logs instead of plain text"
    )

    # --- API Keys ---
    google_api_key: str | None = Field(
        default=None,
        description="Google API key for Gemini",
        validation_alias=AliasChoices("GOOGLE_API_KEY", "GEMINI_API_KEY", "API_KEY"),
    )

    model_config = SettingsConfigDict(
        env_file=os.getenv("DOTENV_PATH", ".env"),
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def has_api_key(self) -> bool:
        """True when a non-blank credential is configured."""
        return bool(self.google_api_key and self.google_api_key.strip())


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get or create settings instance.
    Singleton pattern for consistent configuration.

    Returns:
        Settings instance

    Raises:
        ValidationError: If env vars are present but invalid
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def check_api_key(settings: Settings | None = None) -> bool:
    """
    Reports whether the Gemini credential is available.
    A missing key does not prevent startup, only the submission of turns.
    """
    return (settings or get_settings()).has_api_key
