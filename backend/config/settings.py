from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List

class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # API Settings
    API_V1_STR: str = "/api"
    PROJECT_NAME: str = "AI Image Editor"
    VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server Settings
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None  # enables daily rotating log files when set

    # Upstream provider (Gemini)
    GEMINI_MODEL: str = "gemini-2.5-flash-image-preview"
    UPSTREAM_MODE: str = "stream"  # "stream" or "single"
    UPSTREAM_TIMEOUT_SECONDS: float = 55.0

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = ["*"]
    CORS_ALLOW_METHODS: List[str] = ["GET", "OPTIONS", "PATCH", "DELETE", "POST", "PUT"]

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._validate_settings()

    def _validate_settings(self):
        """Validate settings that have a fixed set of values."""
        if self.UPSTREAM_MODE not in ("stream", "single"):
            raise ValueError(
                f"Invalid UPSTREAM_MODE '{self.UPSTREAM_MODE}'. Expected 'stream' or 'single'."
            )
        if self.UPSTREAM_TIMEOUT_SECONDS <= 0:
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be positive")

# Global settings instance
settings = Settings()
