"""
Service configuration.

Limits on what an upload may contain, plus the HTTP and logging knobs.
Values come from environment variables (a .env file is loaded at startup).
"""
import os
import logging
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Settings field -> environment variable
ENV_VARIABLES = {
    "max_file_size_mb": "MAX_FILE_SIZE_MB",
    "max_files_per_upload": "MAX_FILES_PER_UPLOAD",
    "rate_limit_per_minute": "RATE_LIMIT_PER_MINUTE",
    "request_timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
    "allowed_origins": "ALLOWED_ORIGINS",
    "log_level": "LOG_LEVEL",
    "max_file_rows": "MAX_FILE_ROWS",
    "max_file_columns": "MAX_FILE_COLUMNS",
    "max_cell_size_bytes": "MAX_CELL_SIZE_BYTES",
}


class Settings(BaseModel):
    """Validated settings; every CSV is parsed and analyzed fully in memory."""

    # Per-request upload limits
    max_file_size_mb: int = Field(default=20, ge=1, le=500, description="Largest CSV accepted, in MB")
    max_files_per_upload: int = Field(default=10, ge=1, le=100, description="CSV files accepted in one upload request")

    # Uploads only; /analyze and /dashboard are not limited
    rate_limit_per_minute: int = Field(default=30, ge=1, le=1000, description="Uploads per minute per client IP")

    request_timeout_seconds: int = Field(
        default=120, ge=1, le=3600,
        description="Seconds before a parse or analysis request is answered with TIMEOUT"
    )

    # Origins of the chart frontend (Vite dev server and preview by default)
    allowed_origins: str = Field(
        default="http://localhost:5173,http://localhost:8080",
        description="Comma-separated list of allowed CORS origins"
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Content limits, checked after parsing and before analysis
    max_file_rows: int = Field(default=200000, ge=100, description="Data rows allowed after blank lines are skipped")
    max_file_columns: int = Field(default=500, ge=10, description="Header cells allowed in one CSV")
    max_cell_size_bytes: int = Field(default=100000, ge=1000, description="Largest text cell, in UTF-8 bytes")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as a list."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment; unset variables keep the field defaults."""
        values = {field: os.environ[name] for field, name in ENV_VARIABLES.items() if name in os.environ}
        return cls(**values)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
        logger.info("Configuration loaded and validated successfully")
    return _settings


def reload_settings() -> Settings:
    """Drop the cached settings and read the environment again."""
    global _settings
    _settings = None
    return get_settings()
