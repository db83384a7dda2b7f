"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from datetime import timedelta
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = Field(default="Club Ledger Portal", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000)
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # CSV snapshots
    data_dir: str = Field(default="data", alias="DATA_DIR")
    allowed_phones_file: str = Field(default="allowed-phones.csv", alias="ALLOWED_PHONES_FILE")
    transactions_file: str = Field(default="transactions.csv", alias="TRANSACTIONS_FILE")

    # Authentication
    session_ttl_hours: float = Field(default=24.0, alias="SESSION_TTL_HOURS")
    country_code: str = Field(default="57", alias="COUNTRY_CODE")
    session_token_bytes: int = Field(default=32, alias="SESSION_TOKEN_BYTES")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("session_ttl_hours")
    @classmethod
    def validate_session_ttl(cls, v):
        """Validate session lifetime is positive."""
        if v <= 0:
            raise ValueError("Session TTL must be greater than zero")
        return v

    @field_validator("country_code")
    @classmethod
    def validate_country_code(cls, v):
        """Country code is compared against digit-only strings."""
        v = v.strip().lstrip("+")
        if not v.isdigit():
            raise ValueError("Country code must contain digits only")
        return v

    @field_validator("session_token_bytes")
    @classmethod
    def validate_token_bytes(cls, v):
        """Validate token entropy setting."""
        if v < 16:
            raise ValueError("Session tokens need at least 16 random bytes")
        if v > 128:
            raise ValueError("Session tokens should not exceed 128 random bytes")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def session_ttl(self) -> timedelta:
        """Session time-to-live as a timedelta."""
        return timedelta(hours=self.session_ttl_hours)

    @property
    def data_path(self) -> Path:
        """Directory holding the CSV snapshots."""
        return Path(self.data_dir)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
