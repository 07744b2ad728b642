"""Settings for cfx itself (logging), read from ``CFX_*`` environment variables.

These are separate from the application configuration that cfx loads from
YAML: they only control how the library reports what it is doing.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cfx.config.validators import resolve_path, validate_log_format, validate_log_level


class CfxSettings(BaseSettings):
    """Library-level settings.

    Loads from environment variables and defaults; validates with Pydantic.
    """

    model_config = SettingsConfigDict(
        env_prefix="CFX_",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(
        default="WARNING", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(default="console", description="Log format (json or console)")
    log_dir: Path | None = Field(
        default=None, description="Directory for rotating JSONL logs; unset disables file logs"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_dir", mode="before")
    @classmethod
    def resolve_log_dir(cls, v: Path | str | None) -> Path | None:
        """Resolve relative paths to absolute."""
        if v is None or v == "":
            return None
        return resolve_path(v)


_settings: CfxSettings | None = None


def get_settings() -> CfxSettings:
    """Get the library settings singleton.

    Returns:
        CfxSettings instance (singleton pattern).
    """
    global _settings
    if _settings is None:
        _settings = CfxSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
