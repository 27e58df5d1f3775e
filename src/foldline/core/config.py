# src/foldline/core/config.py
"""
Configuration schema and loading for foldline accumulators.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Any, Literal, Self

from pydantic import BaseModel, Field, ValidationError

from foldline.contracts.enums import ErrorHandling
from foldline.contracts.errors import AccumulatorConfigError
from foldline.core.logging import configure_logging

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class AccumulatorSettings(BaseModel):
    """Settings shared by every accumulator built from them.

    Example YAML:
        error_handling: exception
        log_level: DEBUG
        log_json: true
    """

    model_config = {"frozen": True, "extra": "forbid"}

    error_handling: ErrorHandling = Field(
        default=ErrorHandling.ERROR,
        description="'error' returns failures as values, 'exception' raises them",
    )
    log_level: LogLevel = Field(default="INFO", description="Log level applied by configure_logging()")
    log_json: bool = Field(default=False, description="Emit JSON logs instead of console output")

    @property
    def throws(self) -> bool:
        """True when failures are raised rather than returned."""
        return self.error_handling == ErrorHandling.EXCEPTION

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> Self:
        """Create settings from dict with clear error on validation failure.

        Raises:
            AccumulatorConfigError: If configuration is invalid.
        """
        try:
            return cls.model_validate(config)
        except ValidationError as e:
            raise AccumulatorConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e

    def with_error_handling(self, error_handling: ErrorHandling | str) -> Self:
        """Return a copy with a different error-handling policy (validated)."""
        return self.from_dict({**self.model_dump(), "error_handling": error_handling})

    def configure_logging(self) -> None:
        """Apply the log fields of these settings to structlog and stdlib logging."""
        configure_logging(json_output=self.log_json, level=self.log_level)


def load_settings(config_path: Path | None = None) -> AccumulatorSettings:
    """Load settings from an optional YAML/TOML file with environment overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FOLDLINE_*) - highest priority
    2. Config file - if given
    3. Defaults from the Pydantic schema - lowest priority

    Args:
        config_path: Path to a settings file, or None for environment only

    Returns:
        Validated AccumulatorSettings instance

    Raises:
        AccumulatorConfigError: If configuration fails validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FOLDLINE",
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
    )

    # Dynaconf returns uppercase keys and a few internal ones
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES", "ENVVAR_PREFIX"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return AccumulatorSettings.from_dict(raw_config)
