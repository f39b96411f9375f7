"""
lazybuild Settings

Environment variables use the LAZYBUILD_ prefix.
Example: LAZYBUILD_LOG_LEVEL=DEBUG, LAZYBUILD_STRICT_IMPORT_PATHS=false
"""

import codecs

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BuilderSettings(BaseSettings):
    """
    Builder settings.

    The builder reads these once at construction; changing the environment
    afterwards does not affect an existing LazyBuilder.
    """

    model_config = SettingsConfigDict(
        env_prefix="LAZYBUILD_",
        extra="ignore",
    )

    # ========================================================================
    # Logging
    # ========================================================================
    log_level: str = "INFO"
    log_json: bool = False
    log_sample_size: int = 3  # per-file samples in the batch summary line

    # ========================================================================
    # Transform contract
    # ========================================================================
    text_encoding: str = "utf-8"  # str results are encoded with this
    strict_import_paths: bool = True  # rooted import_file() paths are an error

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @field_validator("text_encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"Unknown text encoding: {value}") from e
        return value

    @field_validator("log_sample_size")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"log_sample_size must be >= 0, got: {value}")
        return value


# Eager loading (module-level instantiation)
settings = BuilderSettings()
