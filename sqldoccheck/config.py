"""
Configuration Settings.

Settings are read from ``SQLDOCCHECK_*`` environment variables and an
optional ``.env`` file in the working directory.  Command-line flags are
applied on top with ``Settings.model_copy(update=...)``.
"""

from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# Fence info-string languages treated as SQL examples
DEFAULT_LANGUAGES = ("sql", "mysql", "postgresql", "postgres", "sqlite", "tsql", "plsql")


class Settings(BaseSettings):
    """Validator configuration."""

    languages: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_LANGUAGES),
        description="Fence language tags whose blocks are checked (comma separated in env)",
    )
    skip_marker: str = Field(
        default="nocheck", description="Info-string word that marks a block as not checked"
    )
    require_semicolon: bool = Field(
        default=False, description="Require every statement, including the last, to end with ';'"
    )
    lint_anchors: bool = Field(default=True, description="Check that #anchor links resolve to headings")
    lint_headings: bool = Field(default=True, description="Check that heading levels are not skipped")
    lint_fences: bool = Field(default=True, description="Report code fences that are never closed")
    output_format: Literal["text", "json"] = Field(default="text", description="Report format")
    log_level: str = Field(default="WARNING", description="Logging level for diagnostics on stderr")

    model_config = SettingsConfigDict(
        env_prefix="SQLDOCCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("languages", mode="before")
    @classmethod
    def _split_languages(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return [lang.strip().lower() for lang in value if lang and lang.strip()]

    @field_validator("skip_marker")
    @classmethod
    def _normalise_marker(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("skip_marker must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper()
