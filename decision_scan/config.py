"""Runtime settings for decision-scan.

Every field can be set through an environment variable of the same name
(case-insensitive) or a ``.env`` file in the working directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Where to analyse, how to run ESLint, and how to serve the API."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- HTTP service ------------------------------------------------------
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["*"]

    # --- Mismatch analysis -------------------------------------------------
    PROJECT_ROOT: Path = Field(default=Path("."), validate_default=True)
    REPORT_FILENAME: str = "ast-mismatch-report.json"
    ESLINT_COMMAND: str = "npx eslint"
    ESLINT_OUTPUT_FILENAME: str = "complexity-report.json"
    TOP_MISMATCHES: int = 20

    # Defaults to PROJECT_ROOT / REPORT_FILENAME.
    REPORT_PATH: Optional[Path] = None

    @field_validator("PROJECT_ROOT", mode="before")
    @classmethod
    def _absolute_project_root(cls, value: object) -> Path:
        return Path(str(value)).resolve()

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> str:
        return str(value).upper()

    @model_validator(mode="after")
    def _default_report_path(self) -> Settings:
        if self.REPORT_PATH is None:
            self.REPORT_PATH = self.PROJECT_ROOT / self.REPORT_FILENAME
        return self


_settings = Settings()


def get_settings() -> Settings:
    """The settings read when this module was first imported."""
    return _settings
