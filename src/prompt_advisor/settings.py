"""Environment-based settings for the server and CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings

DEFAULT_METRICS_PATH = Path.home() / ".claude" / "prompt-metrics.jsonl"


class Settings(BaseSettings):
    """Reads RULES_PATH, METRICS_PATH and LOG_LEVEL from the environment."""

    rules_path: Path | None = None
    metrics_path: Path = DEFAULT_METRICS_PATH
    log_level: str = "INFO"

    @field_validator("rules_path", mode="before")
    @classmethod
    def _blank_rules_path(cls, v: Any) -> Any:
        """An empty RULES_PATH means packaged defaults."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("metrics_path", mode="before")
    @classmethod
    def _blank_metrics_path(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_METRICS_PATH
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }
