"""Public package interface for prompt-advisor."""

from .cli import cli_main
from .server import (
    _analyze,
    main,
    prompt_advisor_analyze,
    prompt_advisor_report,
)

__all__ = [
    "_analyze",
    "cli_main",
    "main",
    "prompt_advisor_analyze",
    "prompt_advisor_report",
]
