"""Rule thresholds for all analyzers and JSON override loading."""


import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .clarity_analyzer import ClarityAnalyzerConfig
from .context_analyzer import ContextAnalyzerConfig
from .pattern_analyzer import PatternAnalyzerConfig
from .token_analyzer import TokenAnalyzerConfig

logger = logging.getLogger(__name__)

_SECTION_NAMES: tuple[str, ...] = ("token", "pattern", "clarity", "context")


@dataclass(frozen=True)
class RulesConfig:
    """Immutable per-analyzer thresholds."""

    token: TokenAnalyzerConfig = field(default_factory=TokenAnalyzerConfig)
    pattern: PatternAnalyzerConfig = field(default_factory=PatternAnalyzerConfig)
    clarity: ClarityAnalyzerConfig = field(default_factory=ClarityAnalyzerConfig)
    context: ContextAnalyzerConfig = field(default_factory=ContextAnalyzerConfig)

    def to_dict(self) -> dict[str, dict[str, object]]:
        """Serialize every section to plain dictionaries."""
        return {name: getattr(self, name).to_dict() for name in _SECTION_NAMES}

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "RulesConfig":
        """Overlay a partial override onto the defaults, one section at a time.

        Raises:
            TypeError: If the override or one of its sections is not an object,
                or a field has the wrong type.
        """
        if not isinstance(raw, Mapping):
            raise TypeError("Rules configuration must be a JSON object")

        defaults = cls()
        sections: dict[str, object] = {}
        for name in _SECTION_NAMES:
            section_raw = raw.get(name)
            default_section = getattr(defaults, name)
            if section_raw is None:
                sections[name] = default_section
                continue
            if not isinstance(section_raw, Mapping):
                raise TypeError(f"Rules section '{name}' must be a JSON object")
            sections[name] = default_section.merged(section_raw)

        for name in raw:
            if name not in _SECTION_NAMES:
                logger.warning("Ignoring unknown rules section: %s", name)

        return cls(**sections)

    @classmethod
    def from_json(cls, path: str | Path) -> "RulesConfig":
        """Read and merge a JSON override file. Errors propagate."""
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
        return cls.from_dict(payload)


DEFAULT_RULES = RulesConfig()


def load_rules(path: str | Path | None) -> RulesConfig:
    """Load rule overrides, falling back to defaults on any failure."""
    if not path:
        logger.info("No rules path provided, using default rules")
        return DEFAULT_RULES

    try:
        rules = RulesConfig.from_json(Path(path).expanduser().resolve())
    except (OSError, ValueError, TypeError) as exc:
        logger.error("Failed to load rules from %s: %s", path, exc)
        logger.warning("Falling back to default rules")
        return DEFAULT_RULES

    logger.info("Loaded rules from %s", path)
    return rules
