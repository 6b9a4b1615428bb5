"""Shared base types for analyzer definitions."""


import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, fields
from enum import StrEnum
from typing import Generic, Mapping, TypeVar, cast, get_args, get_origin

from prompt_advisor.analysis import AnalyzerResult, PromptDocument

logger = logging.getLogger(__name__)


class Dimension(StrEnum):
    """Quality dimension scored by an analyzer."""

    TOKEN = "token"
    PATTERN = "pattern"
    CLARITY = "clarity"
    CONTEXT = "context"


def _snake_case(key: str) -> str:
    """Convert ``optimalMin`` style keys to ``optimal_min``."""
    chars: list[str] = []
    for ch in key:
        if ch.isupper():
            chars.append("_")
            chars.append(ch.lower())
        else:
            chars.append(ch)
    return "".join(chars)


@dataclass(frozen=True)
class AnalyzerConfig:
    """Base config container inherited by concrete analyzer configs."""

    def to_dict(self) -> dict[str, object]:
        """Serialize the config dataclass to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(
        cls: type["ConfigFromDictT"], raw: Mapping[str, object]
    ) -> "ConfigFromDictT":
        """Instantiate a config from defaults overlaid with ``raw`` fields."""
        return cls().merged(raw)

    def merged(self: "ConfigFromDictT", raw: Mapping[str, object]) -> "ConfigFromDictT":
        """Return a copy where each field present in ``raw`` replaces ours.

        Keys may be camelCase or snake_case. List values replace the default
        list outright. Unknown keys are logged and ignored.
        """
        known = {f.name: f for f in fields(self)}
        values = self.to_dict()
        for key, value in raw.items():
            name = _snake_case(key)
            if name not in known:
                logger.warning(
                    "Ignoring unknown %s field: %s", type(self).__name__, key
                )
                continue
            default = values[name]
            if isinstance(default, tuple):
                if not isinstance(value, (list, tuple)):
                    raise TypeError(f"{key} must be a list, got {type(value).__name__}")
                value = tuple(str(item) for item in value)
            elif isinstance(default, bool):
                if not isinstance(value, bool):
                    raise TypeError(f"{key} must be a boolean")
            elif isinstance(default, (int, float)):
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise TypeError(f"{key} must be a number")
            values[name] = value
        return type(self)(**values)


ConfigT = TypeVar("ConfigT", bound=AnalyzerConfig)
ConfigFromDictT = TypeVar("ConfigFromDictT", bound=AnalyzerConfig)
AnalyzerFromDictT = TypeVar("AnalyzerFromDictT", bound="Analyzer[AnalyzerConfig]")


class Analyzer(ABC, Generic[ConfigT]):
    """Base analyzer class exposing a forward pass over a prompt document."""

    name: str = "analyzer"
    dimension: Dimension = Dimension.TOKEN

    def __init__(self, config: ConfigT | None = None) -> None:
        """Initialize an analyzer, using default thresholds when omitted."""
        if config is None:
            config = cast(ConfigT, self._resolve_config_type()())
        self.config = config

    def to_dict(self) -> dict[str, object]:
        """Serialize this analyzer's config as a plain dictionary."""
        return self.config.to_dict()

    @classmethod
    def from_dict(
        cls: type["AnalyzerFromDictT"], raw: Mapping[str, object]
    ) -> "AnalyzerFromDictT":
        """Instantiate an analyzer from a plain (possibly partial) config."""
        config_type = cls._resolve_config_type()
        return cls(config_type.from_dict(raw))

    @classmethod
    def _resolve_config_type(cls) -> type[AnalyzerConfig]:
        """Infer the concrete config type from ``Analyzer[Config]`` inheritance."""
        for base in getattr(cls, "__orig_bases__", ()):
            if get_origin(base) is Analyzer:
                args = get_args(base)
                if len(args) != 1:
                    break
                config_type = args[0]
                if isinstance(config_type, type) and issubclass(
                    config_type, AnalyzerConfig
                ):
                    return cast(type[AnalyzerConfig], config_type)
                break
        raise TypeError(
            f"Could not infer config type for analyzer class {cls.__name__}. "
            "Ensure it subclasses Analyzer[ConcreteConfig]."
        )

    @abstractmethod
    def forward(self, document: PromptDocument) -> AnalyzerResult:
        """Score the document and return issues and suggestions."""

    @abstractmethod
    def example_violations(self) -> list[str]:
        """Return prompts that should be penalized by this analyzer."""

    @abstractmethod
    def example_non_violations(self) -> list[str]:
        """Return prompts that should keep the full score."""
