"""Core analysis models and scoring helpers for prompt-advisor."""


import json
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, TypeAlias

AnalysisPayload: TypeAlias = dict[str, object]
HistoryMessage: TypeAlias = Any

CODE_FENCE = "```"


class ExampleQuality(StrEnum):
    """Ordinal quality of fenced code examples."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Specificity(StrEnum):
    """Ordinal clarity classification of a prompt."""

    VAGUE = "vague"
    MODERATE = "moderate"
    SPECIFIC = "specific"


@dataclass(frozen=True)
class AggregationWeights:
    """Fixed weights and thresholds used to combine analyzer scores."""

    token: float = 0.30
    pattern: float = 0.25
    clarity: float = 0.25
    context: float = 0.20

    recommendation_threshold: int = 7
    score_min: int = 0
    score_max: int = 10


WEIGHTS = AggregationWeights()


@dataclass(frozen=True)
class PromptDocument:
    """Precomputed prompt views consumed by analyzers."""

    text: str
    lower_text: str
    lines: tuple[str, ...]
    fence_count: int
    history: tuple[HistoryMessage, ...] = ()
    task_context: str | None = None
    model_id: str | None = None

    @classmethod
    def from_request(
        cls,
        prompt: str,
        history: list[HistoryMessage] | None = None,
        task_context: str | None = None,
        model_id: str | None = None,
    ) -> "PromptDocument":
        """Build a document from the raw fields of an analyze request."""
        return cls(
            text=prompt,
            lower_text=prompt.lower(),
            lines=tuple(prompt.split("\n")),
            fence_count=prompt.count(CODE_FENCE),
            history=tuple(history or ()),
            task_context=task_context,
            model_id=model_id,
        )

    @property
    def has_code_fence(self) -> bool:
        return self.fence_count > 0


@dataclass
class AnalyzerResult:
    """Score, issues, and suggestions emitted by one analyzer."""

    score: int = WEIGHTS.score_max
    issues: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)

    def penalize(self, penalty: int, issue: str | None, suggestion: str | None) -> None:
        """Apply a fixed penalty and record its explanation."""
        self.score -= penalty
        if issue is not None:
            self.issues.append(issue)
        if suggestion is not None:
            self.suggestions.append(suggestion)

    def to_payload(self) -> AnalysisPayload:
        """Serialize the shared fields for tool output."""
        return {
            "score": self.score,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class TokenAnalysis(AnalyzerResult):
    """Token budget estimate against a model context window."""

    total_tokens: int = 0
    history_tokens: int = 0
    current_tokens: int = 0
    context_window_usage: float = 0.0
    max_tokens: int = 0
    model_id: str = "unknown"

    def to_payload(self) -> AnalysisPayload:
        return {
            "score": self.score,
            "totalTokens": self.total_tokens,
            "historyTokens": self.history_tokens,
            "currentTokens": self.current_tokens,
            "contextWindowUsage": self.context_window_usage,
            "maxTokens": self.max_tokens,
            "modelId": self.model_id,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class PatternAnalysis(AnalyzerResult):
    """Presence and quality of fenced code examples."""

    code_block_count: float = 0.0
    has_examples: bool = False
    example_quality: ExampleQuality = ExampleQuality.NONE

    def to_payload(self) -> AnalysisPayload:
        block_count = self.code_block_count
        return {
            "score": self.score,
            "codeBlockCount": int(block_count) if block_count.is_integer() else block_count,
            "hasExamples": self.has_examples,
            "exampleQuality": str(self.example_quality),
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class ClarityAnalysis(AnalyzerResult):
    """Requirement/constraint structure and vagueness of a prompt."""

    has_requirements: bool = False
    has_constraints: bool = False
    specificity: Specificity = Specificity.MODERATE

    def to_payload(self) -> AnalysisPayload:
        return {
            "score": self.score,
            "hasRequirements": self.has_requirements,
            "hasConstraints": self.has_constraints,
            "specificity": str(self.specificity),
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass
class ContextAnalysis(AnalyzerResult):
    """Line redundancy and history relevance of a prompt."""

    redundancy_score: float = 0.0
    relevance_score: float = 0.0

    def to_payload(self) -> AnalysisPayload:
        return {
            "score": self.score,
            "redundancyScore": self.redundancy_score,
            "relevanceScore": self.relevance_score,
            "issues": list(self.issues),
            "suggestions": list(self.suggestions),
        }


@dataclass(frozen=True)
class Evaluation:
    """Combined outcome of one analyze call."""

    overall_score: int
    token: TokenAnalysis
    pattern: PatternAnalysis
    clarity: ClarityAnalysis
    context: ContextAnalysis
    recommendations: tuple[str, ...]
    timestamp: str

    def to_payload(self) -> AnalysisPayload:
        """Serialize the evaluation in the tool response shape."""
        return {
            "overallScore": self.overall_score,
            "tokenAnalysis": self.token.to_payload(),
            "patternAnalysis": self.pattern.to_payload(),
            "clarityAnalysis": self.clarity.to_payload(),
            "contextAnalysis": self.context.to_payload(),
            "recommendations": list(self.recommendations),
            "timestamp": self.timestamp,
        }


def estimate_tokens(text: str) -> int:
    """Approximate token count as one token per four characters."""
    return math.ceil(len(text) / 4)


def serialize_history_message(message: HistoryMessage) -> str:
    """Render one history entry compactly; unknown objects are stringified."""
    return json.dumps(message, separators=(",", ":"), ensure_ascii=False, default=str)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with ties going toward positive infinity."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def clamp_score(score: int, weights: AggregationWeights = WEIGHTS) -> int:
    """Bound an analyzer score to the configured range."""
    return max(weights.score_min, min(weights.score_max, score))


def utc_timestamp(moment: datetime | None = None) -> str:
    """Format an aware UTC instant as ISO-8601 with millisecond precision."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def compute_overall_score(
    token: AnalyzerResult,
    pattern: AnalyzerResult,
    clarity: AnalyzerResult,
    context: AnalyzerResult,
    weights: AggregationWeights = WEIGHTS,
) -> int:
    """Combine the four analyzer scores with fixed weights."""
    weighted = (
        token.score * weights.token
        + pattern.score * weights.pattern
        + clarity.score * weights.clarity
        + context.score * weights.context
    )
    return int(round_half_up(weighted))


def collect_recommendations(
    token: AnalyzerResult,
    pattern: AnalyzerResult,
    clarity: AnalyzerResult,
    context: AnalyzerResult,
    weights: AggregationWeights = WEIGHTS,
) -> list[str]:
    """Gather suggestions from every analyzer scoring below threshold.

    Order is token, pattern, clarity, context. Duplicates across analyzers are
    kept since reports count recommendations by exact string.
    """
    recommendations: list[str] = []
    for result in (token, pattern, clarity, context):
        if result.score < weights.recommendation_threshold:
            recommendations.extend(result.suggestions)
    return recommendations


def combine(
    token: AnalyzerResult,
    pattern: AnalyzerResult,
    clarity: AnalyzerResult,
    context: AnalyzerResult,
    weights: AggregationWeights = WEIGHTS,
) -> tuple[int, list[str]]:
    """Return the overall score and recommendation list for four results."""
    return (
        compute_overall_score(token, pattern, clarity, context, weights),
        collect_recommendations(token, pattern, clarity, context, weights),
    )
