"""Analyzer pipeline orchestration and score aggregation."""


from datetime import datetime
from pathlib import Path

from prompt_advisor.analysis import (
    WEIGHTS,
    AggregationWeights,
    Evaluation,
    HistoryMessage,
    PromptDocument,
    combine,
    utc_timestamp,
)

from .clarity_analyzer import ClarityAnalyzer
from .context_analyzer import ContextAnalyzer
from .pattern_analyzer import PatternAnalyzer
from .rules import RulesConfig, load_rules
from .token_analyzer import TokenAnalyzer


class Pipeline:
    """The four dimension analyzers plus weighted aggregation.

    Analyzers share only the read-only document and their frozen configs, so
    the order they run in does not affect the result.
    """

    def __init__(
        self,
        token: TokenAnalyzer,
        pattern: PatternAnalyzer,
        clarity: ClarityAnalyzer,
        context: ContextAnalyzer,
        weights: AggregationWeights = WEIGHTS,
    ) -> None:
        self.token = token
        self.pattern = pattern
        self.clarity = clarity
        self.context = context
        self.weights = weights

    @classmethod
    def from_rules(cls, rules: RulesConfig) -> "Pipeline":
        """Build analyzers configured from one rules object."""
        return cls(
            TokenAnalyzer(rules.token),
            PatternAnalyzer(rules.pattern),
            ClarityAnalyzer(rules.clarity),
            ContextAnalyzer(rules.context),
        )

    @classmethod
    def from_json(cls, path: str | Path | None = None) -> "Pipeline":
        """Build a pipeline from a rules override file, or defaults if omitted."""
        return cls.from_rules(load_rules(path))

    @property
    def analyzers(self) -> tuple[TokenAnalyzer, PatternAnalyzer, ClarityAnalyzer, ContextAnalyzer]:
        return (self.token, self.pattern, self.clarity, self.context)

    def forward(
        self, document: PromptDocument, *, timestamp: datetime | None = None
    ) -> Evaluation:
        """Run every analyzer and combine the results."""
        token = self.token.forward(document)
        pattern = self.pattern.forward(document)
        clarity = self.clarity.forward(document)
        context = self.context.forward(document)
        overall_score, recommendations = combine(
            token, pattern, clarity, context, self.weights
        )

        return Evaluation(
            overall_score=overall_score,
            token=token,
            pattern=pattern,
            clarity=clarity,
            context=context,
            recommendations=tuple(recommendations),
            timestamp=utc_timestamp(timestamp),
        )

    def evaluate(
        self,
        prompt: str,
        history: list[HistoryMessage] | None = None,
        task_context: str | None = None,
        model_id: str | None = None,
    ) -> Evaluation:
        """Analyze raw request fields."""
        document = PromptDocument.from_request(
            prompt,
            history=history,
            task_context=task_context,
            model_id=model_id,
        )
        return self.forward(document)
