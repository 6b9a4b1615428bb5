"""Estimate redundancy and relevance of the context a prompt carries.

Objective: Catch prompts padded with duplicated lines (the same snippet pasted
twice, repeated log lines) and estimate whether the prompt ties back to the
conversation it continues.

Example Violations:
    - Fifty copies of the same log line.
      Nearly all non-trivial lines are duplicates.

Example Non-Violations:
    - Fifty distinct numbered lines.
      No duplicate content.

Severity: Medium for redundancy. The relevance heuristic only returns 0.9,
0.8 or 0.6, so its penalty below ``min_relevance`` never fires with the
default threshold.
"""


import re
from dataclasses import dataclass

from prompt_advisor.analysis import ContextAnalysis, PromptDocument, clamp_score

from prompt_advisor.analyzers.base import Analyzer, AnalyzerConfig, Dimension

_HISTORY_REFERENCE_RE = re.compile(
    r"as we discussed|previously|earlier|before", re.IGNORECASE
)

NO_HISTORY_RELEVANCE = 0.9
REFERENCED_HISTORY_RELEVANCE = 0.8
UNREFERENCED_HISTORY_RELEVANCE = 0.6


@dataclass(frozen=True)
class ContextAnalyzerConfig(AnalyzerConfig):
    """Config for redundancy and relevance checks."""

    max_redundancy: float = 0.3
    min_relevance: float = 0.5
    min_line_length: int = 10
    min_lines: int = 10
    redundancy_penalty: int = 3
    relevance_penalty: int = 2


def redundancy_ratio(lines: tuple[str, ...], min_line_length: int, min_lines: int) -> float:
    """Fraction of non-trivial lines that repeat an earlier line."""
    content_lines = [line for line in lines if len(line.strip()) > min_line_length]
    if len(content_lines) < min_lines:
        return 0.0
    return 1 - len(set(content_lines)) / len(content_lines)


def estimate_relevance(text: str, history: tuple[object, ...]) -> float:
    """Heuristic relevance of a prompt to its conversation history."""
    if not history:
        return NO_HISTORY_RELEVANCE
    if _HISTORY_REFERENCE_RE.search(text):
        return REFERENCED_HISTORY_RELEVANCE
    return UNREFERENCED_HISTORY_RELEVANCE


class ContextAnalyzer(Analyzer[ContextAnalyzerConfig]):
    """Score duplicate content and references to earlier conversation."""

    name = "context"
    dimension = Dimension.CONTEXT

    def example_violations(self) -> list[str]:
        return ["\n".join(["same line repeated"] * 50)]

    def example_non_violations(self) -> list[str]:
        return ["\n".join(f"distinct line number {index}" for index in range(50))]

    def analyze(self, prompt: str, history: list[object] | None = None) -> ContextAnalysis:
        return self.forward(PromptDocument.from_request(prompt, history=history))

    def forward(self, document: PromptDocument) -> ContextAnalysis:
        """Measure line redundancy and history relevance."""
        config = self.config
        redundancy = redundancy_ratio(
            document.lines, config.min_line_length, config.min_lines
        )
        relevance = estimate_relevance(document.text, document.history)
        result = ContextAnalysis(redundancy_score=redundancy, relevance_score=relevance)

        if redundancy > config.max_redundancy:
            result.penalize(
                config.redundancy_penalty,
                f"High redundancy detected ({redundancy * 100:.0f}%)",
                "Remove duplicate or very similar examples",
            )

        if relevance < config.min_relevance:
            result.penalize(
                config.relevance_penalty,
                "Context may include irrelevant information",
                "Focus on code/docs directly related to the task",
            )

        result.score = clamp_score(result.score)
        return result
