"""Estimate the token budget of a prompt and its conversation history.

Objective: Flag prompts that are too brief to carry useful context, prompts
large enough to dilute attention, and conversations that approach the model's
context window.

Example Violations:
    - "Add feature"
      Three estimated tokens leave the model guessing.
    - A 20,000 character paste of log output.
      Five thousand tokens of undifferentiated context.

Example Non-Violations:
    - A few paragraphs describing a change with one short code example.
      Between the optimal minimum and maximum.

Severity: Low to high; context-window pressure stacks on top of size issues.
"""


from dataclasses import dataclass

from prompt_advisor.analysis import (
    PromptDocument,
    TokenAnalysis,
    clamp_score,
    estimate_tokens,
    serialize_history_message,
)

from prompt_advisor.analyzers.base import Analyzer, AnalyzerConfig, Dimension

MODEL_CONTEXT_LIMITS: dict[str, int] = {
    "claude-opus-4": 200_000,
    "claude-sonnet-4.5": 1_000_000,
    "claude-sonnet-4": 200_000,
    "claude-haiku-4": 200_000,
}
DEFAULT_CONTEXT_LIMIT = 200_000
UNKNOWN_MODEL_ID = "unknown"


@dataclass(frozen=True)
class TokenAnalyzerConfig(AnalyzerConfig):
    """Config for token budget checks."""

    optimal_min: int = 100
    optimal_max: int = 3000
    high_usage_percent: float = 75.0
    critical_usage_percent: float = 90.0
    brief_penalty: int = 3
    large_penalty: int = 2
    high_usage_penalty: int = 2
    critical_usage_penalty: int = 3


def context_limit_for(model_id: str | None) -> int:
    """Resolve a model's context window size, defaulting for unknown ids."""
    if not model_id:
        return DEFAULT_CONTEXT_LIMIT
    return MODEL_CONTEXT_LIMITS.get(model_id, DEFAULT_CONTEXT_LIMIT)


class TokenAnalyzer(Analyzer[TokenAnalyzerConfig]):
    """Score prompt size and context window usage."""

    name = "token"
    dimension = Dimension.TOKEN

    def example_violations(self) -> list[str]:
        return ["Add feature", "x" * 20_000]

    def example_non_violations(self) -> list[str]:
        return [
            "Refactor the billing module so invoices are generated per tenant. "
            * 8
        ]

    def analyze(
        self,
        prompt: str,
        history: list[object] | None = None,
        model_id: str | None = None,
    ) -> TokenAnalysis:
        return self.forward(
            PromptDocument.from_request(prompt, history=history, model_id=model_id)
        )

    def forward(self, document: PromptDocument) -> TokenAnalysis:
        """Estimate tokens and apply size and usage penalties."""
        config = self.config
        max_tokens = context_limit_for(document.model_id)
        current_tokens = estimate_tokens(document.text)
        history_tokens = sum(
            estimate_tokens(serialize_history_message(message))
            for message in document.history
        )
        total_tokens = current_tokens + history_tokens
        usage = total_tokens / max_tokens * 100

        result = TokenAnalysis(
            total_tokens=total_tokens,
            history_tokens=history_tokens,
            current_tokens=current_tokens,
            context_window_usage=usage,
            max_tokens=max_tokens,
            model_id=document.model_id or UNKNOWN_MODEL_ID,
        )

        if current_tokens < config.optimal_min:
            result.penalize(
                config.brief_penalty,
                f"Very brief prompt ({current_tokens} tokens)",
                "Add relevant code examples or context",
            )
        elif current_tokens > config.optimal_max:
            result.penalize(
                config.large_penalty,
                f"Large prompt ({current_tokens} tokens)",
                "Consider splitting into focused chunks",
            )

        if usage > config.high_usage_percent:
            result.penalize(
                config.high_usage_penalty,
                f"High context window usage ({usage:.1f}%)",
                "Consider /clear to reset conversation",
            )
        if usage > config.critical_usage_percent:
            result.penalize(
                config.critical_usage_penalty,
                f"Very high context window usage ({usage:.1f}%)",
                "Context window nearly full - reset conversation",
            )

        result.score = clamp_score(result.score)
        return result
