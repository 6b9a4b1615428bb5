"""Detect whether implementation requests carry code examples.

Objective: Implementation work goes better when the prompt shows the patterns
the result must match. Penalize implementation requests with no fenced code,
very short examples, and prompts that bury the task under many examples.

Example Violations:
    - "Implement a new feature for user authentication"
      Asks for code but shows none of the existing style.
    - Seven fenced blocks of boilerplate ahead of a one-line task.
      Too many examples compete for attention.

Example Non-Violations:
    - "Explain the difference between a list and a tuple."
      Not an implementation request, so no examples are expected.
    - "Implement login like this:" followed by one complete function.
      Medium or high quality example.

Severity: High for missing examples, low for brief or excessive ones.

Note: the block count is the number of ``` fences divided by two, so an
unbalanced fence yields a fractional count.
"""


import re
from dataclasses import dataclass

from prompt_advisor.analysis import (
    CODE_FENCE,
    ExampleQuality,
    PatternAnalysis,
    PromptDocument,
    clamp_score,
)

from prompt_advisor.analyzers.base import Analyzer, AnalyzerConfig, Dimension

_IMPLEMENTATION_RE = re.compile(
    r"implement|create|build|generate|write|add", re.IGNORECASE
)
_FENCED_BLOCK_RE = re.compile(r"```.*?```", re.DOTALL)


@dataclass(frozen=True)
class PatternAnalyzerConfig(AnalyzerConfig):
    """Config for code example checks."""

    require_examples_for_implementation: bool = True
    max_examples: int = 5
    min_example_length: int = 50
    high_quality_example_length: int = 200
    missing_examples_penalty: int = 4
    brief_examples_penalty: int = 1
    many_examples_penalty: int = 1


def average_example_length(text: str) -> float:
    """Mean character length of fenced blocks, fences included."""
    blocks = _FENCED_BLOCK_RE.findall(text)
    if not blocks:
        return 0.0
    return sum(len(block) for block in blocks) / len(blocks)


class PatternAnalyzer(Analyzer[PatternAnalyzerConfig]):
    """Score presence and quality of code examples."""

    name = "pattern"
    dimension = Dimension.PATTERN

    def example_violations(self) -> list[str]:
        many_blocks = "\n\n".join(
            f"{CODE_FENCE}python\nvalue = {index}\n{CODE_FENCE}" for index in range(7)
        )
        return [
            "Implement a new feature for user authentication",
            "Task\n```ts\nx\n```",
            f"Task\n\n{many_blocks}",
        ]

    def example_non_violations(self) -> list[str]:
        return [
            "Explain the difference between a list and a tuple.",
            (
                "Implement login like this:\n"
                "```python\n"
                "def login(email: str, password: str) -> User:\n"
                "    user = repository.find_by_email(email)\n"
                "    verify_password(password, user.password_hash)\n"
                "    return user\n"
                "```"
            ),
        ]

    def analyze(self, prompt: str) -> PatternAnalysis:
        return self.forward(PromptDocument.from_request(prompt))

    def forward(self, document: PromptDocument) -> PatternAnalysis:
        """Count fenced blocks and grade them against the request type."""
        config = self.config
        code_block_count = document.fence_count / 2
        has_examples = code_block_count > 0
        result = PatternAnalysis(
            code_block_count=code_block_count,
            has_examples=has_examples,
        )

        is_implementation_request = bool(_IMPLEMENTATION_RE.search(document.text))

        if is_implementation_request and not has_examples:
            if config.require_examples_for_implementation:
                result.penalize(
                    config.missing_examples_penalty,
                    "Implementation request without code examples",
                    "Show existing code patterns to match your style",
                )
        elif has_examples:
            avg_length = average_example_length(document.text)
            if avg_length < config.min_example_length:
                result.example_quality = ExampleQuality.LOW
                result.penalize(
                    config.brief_examples_penalty,
                    None,
                    "Examples are brief - consider more complete examples",
                )
            elif avg_length < config.high_quality_example_length:
                result.example_quality = ExampleQuality.MEDIUM
            else:
                result.example_quality = ExampleQuality.HIGH

            if code_block_count > config.max_examples:
                result.penalize(
                    config.many_examples_penalty,
                    "Many examples may overwhelm context",
                    "Focus on 1-3 most relevant examples",
                )

        result.score = clamp_score(result.score)
        return result
