"""Detect vague requests and missing requirement structure.

Objective: Reward prompts that state explicit requirements and constraints,
and penalize vague asks ("make it better", "improve") that leave the model to
invent the acceptance criteria.

Example Violations:
    - "Make it better and add some features"
      Vague phrasing with no requirements section.
    - Two hundred repetitions of "Add feature. " with no structure.
      Long prompt without numbered requirements.

Example Non-Violations:
    - "Requirements: ... Constraints: ..."
      Explicit markers make the request specific.

Severity: High for vague requests; a fenced example partially offsets it.
"""


from dataclasses import dataclass

from prompt_advisor.analysis import (
    ClarityAnalysis,
    PromptDocument,
    Specificity,
    clamp_score,
)

from prompt_advisor.analyzers.base import Analyzer, AnalyzerConfig, Dimension

VAGUE_PHRASES: tuple[str, ...] = (
    "add feature",
    "make it better",
    "improve",
    "fix it",
    "update",
)
REQUIREMENT_MARKERS: tuple[str, ...] = (
    "requirements:",
    "needs to:",
    "must:",
    "should:",
    "requirements are:",
)
CONSTRAINT_MARKERS: tuple[str, ...] = (
    "constraints:",
    "limitations:",
    "must not:",
    "cannot:",
    "avoid:",
)


@dataclass(frozen=True)
class ClarityAnalyzerConfig(AnalyzerConfig):
    """Config for clarity and specificity checks."""

    require_explicit_requirements: bool = True
    long_prompt_chars: int = 1000
    vague_phrases: tuple[str, ...] = VAGUE_PHRASES
    requirement_markers: tuple[str, ...] = REQUIREMENT_MARKERS
    constraint_markers: tuple[str, ...] = CONSTRAINT_MARKERS
    vague_penalty: int = 4
    unstructured_penalty: int = 2
    example_offset: int = 2


class ClarityAnalyzer(Analyzer[ClarityAnalyzerConfig]):
    """Classify specificity from requirement markers and vague phrases."""

    name = "clarity"
    dimension = Dimension.CLARITY

    def example_violations(self) -> list[str]:
        return ["Make it better and add some features", "Add feature. " * 200]

    def example_non_violations(self) -> list[str]:
        return [
            (
                "Requirements:\n- Add caching\n\n"
                "Constraints:\n- Must not use Redis\n"
            ),
            "Explain how the scheduler picks the next job.",
        ]

    def analyze(self, prompt: str, task_context: str | None = None) -> ClarityAnalysis:
        return self.forward(PromptDocument.from_request(prompt, task_context=task_context))

    def forward(self, document: PromptDocument) -> ClarityAnalysis:
        """Match markers and vague phrases, then assign specificity."""
        # task_context is carried on the document but not scored yet.
        config = self.config
        lower_text = document.lower_text
        has_requirements = any(marker in lower_text for marker in config.requirement_markers)
        has_constraints = any(marker in lower_text for marker in config.constraint_markers)
        vague_count = sum(1 for phrase in config.vague_phrases if phrase in lower_text)

        result = ClarityAnalysis(
            has_requirements=has_requirements,
            has_constraints=has_constraints,
        )

        if vague_count > 0 and not has_requirements:
            result.specificity = Specificity.VAGUE
            result.penalize(
                config.vague_penalty,
                "Vague request without explicit requirements",
                'Add a "Requirements:" section with specific details',
            )
        elif has_requirements and has_constraints:
            result.specificity = Specificity.SPECIFIC

        if (
            config.require_explicit_requirements
            and len(document.text) > config.long_prompt_chars
            and not has_requirements
        ):
            result.penalize(
                config.unstructured_penalty,
                "Long prompt without structured requirements",
                "Break down into numbered requirements",
            )

        if vague_count > 0 and document.has_code_fence:
            result.score += config.example_offset
            result.specificity = Specificity.MODERATE

        result.score = clamp_score(result.score)
        return result
