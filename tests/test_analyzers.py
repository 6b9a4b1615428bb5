"""Behavioral tests for the four prompt analyzers."""

from __future__ import annotations

import textwrap

import pytest

from prompt_advisor.analysis import ExampleQuality, Specificity
from prompt_advisor.analyzers import (
    ClarityAnalyzer,
    ContextAnalyzer,
    ContextAnalyzerConfig,
    PatternAnalyzer,
    PatternAnalyzerConfig,
    TokenAnalyzer,
)

AUTH_PROMPT = textwrap.dedent("""\
    Implement user authentication with JWT tokens.

    Requirements:
    - 1 hour token expiry
    - Bcrypt password hashing
    - Rate limiting (5 attempts per minute)

    Existing pattern:
    ```typescript
    async function handleLogin(req: Request) {
      // Current auth structure
    }
    ```
""")

# ---------------------------------------------------------------------------
# TokenAnalyzer
# ---------------------------------------------------------------------------


def test_token_flags_brief_prompt() -> None:
    result = TokenAnalyzer().analyze("Add feature")

    assert result.current_tokens == 3
    assert result.score < 8
    assert any("brief" in issue for issue in result.issues)
    assert result.suggestions


def test_token_flags_large_prompt() -> None:
    result = TokenAnalyzer().analyze("x" * 20_000)

    assert result.current_tokens == 5000
    assert result.score < 9
    assert any("Large prompt" in issue for issue in result.issues)


def test_token_resolves_model_context_limits() -> None:
    prompt = "x" * 10_000
    analyzer = TokenAnalyzer()

    sonnet = analyzer.analyze(prompt, [], "claude-sonnet-4.5")
    opus = analyzer.analyze(prompt, [], "claude-opus-4")

    assert sonnet.max_tokens == 1_000_000
    assert opus.max_tokens == 200_000
    assert sonnet.context_window_usage < opus.context_window_usage
    assert sonnet.model_id == "claude-sonnet-4.5"


def test_token_unknown_model_falls_back_to_default_limit() -> None:
    analyzer = TokenAnalyzer()

    assert analyzer.analyze("x" * 400, model_id="gpt-nonexistent").max_tokens == 200_000
    missing = analyzer.analyze("x" * 400)
    assert missing.max_tokens == 200_000
    assert missing.model_id == "unknown"


def test_token_counts_history_messages() -> None:
    history = [
        {"role": "user", "content": "x" * 10_000},
        {"role": "assistant", "content": "y" * 10_000},
    ]

    result = TokenAnalyzer().analyze("New prompt", history)

    assert result.history_tokens > 5000
    assert result.total_tokens == result.current_tokens + result.history_tokens
    assert result.total_tokens > result.current_tokens


def test_token_tolerates_non_json_history_entries() -> None:
    result = TokenAnalyzer().analyze("New prompt", [object(), "plain text", None])

    assert result.history_tokens > 0


def test_token_usage_penalties_stack_past_critical_threshold() -> None:
    high = TokenAnalyzer().analyze("x" * (4 * 160_000))
    critical = TokenAnalyzer().analyze("x" * (4 * 190_000))

    assert high.context_window_usage == pytest.approx(80.0)
    assert high.score == 10 - 2 - 2
    assert any(issue.startswith("High context window usage (80.0%)") for issue in high.issues)

    assert critical.score == 10 - 2 - 2 - 3
    assert any("Very high context window usage" in issue for issue in critical.issues)
    assert len(critical.suggestions) == 3


# ---------------------------------------------------------------------------
# PatternAnalyzer
# ---------------------------------------------------------------------------


def test_pattern_flags_implementation_request_without_examples() -> None:
    result = PatternAnalyzer().analyze("Implement a new feature for user authentication")

    assert result.has_examples is False
    assert result.score < 7
    assert any("code patterns" in suggestion for suggestion in result.suggestions)


def test_pattern_recognizes_single_code_example() -> None:
    result = PatternAnalyzer().analyze(AUTH_PROMPT)

    assert result.has_examples is True
    assert result.code_block_count == 1
    assert result.example_quality != ExampleQuality.NONE


def test_pattern_flags_many_examples() -> None:
    examples = "\n\n".join(["```typescript\ncode\n```"] * 7)

    result = PatternAnalyzer().analyze(f"Task description\n\n{examples}")

    assert result.code_block_count == 7
    assert any("Many examples" in issue for issue in result.issues)


def test_pattern_grades_example_quality_by_length() -> None:
    analyzer = PatternAnalyzer()

    short = analyzer.analyze("Task\n```ts\nx\n```")
    long = analyzer.analyze("Task\n```typescript\n" + "x" * 300 + "\n```")

    assert short.example_quality == ExampleQuality.LOW
    assert short.score == 9
    assert long.example_quality == ExampleQuality.HIGH
    assert long.score == 10


def test_pattern_non_implementation_prompt_without_examples_is_neutral() -> None:
    result = PatternAnalyzer().analyze("Explain the difference between a list and a tuple.")

    assert result.score == 10
    assert result.example_quality == ExampleQuality.NONE


def test_pattern_unbalanced_fence_gives_fractional_count() -> None:
    result = PatternAnalyzer().analyze("Task\n```python\nprint(1)")

    assert result.code_block_count == 0.5
    assert result.has_examples is True
    assert result.to_payload()["codeBlockCount"] == 0.5


def test_pattern_missing_examples_check_can_be_disabled() -> None:
    analyzer = PatternAnalyzer(
        PatternAnalyzerConfig(require_examples_for_implementation=False)
    )

    assert analyzer.analyze("Implement a cache").score == 10


# ---------------------------------------------------------------------------
# ClarityAnalyzer
# ---------------------------------------------------------------------------


def test_clarity_flags_vague_request() -> None:
    result = ClarityAnalyzer().analyze("Make it better and add some features")

    assert result.specificity == Specificity.VAGUE
    assert result.score < 7
    assert result.has_requirements is False


def test_clarity_recognizes_requirements() -> None:
    prompt = textwrap.dedent("""\
        Add authentication.

        Requirements:
        - JWT tokens with 1 hour expiry
        - Bcrypt password hashing
        - Rate limiting on login endpoint
    """)

    result = ClarityAnalyzer().analyze(prompt)

    assert result.has_requirements is True
    assert result.specificity != Specificity.VAGUE
    assert result.score > 7


def test_clarity_requirements_and_constraints_are_specific() -> None:
    prompt = textwrap.dedent("""\
        Requirements:
        - Add caching

        Constraints:
        - Must not use Redis
        - Cannot exceed 100ms latency
    """)

    result = ClarityAnalyzer().analyze(prompt)

    assert result.has_requirements is True
    assert result.has_constraints is True
    assert result.specificity == Specificity.SPECIFIC


def test_clarity_penalizes_long_unstructured_prompt() -> None:
    result = ClarityAnalyzer().analyze("Add feature. " * 200)

    assert result.score < 9
    assert any("numbered requirements" in s for s in result.suggestions)


def test_clarity_code_example_offsets_vagueness() -> None:
    result = ClarityAnalyzer().analyze("Improve this:\n```python\nx = 1\n```")

    assert result.specificity == Specificity.MODERATE
    assert result.score == 10 - 4 + 2
    assert result.issues == ["Vague request without explicit requirements"]


def test_clarity_offset_never_lifts_score_above_ten() -> None:
    prompt = "Requirements: improve caching\n```python\ncache = {}\n```"

    result = ClarityAnalyzer().analyze(prompt)

    assert result.has_requirements is True
    assert result.score == 10


def test_clarity_accepts_unused_task_context() -> None:
    analyzer = ClarityAnalyzer()
    prompt = "Make it better"

    assert analyzer.analyze(prompt, "Building a REST API") == analyzer.analyze(prompt)


# ---------------------------------------------------------------------------
# ContextAnalyzer
# ---------------------------------------------------------------------------


def test_context_flags_high_redundancy() -> None:
    redundant = "\n".join(["same line repeated"] * 50)

    result = ContextAnalyzer().analyze(redundant)

    assert result.redundancy_score > 0.3
    assert any("redundancy" in issue for issue in result.issues)
    assert result.issues == ["High redundancy detected (98%)"]


def test_context_scores_distinct_lines_well() -> None:
    unique = "\n".join(f"line {index}" for index in range(50))

    result = ContextAnalyzer().analyze(unique)

    assert result.redundancy_score < 0.1
    assert result.score > 8


def test_context_ignores_redundancy_below_minimum_line_count() -> None:
    result = ContextAnalyzer().analyze("\n".join(["same line repeated"] * 9))

    assert result.redundancy_score == 0


def test_context_relevance_rewards_history_references() -> None:
    history = [{"role": "user", "content": "some previous context"}]
    analyzer = ContextAnalyzer()

    with_ref = analyzer.analyze("As we discussed previously, implement the feature", history)
    without_ref = analyzer.analyze("Implement a new feature", history)

    assert with_ref.relevance_score == 0.8
    assert without_ref.relevance_score == 0.6
    assert with_ref.relevance_score > without_ref.relevance_score


def test_context_without_history_assumes_relevance() -> None:
    analyzer = ContextAnalyzer()

    assert analyzer.analyze("Implement a new feature").relevance_score == 0.9
    assert analyzer.analyze("Implement a new feature", []).relevance_score == 0.9


def test_context_relevance_penalty_applies_with_stricter_threshold() -> None:
    analyzer = ContextAnalyzer(ContextAnalyzerConfig(min_relevance=0.7))
    history = [{"role": "user", "content": "earlier"}]

    result = analyzer.analyze("Implement a new feature", history)

    assert result.score == 8
    assert result.issues == ["Context may include irrelevant information"]


# ---------------------------------------------------------------------------
# Integration
# ---------------------------------------------------------------------------


def test_well_formed_prompt_scores_well_on_every_dimension() -> None:
    token = TokenAnalyzer().analyze(AUTH_PROMPT)
    pattern = PatternAnalyzer().analyze(AUTH_PROMPT)
    clarity = ClarityAnalyzer().analyze(AUTH_PROMPT)
    context = ContextAnalyzer().analyze(AUTH_PROMPT)

    assert token.score >= 7
    assert pattern.score >= 7
    assert clarity.score >= 7
    assert context.score >= 7
    assert pattern.has_examples is True
    assert clarity.has_requirements is True


_BOUNDS_PROMPTS = [
    "",
    "Add feature",
    "fix it " * 500,
    "Improve it\n```\n```\n```\n```\n```\n```\n```\n```\n```\n```\n```\n```",
    "Requirements: improve and update\nConstraints: avoid: x\n```py\nx\n```",
    "\n".join(["duplicated content line"] * 80),
    "x" * (4 * 250_000),
]


@pytest.mark.parametrize("prompt", _BOUNDS_PROMPTS)
def test_all_scores_stay_within_bounds(prompt: str) -> None:
    history = [{"role": "user", "content": "before"}]
    for result in (
        TokenAnalyzer().analyze(prompt, history),
        PatternAnalyzer().analyze(prompt),
        ClarityAnalyzer().analyze(prompt),
        ContextAnalyzer().analyze(prompt, history),
    ):
        assert 0 <= result.score <= 10
