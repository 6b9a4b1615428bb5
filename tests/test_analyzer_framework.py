"""Tests for the modular analyzer framework."""


import pytest

from prompt_advisor.analysis import PromptDocument
from prompt_advisor.analyzers import (
    Analyzer,
    AnalyzerConfig,
    Dimension,
    Pipeline,
    TokenAnalyzer,
    TokenAnalyzerConfig,
)


def test_default_pipeline_covers_all_dimensions() -> None:
    """Default pipeline should include one analyzer per dimension, in order."""
    analyzers = Pipeline.from_json().analyzers
    assert [analyzer.dimension for analyzer in analyzers] == [
        Dimension.TOKEN,
        Dimension.PATTERN,
        Dimension.CLARITY,
        Dimension.CONTEXT,
    ]


def test_analyzer_without_config_uses_defaults() -> None:
    """Omitting config should instantiate the inferred config type's defaults."""
    analyzer = TokenAnalyzer()
    assert analyzer.config == TokenAnalyzerConfig()


def test_analyzer_to_dict_from_dict_round_trip() -> None:
    """Analyzers should round-trip config through base serialization helpers."""
    analyzer = TokenAnalyzer(TokenAnalyzerConfig(optimal_min=50, optimal_max=500))

    raw = analyzer.to_dict()
    assert raw["optimal_min"] == 50
    assert raw["optimal_max"] == 500

    rebuilt = TokenAnalyzer.from_dict(raw)
    assert isinstance(rebuilt, TokenAnalyzer)
    assert rebuilt.config == analyzer.config


def test_from_dict_accepts_camel_case_and_keeps_other_defaults() -> None:
    """Partial camelCase overrides replace only the named fields."""
    analyzer = TokenAnalyzer.from_dict({"optimalMin": 10, "warningThreshold": 4000})

    assert analyzer.config.optimal_min == 10
    assert analyzer.config.optimal_max == TokenAnalyzerConfig().optimal_max


def test_from_dict_rejects_wrong_field_types() -> None:
    """Type mismatches in overrides should raise instead of being coerced."""
    with pytest.raises(TypeError):
        TokenAnalyzer.from_dict({"optimalMin": "many"})

    with pytest.raises(TypeError):
        TokenAnalyzer.from_dict({"optimalMin": True})


_DEFAULT_ANALYZERS = Pipeline.from_json().analyzers
_ANALYZER_EXAMPLE_IDS = [analyzer.__class__.__name__ for analyzer in _DEFAULT_ANALYZERS]


@pytest.mark.parametrize("analyzer", _DEFAULT_ANALYZERS, ids=_ANALYZER_EXAMPLE_IDS)
def test_analyzer_examples_match_forward_behavior(
    analyzer: Analyzer[AnalyzerConfig],
) -> None:
    """Each analyzer should penalize its violations and spare its non-violations."""
    violation_examples = analyzer.example_violations()
    non_violation_examples = analyzer.example_non_violations()

    assert violation_examples, (
        f"{analyzer.__class__.__name__} must define at least one violation example"
    )
    assert non_violation_examples, (
        f"{analyzer.__class__.__name__} must define at least one non-violation example"
    )

    for text in violation_examples:
        result = analyzer.forward(PromptDocument.from_request(text))
        assert result.score < 10, (
            f"{analyzer.__class__.__name__} expected a penalty for: {text[:60]!r}"
        )
        assert result.suggestions

    for text in non_violation_examples:
        result = analyzer.forward(PromptDocument.from_request(text))
        assert result.score == 10, (
            f"{analyzer.__class__.__name__} expected no penalty for: {text[:60]!r}"
        )
        assert not result.issues
