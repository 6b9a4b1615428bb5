"""Analyzer framework exports."""

from .base import Analyzer, AnalyzerConfig, Dimension
from .clarity_analyzer import ClarityAnalyzer, ClarityAnalyzerConfig
from .context_analyzer import ContextAnalyzer, ContextAnalyzerConfig
from .pattern_analyzer import PatternAnalyzer, PatternAnalyzerConfig
from .token_analyzer import TokenAnalyzer, TokenAnalyzerConfig
from .rules import DEFAULT_RULES, RulesConfig, load_rules
from .pipeline import Pipeline

__all__ = [
    "Analyzer",
    "AnalyzerConfig",
    "ClarityAnalyzer",
    "ClarityAnalyzerConfig",
    "ContextAnalyzer",
    "ContextAnalyzerConfig",
    "DEFAULT_RULES",
    "Dimension",
    "PatternAnalyzer",
    "PatternAnalyzerConfig",
    "Pipeline",
    "RulesConfig",
    "TokenAnalyzer",
    "TokenAnalyzerConfig",
    "load_rules",
]
