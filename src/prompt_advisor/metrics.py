"""Append-only evaluation log and windowed trend reports."""


import json
import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path

from .analysis import AnalysisPayload, Evaluation, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_REPORT_DAYS = 7
COMMON_ISSUES_LIMIT = 5
TOP_RECOMMENDATIONS_LIMIT = 3

BAND_EXCELLENT_MIN = 9
BAND_GOOD_MIN = 7
BAND_ACCEPTABLE_MIN = 5


def _score_field(payload: Mapping[str, object], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Metrics field '{key}' must be an integer, got {value!r}")
    return value


def _window_start(now: datetime, days: float) -> datetime:
    """Return ``now - days``, saturating at the earliest representable instant."""
    try:
        return now - timedelta(days=days)
    except OverflowError:
        return datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class EvaluationRecord:
    """One persisted evaluation outcome."""

    timestamp: str
    overall_score: int
    token_score: int
    pattern_score: int
    clarity_score: int
    context_score: int
    recommendations: tuple[str, ...] = ()

    @classmethod
    def from_evaluation(cls, evaluation: Evaluation) -> "EvaluationRecord":
        """Normalize a full evaluation down to its persisted fields."""
        return cls(
            timestamp=evaluation.timestamp,
            overall_score=evaluation.overall_score,
            token_score=evaluation.token.score,
            pattern_score=evaluation.pattern.score,
            clarity_score=evaluation.clarity.score,
            context_score=evaluation.context.score,
            recommendations=tuple(evaluation.recommendations),
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, object]) -> "EvaluationRecord":
        """Parse one decoded log line.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If the payload is not an object, a score is not an
                integer, or a recommendation is not a string.
        """
        if not isinstance(payload, Mapping):
            raise TypeError("Metrics record must be a JSON object")

        recommendations = payload.get("recommendations") or ()
        if not isinstance(recommendations, list | tuple) or not all(
            isinstance(item, str) for item in recommendations
        ):
            raise TypeError("Metrics field 'recommendations' must be a list of strings")

        return cls(
            timestamp=str(payload["timestamp"]),
            overall_score=_score_field(payload, "overallScore"),
            token_score=_score_field(payload, "tokenScore"),
            pattern_score=_score_field(payload, "patternScore"),
            clarity_score=_score_field(payload, "clarityScore"),
            context_score=_score_field(payload, "contextScore"),
            recommendations=tuple(recommendations),
        )

    def to_payload(self) -> AnalysisPayload:
        return {
            "timestamp": self.timestamp,
            "overallScore": self.overall_score,
            "tokenScore": self.token_score,
            "patternScore": self.pattern_score,
            "clarityScore": self.clarity_score,
            "contextScore": self.context_score,
            "recommendations": list(self.recommendations),
        }

    @property
    def recorded_at(self) -> datetime:
        """Parsed timestamp; naive values are read as UTC."""
        moment = datetime.fromisoformat(self.timestamp)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment


@dataclass(frozen=True)
class ScoreDistribution:
    """Counts of overall scores per quality band."""

    excellent: int = 0
    good: int = 0
    acceptable: int = 0
    poor: int = 0

    def to_payload(self) -> AnalysisPayload:
        return {
            "excellent": self.excellent,
            "good": self.good,
            "acceptable": self.acceptable,
            "poor": self.poor,
        }


@dataclass(frozen=True)
class MetricsReport:
    """Aggregate statistics over a window of evaluation records."""

    period_start: str
    period_end: str
    total_analyses: int = 0
    average_score: float = 0
    score_distribution: ScoreDistribution = field(default_factory=ScoreDistribution)
    common_issues: tuple[tuple[str, int], ...] = ()
    improvement_trend: float = 0
    top_recommendations: tuple[str, ...] = ()

    def to_payload(self) -> AnalysisPayload:
        """Serialize the report in the tool response shape."""
        return {
            "periodStart": self.period_start,
            "periodEnd": self.period_end,
            "totalAnalyses": self.total_analyses,
            "averageScore": self.average_score,
            "scoreDistribution": self.score_distribution.to_payload(),
            "commonIssues": [
                {"issue": issue, "count": count} for issue, count in self.common_issues
            ],
            "improvementTrend": self.improvement_trend,
            "topRecommendations": list(self.top_recommendations),
        }


def _format_instant(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds").replace(
        "+00:00", "Z"
    )


def _mean(values: list[int]) -> float:
    return sum(values) / len(values)


def distribution_for(scores: list[int]) -> ScoreDistribution:
    """Bucket overall scores into excellent/good/acceptable/poor."""
    return ScoreDistribution(
        excellent=sum(1 for score in scores if score >= BAND_EXCELLENT_MIN),
        good=sum(1 for score in scores if BAND_GOOD_MIN <= score < BAND_EXCELLENT_MIN),
        acceptable=sum(
            1 for score in scores if BAND_ACCEPTABLE_MIN <= score < BAND_GOOD_MIN
        ),
        poor=sum(1 for score in scores if score < BAND_ACCEPTABLE_MIN),
    )


def improvement_trend(scores: list[int]) -> float:
    """Percent change from the first half's mean to the second half's.

    Returns 0 when the first half is empty or averages zero.
    """
    midpoint = len(scores) // 2
    first_half = scores[:midpoint]
    second_half = scores[midpoint:]
    if not first_half or not second_half:
        return 0.0
    first_avg = _mean(first_half)
    if first_avg == 0:
        return 0.0
    return (_mean(second_half) - first_avg) / first_avg * 100


class MetricsStore:
    """JSONL-backed evaluation history."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def record(self, evaluation: Evaluation | EvaluationRecord) -> None:
        """Append one evaluation to the log.

        Failures are logged and swallowed so callers are never blocked by
        persistence.
        """
        entry = (
            evaluation
            if isinstance(evaluation, EvaluationRecord)
            else EvaluationRecord.from_evaluation(evaluation)
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(entry.to_payload()) + "\n")
        except OSError as exc:
            logger.error("Failed to record metrics to %s: %s", self.path, exc)

    def read_records(self) -> list[EvaluationRecord]:
        """Parse the whole log in file order.

        Raises:
            OSError: If the log cannot be read.
            ValueError: If a line is not valid JSON or has a bad timestamp.
            KeyError: If a record is missing a field.
        """
        records: list[EvaluationRecord] = []
        content = self.path.read_text(encoding="utf-8")
        for line in content.strip().split("\n"):
            if not line.strip():
                continue
            records.append(EvaluationRecord.from_payload(json.loads(line)))
        return records

    def load_records(
        self, days: float, now: datetime | None = None
    ) -> list[EvaluationRecord]:
        """Return records at or after ``now - days``, in file order."""
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        start = _window_start(now, days)
        return [record for record in self.read_records() if record.recorded_at >= start]

    def generate_report(
        self, days: float = DEFAULT_REPORT_DAYS, now: datetime | None = None
    ) -> MetricsReport:
        """Summarize the window ending now.

        An unreadable or malformed log yields the same empty report as a
        window with no records.
        """
        now = (now or datetime.now(timezone.utc)).replace(microsecond=0)
        start = _window_start(now, days)
        period_start = _format_instant(start)
        period_end = _format_instant(now)

        try:
            records = self.load_records(days, now=now)
        except Exception as exc:  # noqa: BLE001 - report degrades to empty
            logger.error("Failed to generate report from %s: %s", self.path, exc)
            return MetricsReport(period_start=period_start, period_end=period_end)

        if not records:
            return MetricsReport(period_start=period_start, period_end=period_end)

        scores = [record.overall_score for record in records]
        frequencies: Counter[str] = Counter()
        for record in records:
            frequencies.update(record.recommendations)
        common_issues = tuple(
            sorted(frequencies.items(), key=lambda item: item[1], reverse=True)[
                :COMMON_ISSUES_LIMIT
            ]
        )

        return MetricsReport(
            period_start=period_start,
            period_end=period_end,
            total_analyses=len(records),
            average_score=round_half_up(_mean(scores), 1),
            score_distribution=distribution_for(scores),
            common_issues=common_issues,
            improvement_trend=round_half_up(improvement_trend(scores), 1),
            top_recommendations=tuple(
                issue for issue, _ in common_issues[:TOP_RECOMMENDATIONS_LIMIT]
            ),
        )
