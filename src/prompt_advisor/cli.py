"""CLI entry point for the ``pa`` prompt checker.

Usage examples::

    # Score prompt files
    pa prompts/feature.md prompts/bugfix.md

    # Score inline text
    pa "Implement a login endpoint"

    # Score from stdin
    cat prompt.txt | pa -

    # Machine-readable JSON output
    pa -j prompt.md

    # Verbose: show issues and recommendations
    pa -v prompt.md

    # Score only
    pa -s prompt.md

    # Use custom JSON rule overrides
    pa -r rules.json prompt.md

    # Size against a specific model's context window
    pa --model claude-sonnet-4.5 prompt.md

    # Exit 1 if any prompt scores below 7
    pa -t 7 prompts/*.md

    # Append results to the metrics log, then report the last 30 days
    pa --record prompt.md
    pa --report 30
"""


import argparse
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TextIO, TypeAlias

from .analyzers import Pipeline
from .metrics import MetricsReport, MetricsStore
from .server import _analyze
from .settings import Settings

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_THRESHOLD_FAILURE = 1
EXIT_ERROR = 2

_DIMENSIONS: tuple[str, ...] = ("token", "pattern", "clarity", "context")

InputValue: TypeAlias = str | Path


@dataclass(frozen=True)
class InputTarget:
    """Typed representation of a CLI input target."""

    kind: Literal["file", "stdin", "text"]
    value: InputValue
    label: str


def _format_score_line(label: str, result: dict) -> str:
    """Build a one-line summary for a single analyzed prompt."""
    parts = " ".join(
        f"{name}={result[f'{name}Analysis']['score']}" for name in _DIMENSIONS
    )
    return f"{label}: {result['overallScore']}/10 ({parts})"


def _print_details(result: dict, file: TextIO | None = None) -> None:
    """Print issues per dimension, then the recommendation list."""
    file = file or sys.stdout
    for name in _DIMENSIONS:
        for issue in result[f"{name}Analysis"]["issues"]:
            print(f"  {name}: {issue}", file=file)
    for item in result["recommendations"]:
        print(f"  - {item}", file=file)


def _format_report(report: MetricsReport) -> str:
    """Render a metrics report for the terminal."""
    dist = report.score_distribution
    lines = [
        f"{report.period_start} .. {report.period_end}",
        f"analyses: {report.total_analyses}  average: {report.average_score}"
        f"  trend: {report.improvement_trend:+}%",
        f"excellent={dist.excellent} good={dist.good} "
        f"acceptable={dist.acceptable} poor={dist.poor}",
    ]
    for issue, count in report.common_issues:
        lines.append(f"  {count:>4}  {issue}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Core analysis dispatch
# ---------------------------------------------------------------------------


def _analyze_text(
    text: str,
    label: str,
    pipeline: Pipeline,
    model_id: str | None,
    store: MetricsStore | None,
) -> dict:
    """Run analysis, optionally persist it, and attach the source label."""
    evaluation = _analyze(text, model_id=model_id, pipeline=pipeline)
    if store is not None:
        store.record(evaluation)
    result = evaluation.to_payload()
    result["source"] = label
    return result


def _analyze_file(
    path: Path,
    pipeline: Pipeline,
    model_id: str | None,
    store: MetricsStore | None,
) -> dict:
    """Read a file and analyze its contents."""
    text = path.read_text(encoding="utf-8")
    return _analyze_text(text, str(path), pipeline, model_id, store)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser."""
    p = argparse.ArgumentParser(
        prog="pa",
        description="Score prompts for token budget, examples, clarity and context.",
        epilog="Pass file paths, '-' for stdin, or quoted inline text.",
    )
    p.add_argument(
        "inputs",
        nargs="*",
        metavar="INPUT",
        help="Prompts to score: files, '-' for stdin, or quoted inline text.",
    )
    p.add_argument(
        "-j", "--json",
        action="store_true",
        default=False,
        help="Output results as JSON.",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Show issues and recommendations.",
    )
    p.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Only print sources that fail the threshold.",
    )
    p.add_argument(
        "-t", "--threshold",
        type=int,
        default=0,
        metavar="SCORE",
        help="Minimum passing score (0-10). Exit 1 if any input scores below this.",
    )
    p.add_argument(
        "-r", "--rules",
        default=None,
        metavar="JSON",
        help="Path to JSON rule overrides. Defaults to RULES_PATH or built-in rules.",
    )
    p.add_argument(
        "-s", "--score-only",
        action="store_true",
        default=False,
        help="Print overall score only.",
    )
    p.add_argument(
        "--model",
        default=None,
        metavar="ID",
        help="Model id used to size the context window.",
    )
    p.add_argument(
        "--record",
        action="store_true",
        default=False,
        help="Append each evaluation to the metrics log.",
    )
    p.add_argument(
        "--report",
        type=int,
        default=None,
        metavar="DAYS",
        help="Print a metrics report for the last DAYS days.",
    )
    return p


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def _is_inline_text_argument(value: str) -> bool:
    """Return whether a positional argument should be treated as inline text."""
    return any(ch.isspace() for ch in value)


def _resolve_inputs(args: argparse.Namespace) -> list[InputTarget]:
    """Resolve positional args into typed input targets."""
    inputs: list[InputTarget] = []
    for index, raw in enumerate(args.inputs, start=1):
        if raw == "-":
            inputs.append(InputTarget(kind="stdin", value=raw, label="<stdin>"))
            continue
        candidate_path = Path(raw)
        if candidate_path.is_file():
            inputs.append(
                InputTarget(kind="file", value=candidate_path, label=str(candidate_path))
            )
            continue
        if _is_inline_text_argument(raw):
            inputs.append(InputTarget(kind="text", value=raw, label=f"<text:{index}>"))
            continue
        inputs.append(InputTarget(kind="file", value=candidate_path, label=str(candidate_path)))
    return inputs


def _emit_result(result: dict, args: argparse.Namespace) -> None:
    """Print one analyzed result immediately."""
    fails_threshold = args.threshold > 0 and result["overallScore"] < args.threshold
    if args.quiet and not fails_threshold:
        return
    if args.score_only:
        print(result["overallScore"], flush=True)
        return

    print(_format_score_line(result["source"], result), flush=True)
    if args.verbose:
        _print_details(result)


def _emit_report(store: MetricsStore, days: int, as_json: bool) -> None:
    report = store.generate_report(days)
    if as_json:
        json.dump(report.to_payload(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(_format_report(report))


def cli_main(argv: list[str] | None = None) -> int:
    """Entry point for the ``pa`` command.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Exit code suitable for ``sys.exit``.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.inputs and args.report is None:
        parser.error("the following arguments are required: INPUT")

    settings = Settings()
    store = MetricsStore(settings.metrics_path)

    if not args.inputs:
        _emit_report(store, args.report, args.json)
        return EXIT_OK

    inputs = _resolve_inputs(args)

    results: list[dict] = []
    threshold_failed = False
    pipeline = Pipeline.from_json(
        args.rules if args.rules is not None else settings.rules_path
    )
    record_store = store if args.record else None

    for target in inputs:
        if target.kind == "stdin":
            text = sys.stdin.read()
            result = _analyze_text(text, target.label, pipeline, args.model, record_store)
        elif target.kind == "text":
            assert isinstance(target.value, str)
            result = _analyze_text(
                target.value, target.label, pipeline, args.model, record_store
            )
        else:
            assert isinstance(target.value, Path)
            path = target.value
            if not path.is_file():
                print(f"pa: {path}: No such file", file=sys.stderr)
                continue
            try:
                result = _analyze_file(path, pipeline, args.model, record_store)
            except (OSError, UnicodeDecodeError) as exc:
                print(f"pa: {path}: {exc}", file=sys.stderr)
                continue

        results.append(result)
        if args.threshold > 0 and result["overallScore"] < args.threshold:
            threshold_failed = True

        if not args.json:
            _emit_result(result, args)

    if not results:
        return EXIT_ERROR

    # --- Output ---
    if args.json:
        out = results if len(results) > 1 else results[0]
        json.dump(out, sys.stdout, indent=2)
        sys.stdout.write("\n")

    if args.report is not None:
        _emit_report(store, args.report, args.json)

    # --- Exit code ---
    if threshold_failed:
        return EXIT_THRESHOLD_FAILURE

    return EXIT_OK


def main() -> None:
    """Thin wrapper that calls ``sys.exit`` with the CLI return code."""
    sys.exit(cli_main())
