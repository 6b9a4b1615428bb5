"""MCP server exposing prompt analysis and metrics reports."""


import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP

from .analysis import Evaluation
from .analyzers import Pipeline, load_rules
from .metrics import DEFAULT_REPORT_DAYS, MetricsStore
from .settings import Settings
from .version import PACKAGE_VERSION

logger = logging.getLogger(__name__)

MCP_SERVER_NAME = "prompt-advisor"
mcp_server = FastMCP(MCP_SERVER_NAME)
SETTINGS = Settings()
ACTIVE_PIPELINE = Pipeline.from_rules(load_rules(SETTINGS.rules_path))
METRICS_STORE = MetricsStore(SETTINGS.metrics_path)

# Strong references to in-flight metric writes until they finish.
_pending_writes: set[asyncio.Task[None]] = set()


def _analyze(
    prompt: str,
    history: list[Any] | None = None,
    task_context: str | None = None,
    model_id: str | None = None,
    pipeline: Pipeline | None = None,
) -> Evaluation:
    """Run all analyzers and aggregate their scores."""
    active_pipeline = ACTIVE_PIPELINE if pipeline is None else pipeline
    return active_pipeline.evaluate(
        prompt,
        history=history,
        task_context=task_context,
        model_id=model_id,
    )


def _record_in_background(evaluation: Evaluation, store: MetricsStore) -> None:
    """Persist an evaluation without holding up the tool response."""
    task = asyncio.create_task(asyncio.to_thread(store.record, evaluation))
    _pending_writes.add(task)
    task.add_done_callback(_finish_write)


def _finish_write(task: "asyncio.Task[None]") -> None:
    _pending_writes.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logger.error("Metrics write failed: %s", task.exception())


@mcp_server.tool()
async def prompt_advisor_analyze(
    prompt: str,
    conversationHistory: list[Any] | None = None,  # noqa: N803 - wire name
    taskContext: str | None = None,  # noqa: N803 - wire name
    modelId: str | None = None,  # noqa: N803 - wire name
) -> str:
    """Analyze a prompt for quality and return advisory feedback.

    Returns a JSON object with an overall score (0-10), per-dimension results
    for token usage, code examples, clarity and context, and a list of
    recommendations.
    """
    evaluation = _analyze(
        prompt,
        history=conversationHistory,
        task_context=taskContext,
        model_id=modelId,
    )
    _record_in_background(evaluation, METRICS_STORE)
    return json.dumps(evaluation.to_payload(), indent=2)


@mcp_server.tool()
async def prompt_advisor_report(days: int = DEFAULT_REPORT_DAYS) -> str:
    """Generate a report of recent prompt quality metrics.

    Covers the last ``days`` days (default 7): average score, score
    distribution, most common recommendations and the improvement trend.
    """
    report = await asyncio.to_thread(
        METRICS_STORE.generate_report, days or DEFAULT_REPORT_DAYS
    )
    return json.dumps(report.to_payload(), indent=2)


def _build_parser() -> argparse.ArgumentParser:
    """Construct the MCP server CLI parser."""
    parser = argparse.ArgumentParser(
        prog="prompt-advisor",
        description="Run the prompt-advisor MCP server on stdio.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=PACKAGE_VERSION,
        help="Show package version and exit.",
    )
    parser.add_argument(
        "-r", "--rules",
        default=None,
        metavar="JSON",
        help="Path to JSON rule overrides. Defaults to RULES_PATH or built-in rules.",
    )
    parser.add_argument(
        "-m", "--metrics",
        default=None,
        metavar="JSONL",
        help="Path to the metrics log. Defaults to METRICS_PATH.",
    )
    return parser


def _resolve_log_level(name: str) -> int | None:
    """Map a level name such as ``debug`` to its number, or None if unknown."""
    return logging.getLevelNamesMapping().get(name.strip().upper())


def main(argv: list[str] | None = None) -> None:
    """Run the prompt-advisor MCP server on stdio."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    level = _resolve_log_level(SETTINGS.log_level)
    # stdout carries the MCP stream, so logs go to stderr.
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO if level is None else level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if level is None:
        logger.warning("Unknown LOG_LEVEL %r, using INFO", SETTINGS.log_level)

    global ACTIVE_PIPELINE, METRICS_STORE
    rules_path = args.rules if args.rules is not None else SETTINGS.rules_path
    ACTIVE_PIPELINE = Pipeline.from_rules(load_rules(rules_path))
    METRICS_STORE = MetricsStore(
        args.metrics if args.metrics is not None else SETTINGS.metrics_path
    )
    logger.info("Recording metrics to %s", METRICS_STORE.path)
    mcp_server.run()
