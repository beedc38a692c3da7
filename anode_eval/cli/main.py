"""CLI entrypoint for anode-eval — typer app with init/run/status/cancel/cleanup."""

import asyncio
import json
import logging
import sys
import time
from enum import StrEnum
from pathlib import Path
from typing import NoReturn

import structlog
import typer

from anode_eval.cli.output.markdown import build_markdown_report
from anode_eval.cli.output.report_json import build_report_json
from anode_eval.config.infrastructure.credentials import EnvCredentialProvider
from anode_eval.config.infrastructure.observer import StructlogConfigObserver
from anode_eval.config.infrastructure.sample import write_sample_config
from anode_eval.config.infrastructure.yaml_loader import YamlConfigLoader
from anode_eval.core.errors import AnodeEvalError
from anode_eval.evaluation.application.manager import RunManager
from anode_eval.evaluation.application.runner import EvaluationRunner
from anode_eval.evaluation.domain.observer import EvaluationObserver
from anode_eval.evaluation.domain.report import EvaluationReport
from anode_eval.evaluation.domain.score import format_score
from anode_eval.evaluation.domain.snapshot import StatusSnapshot
from anode_eval.evaluation.infrastructure.composite_observer import (
    CompositeEvaluationObserver,
)
from anode_eval.evaluation.infrastructure.errors import RunNotFoundError
from anode_eval.evaluation.infrastructure.observer import StructlogEvaluationObserver
from anode_eval.evaluation.infrastructure.output_archive import FileOutputArchive
from anode_eval.evaluation.infrastructure.progress_observer import (
    ProgressEvaluationObserver,
)
from anode_eval.evaluation.infrastructure.state_store import JsonRunStateStore
from anode_eval.harness.infrastructure.registry import adapter_for
from anode_eval.matrix.domain.work_item import WorkItemStatus
from anode_eval.sandbox.domain.provider import PodProvider
from anode_eval.sandbox.infrastructure.kubernetes import KubernetesPodProvider
from anode_eval.sandbox.infrastructure.local import LocalProcessProvider
from anode_eval.sandbox.infrastructure.observer import StructlogSandboxObserver

app = typer.Typer(
    add_completion=False,
    help="Evaluate coding agents against a matrix of prompts in isolated sandboxes.",
)

_DEFAULT_NAMESPACE = "anode-eval"


class LogFormat(StrEnum):
    CONSOLE = "console"
    JSON = "json"


def _configure_structlog(log_format: LogFormat, verbose: bool = False) -> None:
    """Configure structlog based on the requested format. Logs go to stderr."""
    if log_format is LogFormat.JSON:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if verbose else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _make_provider(local: bool, namespace: str) -> PodProvider:
    if local:
        return LocalProcessProvider()
    return KubernetesPodProvider(namespace=namespace)


def _fail(exc: AnodeEvalError) -> NoReturn:
    typer.echo(f"{type(exc).__name__}: {exc}", err=True)
    sys.exit(1)


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_RED = "\033[31m"


def _score_color(score: float | None) -> str:
    if score is None:
        return _DIM
    if score >= 80.0:
        return _GREEN
    if score >= 50.0:
        return _YELLOW
    return _RED


def _rule(width: int = 72, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _write_outputs(output_dir: Path, report: EvaluationReport) -> tuple[Path, Path]:
    """Write `{run_id}.json` and `{run_id}_report.md`. Returns both paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    run_id = report.run.run_id
    json_path = output_dir / f"{run_id}.json"
    md_path = output_dir / f"{run_id}_report.md"
    json_path.write_text(
        json.dumps(build_report_json(report), indent=2), encoding="utf-8"
    )
    md_path.write_text(build_markdown_report(report), encoding="utf-8")
    return json_path, md_path


def _print_plan(report: EvaluationReport) -> None:
    typer.echo(f"Dry run: {len(report.work_items)} work item(s) planned")
    for item in report.work_items:
        typer.echo(f"  {item.work_id}")


def _print_summary(
    report: EvaluationReport,
    json_path: Path,
    md_path: Path,
    elapsed_seconds: float,
) -> None:
    typer.echo("")
    _rule(color=_CYAN)
    typer.echo(f"{_CYAN}{_BOLD}  anode-eval  ·  Run {report.run.status.value}{_RESET}")
    _rule(color=_CYAN)

    meta_rows: list[tuple[str, str]] = [
        ("Run ID", report.run.run_id),
        ("Config", report.run.name),
        ("Work items", str(len(report.work_items))),
        ("Succeeded", str(report.count(WorkItemStatus.SUCCEEDED))),
        ("Failed", str(report.count(WorkItemStatus.FAILED))),
        ("Timed out", str(report.count(WorkItemStatus.TIMED_OUT))),
        ("Cancelled", str(report.count(WorkItemStatus.CANCELLED))),
        ("Overall pass rate", format_score(report.overall_pass_rate)),
        ("Elapsed", _format_elapsed(elapsed_seconds=elapsed_seconds)),
        ("Report JSON", str(json_path)),
        ("Report Markdown", str(md_path)),
    ]
    label_w = max(len(label) for label, _ in meta_rows)
    for label, value in meta_rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {value}")

    if report.rankings:
        typer.echo("")
        name_w = max(len(f"{e.tool}/{e.model}") for e in report.rankings)
        for entry in report.rankings:
            color = _score_color(entry.score)
            agent = f"{entry.tool}/{entry.model}"
            typer.echo(
                f"  {entry.rank:>2}. {agent:<{name_w}}  "
                f"{color}{format_score(entry.score):>8}{_RESET}  "
                f"{_DIM}tests {entry.tests_passed}/{entry.tests_total}  "
                f"runs {entry.runs_completed}/{entry.runs_total}{_RESET}"
            )

    if report.warnings:
        typer.echo("")
        typer.echo(f"  {_YELLOW}{_BOLD}Cleanup warnings ({len(report.warnings)}){_RESET}")
        for warning in report.warnings:
            typer.echo(f"  {_DIM}{warning}{_RESET}")

    typer.echo("")
    _rule(color=_CYAN)


def _print_status(snapshot: StatusSnapshot) -> None:
    typer.echo(f"Run:    {snapshot.run_id} ({snapshot.name})")
    typer.echo(f"Status: {snapshot.status.value}")
    if snapshot.cancel_requested:
        typer.echo("Cancellation requested")
    typer.echo(f"Total:  {snapshot.total}")
    for status in WorkItemStatus:
        typer.echo(f"  {status.value:<10} {snapshot.count(status)}")


@app.command()
def init(
    output: Path = typer.Option(
        Path("anode-eval.yaml"),
        "--output",
        "-o",
        help="Where to write the sample configuration",
    ),
) -> None:
    """Write a sample evaluation configuration."""
    try:
        write_sample_config(path=output)
    except AnodeEvalError as exc:
        _fail(exc)
    typer.echo(f"Wrote sample configuration to {output}")


@app.command()
def run(
    config_path: Path = typer.Option(
        ..., "--config", "-c", help="Path to evaluation config YAML"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Expand and validate only; create no sandboxes"
    ),
    local: bool = typer.Option(
        False, "--local", help="Run harnesses as local processes instead of pods"
    ),
    parallelism: int | None = typer.Option(
        None, "--parallelism", "-p", min=1, help="Override settings.max_parallel"
    ),
    timeout_hours: float | None = typer.Option(
        None, "--timeout-hours", min=0.001, help="Cap every work item's timeout"
    ),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Override settings.output_dir"
    ),
    state_dir: Path = typer.Option(
        Path("."), "--state-dir", help="Directory holding .anode-eval run state"
    ),
    log_format: LogFormat = typer.Option(
        LogFormat.CONSOLE, "--log-format", help="Log format: 'console' or 'json'"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Run (or with --dry-run, plan) an evaluation from a YAML config file."""
    _configure_structlog(log_format=log_format, verbose=verbose)
    try:
        config = YamlConfigLoader(observer=StructlogConfigObserver()).load(
            path=config_path
        )
        settings = config.settings
        results_dir = output_dir or settings.output_dir
        provider = _make_provider(local=local, namespace=settings.namespace)
        sandbox_observer = StructlogSandboxObserver()
        observers: list[EvaluationObserver] = [StructlogEvaluationObserver()]
        if log_format is LogFormat.CONSOLE and not dry_run:
            observers.append(ProgressEvaluationObserver())
        evaluation_observer = CompositeEvaluationObserver(observers=observers)
        manager = RunManager(
            store=JsonRunStateStore(root=state_dir),
            provider=provider,
            sandbox_observer=sandbox_observer,
            observer=evaluation_observer,
            teardown_attempts=settings.teardown_attempts,
        )
        runner = EvaluationRunner(
            config=config,
            provider=provider,
            credentials=EnvCredentialProvider(),
            adapter_for=adapter_for,
            observer=evaluation_observer,
            sandbox_observer=sandbox_observer,
            manager=manager,
            store=JsonRunStateStore(root=state_dir),
            archive=FileOutputArchive(root=results_dir),
            max_parallel=parallelism,
            timeout_cap_hours=timeout_hours,
        )
        typer.echo(f"Run ID: {runner.run_id}")

        started_at = time.monotonic()
        report = asyncio.run(runner.run(dry_run=dry_run))
        elapsed_seconds = time.monotonic() - started_at

        if dry_run:
            _print_plan(report)
            return
        json_path, md_path = _write_outputs(output_dir=results_dir, report=report)
        _print_summary(
            report=report,
            json_path=json_path,
            md_path=md_path,
            elapsed_seconds=elapsed_seconds,
        )

    except KeyboardInterrupt:
        typer.echo("Evaluation interrupted.", err=True)
        sys.exit(1)
    except AnodeEvalError as exc:
        _fail(exc)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.", err=True)
        sys.exit(1)


@app.command()
def status(
    run_id: str = typer.Option(..., "--run-id", help="Run to inspect"),
    state_dir: Path = typer.Option(
        Path("."), "--state-dir", help="Directory holding .anode-eval run state"
    ),
) -> None:
    """Print work item counts per status and the overall run status."""
    try:
        snapshot = JsonRunStateStore(root=state_dir).load(run_id)
        if snapshot is None:
            raise RunNotFoundError(run_id=run_id)
    except AnodeEvalError as exc:
        _fail(exc)
    _print_status(snapshot)


@app.command()
def cancel(
    run_id: str = typer.Argument(..., help="Run to cancel"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    local: bool = typer.Option(
        False, "--local", help="The run used local processes, not pods"
    ),
    namespace: str = typer.Option(
        _DEFAULT_NAMESPACE, "--namespace", help="Namespace holding the run's pods"
    ),
    wait_seconds: float = typer.Option(
        60.0,
        "--wait-seconds",
        min=0,
        help="How long to wait for the running process to acknowledge",
    ),
    state_dir: Path = typer.Option(
        Path("."), "--state-dir", help="Directory holding .anode-eval run state"
    ),
) -> None:
    """Cancel a run and tear down every sandbox it still has."""
    if not force:
        typer.confirm(f"Cancel run {run_id}?", abort=True)
    _configure_structlog(log_format=LogFormat.CONSOLE)
    try:
        manager = RunManager(
            store=JsonRunStateStore(root=state_dir),
            provider=_make_provider(local=local, namespace=namespace),
            sandbox_observer=StructlogSandboxObserver(),
            observer=StructlogEvaluationObserver(),
            settle_timeout_seconds=wait_seconds,
        )
        warnings = asyncio.run(manager.cancel(run_id))
    except AnodeEvalError as exc:
        _fail(exc)
    for warning in warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(f"Cancelled run {run_id}")


@app.command()
def cleanup(
    run_id: str = typer.Argument(..., help="Run to clean up"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    local: bool = typer.Option(
        False, "--local", help="The run used local processes, not pods"
    ),
    namespace: str = typer.Option(
        _DEFAULT_NAMESPACE, "--namespace", help="Namespace holding the run's pods"
    ),
    state_dir: Path = typer.Option(
        Path("."), "--state-dir", help="Directory holding .anode-eval run state"
    ),
) -> None:
    """Delete leftover sandboxes and on-disk state of a run. Safe to repeat."""
    if not force:
        typer.confirm(f"Clean up run {run_id}?", abort=True)
    _configure_structlog(log_format=LogFormat.CONSOLE)
    try:
        manager = RunManager(
            store=JsonRunStateStore(root=state_dir),
            provider=_make_provider(local=local, namespace=namespace),
            sandbox_observer=StructlogSandboxObserver(),
        )
        result = asyncio.run(manager.cleanup(run_id))
    except AnodeEvalError as exc:
        _fail(exc)
    for warning in result.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    if not result.changed:
        typer.echo(f"Nothing to clean up for run {run_id}")
        return
    typer.echo(
        f"Cleaned up run {run_id}: {result.sandboxes_deleted} sandbox(es) deleted"
        + (", state removed" if result.state_removed else "")
    )


if __name__ == "__main__":
    app()
