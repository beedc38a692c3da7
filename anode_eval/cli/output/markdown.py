"""Human-readable run report (`{run_id}_report.md`)."""

from anode_eval.evaluation.domain.report import EvaluationReport
from anode_eval.evaluation.domain.score import format_score
from anode_eval.matrix.domain.work_item import WorkItemStatus


def _cell(value: object) -> str:
    return str(value).replace("|", "\\|").replace("\n", " ")


def build_markdown_report(report: EvaluationReport) -> str:
    run = report.run
    lines = [
        f"# Evaluation Report: {run.name}",
        "",
        f"**Run ID:** `{run.run_id}`",
        f"**Status:** {run.status.value}",
        f"**Started:** {run.created_at.isoformat()}",
    ]
    if run.completed_at is not None:
        lines.append(f"**Completed:** {run.completed_at.isoformat()}")
    if run.description:
        lines += ["", run.description]

    lines += [
        "",
        "## Summary",
        "",
        f"- Total work items: {len(report.work_items)}",
        f"- Succeeded: {report.count(WorkItemStatus.SUCCEEDED)}",
        f"- Failed: {report.count(WorkItemStatus.FAILED)}",
        f"- Timed out: {report.count(WorkItemStatus.TIMED_OUT)}",
        f"- Cancelled: {report.count(WorkItemStatus.CANCELLED)}",
        f"- Tests passed: {report.tests_passed}/{report.tests_total}",
        f"- Overall pass rate: {format_score(report.overall_pass_rate)}",
        "",
        "## Agent Rankings",
        "",
        "| Rank | Agent | Model | Score | Tests Passed | Runs |",
        "|------|-------|-------|-------|--------------|------|",
    ]
    for entry in report.rankings:
        lines.append(
            f"| {entry.rank} | {_cell(entry.tool)} | {_cell(entry.model)} "
            f"| {format_score(entry.score)} "
            f"| {entry.tests_passed}/{entry.tests_total} "
            f"| {entry.runs_completed}/{entry.runs_total} |"
        )

    if report.prompt_scores:
        lines += [
            "",
            "## Results by Prompt",
            "",
            "| Prompt | Agent | Model | Score | Tests Passed | Runs |",
            "|--------|-------|-------|-------|--------------|------|",
        ]
        for record in report.prompt_scores:
            lines.append(
                f"| {_cell(record.prompt_id)} | {_cell(record.tool)} "
                f"| {_cell(record.model)} | {format_score(record.score)} "
                f"| {record.tests_passed}/{record.tests_total} "
                f"| {record.runs_completed}/{record.runs_total} |"
            )

    if report.work_items:
        lines += [
            "",
            "## Individual Results",
            "",
            "| Work Item | Status | Tests | Duration | Error |",
            "|-----------|--------|-------|----------|-------|",
        ]
        for item in report.work_items:
            result = item.run_result
            tests = f"{result.tests_passed}/{result.tests_total}" if result else "-"
            duration = f"{result.duration_seconds:.1f}s" if result else "-"
            lines.append(
                f"| `{_cell(item.work_id)}` | {item.status.value} | {tests} "
                f"| {duration} | {_cell(item.error or '')} |"
            )

        failures = [
            (item.work_id, item.run_result.failed_tests)
            for item in report.work_items
            if item.run_result is not None and item.run_result.failed_tests
        ]
        if failures:
            lines += ["", "### Failed Tests", ""]
            for work_id, failed_tests in failures:
                names = ", ".join(f"`{name}`" for name in failed_tests)
                lines.append(f"- `{_cell(work_id)}`: {_cell(names)}")

    if report.warnings:
        lines += ["", "## Cleanup Warnings", ""]
        lines += [f"- {_cell(warning)}" for warning in report.warnings]

    return "\n".join(lines) + "\n"
