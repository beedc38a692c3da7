"""Machine-readable run report (`{run_id}.json`)."""

from importlib.metadata import PackageNotFoundError, version
from typing import Any

from anode_eval.evaluation.domain.report import EvaluationReport
from anode_eval.evaluation.domain.score import ScoreRecord
from anode_eval.matrix.domain.work_item import WorkItem, WorkItemStatus

type JsonDict = dict[str, Any]


def _anode_eval_version() -> str:
    try:
        return version("anode-eval")
    except PackageNotFoundError:
        return "dev"


def _work_item(item: WorkItem) -> JsonDict:
    return {
        "work_id": item.work_id,
        "prompt_id": item.prompt_id,
        "tool": item.tool,
        "model": item.model,
        "iteration": item.iteration,
        "status": item.status.value,
        "scheduled_at": item.scheduled_at.isoformat() if item.scheduled_at else None,
        "started_at": item.started_at.isoformat() if item.started_at else None,
        "completed_at": item.completed_at.isoformat() if item.completed_at else None,
        "sandbox_handle": item.sandbox_handle,
        "output_ref": item.output_ref,
        "error": item.error,
        "run_result": (
            item.run_result.model_dump(mode="json") if item.run_result else None
        ),
    }


def _score(record: ScoreRecord) -> JsonDict:
    data = record.model_dump(mode="json")
    data["agent_id"] = record.agent_id
    return data


def build_report_json(report: EvaluationReport) -> JsonDict:
    """Run metadata, every work item, scores, rankings, summary and warnings."""
    run = report.run
    return {
        "generator": {"name": "anode-eval", "version": _anode_eval_version()},
        "run": {
            "run_id": run.run_id,
            "name": run.name,
            "description": run.description,
            "status": run.status.value,
            "created_at": run.created_at.isoformat(),
            "completed_at": run.completed_at.isoformat() if run.completed_at else None,
            "max_parallel": run.max_parallel,
            "dry_run": run.dry_run,
        },
        "summary": {
            "total_work_items": len(report.work_items),
            "counts": {
                status.value: report.count(status) for status in WorkItemStatus
            },
            "tests_passed": report.tests_passed,
            "tests_total": report.tests_total,
            "overall_pass_rate": report.overall_pass_rate,
        },
        "work_items": [_work_item(item) for item in report.work_items],
        "scores": [_score(record) for record in report.scores],
        "prompt_scores": [_score(record) for record in report.prompt_scores],
        "rankings": [entry.model_dump(mode="json") for entry in report.rankings],
        "warnings": list(report.warnings),
    }
