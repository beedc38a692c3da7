"""Scoring engine — reduces work item results into scores and a ranking.

Everything here is recomputed from the work items on each call; nothing is
accumulated incrementally.
"""

from collections.abc import Callable, Iterable

from anode_eval.evaluation.domain.score import (
    PromptScoreRecord,
    RankingEntry,
    ScoreRecord,
)
from anode_eval.matrix.domain.work_item import WorkItem, WorkItemStatus


def _score(passed: int, total: int) -> float | None:
    if total == 0:
        return None
    return passed / total * 100.0


def _tally(items: list[WorkItem]) -> dict[str, int]:
    return {
        "tests_passed": sum(
            item.run_result.tests_passed for item in items if item.run_result
        ),
        "tests_total": sum(
            item.run_result.tests_total for item in items if item.run_result
        ),
        "runs_completed": sum(
            1 for item in items if item.status is WorkItemStatus.SUCCEEDED
        ),
        "runs_total": sum(1 for item in items if item.scheduled_at is not None),
    }


def _group[K](
    items: Iterable[WorkItem], key: Callable[[WorkItem], K]
) -> dict[K, list[WorkItem]]:
    groups: dict[K, list[WorkItem]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


def compute_scores(items: Iterable[WorkItem]) -> list[ScoreRecord]:
    """One record per (tool, model), in first-seen order.

    `runs_total` counts items that were ever admitted (scheduled); items that
    never left the queue do not count against an agent.
    """
    records = []
    for (tool, model), group in _group(items, lambda i: (i.tool, i.model)).items():
        tally = _tally(group)
        records.append(
            ScoreRecord(
                tool=tool,
                model=model,
                score=_score(tally["tests_passed"], tally["tests_total"]),
                **tally,
            )
        )
    return records


def compute_prompt_scores(items: Iterable[WorkItem]) -> list[PromptScoreRecord]:
    """One record per (prompt, tool, model), in first-seen order."""
    records = []
    groups = _group(items, lambda i: (i.prompt_id, i.tool, i.model))
    for (prompt_id, tool, model), group in groups.items():
        tally = _tally(group)
        records.append(
            PromptScoreRecord(
                prompt_id=prompt_id,
                tool=tool,
                model=model,
                score=_score(tally["tests_passed"], tally["tests_total"]),
                **tally,
            )
        )
    return records


def _ranking_key(record: ScoreRecord) -> tuple[bool, float, float, str, str]:
    # Undefined scores sort after every defined score.
    return (
        record.score is None,
        -(record.score or 0.0),
        -record.completion_fraction,
        record.tool,
        record.model,
    )


def rank(scores: Iterable[ScoreRecord]) -> list[RankingEntry]:
    """Score descending, then completion fraction descending, then tool, model."""
    return [
        RankingEntry(
            rank=position,
            tool=record.tool,
            model=record.model,
            score=record.score,
            tests_passed=record.tests_passed,
            tests_total=record.tests_total,
            runs_completed=record.runs_completed,
            runs_total=record.runs_total,
        )
        for position, record in enumerate(sorted(scores, key=_ranking_key), start=1)
    ]
