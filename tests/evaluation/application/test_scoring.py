"""Tests for the scoring engine."""

from datetime import UTC, datetime

import pytest

from anode_eval.evaluation.application.scoring import (
    compute_prompt_scores,
    compute_scores,
    rank,
)
from anode_eval.evaluation.domain.score import ScoreRecord
from anode_eval.harness.domain.result import ExitClassification, RunResult
from anode_eval.matrix.domain.work_item import WorkItem, WorkItemStatus, make_work_id
from tests.evaluation.factories import RUN_ID, make_agent, make_prompt

_T0 = datetime(2026, 1, 1, tzinfo=UTC)


def _make_item(
    tool: str = "codex",
    model: str = "m",
    prompt_id: str = "hello",
    iteration: int = 0,
    status: WorkItemStatus = WorkItemStatus.SUCCEEDED,
    passed: int = 0,
    total: int = 0,
    scheduled: bool = True,
) -> WorkItem:
    result = None
    if status is not WorkItemStatus.CANCELLED:
        result = RunResult(
            tests_passed=passed,
            tests_total=total,
            classification=(
                ExitClassification.OK
                if status is WorkItemStatus.SUCCEEDED
                else ExitClassification.ERROR
            ),
        )
    return WorkItem(
        work_id=make_work_id(RUN_ID, prompt_id, tool, model, iteration),
        run_id=RUN_ID,
        prompt=make_prompt(prompt_id),
        agent=make_agent(tool=tool, model=model),
        iteration=iteration,
        status=status,
        scheduled_at=_T0 if scheduled else None,
        run_result=result,
    )


def _make_record(
    tool: str, score: float | None, runs_completed: int = 1, runs_total: int = 1
) -> ScoreRecord:
    return ScoreRecord(
        tool=tool,
        model="m",
        tests_passed=0,
        tests_total=0,
        runs_completed=runs_completed,
        runs_total=runs_total,
        score=score,
    )


class TestComputeScores:
    def test_score_is_tests_passed_over_tests_total(self) -> None:
        items = [
            _make_item(tool="claude_code", iteration=0, passed=4, total=5),
            _make_item(tool="claude_code", iteration=1, passed=5, total=5),
            _make_item(tool="codex", iteration=0, passed=3, total=5),
            _make_item(tool="codex", iteration=1, passed=5, total=5),
        ]

        scores = {record.tool: record for record in compute_scores(items)}

        assert scores["claude_code"].score == pytest.approx(90.0)
        assert scores["codex"].score == pytest.approx(80.0)
        assert scores["claude_code"].tests_passed == 9
        assert scores["claude_code"].tests_total == 10

    def test_failed_runs_contribute_zero_tests(self) -> None:
        items = [
            _make_item(passed=2, total=2),
            _make_item(iteration=1, status=WorkItemStatus.FAILED),
        ]

        (record,) = compute_scores(items)

        assert record.score == pytest.approx(100.0)
        assert record.runs_completed == 1
        assert record.runs_total == 2

    def test_zero_tests_is_undefined_not_zero(self) -> None:
        (record,) = compute_scores([_make_item(passed=0, total=0)])

        assert record.score is None

    def test_all_failing_tests_is_zero(self) -> None:
        (record,) = compute_scores([_make_item(passed=0, total=3)])

        assert record.score == 0.0

    def test_never_scheduled_items_not_counted(self) -> None:
        items = [
            _make_item(passed=1, total=1),
            _make_item(iteration=1, status=WorkItemStatus.CANCELLED, scheduled=False),
        ]

        (record,) = compute_scores(items)

        assert record.runs_total == 1

    def test_first_seen_order(self) -> None:
        items = [_make_item(tool="opencode"), _make_item(tool="codex")]

        assert [r.tool for r in compute_scores(items)] == ["opencode", "codex"]


class TestComputePromptScores:
    def test_one_record_per_prompt_and_agent(self) -> None:
        items = [
            _make_item(prompt_id="a", passed=1, total=2),
            _make_item(prompt_id="b", passed=2, total=2),
            _make_item(prompt_id="a", tool="opencode", passed=0, total=2),
        ]

        records = compute_prompt_scores(items)

        assert [(r.prompt_id, r.tool, r.score) for r in records] == [
            ("a", "codex", pytest.approx(50.0)),
            ("b", "codex", pytest.approx(100.0)),
            ("a", "opencode", 0.0),
        ]


class TestRank:
    def test_higher_score_ranks_first(self) -> None:
        entries = rank([_make_record("codex", 80.0), _make_record("claude_code", 90.0)])

        assert [(e.rank, e.tool) for e in entries] == [(1, "claude_code"), (2, "codex")]

    def test_undefined_score_ranks_last(self) -> None:
        entries = rank(
            [
                _make_record("claude_code", None),
                _make_record("codex", 0.0),
                _make_record("opencode", 10.0),
            ]
        )

        assert [e.tool for e in entries] == ["opencode", "codex", "claude_code"]

    def test_ties_broken_by_completion_then_name(self) -> None:
        entries = rank(
            [
                _make_record("opencode", 50.0, runs_completed=1, runs_total=2),
                _make_record("codex", 50.0, runs_completed=1, runs_total=2),
                _make_record("claude_code", 50.0, runs_completed=1, runs_total=4),
            ]
        )

        assert [e.tool for e in entries] == ["codex", "opencode", "claude_code"]
        assert [e.rank for e in entries] == [1, 2, 3]
