"""EvaluationReport — everything produced by one run, ready for serialisation."""

from pydantic import BaseModel, Field

from anode_eval.evaluation.domain.run import EvaluationRun
from anode_eval.evaluation.domain.score import (
    PromptScoreRecord,
    RankingEntry,
    ScoreRecord,
)
from anode_eval.matrix.domain.work_item import WorkItem, WorkItemStatus


class EvaluationReport(BaseModel, frozen=True):
    run: EvaluationRun
    work_items: list[WorkItem] = Field(default_factory=list)
    scores: list[ScoreRecord] = Field(default_factory=list)
    prompt_scores: list[PromptScoreRecord] = Field(default_factory=list)
    rankings: list[RankingEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def count(self, status: WorkItemStatus) -> int:
        return sum(1 for item in self.work_items if item.status is status)

    @property
    def tests_passed(self) -> int:
        return sum(
            item.run_result.tests_passed
            for item in self.work_items
            if item.run_result is not None
        )

    @property
    def tests_total(self) -> int:
        return sum(
            item.run_result.tests_total
            for item in self.work_items
            if item.run_result is not None
        )

    @property
    def overall_pass_rate(self) -> float | None:
        if self.tests_total == 0:
            return None
        return self.tests_passed / self.tests_total * 100.0
