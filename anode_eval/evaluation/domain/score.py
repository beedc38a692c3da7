"""Score records and ranking entries derived from run results."""

from pydantic import BaseModel, Field


def format_score(score: float | None) -> str:
    """Render a score as `90.00%`, or `N/A` when no tests were reported."""
    if score is None:
        return "N/A"
    return f"{score:.2f}%"


class ScoreRecord(BaseModel, frozen=True):
    """Aggregate pass rate for one (tool, model) pair.

    `score` is None when the pair reported zero tests in total, which is
    distinct from a 0% pass rate.
    """

    tool: str
    model: str
    tests_passed: int = Field(ge=0)
    tests_total: int = Field(ge=0)
    runs_completed: int = Field(ge=0)
    runs_total: int = Field(ge=0)
    score: float | None = None

    @property
    def agent_id(self) -> str:
        return f"{self.tool}-{self.model}"

    @property
    def completion_fraction(self) -> float:
        if self.runs_total == 0:
            return 0.0
        return self.runs_completed / self.runs_total


class PromptScoreRecord(ScoreRecord, frozen=True):
    prompt_id: str


class RankingEntry(BaseModel, frozen=True):
    rank: int = Field(ge=1)
    tool: str
    model: str
    score: float | None
    tests_passed: int
    tests_total: int
    runs_completed: int
    runs_total: int
