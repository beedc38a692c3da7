"""RunResult — normalized outcome of one work item's test harness."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ExitClassification(StrEnum):
    OK = "ok"
    TIMEOUT = "timeout"
    ERROR = "error"
    CRASH = "crash"


class RunResult(BaseModel):
    """Immutable, harness-independent test outcome.

    Used as a cross-layer DTO: produced by harness adapters, attached to work
    items by the result collector, consumed by scoring and reporting.
    """

    model_config = ConfigDict(frozen=True)

    tests_passed: int = Field(ge=0)
    tests_total: int = Field(ge=0)
    classification: ExitClassification
    duration_seconds: float = Field(default=0.0, ge=0)
    detail: str | None = None
    failed_tests: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _passed_within_total(self) -> "RunResult":
        if self.tests_passed > self.tests_total:
            raise ValueError("tests_passed cannot exceed tests_total")
        return self

    @property
    def pass_rate(self) -> float | None:
        """Percentage of tests passed, or None when no tests ran."""
        if self.tests_total == 0:
            return None
        return self.tests_passed / self.tests_total * 100.0

    @classmethod
    def empty(
        cls,
        classification: ExitClassification,
        duration_seconds: float = 0.0,
        detail: str | None = None,
    ) -> "RunResult":
        return cls(
            tests_passed=0,
            tests_total=0,
            classification=classification,
            duration_seconds=duration_seconds,
            detail=detail,
        )
