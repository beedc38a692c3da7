"""Harness adapters — one per test harness variant."""

from anode_eval.config.domain.harness import (
    CargoHarness,
    CustomHarness,
    GoHarness,
    NpmHarness,
    PytestHarness,
    TestHarness,
)
from anode_eval.harness.domain.adapter import HarnessCounts
from anode_eval.harness.domain.markers import extract_test_output
from anode_eval.harness.domain.result import ExitClassification, RunResult
from anode_eval.harness.infrastructure.parsers import (
    parse_cargo,
    parse_generic,
    parse_go,
    parse_pytest,
)


class _ParsingHarnessAdapter:
    """Shared interpretation: crash check, marker extraction, then `parse`.

    Subclasses only provide `parse`. Does NOT inherit from HarnessAdapter
    (structural typing via Protocol).
    """

    def __init__(self, harness: TestHarness) -> None:
        self._harness = harness

    def test_command(self) -> list[str]:
        return self._harness.test_command()

    def parse(self, output: str) -> HarnessCounts | None:
        raise NotImplementedError

    def interpret(
        self, logs: str, duration_seconds: float, crashed: bool = False
    ) -> RunResult:
        if crashed:
            return RunResult.empty(
                ExitClassification.CRASH,
                duration_seconds=duration_seconds,
                detail="sandbox terminated abnormally",
            )
        output = extract_test_output(logs)
        if output is None:
            return RunResult.empty(
                ExitClassification.ERROR,
                duration_seconds=duration_seconds,
                detail="test output markers not found in sandbox logs",
            )
        counts = self.parse(output)
        if counts is None:
            return RunResult.empty(
                ExitClassification.ERROR,
                duration_seconds=duration_seconds,
                detail=f"unrecognised {self._harness.type} output",
            )
        return RunResult(
            tests_passed=counts.passed,
            tests_total=counts.total,
            classification=ExitClassification.OK,
            duration_seconds=duration_seconds,
            failed_tests=counts.failed,
        )


class CargoHarnessAdapter(_ParsingHarnessAdapter):
    def __init__(self, harness: CargoHarness) -> None:
        super().__init__(harness)

    def parse(self, output: str) -> HarnessCounts | None:
        return parse_cargo(output)


class NpmHarnessAdapter(_ParsingHarnessAdapter):
    def __init__(self, harness: NpmHarness) -> None:
        super().__init__(harness)

    def parse(self, output: str) -> HarnessCounts | None:
        return parse_generic(output)


class PytestHarnessAdapter(_ParsingHarnessAdapter):
    def __init__(self, harness: PytestHarness) -> None:
        super().__init__(harness)

    def parse(self, output: str) -> HarnessCounts | None:
        return parse_pytest(output)


class GoHarnessAdapter(_ParsingHarnessAdapter):
    def __init__(self, harness: GoHarness) -> None:
        super().__init__(harness)

    def parse(self, output: str) -> HarnessCounts | None:
        return parse_go(output)


class CustomHarnessAdapter(_ParsingHarnessAdapter):
    def __init__(self, harness: CustomHarness) -> None:
        super().__init__(harness)

    def parse(self, output: str) -> HarnessCounts | None:
        return parse_generic(output)
