"""HarnessAdapter Protocol — how one test harness is invoked and interpreted."""

from typing import NamedTuple, Protocol

from anode_eval.harness.domain.result import RunResult


class HarnessCounts(NamedTuple):
    passed: int
    total: int
    failed: tuple[str, ...] = ()


class HarnessAdapter(Protocol):
    """Capability interface implemented once per harness variant.

    Adapters never raise on bad output: anything they cannot read becomes a
    `(0, 0)` RunResult classified `error`.
    """

    def test_command(self) -> list[str]: ...

    def parse(self, output: str) -> HarnessCounts | None: ...

    def interpret(
        self, logs: str, duration_seconds: float, crashed: bool = False
    ) -> RunResult: ...
