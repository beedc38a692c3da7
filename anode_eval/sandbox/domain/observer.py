"""Observer port for the sandbox domain — defines events in domain language."""

from typing import Protocol


class SandboxObserver(Protocol):
    def sandbox_created(self, work_id: str, handle: str) -> None: ...

    def sandbox_phase_polled(self, work_id: str, handle: str, phase: str) -> None: ...

    def sandbox_timed_out(
        self, work_id: str, handle: str, timeout_seconds: float
    ) -> None: ...

    def sandbox_deleted(self, work_id: str, handle: str) -> None: ...

    def sandbox_teardown_retry(
        self, work_id: str, handle: str, attempt: int, reason: str
    ) -> None: ...

    def sandbox_teardown_failed(self, work_id: str, handle: str, reason: str) -> None: ...
