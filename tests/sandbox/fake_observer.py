"""FakeSandboxObserver — records sandbox domain events for assertion in tests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class SandboxEvent:
    work_id: str
    handle: str


@dataclass(frozen=True)
class SandboxTimedOutEvent:
    work_id: str
    handle: str
    timeout_seconds: float


@dataclass(frozen=True)
class TeardownRetryEvent:
    work_id: str
    handle: str
    attempt: int
    reason: str


@dataclass(frozen=True)
class TeardownFailedEvent:
    work_id: str
    handle: str
    reason: str


class FakeSandboxObserver:
    """Records all emitted sandbox events as typed frozen dataclasses."""

    def __init__(self) -> None:
        self.created: list[SandboxEvent] = []
        self.polled: list[str] = []
        self.timed_out: list[SandboxTimedOutEvent] = []
        self.deleted: list[SandboxEvent] = []
        self.retries: list[TeardownRetryEvent] = []
        self.teardown_failures: list[TeardownFailedEvent] = []

    def sandbox_created(self, work_id: str, handle: str) -> None:
        self.created.append(SandboxEvent(work_id=work_id, handle=handle))

    def sandbox_phase_polled(self, work_id: str, handle: str, phase: str) -> None:
        self.polled.append(phase)

    def sandbox_timed_out(
        self, work_id: str, handle: str, timeout_seconds: float
    ) -> None:
        self.timed_out.append(
            SandboxTimedOutEvent(
                work_id=work_id, handle=handle, timeout_seconds=timeout_seconds
            )
        )

    def sandbox_deleted(self, work_id: str, handle: str) -> None:
        self.deleted.append(SandboxEvent(work_id=work_id, handle=handle))

    def sandbox_teardown_retry(
        self, work_id: str, handle: str, attempt: int, reason: str
    ) -> None:
        self.retries.append(
            TeardownRetryEvent(
                work_id=work_id, handle=handle, attempt=attempt, reason=reason
            )
        )

    def sandbox_teardown_failed(self, work_id: str, handle: str, reason: str) -> None:
        self.teardown_failures.append(
            TeardownFailedEvent(work_id=work_id, handle=handle, reason=reason)
        )
