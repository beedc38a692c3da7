"""FakePodProvider — scripted in-memory sandbox backend for tests."""

import asyncio
from collections import Counter
from collections.abc import Callable, Sequence

from anode_eval.harness.domain.markers import TEST_OUTPUT_END, TEST_OUTPUT_START
from anode_eval.sandbox.domain.spec import PodPhase, SandboxHandle, SandboxSpec
from anode_eval.sandbox.infrastructure.errors import (
    CollectionError,
    SandboxDeleteError,
    SchedulingError,
)

type LogScript = str | Callable[[SandboxSpec], str]


def cargo_logs(passed: int, failed: int = 0) -> str:
    """Sandbox log whose fenced section is plain libtest output."""
    lines = [f"test t{i} ... ok" for i in range(passed)]
    lines += [f"test f{i} ... FAILED" for i in range(failed)]
    body = "\n".join(lines)
    return f"agent done\n{TEST_OUTPUT_START}\n{body}\n{TEST_OUTPUT_END}\n"


class FakePodProvider:
    """Walks every sandbox through `phases`; the last phase repeats forever.

    Each method yields to the event loop once so concurrent callers interleave
    the way they would against a real backend.

    Does NOT inherit from PodProvider (structural typing via Protocol).
    """

    def __init__(
        self,
        phases: Sequence[PodPhase] = (PodPhase.RUNNING, PodPhase.SUCCEEDED),
        logs: LogScript = "",
        reject: Callable[[SandboxSpec], bool] | None = None,
        logs_error: bool = False,
        delete_failures: int = 0,
        failure_reason: str | None = None,
    ) -> None:
        self._phases = list(phases)
        self._logs = logs
        self._reject = reject
        self._logs_error = logs_error
        self._delete_failures = delete_failures
        self._failure_reason = failure_reason
        self._specs: dict[SandboxHandle, SandboxSpec] = {}
        self._run_ids: dict[SandboxHandle, str] = {}
        self._polls: Counter[SandboxHandle] = Counter()
        self.created: list[SandboxSpec] = []
        self.deleted: list[SandboxHandle] = []
        self.delete_calls: Counter[SandboxHandle] = Counter()
        self.live: set[SandboxHandle] = set()
        self.max_live = 0

    def adopt(self, handle: SandboxHandle, run_id: str) -> None:
        """Register a live sandbox this provider did not create (a leak)."""
        self._run_ids[handle] = run_id
        self.live.add(handle)

    async def create(self, spec: SandboxSpec) -> SandboxHandle:
        await asyncio.sleep(0)
        if self._reject is not None and self._reject(spec):
            raise SchedulingError(work_id=spec.work_id, reason="quota exceeded")
        handle = f"fake-{len(self.created)}"
        self.created.append(spec)
        self._specs[handle] = spec
        self._run_ids[handle] = spec.run_id
        self.live.add(handle)
        self.max_live = max(self.max_live, len(self.live))
        return handle

    async def phase(self, handle: SandboxHandle) -> PodPhase:
        await asyncio.sleep(0)
        if handle not in self.live:
            return PodPhase.UNKNOWN
        index = min(self._polls[handle], len(self._phases) - 1)
        self._polls[handle] += 1
        return self._phases[index]

    async def failure_reason(self, handle: SandboxHandle) -> str | None:
        return self._failure_reason

    async def logs(self, handle: SandboxHandle) -> bytes:
        await asyncio.sleep(0)
        if self._logs_error:
            raise CollectionError(handle=handle, reason="pod evicted")
        if callable(self._logs):
            return self._logs(self._specs[handle]).encode("utf-8")
        return self._logs.encode("utf-8")

    async def delete(self, handle: SandboxHandle) -> None:
        await asyncio.sleep(0)
        self.delete_calls[handle] += 1
        if self.delete_calls[handle] <= self._delete_failures:
            raise SandboxDeleteError(handle=handle, reason="api unavailable")
        if handle in self.live:
            self.live.discard(handle)
            self.deleted.append(handle)

    async def list_for_run(self, run_id: str) -> list[SandboxHandle]:
        return sorted(h for h in self.live if self._run_ids.get(h) == run_id)
