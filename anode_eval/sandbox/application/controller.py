"""PodLifecycleController — owns the state machine of one sandboxed execution."""

import asyncio
import time
from collections.abc import Callable
from enum import StrEnum

from anode_eval.core.errors import AnodeEvalError
from anode_eval.sandbox.application.teardown import delete_with_retries
from anode_eval.sandbox.domain.observer import SandboxObserver
from anode_eval.sandbox.domain.provider import PodProvider
from anode_eval.sandbox.domain.spec import (
    PodPhase,
    SandboxHandle,
    SandboxOutput,
    SandboxSpec,
)
from anode_eval.sandbox.infrastructure.errors import (
    CollectionError,
    SandboxTimeoutError,
    TeardownWarning,
)


class ControllerState(StrEnum):
    CREATING = "creating"
    WAITING = "waiting"
    RUNNING = "running"
    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"

    @property
    def is_active(self) -> bool:
        return self in (
            ControllerState.CREATING,
            ControllerState.WAITING,
            ControllerState.RUNNING,
        )


class PodLifecycleController:
    """Drives one sandbox from creation to deletion.

    Every successful `start` is matched by exactly one provider delete: the
    first `terminate` call performs it and later calls are no-ops. Teardown
    failures are retried `teardown_attempts` times and then kept as
    `teardown_warning` instead of being raised.
    """

    def __init__(
        self,
        provider: PodProvider,
        observer: SandboxObserver,
        poll_interval_seconds: float,
        teardown_attempts: int = 3,
        teardown_backoff_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._provider = provider
        self._observer = observer
        self._poll_interval_seconds = poll_interval_seconds
        self._teardown_attempts = teardown_attempts
        self._teardown_backoff_seconds = teardown_backoff_seconds
        self._clock = clock
        self._state = ControllerState.CREATING
        self._spec: SandboxSpec | None = None
        self._handle: SandboxHandle | None = None
        self._deadline: float | None = None
        self._started_at: float | None = None
        self._phase = PodPhase.PENDING
        self._terminated = False
        self.teardown_warning: TeardownWarning | None = None

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def handle(self) -> SandboxHandle | None:
        return self._handle

    @property
    def elapsed_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return max(0.0, self._clock() - self._started_at)

    async def start(self, spec: SandboxSpec) -> SandboxHandle:
        """Request a sandbox and return its handle without waiting for it to run.

        Raises:
            SchedulingError: if the provider rejects the request.
            ProviderUnavailableError: if the backend cannot be reached.
        """
        self._spec = spec
        try:
            self._handle = await self._provider.create(spec)
        except AnodeEvalError:
            self._state = ControllerState.ERRORED
            raise
        self._started_at = self._clock()
        self._deadline = self._started_at + spec.timeout_seconds
        self._state = ControllerState.WAITING
        self._observer.sandbox_created(work_id=spec.work_id, handle=self._handle)
        return self._handle

    async def poll(self) -> PodPhase:
        """Query the sandbox phase once and advance the controller state."""
        spec, handle = self._require_started()
        self._phase = await self._provider.phase(handle)
        self._observer.sandbox_phase_polled(
            work_id=spec.work_id, handle=handle, phase=self._phase.value
        )
        if self._phase.is_terminal:
            self._state = ControllerState.COMPLETED
        elif self._phase is PodPhase.RUNNING:
            self._state = ControllerState.RUNNING
        return self._phase

    async def wait(self, cancel_event: asyncio.Event) -> PodPhase | None:
        """Poll until the sandbox is terminal.

        Returns the terminal phase, or None when `cancel_event` fired first.

        Raises:
            SandboxTimeoutError: after tearing the sandbox down, once the
                deadline set at `start` has passed.
        """
        spec, handle = self._require_started()
        assert self._deadline is not None
        while True:
            if cancel_event.is_set():
                return None
            phase = await self.poll()
            if phase.is_terminal:
                return phase
            remaining = self._deadline - self._clock()
            if remaining <= 0:
                self._state = ControllerState.TIMED_OUT
                self._observer.sandbox_timed_out(
                    work_id=spec.work_id,
                    handle=handle,
                    timeout_seconds=spec.timeout_seconds,
                )
                await self.terminate()
                raise SandboxTimeoutError(
                    work_id=spec.work_id, timeout_seconds=spec.timeout_seconds
                )
            try:
                await asyncio.wait_for(
                    cancel_event.wait(),
                    timeout=min(self._poll_interval_seconds, remaining),
                )
            except TimeoutError:
                continue

    async def fetch_output(self) -> SandboxOutput:
        """Read the logs of a terminal sandbox.

        Raises:
            CollectionError: if the output is no longer available.
        """
        _, handle = self._require_started()
        try:
            raw = await self._provider.logs(handle)
        except CollectionError:
            self._state = ControllerState.ERRORED
            raise
        reason = None
        if self._phase is PodPhase.FAILED:
            reason = await self._provider.failure_reason(handle)
        return SandboxOutput(
            handle=handle,
            phase=self._phase,
            logs=raw.decode("utf-8", errors="replace"),
            reason=reason,
        )

    async def terminate(self) -> None:
        """Delete the sandbox with bounded retries. Safe to call repeatedly."""
        if self._handle is None or self._terminated:
            return
        self._terminated = True
        if self._state.is_active:
            self._state = ControllerState.ERRORED
        assert self._spec is not None
        self.teardown_warning = await delete_with_retries(
            provider=self._provider,
            observer=self._observer,
            handle=self._handle,
            work_id=self._spec.work_id,
            attempts=self._teardown_attempts,
            backoff_seconds=self._teardown_backoff_seconds,
        )

    def _require_started(self) -> tuple[SandboxSpec, SandboxHandle]:
        if self._spec is None or self._handle is None:
            raise RuntimeError("controller has not started a sandbox")
        return self._spec, self._handle
