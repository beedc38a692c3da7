"""StructlogSandboxObserver — production observer that delegates to structlog."""

import structlog


class StructlogSandboxObserver:
    """Logs sandbox lifecycle events to structlog.

    Does NOT inherit from SandboxObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def sandbox_created(self, work_id: str, handle: str) -> None:
        self._log.info("sandbox.created", work_id=work_id, handle=handle)

    def sandbox_phase_polled(self, work_id: str, handle: str, phase: str) -> None:
        self._log.debug(
            "sandbox.phase_polled", work_id=work_id, handle=handle, phase=phase
        )

    def sandbox_timed_out(
        self, work_id: str, handle: str, timeout_seconds: float
    ) -> None:
        self._log.warning(
            "sandbox.timed_out",
            work_id=work_id,
            handle=handle,
            timeout_seconds=timeout_seconds,
        )

    def sandbox_deleted(self, work_id: str, handle: str) -> None:
        self._log.info("sandbox.deleted", work_id=work_id, handle=handle)

    def sandbox_teardown_retry(
        self, work_id: str, handle: str, attempt: int, reason: str
    ) -> None:
        self._log.warning(
            "sandbox.teardown_retry",
            work_id=work_id,
            handle=handle,
            attempt=attempt,
            reason=reason,
        )

    def sandbox_teardown_failed(self, work_id: str, handle: str, reason: str) -> None:
        self._log.error(
            "sandbox.teardown_failed", work_id=work_id, handle=handle, reason=reason
        )
