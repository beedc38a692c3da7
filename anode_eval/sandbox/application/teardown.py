"""Bounded-retry sandbox deletion shared by controllers and run sweeps."""

import asyncio

from anode_eval.sandbox.domain.observer import SandboxObserver
from anode_eval.sandbox.domain.provider import PodProvider
from anode_eval.sandbox.domain.spec import SandboxHandle
from anode_eval.sandbox.infrastructure.errors import TeardownWarning


async def delete_with_retries(
    provider: PodProvider,
    observer: SandboxObserver,
    handle: SandboxHandle,
    work_id: str,
    attempts: int,
    backoff_seconds: float = 1.0,
) -> TeardownWarning | None:
    """Delete one sandbox, retrying up to `attempts` times.

    Returns a TeardownWarning instead of raising when every attempt failed.
    """
    last_reason = ""
    for attempt in range(1, attempts + 1):
        try:
            await provider.delete(handle)
        except Exception as exc:  # noqa: BLE001
            last_reason = str(exc) or type(exc).__name__
            observer.sandbox_teardown_retry(
                work_id=work_id, handle=handle, attempt=attempt, reason=last_reason
            )
            if attempt < attempts:
                await asyncio.sleep(backoff_seconds * attempt)
            continue
        observer.sandbox_deleted(work_id=work_id, handle=handle)
        return None

    observer.sandbox_teardown_failed(work_id=work_id, handle=handle, reason=last_reason)
    return TeardownWarning(handle=handle, attempts=attempts, reason=last_reason)
