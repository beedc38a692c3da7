"""Scheduler — bounded-parallel dispatch of work items to pod controllers."""

import asyncio
from collections.abc import Callable
from functools import partial

from anode_eval.core.errors import AnodeEvalError
from anode_eval.evaluation.application.collector import ResultCollector
from anode_eval.evaluation.application.state import RunState
from anode_eval.evaluation.domain.observer import EvaluationObserver
from anode_eval.matrix.domain.work_item import WorkId, WorkItem, WorkItemStatus
from anode_eval.sandbox.application.controller import PodLifecycleController
from anode_eval.sandbox.domain.spec import SandboxSpec
from anode_eval.sandbox.infrastructure.errors import (
    CollectionError,
    SandboxTimeoutError,
    SchedulingError,
)

type ControllerFactory = Callable[[], PodLifecycleController]
type SpecBuilder = Callable[[WorkItem], SandboxSpec]
type Finalizer = Callable[[], WorkItem]


class Scheduler:
    """Admits work items in expansion order, at most `max_parallel` at a time.

    A semaphore slot is taken before an item is admitted and given back only
    after its sandbox is torn down and its final status recorded, so the
    number of live controllers never exceeds `max_parallel`. Cancellation is
    checked before every admission and inside every controller's poll loop.
    """

    def __init__(
        self,
        state: RunState,
        collector: ResultCollector,
        controller_factory: ControllerFactory,
        spec_builder: SpecBuilder,
        observer: EvaluationObserver,
        max_parallel: int,
    ) -> None:
        self._state = state
        self._collector = collector
        self._controller_factory = controller_factory
        self._spec_builder = spec_builder
        self._observer = observer
        self._max_parallel = max_parallel
        self._active = 0
        self._peak_active = 0
        self._finished = False

    @property
    def peak_active(self) -> int:
        return self._peak_active

    @property
    def finished(self) -> bool:
        """True once every work item has reached a terminal status."""
        return self._finished

    async def run(self) -> None:
        sem = asyncio.Semaphore(self._max_parallel)
        async with asyncio.TaskGroup() as tg:
            for item in self._state.items():
                await sem.acquire()
                if self._state.cancel_requested:
                    sem.release()
                    break
                self._state.transition(item.work_id, WorkItemStatus.SCHEDULED)
                self._active += 1
                self._peak_active = max(self._peak_active, self._active)
                tg.create_task(self._execute(work_id=item.work_id, sem=sem))

        for item in self._state.items():
            if item.status is WorkItemStatus.QUEUED:
                self._finish(partial(self._collector.record_cancelled, item.work_id))
        self._finished = True

    async def _execute(self, work_id: WorkId, sem: asyncio.Semaphore) -> None:
        controller = self._controller_factory()
        item = self._state.get(work_id)
        self._observer.work_item_started(
            run_id=self._state.run_id, work_id=work_id, agent_id=item.agent.agent_id
        )
        teardown_reported = False
        try:
            finalize = await self._drive(item=item, controller=controller)
            # The sandbox is gone before the final status becomes visible.
            await self._terminate(controller)
            teardown_reported = True
            self._finish(finalize)
        finally:
            if not teardown_reported:
                await self._terminate(controller)
            self._active -= 1
            sem.release()

    async def _drive(
        self, item: WorkItem, controller: PodLifecycleController
    ) -> Finalizer:
        """Run one item to a terminal sandbox state; return its final transition.

        Any other AnodeEvalError from the provider fails this item only.
        """
        try:
            return await self._drive_sandbox(item=item, controller=controller)
        except AnodeEvalError as exc:
            return partial(
                self._collector.record_failure,
                item.work_id,
                str(exc),
                controller.elapsed_seconds,
            )

    async def _drive_sandbox(
        self, item: WorkItem, controller: PodLifecycleController
    ) -> Finalizer:
        work_id = item.work_id
        if self._state.cancel_requested:
            return partial(self._collector.record_cancelled, work_id)
        try:
            handle = await controller.start(self._spec_builder(item))
        except SchedulingError as exc:
            return partial(self._collector.record_failure, work_id, str(exc))
        self._state.transition(
            work_id, WorkItemStatus.RUNNING, sandbox_handle=handle
        )

        try:
            phase = await controller.wait(self._state.cancel_event)
        except SandboxTimeoutError as exc:
            return partial(
                self._collector.record_timeout,
                work_id,
                controller.elapsed_seconds,
                str(exc),
            )
        if phase is None:
            return partial(self._collector.record_cancelled, work_id)

        try:
            output = await controller.fetch_output()
        except CollectionError as exc:
            return partial(
                self._collector.record_failure,
                work_id,
                str(exc),
                controller.elapsed_seconds,
            )
        return partial(
            self._collector.collect, work_id, output, controller.elapsed_seconds
        )

    async def _terminate(self, controller: PodLifecycleController) -> None:
        """Tear down and surface a warning, whichever call performed the delete.

        The controller deletes the sandbox itself on timeout, so its warning
        may already exist; it is still reported exactly once, here.
        """
        await controller.terminate()
        warning = controller.teardown_warning
        if warning is None:
            return
        self._state.add_warning(str(warning))
        self._observer.evaluation_teardown_warning(
            run_id=self._state.run_id, handle=warning.handle, reason=str(warning)
        )

    def _finish(self, finalize: Finalizer) -> None:
        item = finalize()
        run_id = self._state.run_id
        agent_id = item.agent.agent_id
        if item.status is WorkItemStatus.SUCCEEDED and item.run_result is not None:
            self._observer.work_item_completed(
                run_id=run_id,
                work_id=item.work_id,
                agent_id=agent_id,
                status=item.status.value,
                tests_passed=item.run_result.tests_passed,
                tests_total=item.run_result.tests_total,
            )
        else:
            self._observer.work_item_failed(
                run_id=run_id,
                work_id=item.work_id,
                agent_id=agent_id,
                reason=item.error or item.status.value,
            )

        agent_items = [
            other
            for other in self._state.items()
            if other.agent.agent_id == agent_id
        ]
        self._observer.evaluation_progress(
            run_id=run_id,
            agent_id=agent_id,
            completed=sum(1 for other in agent_items if other.status.is_terminal),
            total=len(agent_items),
        )
