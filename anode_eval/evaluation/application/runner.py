"""EvaluationRunner — orchestrates one evaluation run end to end."""

import asyncio
import time
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime

from anode_eval.config.domain.config import EvalConfig
from anode_eval.config.domain.credentials import CredentialProvider
from anode_eval.config.domain.harness import TestHarness
from anode_eval.core.errors import AnodeEvalError
from anode_eval.evaluation.application.collector import ResultCollector
from anode_eval.evaluation.application.manager import RunManager
from anode_eval.evaluation.application.scheduler import Scheduler
from anode_eval.evaluation.application.scoring import (
    compute_prompt_scores,
    compute_scores,
    rank,
)
from anode_eval.evaluation.application.state import RunState
from anode_eval.evaluation.domain.archive import OutputArchive
from anode_eval.evaluation.domain.observer import EvaluationObserver
from anode_eval.evaluation.domain.report import EvaluationReport
from anode_eval.evaluation.domain.run import EvaluationRun, RunId, RunStatus, new_run_id
from anode_eval.evaluation.domain.store import RunStateStore
from anode_eval.harness.domain.adapter import HarnessAdapter
from anode_eval.matrix.application.expander import expand_matrix
from anode_eval.matrix.domain.work_item import WorkItem
from anode_eval.sandbox.application.controller import PodLifecycleController
from anode_eval.sandbox.domain.observer import SandboxObserver
from anode_eval.sandbox.domain.provider import PodProvider
from anode_eval.sandbox.domain.spec import SandboxSpec

_SECONDS_PER_HOUR = 3600


def effective_timeout_hours(
    item: WorkItem, default_hours: float, cap_hours: float | None
) -> float:
    """Prompt override or run default, never above the run-wide cap."""
    hours = item.prompt.timeout_hours or default_hours
    if cap_hours is not None:
        hours = min(hours, cap_hours)
    return hours


class EvaluationRunner:
    """Expands the matrix, schedules every work item and builds the report.

    Only configuration errors (raised before any sandbox exists) abort a run.
    Everything that goes wrong inside one work item is recorded on that item.
    """

    def __init__(
        self,
        config: EvalConfig,
        provider: PodProvider,
        credentials: CredentialProvider,
        adapter_for: Callable[[TestHarness], HarnessAdapter],
        observer: EvaluationObserver,
        sandbox_observer: SandboxObserver,
        manager: RunManager | None = None,
        store: RunStateStore | None = None,
        archive: OutputArchive | None = None,
        max_parallel: int | None = None,
        timeout_cap_hours: float | None = None,
        teardown_backoff_seconds: float = 1.0,
        run_id: RunId | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._credentials = credentials
        self._adapter_for = adapter_for
        self._observer = observer
        self._sandbox_observer = sandbox_observer
        self._manager = manager
        self._store = store
        self._archive = archive
        self._max_parallel = max_parallel or config.settings.max_parallel
        self._timeout_cap_hours = timeout_cap_hours
        self._teardown_backoff_seconds = teardown_backoff_seconds
        self._run_id = run_id or new_run_id()
        self._state: RunState | None = None

    @property
    def run_id(self) -> RunId:
        return self._run_id

    @property
    def state(self) -> RunState | None:
        return self._state

    async def run(self, dry_run: bool = False) -> EvaluationReport:
        """Execute the run, or only plan it when `dry_run` is set.

        A dry run returns every planned work item still queued and never
        calls the pod provider.

        Raises:
            ConfigError: if the matrix or credentials are invalid.
        """
        settings = self._config.settings
        items = expand_matrix(
            run_id=self._run_id,
            prompts=self._config.prompts,
            agents=self._config.agents,
        )
        env = self._credentials.resolve(settings.api_keys)

        run = EvaluationRun(
            run_id=self._run_id,
            name=self._config.name,
            description=self._config.description,
            created_at=datetime.now(UTC),
            max_parallel=self._max_parallel,
            dry_run=dry_run,
        )
        state = RunState(
            run=run,
            items=items,
            store=None if dry_run else self._store,
            observer=self._observer,
        )
        self._state = state
        if self._manager is not None:
            self._manager.register(state)

        agent_totals = Counter(item.agent.agent_id for item in items)
        self._observer.evaluation_started(
            run_id=self._run_id,
            total_work_items=len(items),
            agent_totals=dict(agent_totals),
            max_parallel=self._max_parallel,
            dry_run=dry_run,
        )
        started_at = time.monotonic()

        if not dry_run:
            await self._execute(state=state, env=env)

        report = self._build_report(state)
        self._observer.evaluation_completed(
            run_id=self._run_id,
            status=report.run.status.value,
            total_work_items=len(report.work_items),
            elapsed_seconds=time.monotonic() - started_at,
        )
        return report

    async def _execute(self, state: RunState, env: dict[str, str]) -> None:
        settings = self._config.settings
        scheduler = Scheduler(
            state=state,
            collector=ResultCollector(
                state=state, adapter_for=self._adapter_for, archive=self._archive
            ),
            controller_factory=lambda: PodLifecycleController(
                provider=self._provider,
                observer=self._sandbox_observer,
                poll_interval_seconds=settings.poll_interval_seconds,
                teardown_attempts=settings.teardown_attempts,
                teardown_backoff_seconds=self._teardown_backoff_seconds,
            ),
            spec_builder=lambda item: self._sandbox_spec(item=item, env=env),
            observer=self._observer,
            max_parallel=self._max_parallel,
        )

        state.start()
        watcher = asyncio.create_task(self._watch_cancel_marker(state))
        try:
            await scheduler.run()
        except* AnodeEvalError as eg:
            raise eg.exceptions[0]
        finally:
            watcher.cancel()
            await asyncio.gather(watcher, return_exceptions=True)
            if state.run.status is RunStatus.RUNNING and not scheduler.finished:
                state.complete(RunStatus.FAILED)

        if settings.cleanup_on_complete:
            await self._sweep_leftovers(state)
        state.complete(
            RunStatus.CANCELLED if state.cancel_requested else RunStatus.COMPLETED
        )

    def _sandbox_spec(self, item: WorkItem, env: dict[str, str]) -> SandboxSpec:
        hours = effective_timeout_hours(
            item=item,
            default_hours=self._config.settings.default_timeout_hours,
            cap_hours=self._timeout_cap_hours,
        )
        return SandboxSpec(
            run_id=item.run_id,
            work_id=item.work_id,
            prompt_id=item.prompt_id,
            tool=item.tool,
            model=item.model,
            iteration=item.iteration,
            prompt=item.prompt.prompt,
            eval_path=str(item.prompt.eval_path),
            test_command=item.prompt.test_harness.test_command(),
            setup_commands=list(item.prompt.setup_commands),
            env=env,
            timeout_seconds=hours * _SECONDS_PER_HOUR,
        )

    async def _watch_cancel_marker(self, state: RunState) -> None:
        """Turn a cancel request written by another process into the local flag."""
        if self._store is None:
            return
        interval = self._config.settings.poll_interval_seconds
        while not state.cancel_requested:
            if self._store.cancel_requested(state.run_id):
                if state.request_cancel():
                    self._observer.evaluation_cancel_requested(run_id=state.run_id)
                return
            try:
                await asyncio.wait_for(state.cancel_event.wait(), timeout=interval)
            except TimeoutError:
                continue

    async def _sweep_leftovers(self, state: RunState) -> None:
        if self._manager is None:
            return
        for warning in await self._manager.sweep(state.run_id):
            state.add_warning(warning)

    def _build_report(self, state: RunState) -> EvaluationReport:
        items = state.items()
        scores = compute_scores(items)
        return EvaluationReport(
            run=state.run,
            work_items=items,
            scores=scores,
            prompt_scores=compute_prompt_scores(items),
            rankings=rank(scores),
            warnings=state.warnings,
        )
