"""ProgressEvaluationObserver — renders per-agent Rich progress bars to stderr."""

from __future__ import annotations

import sys

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.text import Text

_OVERALL = "Overall"

_AGENT_COLORS: list[str] = [
    "cyan",
    "green",
    "yellow",
    "magenta",
    "blue",
]


class _CountsColumn(ProgressColumn):
    """Renders done+running/total with colors matching the bar segments."""

    def render(self, task: Task) -> Text:
        done = int(task.fields.get("done", 0))
        running = int(task.fields.get("running", 0))
        total = int(task.total or 0)
        return Text.assemble(
            (str(done), "bright_green"),
            ("+", "dim white"),
            (str(running), "grey50"),
            ("/", "dim white"),
            (str(total), "default"),
        )


class _SegmentedBarColumn(ProgressColumn):
    """Three segments: finished work items, running ones, and the queue."""

    def __init__(self, bar_width: int = 40) -> None:
        super().__init__()
        self.bar_width = bar_width

    def render(self, task: Task) -> Text:
        total = task.total or 0
        done_cells = running_cells = 0
        if total > 0:
            done_cells = int(task.completed / total * self.bar_width)
            running = int(task.fields.get("running", 0))
            running_cells = min(
                int(running / total * self.bar_width), self.bar_width - done_cells
            )
        queued_cells = self.bar_width - done_cells - running_cells

        bar = Text()
        bar.append("█" * done_cells, style="bright_green")
        bar.append("▒" * running_cells, style="grey50")
        bar.append("░" * queued_cells, style="dim white")
        return bar


def _make_progress(console: Console) -> Progress:
    return Progress(
        TextColumn("{task.description}"),
        _SegmentedBarColumn(bar_width=40),
        _CountsColumn(),
        TimeElapsedColumn(),
        console=console,
        refresh_per_second=4,
        transient=False,
    )


class ProgressEvaluationObserver:
    """Overall bar plus one bar per agent (tool-model) on stderr.

    Only started/progress/work-item-started/completed events move the bars;
    the rest are no-ops. Pass ``disabled=True`` to track counts without
    drawing anything (useful in tests).

    Does NOT inherit from EvaluationObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._done: dict[str, int] = {}
        self._running: dict[str, int] = {}
        self._total: dict[str, int] = {}
        self._task_ids: dict[str, TaskID] = {}
        self._progress: Progress | None = None
        self._live: Live | None = None

    @property
    def done(self) -> dict[str, int]:
        return dict(self._done)

    @property
    def running(self) -> dict[str, int]:
        return dict(self._running)

    def _describe(self, name: str, index: int, pad_width: int) -> str:
        if name == _OVERALL:
            return f"[bold]{_OVERALL:<{pad_width}}[/bold]"
        if sys.stderr.isatty():
            color = _AGENT_COLORS[index % len(_AGENT_COLORS)]
            return f"[{color}]{name:<{pad_width}}[/{color}]"
        return f"{name:<{pad_width}}"

    def _refresh(self, *keys: str) -> None:
        if self._progress is None:
            return
        for key in keys:
            task_id = self._task_ids.get(key)
            if task_id is None:
                continue
            self._progress.update(
                task_id,
                completed=self._done.get(key, 0),
                done=self._done.get(key, 0),
                running=self._running.get(key, 0),
            )

    def evaluation_started(
        self,
        run_id: str,
        total_work_items: int,
        agent_totals: dict[str, int],
        max_parallel: int,
        dry_run: bool,
    ) -> None:
        self._total = {**agent_totals, _OVERALL: total_work_items}
        self._done = dict.fromkeys(self._total, 0)
        self._running = dict.fromkeys(self._total, 0)
        self._task_ids = {}

        if self._disabled or dry_run:
            return

        console = Console(stderr=True)
        self._progress = _make_progress(console=console)
        names = [_OVERALL, *agent_totals]
        pad_width = max(len(name) for name in names)
        for index, name in enumerate(names):
            self._task_ids[name] = self._progress.add_task(
                description=self._describe(name=name, index=index, pad_width=pad_width),
                total=float(self._total[name]),
                done=0,
                running=0,
            )
        legend = Text.assemble(
            "  Legend:  ",
            ("█", "bright_green"),
            " finished  ",
            ("▒", "grey50"),
            " running  ",
            ("░", "dim white"),
            " queued",
        )
        self._live = Live(
            Group(self._progress, Text(""), legend),
            console=console,
            refresh_per_second=4,
        )
        self._live.start()

    def evaluation_completed(
        self,
        run_id: str,
        status: str,
        total_work_items: int,
        elapsed_seconds: float,
    ) -> None:
        if self._live is not None:
            self._live.stop()
        self._live = None
        self._progress = None

    def evaluation_progress(
        self,
        run_id: str,
        agent_id: str,
        completed: int,
        total: int,
    ) -> None:
        for key in (agent_id, _OVERALL):
            if key in self._done:
                self._done[key] += 1
                self._running[key] = max(0, self._running[key] - 1)
        self._refresh(agent_id, _OVERALL)

    def work_item_started(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
    ) -> None:
        for key in (agent_id, _OVERALL):
            if key in self._running:
                self._running[key] += 1
        self._refresh(agent_id, _OVERALL)

    def work_item_completed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        status: str,
        tests_passed: int,
        tests_total: int,
    ) -> None:
        pass

    def work_item_failed(
        self,
        run_id: str,
        work_id: str,
        agent_id: str,
        reason: str,
    ) -> None:
        pass

    def evaluation_cancel_requested(self, run_id: str) -> None:
        pass

    def evaluation_teardown_warning(
        self,
        run_id: str,
        handle: str,
        reason: str,
    ) -> None:
        pass

    def evaluation_state_persist_failed(self, run_id: str, reason: str) -> None:
        pass
