"""Rich-based apply progress display."""

from __future__ import annotations

from dataclasses import dataclass
from types import TracebackType

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, Task, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID

from ctfpilot.contracts.records import SubEntityKind
from ctfpilot.engine.engine import CHALLENGE_PHASE
from ctfpilot.engine.progress import ApplyProgress

_PHASE_STYLES: dict[str, str] = {
    CHALLENGE_PHASE: "cyan",
    SubEntityKind.FILES.value: "green",
    SubEntityKind.FLAGS.value: "yellow",
    SubEntityKind.TAGS.value: "blue",
    SubEntityKind.TOPICS.value: "blue",
    SubEntityKind.HINTS.value: "magenta",
}


@dataclass(slots=True)
class _Phase:
    task_id: RichTaskID
    # Started without an action count; the bar grows as actions complete.
    open_ended: bool


class RichApplyProgress(ApplyProgress):
    """One Rich bar per apply phase: the challenge row, then each sub-collection.

    Enter it as a context manager to run the live display::

        with RichApplyProgress() as progress:
            result = await engine.update(spec, recorded)
    """

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>14}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=console or Console(stderr=True),
        )
        self._phases: dict[str, _Phase] = {}

    def __enter__(self) -> RichApplyProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def _task(self, phase: str) -> Task | None:
        entry = self._phases.get(phase)
        if entry is None:
            return None
        return self._progress.tasks[entry.task_id]

    def phase_start(self, phase: str, total: int | None = None) -> None:
        style = _PHASE_STYLES.get(phase)
        label = f"[{style}]{phase.capitalize()}[/]" if style else phase
        task_id = self._progress.add_task(label, total=total)
        self._phases[phase] = _Phase(task_id=task_id, open_ended=total is None)

    def item_done(self, phase: str, count: int = 1) -> None:
        entry = self._phases.get(phase)
        if entry is None or not count:
            return
        if entry.open_ended:
            completed = self._progress.tasks[entry.task_id].completed
            self._progress.update(entry.task_id, total=completed + count)
        self._progress.advance(entry.task_id, count)

    def phase_done(self, phase: str) -> None:
        entry = self._phases.get(phase)
        if entry is None:
            return
        total = self._progress.tasks[entry.task_id].total
        if total:
            self._progress.update(entry.task_id, completed=total)
        else:
            # Nothing to apply still renders as one finished step.
            self._progress.update(entry.task_id, total=1, completed=1)

    def phase_error(self, phase: str, error: BaseException) -> None:
        entry = self._phases.get(phase)
        if entry is None:
            return
        self._progress.update(entry.task_id, description=f"[red]✗ {phase}[/] [dim]{type(error).__name__}[/]")
