"""Tests for RichApplyProgress and NullApplyProgress."""

from __future__ import annotations

import io

from rich.console import Console

from ctfpilot.cli.progress.rich import RichApplyProgress
from ctfpilot.engine.progress import ApplyProgress, NullApplyProgress


def _quiet() -> RichApplyProgress:
    return RichApplyProgress(console=Console(file=io.StringIO()))


class TestNullApplyProgress:
    """NullApplyProgress is a no-op implementation."""

    def test_implements_protocol(self) -> None:
        assert issubclass(NullApplyProgress, ApplyProgress)

    def test_phase_lifecycle_is_noop(self) -> None:
        progress = NullApplyProgress()
        progress.phase_start("flags")
        progress.item_done("flags", 2)
        progress.phase_done("flags")
        progress.phase_error("hints", RuntimeError("boom"))


class TestRichApplyProgress:
    """RichApplyProgress drives one Rich bar per phase."""

    def test_context_manager(self) -> None:
        progress = _quiet()
        with progress as p:
            assert p is progress

    def test_known_phases_are_labelled(self) -> None:
        with _quiet() as progress:
            progress.phase_start("challenge")
            progress.phase_start("custom")
            challenge = progress._task("challenge")
            custom = progress._task("custom")
            assert challenge is not None and challenge.description == "[cyan]Challenge[/]"
            assert custom is not None and custom.description == "custom"

    def test_open_ended_phase_grows_its_total(self) -> None:
        with _quiet() as progress:
            progress.phase_start("flags")
            progress.item_done("flags", 2)
            progress.item_done("flags", 1)
            task = progress._task("flags")
            assert task is not None
            assert task.total == 3
            assert task.completed == 3
            progress.phase_done("flags")

    def test_counted_phase_fills_on_done(self) -> None:
        with _quiet() as progress:
            progress.phase_start("files", total=2)
            progress.item_done("files")
            progress.phase_done("files")
            task = progress._task("files")
            assert task is not None
            assert task.total == 2
            assert task.completed == 2

    def test_empty_phase_completes(self) -> None:
        with _quiet() as progress:
            progress.phase_start("tags")
            progress.item_done("tags", 0)
            progress.phase_done("tags")
            task = progress._task("tags")
            assert task is not None
            assert task.finished

    def test_phase_error_names_phase_and_error(self) -> None:
        with _quiet() as progress:
            progress.phase_start("hints")
            progress.phase_error("hints", RuntimeError("boom"))
            task = progress._task("hints")
            assert task is not None
            assert "hints" in task.description
            assert "RuntimeError" in task.description

    def test_unknown_phase_is_noop(self) -> None:
        with _quiet() as progress:
            progress.item_done("unknown")
            progress.phase_done("unknown")
            progress.phase_error("unknown", RuntimeError("boom"))
            assert progress._task("unknown") is None
