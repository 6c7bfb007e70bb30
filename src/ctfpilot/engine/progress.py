"""Progress reporting protocol for challenge applies.

This is engine-level instrumentation, not a provider contract.
The engine emits one phase per remote step (the challenge itself, then each
sub-collection kind); consumers such as the CLI's Rich progress bar
implement ``ApplyProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class ApplyProgress(ABC):
    """Observer interface for apply progress events."""

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A phase is starting. *total* is ``None`` for indeterminate phases."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str, count: int = 1) -> None:
        """*count* actions within *phase* have completed."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None:
        """The *phase* has finished without diagnostics."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* finished with diagnostics or was interrupted by *error*."""
        ...  # pragma: no cover


class NullApplyProgress(ApplyProgress):
    """No-op implementation used when no progress display is requested."""

    def phase_start(self, phase: str, total: int | None = None) -> None:
        pass

    def item_done(self, phase: str, count: int = 1) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
