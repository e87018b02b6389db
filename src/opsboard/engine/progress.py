"""Progress reporting protocol for batch operations.

Batch writers (matrix ensure, bulk import, archive moves) emit phase
lifecycle events; consumers such as the CLI's Rich progress bar implement
``OpsProgress`` to render feedback.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class OpsProgress(ABC):
    """Observer interface for batch progress events."""

    @abstractmethod
    def phase_start(self, phase: str, total: int | None = None) -> None:
        """A phase is starting. *total* is ``None`` for indeterminate phases."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: str) -> None:
        """One item within *phase* has completed (successfully or not)."""
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: str) -> None:
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: str, error: BaseException) -> None:
        """The *phase* was interrupted by *error*."""
        ...  # pragma: no cover


class NullOpsProgress(OpsProgress):
    """No-op implementation used when no progress display is requested."""

    def phase_start(self, phase: str, total: int | None = None) -> None:
        pass

    def item_done(self, phase: str) -> None:
        pass

    def phase_done(self, phase: str) -> None:
        pass

    def phase_error(self, phase: str, error: BaseException) -> None:
        pass
