"""Progress tracking for long-running export and import runs.

Pipelines report ProgressSnapshot values to an optional callback; the
tracker keeps the running count so every run ends on current == total.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from deckpress.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ProgressSnapshot:
    """A single progress emission: units done, units planned, current label."""

    current: int
    total: int
    label: str

    @property
    def fraction(self) -> float:
        if self.total <= 0:
            return 1.0
        return self.current / self.total


ProgressCallback = Callable[[ProgressSnapshot], None]


class ProgressTracker:
    """Counts completed units and forwards snapshots to a callback."""

    def __init__(
        self,
        description: str,
        total: int,
        on_progress: Optional[ProgressCallback] = None,
    ):
        """Initialize progress tracker.

        Args:
            description: Description of the operation
            total: Total number of units the run will report
            on_progress: Optional callback receiving each snapshot
        """
        self.description = description
        self.total = total
        self.on_progress = on_progress
        self.current = 0
        self.start_time: Optional[float] = None
        self.last_label = ""

    def __enter__(self):
        self.start_time = time.time()
        logger.debug("{} started (total={})", self.description, self.total)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.time() - (self.start_time or time.time())
        if exc_type is None:
            logger.debug(
                "{} finished {}/{} in {:.1f}s",
                self.description,
                self.current,
                self.total,
                elapsed,
            )
        return False  # Don't suppress exceptions

    def update(self, amount: int = 1, label: str = "") -> ProgressSnapshot:
        """Advance by amount and emit a snapshot labelled with the unit just handled."""
        self.current = min(self.current + amount, self.total)
        self.last_label = label
        snapshot = ProgressSnapshot(self.current, self.total, label)
        if self.on_progress is not None:
            self.on_progress(snapshot)
        return snapshot

    def finish(self) -> None:
        """Emit a closing snapshot when the count stopped short of the total."""
        if self.current < self.total:
            self.update(self.total - self.current, self.last_label)


@contextmanager
def progress(
    description: str,
    total: int,
    on_progress: Optional[ProgressCallback] = None,
) -> Iterator[ProgressTracker]:
    """Context manager for progress tracking.

    Usage:
        with progress("Exporting archive", total=60, on_progress=cb) as p:
            for unit in units:
                ...
                p.update(1, unit.label)
    """
    tracker = ProgressTracker(description, total, on_progress)
    with tracker:
        yield tracker
