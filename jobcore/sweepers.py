"""
Periodic maintenance of the job table.

The reclaimer returns jobs with an expired lease to the queue; it is what
makes a crashed or hung dispatcher harmless. The cleanup sweeper deletes
terminal jobs once they are older than the retention window.
"""

import logging
from datetime import timedelta
from threading import Event

from sqlalchemy.exc import SQLAlchemyError

from jobcore.core.store import JobStore


logger = logging.getLogger(__name__)


class PeriodicSweeper:
    name = "sweeper"

    def __init__(self, store: JobStore, interval: timedelta) -> None:
        if interval <= timedelta(0):
            raise ValueError("interval must be positive")
        self.store = store
        self.interval = interval
        self.stop_event = Event()

    def run_once(self) -> int:
        raise NotImplementedError

    def run(self) -> None:
        """Call ``run_once()`` every ``interval`` until stopped."""
        logger.info(f"Starting {self.name}, running every {self.interval}")
        while not self.stop_event.is_set():
            try:
                self.run_once()
            except SQLAlchemyError as e:
                logger.error(f"{self.name} failed: {e}", exc_info=e)
            self.stop_event.wait(self.interval.total_seconds())
        logger.info(f"{self.name} stopped")

    def stop(self) -> None:
        self.stop_event.set()


class Reclaimer(PeriodicSweeper):
    """Put jobs whose lease expired back in the queue."""

    name = "reclaimer"

    def __init__(
        self, store: JobStore, interval: timedelta | None = None
    ) -> None:
        if interval is None:
            interval = store.settings.reclaim_interval
        super().__init__(store, interval)

    def run_once(self) -> int:
        return self.store.reclaim_expired()


class CleanupSweeper(PeriodicSweeper):
    """Delete terminal jobs older than ``retention``."""

    name = "cleanup sweeper"

    def __init__(
        self,
        store: JobStore,
        interval: timedelta | None = None,
        retention: timedelta | None = None,
    ) -> None:
        if interval is None:
            interval = store.settings.cleanup_interval
        super().__init__(store, interval)
        self.retention = (
            retention if retention is not None else store.settings.retention
        )
        if self.retention < timedelta(0):
            raise ValueError("retention cannot be negative")

    def run_once(self) -> int:
        return self.store.delete_terminal_before(
            self.store.now() - self.retention
        )
