import enum
import logging
import os
import random
import socket
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import timedelta
from threading import Event
from uuid import uuid4
from typing import Iterable

from sqlalchemy.exc import SQLAlchemyError

from jobcore.core.base import StopDispatcher
from jobcore.core.store import JobStore
from jobcore.errors import ConflictError, NotFoundError
from jobcore.models.job import Job
from jobcore.registry import HandlerRegistry, job_type_tag


logger = logging.getLogger(__name__)


def default_dispatcher_id() -> str:
    return f"{socket.gethostname()}-{os.getpid()}-{uuid4().hex[:8]}"


class Dispatcher:
    """Poll the store, run the handler of every claimed job, record outcomes.

    Any number of dispatchers can run at the same time, in threads of one
    process or in different processes. They share nothing but the database.

    A handler runs in a worker thread with a timeout of
    ``lease_duration - safety_margin``. When it returns, the job is
    completed; when it raises, the job is failed and the retry policy of
    the store decides what happens next. When it runs out of time, nothing
    is recorded: the lease expires and the reclaimer puts the job back in
    the queue. The dispatcher then abandons the worker thread and keeps
    polling with a fresh one.

    Raising ``StopDispatcher`` from a handler completes the job and stops
    the loop.

    Args:
        store (JobStore): The job store.
        registry (HandlerRegistry): Handlers by job type.
        dispatcher_id (str | None): Lease owner name. Defaults to
            ``<hostname>-<pid>-<random>``.
        job_types (Iterable[str]): Only claim these job types. Defaults to
            every registered job type, so a dispatcher never claims a job it
            has no handler for.
        lease_duration (timedelta | None): Defaults to
            ``settings.lease_duration``.
        safety_margin (timedelta | None): Defaults to
            ``settings.lease_safety_margin``.
        poll_min (timedelta | None): Shortest idle sleep. Defaults to
            ``settings.poll_min_interval``.
        poll_max (timedelta | None): Longest idle sleep. Defaults to
            ``settings.poll_max_interval``.

    Raises:
        ConfigurationError: If one of ``job_types`` has no handler.
        ValueError: If the lease or polling intervals are inconsistent.
    """

    def __init__(
        self,
        store: JobStore,
        registry: HandlerRegistry,
        dispatcher_id: str | None = None,
        job_types: Iterable[str | enum.Enum] = (),
        lease_duration: timedelta | None = None,
        safety_margin: timedelta | None = None,
        poll_min: timedelta | None = None,
        poll_max: timedelta | None = None,
    ) -> None:
        settings = store.settings
        self.store = store
        self.registry = registry
        self.dispatcher_id = dispatcher_id or default_dispatcher_id()
        self.job_types = [job_type_tag(t) for t in job_types]
        self.registry.validate(self.job_types)
        self.lease_duration = (
            lease_duration
            if lease_duration is not None
            else settings.lease_duration
        )
        if self.lease_duration <= timedelta(0):
            raise ValueError("lease_duration must be positive")
        self.safety_margin = (
            safety_margin
            if safety_margin is not None
            else settings.lease_safety_margin
        )
        if self.safety_margin >= self.lease_duration:
            raise ValueError("safety_margin must be shorter than lease_duration")
        self.poll_min = (
            poll_min if poll_min is not None else settings.poll_min_interval
        )
        self.poll_max = (
            poll_max if poll_max is not None else settings.poll_max_interval
        )
        if self.poll_min <= timedelta(0):
            raise ValueError("poll_min must be positive")
        if self.poll_min > self.poll_max:
            raise ValueError("poll_min cannot be greater than poll_max")

        self.stop_event = Event()
        self.idle_polls = 0
        self._executor = self._new_executor()

    @property
    def handler_timeout(self) -> timedelta:
        return self.lease_duration - self.safety_margin

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"{self.dispatcher_id}-handler"
        )

    def _claimable_types(self) -> list[str]:
        return self.job_types or self.registry.job_types()

    def idle_delay(self) -> float:
        """Jittered exponential sleep in seconds, bounded by poll_min/max."""
        low = self.poll_min.total_seconds()
        high = self.poll_max.total_seconds()
        ceiling = min(high, low * 2 ** min(self.idle_polls, 16))
        return random.uniform(low, max(low, ceiling))

    def run_once(self) -> bool:
        """Claim and process at most one job.

        Returns:
            bool: True if a job was claimed, False if there was none.
        """
        job_types = self._claimable_types()
        if not job_types:
            logger.debug(f"Dispatcher {self.dispatcher_id} has no handlers")
            return False

        job = self.store.claim(
            self.dispatcher_id, self.lease_duration, job_types
        )
        if job is None:
            return False

        handler = self.registry.get(job.job_type)
        future = self._executor.submit(handler, job.payload)
        wait([future], timeout=self.handler_timeout.total_seconds())

        if not future.done():
            logger.warning(
                f"Job {job.id} did not finish within {self.handler_timeout}, "
                f"leaving it to the reclaimer"
            )
            # The hung thread cannot be killed; stop feeding it work.
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = self._new_executor()
            return True

        exception = future.exception()
        if exception is None or isinstance(exception, StopDispatcher):
            self._complete(job)
            if exception is not None:
                raise exception
        else:
            logger.error(
                f"Failed to process job {job.id} "
                f"(attempt {job.attempts + 1}/{job.max_attempts}): {exception}",
                exc_info=exception,
            )
            self._fail(job, exception)
        return True

    def _complete(self, job: Job) -> None:
        try:
            self.store.complete(job.id, lease_owner=self.dispatcher_id)
            logger.debug(f"Job {job.id} processed successfully")
        except (ConflictError, NotFoundError) as e:
            logger.warning(f"Could not complete job {job.id}: {e}")

    def _fail(self, job: Job, exception: BaseException) -> None:
        try:
            self.store.fail(job.id, exception, lease_owner=self.dispatcher_id)
        except (ConflictError, NotFoundError) as e:
            logger.warning(f"Could not record failure of job {job.id}: {e}")

    def drain(self, limit: int | None = None) -> int:
        """Process jobs until none is eligible or ``limit`` is reached.

        Returns:
            int: Number of claimed jobs.
        """
        processed = 0
        while limit is None or processed < limit:
            if not self.run_once():
                break
            processed += 1
        return processed

    def run(self) -> None:
        """Launch the dispatcher loop.

        Blocks until ``stop()`` is called, a handler raises
        ``StopDispatcher`` or the process is interrupted.
        """
        logger.info(
            f"Starting dispatcher {self.dispatcher_id} for job types "
            f"{self.job_types or 'all registered'}"
        )
        try:
            while not self.stop_event.is_set():
                try:
                    claimed = self.run_once()
                except StopDispatcher:
                    logger.debug(
                        f"Dispatcher {self.dispatcher_id} interrupted by StopDispatcher signal"
                    )
                    return
                except SQLAlchemyError as e:
                    logger.error(
                        f"Dispatcher {self.dispatcher_id} database error: {e}",
                        exc_info=e,
                    )
                    claimed = False

                if claimed:
                    self.idle_polls = 0
                else:
                    self.stop_event.wait(self.idle_delay())
                    self.idle_polls += 1
        except KeyboardInterrupt:
            logger.info(
                f"Dispatcher {self.dispatcher_id} interrupted by KeyboardInterrupt signal"
            )
        finally:
            self._executor.shutdown(wait=False)
            logger.info(f"Dispatcher {self.dispatcher_id} stopped")

    def stop(self) -> None:
        """Request the dispatcher to stop.

        The dispatcher will stop after processing the current job or after
        the current wait period is over.
        """
        self.stop_event.set()
