"""
Retry policy: decides what happens to a job after a failed attempt.

Two outcomes:
1. The error is transient and attempts are left: the job goes back to
   PENDING, either immediately or after an exponential backoff delay.
2. The error is permanent, or this was the last attempt: the job becomes
   FAILED and is never picked up again unless an administrator retries it.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime, timedelta

from jobcore.config import QueueSettings
from jobcore.errors import PermanentError, TransientError


logger = logging.getLogger(__name__)


TRANSIENT = "transient"
PERMANENT = "permanent"


@dataclass
class RetryDecision:
    status: str
    scheduled_at: datetime | None = None

    @property
    def retry(self) -> bool:
        return self.status == "PENDING"


class RetryPolicy:
    """Classify handler errors and pick the next state of a failed job.

    Args:
        backoff (bool): Delay retries exponentially. When False, a retried
            job is eligible again right away. Defaults to True.
        backoff_base (timedelta): The delay before the first retry. Every
            following retry doubles it. Defaults to 1 second.
        min_delay (timedelta): Lower bound of the delay. Defaults to 1 second.
        max_delay (timedelta): Upper bound of the delay. Defaults to 12 hours.
        jitter (float): Randomize the delay by up to this fraction in both
            directions. Defaults to 0 (no jitter).
        permanent_exceptions (tuple[type[BaseException], ...]): Exception
            classes that are never retried, in addition to
            ``PermanentError``.
    """

    def __init__(
        self,
        backoff: bool = True,
        backoff_base: timedelta = timedelta(seconds=1),
        min_delay: timedelta = timedelta(seconds=1),
        max_delay: timedelta = timedelta(hours=12),
        jitter: float = 0.0,
        permanent_exceptions: tuple[type[BaseException], ...] = (),
    ) -> None:
        if max_delay < min_delay:
            raise ValueError("max_delay cannot be less than min_delay")
        if not 0 <= jitter < 1:
            raise ValueError("jitter must be within [0, 1)")
        self.backoff = backoff
        self.backoff_base = backoff_base
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.permanent_exceptions = permanent_exceptions

    @classmethod
    def from_settings(cls, settings: QueueSettings) -> "RetryPolicy":
        return cls(
            backoff=settings.retry_backoff,
            backoff_base=settings.retry_backoff_base,
            min_delay=settings.retry_min_delay,
            max_delay=settings.retry_max_delay,
        )

    def classify(self, error: BaseException | str | None) -> str:
        # Explicit handler classification wins over the exception class list
        if isinstance(error, PermanentError):
            return PERMANENT
        if isinstance(error, TransientError):
            return TRANSIENT
        if self.permanent_exceptions and isinstance(
            error, self.permanent_exceptions
        ):
            return PERMANENT
        return TRANSIENT

    def delay(self, attempts: int) -> timedelta:
        """Delay before the retry that follows attempt number ``attempts``."""
        planned = self.backoff_base * 2 ** max(attempts - 1, 0)
        actual = min(max(self.min_delay, planned), self.max_delay)
        if self.jitter:
            factor = random.uniform(1 - self.jitter, 1 + self.jitter)
            actual = min(max(self.min_delay, actual * factor), self.max_delay)
        return actual

    def decide(
        self,
        attempts: int,
        max_attempts: int,
        error: BaseException | str | None,
        now: datetime,
    ) -> RetryDecision:
        """Pick the next state of a job.

        Args:
            attempts (int): Number of attempts including the one that has
                just failed.
            max_attempts (int): Maximum number of attempts of the job.
            error (BaseException | str | None): The failure.
            now (datetime): Current time, used to schedule the retry.
        """
        if self.classify(error) == PERMANENT:
            logger.debug(f"Permanent error, not retrying: {error}")
            return RetryDecision(status="FAILED")

        if attempts >= max_attempts:
            logger.debug(f"Attempts exhausted ({attempts}/{max_attempts})")
            return RetryDecision(status="FAILED")

        if not self.backoff:
            return RetryDecision(status="PENDING")

        return RetryDecision(
            status="PENDING",
            scheduled_at=now + self.delay(attempts),
        )
