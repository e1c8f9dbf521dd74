"""
Queue configuration using pydantic-settings.

Every value can be overridden with a ``JOBCORE_`` prefixed environment
variable or an entry in a ``.env`` file. Durations are given in seconds or
as ISO 8601 durations, e.g. ``JOBCORE_LEASE_DURATION=120``,
``JOBCORE_POLL_MIN_INTERVAL=0.25`` or ``JOBCORE_RETENTION=P7D``.
"""

from datetime import timedelta

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class QueueSettings(BaseSettings):
    """Settings shared by the store, dispatchers and sweepers."""

    model_config = SettingsConfigDict(
        env_prefix="JOBCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///jobcore.db"

    # Leases
    lease_duration: timedelta = timedelta(minutes=5)
    lease_safety_margin: timedelta = timedelta(seconds=5)

    # Dispatchers
    dispatchers: int = Field(default=1, ge=1)
    poll_min_interval: timedelta = timedelta(milliseconds=100)
    poll_max_interval: timedelta = timedelta(seconds=2)
    required_job_types: list[str] = Field(default_factory=list)

    # Sweepers
    reclaim_interval: timedelta = timedelta(seconds=60)
    cleanup_interval: timedelta = timedelta(hours=1)
    retention: timedelta = timedelta(days=30)
    stuck_threshold: timedelta = timedelta(minutes=60)

    # Retries
    default_max_attempts: int = Field(default=3, ge=1)
    retry_backoff: bool = True
    retry_backoff_base: timedelta = timedelta(seconds=1)
    retry_min_delay: timedelta = timedelta(seconds=1)
    retry_max_delay: timedelta = timedelta(hours=12)
    retry_failed_resets_attempts: bool = False

    @field_validator(
        "lease_duration",
        "lease_safety_margin",
        "poll_min_interval",
        "poll_max_interval",
        "reclaim_interval",
        "cleanup_interval",
        "retention",
        "stuck_threshold",
        "retry_backoff_base",
        "retry_min_delay",
        "retry_max_delay",
        mode="before",
    )
    @classmethod
    def parse_seconds(cls, value):
        # Environment values arrive as text; pydantic only parses ISO 8601 there
        if isinstance(value, str):
            try:
                return timedelta(seconds=float(value.strip()))
            except (ValueError, OverflowError):
                return value
        return value

    @model_validator(mode="after")
    def check_intervals(self) -> "QueueSettings":
        if self.lease_duration <= timedelta(0):
            raise ValueError("lease_duration must be positive")
        if self.lease_safety_margin >= self.lease_duration:
            raise ValueError(
                "lease_safety_margin must be shorter than lease_duration"
            )
        if self.poll_min_interval > self.poll_max_interval:
            raise ValueError(
                "poll_min_interval cannot be greater than poll_max_interval"
            )
        if self.retry_min_delay > self.retry_max_delay:
            raise ValueError(
                "retry_max_delay cannot be less than retry_min_delay"
            )
        return self

    @property
    def handler_timeout(self) -> timedelta:
        """How long a handler may run before its job is left to the reclaimer."""
        return self.lease_duration - self.lease_safety_margin
