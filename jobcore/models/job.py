import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4, UUID
from typing import Any

from .base_job import BaseJob, JobStatusValueType
from .enums import Priority
from .raw_job import RawJob


logger = logging.getLogger(__name__)


TERMINAL_STATUSES = ("COMPLETED", "FAILED", "CANCELLED")


def ms_to_datetime(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, timezone.utc)


@dataclass
class Job(BaseJob):
    id: UUID = field(default_factory=uuid4)
    """The unique identifier for the job.

    A random UUID4 generated on the client side, so ids never collide
    between dispatchers or databases."""
    job_type: str = field(default="GENERIC_BATCH")
    """The tag that selects the handler for this job."""
    payload: Any | None = field(default=None)
    """The payload of the job. Never inspected by the queue itself."""
    priority: int = field(default=Priority.NORMAL)
    """The priority of the job. Higher priorities are claimed first."""
    status: JobStatusValueType | None = field(default=None)
    """The status of the job.

    Jobs are created as "PENDING". A dispatcher claims a job and moves it to
    "PROCESSING" under a lease. Once the handler returns, the job becomes
    "COMPLETED". If the handler fails, the job goes back to "PENDING" for
    another attempt or, when attempts are exhausted or the error is
    permanent, to "FAILED". Only pending jobs can become "CANCELLED".
    """
    attempts: int = field(default=0)
    """The number of resolved processing attempts."""
    max_attempts: int = field(default=3)
    """The maximum number of processing attempts."""
    scheduled_at: datetime | None = field(default=None)
    """The job will not be claimed before this time. None means right away.

    Represented as a datetime object in UTC. In database, this is stored as
    a Unix epoch timestamp in milliseconds in UTC timezone.
    """
    created_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    """The time when the job was submitted."""
    started_at: datetime | None = field(default=None)
    """The time when the current or last attempt was claimed."""
    completed_at: datetime | None = field(default=None)
    """The time when the job reached a terminal status."""
    lease_owner: str | None = field(default=None)
    """The dispatcher that currently holds the job."""
    lease_expires_at: datetime | None = field(default=None)
    """The time after which the lease is considered abandoned."""
    error_message: str | None = field(default=None)
    """The error message of the last failed attempt."""
    error_trace: str | None = field(default=None)
    """The stack trace of the last failed attempt."""
    created_by: str | None = field(default=None)
    """Optional identity of whoever submitted the job."""

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def priority_name(self) -> str:
        return Priority(self.priority).name

    @staticmethod
    def from_raw_job(raw_job: RawJob) -> "Job":
        return Job(
            id=raw_job.id,
            job_type=raw_job.job_type,
            payload=Job.deserialize_payload(raw_job.payload),
            priority=Priority(raw_job.priority),
            status=raw_job.status,
            attempts=raw_job.attempts,
            max_attempts=raw_job.max_attempts,
            scheduled_at=ms_to_datetime(raw_job.scheduled_at),
            created_at=ms_to_datetime(raw_job.created_at),
            started_at=ms_to_datetime(raw_job.started_at),
            completed_at=ms_to_datetime(raw_job.completed_at),
            lease_owner=raw_job.lease_owner,
            lease_expires_at=ms_to_datetime(raw_job.lease_expires_at),
            error_message=raw_job.error_message,
            error_trace=raw_job.error_trace,
            created_by=raw_job.created_by,
        )

    def to_dict(self) -> dict[str, Any]:
        def iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "id": str(self.id),
            "job_type": self.job_type,
            "payload": self.payload,
            "priority": self.priority_name,
            "status": self.status,
            "attempts": self.attempts,
            "max_attempts": self.max_attempts,
            "scheduled_at": iso(self.scheduled_at),
            "created_at": iso(self.created_at),
            "started_at": iso(self.started_at),
            "completed_at": iso(self.completed_at),
            "lease_owner": self.lease_owner,
            "lease_expires_at": iso(self.lease_expires_at),
            "error_message": self.error_message,
            "created_by": self.created_by,
        }

    @staticmethod
    def serialize_payload(payload: Any | None) -> str | None:
        if payload is None:
            return None
        # Strings are encoded too, so "42" never reads back as 42
        return json.dumps(payload)

    @staticmethod
    def deserialize_payload(serialized_payload: str | None) -> Any | None:
        if serialized_payload is None:
            return None

        try:
            return json.loads(serialized_payload)
        except json.JSONDecodeError:
            logger.debug(
                f"Failed to deserialize payload using JSON: {serialized_payload}"
            )
            return serialized_payload
