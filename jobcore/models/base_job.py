from dataclasses import dataclass
from datetime import datetime
from uuid import UUID
from typing import Any, Literal


JobStatusValueType = Literal[
    "PENDING",
    "PROCESSING",
    "COMPLETED",
    "FAILED",
    "CANCELLED",
]


@dataclass
class BaseJob:
    id: UUID
    job_type: str
    payload: Any | None
    priority: int
    status: JobStatusValueType | None
    attempts: int
    max_attempts: int
    scheduled_at: datetime | None
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None
    lease_owner: str | None
    lease_expires_at: datetime | None
    error_message: str | None
    error_trace: str | None
    created_by: str | None
