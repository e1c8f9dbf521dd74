import enum
from datetime import datetime, timedelta
from uuid import UUID
from typing import Any, Iterable

from jobcore.core.base import BaseJobStore
from jobcore.errors import ValidationError
from jobcore.models.enums import Priority
from jobcore.models.job import Job
from jobcore.models.params import ClaimParams, QueryParams, SubmitParams
from jobcore.registry import job_type_tag


SORTABLE_COLUMNS = (
    "created_at",
    "scheduled_at",
    "started_at",
    "completed_at",
    "priority",
    "status",
    "job_type",
    "attempts",
)
MAX_PAGE_SIZE = 1000


def to_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def to_timedelta(value: int | float | timedelta, name: str) -> timedelta:
    """Accept a ``timedelta`` or a number of milliseconds."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(milliseconds=value)
    raise ValidationError(f"{name} must be a timedelta or milliseconds")


def validate_job_id(job_id: UUID) -> None:
    if not job_id or not isinstance(job_id, UUID):
        raise ValidationError("Job ID must be a UUID")


def validate_dispatcher_id(dispatcher_id: str) -> None:
    if not dispatcher_id or not isinstance(dispatcher_id, str):
        raise ValidationError("dispatcher_id must be a non-empty string")


def validate_status(status: str) -> None:
    if status not in BaseJobStore.STATUSES:
        raise ValidationError(f"Unknown status: {status!r}")


def parse_job_type(job_type: str | enum.Enum) -> str:
    tag = job_type_tag(job_type) if job_type is not None else None
    if not tag or not isinstance(tag, str):
        raise ValidationError("Job type must be a non-empty string")
    return tag


def parse_job_types(job_types: Iterable[str | enum.Enum]) -> list[str]:
    return [parse_job_type(t) for t in job_types]


def parse_priority(priority: Priority | str | int) -> Priority:
    try:
        return Priority.parse(priority)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def parse_submit_params(
    job_type: str | enum.Enum,
    payload: Any | None,
    priority: Priority | str | int,
    scheduled_at: datetime | int | None,
    delay: int | timedelta | None,
    max_attempts: int | None,
    created_by: str | None,
    known_job_types: Iterable[str],
    default_max_attempts: int,
    now: datetime,
) -> SubmitParams:
    tag = parse_job_type(job_type)
    known = set(known_job_types)
    if tag not in known:
        raise ValidationError(
            f"Unknown job type {tag!r}. Known: {sorted(known)}"
        )

    if max_attempts is None:
        max_attempts = default_max_attempts
    if not isinstance(max_attempts, int) or isinstance(max_attempts, bool):
        raise ValidationError("max_attempts must be an integer")
    if max_attempts < 1:
        raise ValidationError("max_attempts must be at least 1")

    if created_by is not None and not isinstance(created_by, str):
        raise ValidationError("created_by must be a string")

    # Determine the scheduled_at time. None stays None: eligible right away.
    if isinstance(scheduled_at, bool):
        raise ValidationError("scheduled_at must be a datetime or epoch ms")
    if isinstance(scheduled_at, int):
        scheduled_at = datetime.fromtimestamp(scheduled_at / 1000, now.tzinfo)
    elif scheduled_at is not None and not isinstance(scheduled_at, datetime):
        raise ValidationError("scheduled_at must be a datetime or epoch ms")

    if delay:
        scheduled_at = (scheduled_at or now) + to_timedelta(delay, "delay")

    try:
        serialized_payload = Job.serialize_payload(payload)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Payload is not serializable: {e}") from None

    return SubmitParams(
        job_type=tag,
        serialized_payload=serialized_payload,
        priority=int(parse_priority(priority)),
        max_attempts=max_attempts,
        created_by=created_by,
        created_at_ms=to_ms(now),
        scheduled_at_ms=to_ms(scheduled_at) if scheduled_at else None,
    )


def parse_claim_params(
    dispatcher_id: str,
    lease_duration: int | timedelta,
    job_types: Iterable[str | enum.Enum],
    now: datetime,
) -> ClaimParams:
    validate_dispatcher_id(dispatcher_id)
    lease = to_timedelta(lease_duration, "lease_duration")
    if lease <= timedelta(0):
        raise ValidationError("lease_duration must be positive")

    return ClaimParams(
        dispatcher_id=dispatcher_id,
        job_types=parse_job_types(job_types),
        now_ms=to_ms(now),
        lease_expires_at_ms=to_ms(now + lease),
    )


def parse_query_params(
    job_type: str | enum.Enum | None = None,
    status: str | None = None,
    priority: Priority | str | int | None = None,
    created_by: str | None = None,
    page: int = 0,
    size: int = 20,
    sort_by: str = "created_at",
    sort_dir: str = "desc",
) -> QueryParams:
    if job_type is not None:
        job_type = parse_job_type(job_type)
    if status is not None:
        status = status.upper() if isinstance(status, str) else status
        validate_status(status)
    if priority is not None:
        priority = int(parse_priority(priority))

    if not isinstance(page, int) or page < 0:
        raise ValidationError("page must be a non-negative integer")
    if not isinstance(size, int) or not 1 <= size <= MAX_PAGE_SIZE:
        raise ValidationError(f"size must be between 1 and {MAX_PAGE_SIZE}")
    if sort_by not in SORTABLE_COLUMNS:
        raise ValidationError(
            f"Cannot sort by {sort_by!r}. Allowed: {', '.join(SORTABLE_COLUMNS)}"
        )
    sort_dir = (sort_dir or "").lower()
    if sort_dir not in ("asc", "desc"):
        raise ValidationError("sort_dir must be 'asc' or 'desc'")

    return QueryParams(
        job_type=job_type,
        status=status,
        priority=priority,
        created_by=created_by,
        page=page,
        size=size,
        sort_by=sort_by,
        sort_dir=sort_dir,
    )
