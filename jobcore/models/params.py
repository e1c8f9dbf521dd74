from dataclasses import dataclass


@dataclass
class SubmitParams:
    job_type: str
    serialized_payload: str | None
    priority: int
    max_attempts: int
    created_by: str | None
    created_at_ms: int
    scheduled_at_ms: int | None


@dataclass
class ClaimParams:
    dispatcher_id: str
    job_types: list[str]
    now_ms: int
    lease_expires_at_ms: int


@dataclass
class QueryParams:
    job_type: str | None
    status: str | None
    priority: int | None
    created_by: str | None
    page: int
    size: int
    sort_by: str
    sort_dir: str
