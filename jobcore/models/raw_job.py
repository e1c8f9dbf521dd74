from datetime import datetime, timezone
from uuid import uuid4, UUID
from typing import Optional

from sqlalchemy import Index, Integer, BigInteger, String, Uuid
from sqlalchemy.orm import mapped_column, Mapped

from .params import SubmitParams
from .base_sql import BaseSQL


def now_ms() -> int:
    return int(
        datetime.now(timezone.utc).timestamp() * 1000
    )  # pragma: no cover


class RawJob(BaseSQL):
    __tablename__ = "jobs"
    __table_args__ = (
        Index(
            "ix_jobs_claim_order",
            "status",
            "priority",
            "scheduled_at",
            "created_at",
        ),
    )

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    job_type: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True
    )
    payload: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    priority: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1, index=True
    )
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default="PENDING", index=True
    )
    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=3
    )
    scheduled_at: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True
    )
    created_at: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=now_ms
    )
    started_at: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True
    )
    completed_at: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True, index=True
    )
    lease_owner: Mapped[Optional[str]] = mapped_column(
        String, nullable=True, index=True
    )
    lease_expires_at: Mapped[Optional[int]] = mapped_column(
        BigInteger, nullable=True, index=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    error_trace: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    @staticmethod
    def from_submit_params(submit_params: SubmitParams) -> "RawJob":
        return RawJob(
            id=uuid4(),
            job_type=submit_params.job_type,
            payload=submit_params.serialized_payload,
            priority=submit_params.priority,
            status="PENDING",
            attempts=0,
            max_attempts=submit_params.max_attempts,
            scheduled_at=submit_params.scheduled_at_ms,
            created_at=submit_params.created_at_ms,
            created_by=submit_params.created_by,
        )
