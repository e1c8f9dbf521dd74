from uuid import UUID

from sqlalchemy import Update, and_, update

from jobcore.models.raw_job import RawJob


class StopDispatcher(BaseException):
    pass


class BaseJobStore:
    """This class exists for proper type hinting and dependency inversion.

    It holds the status values and builds the conditional ``UPDATE``
    statements that implement every transition of the job state machine.
    Each statement carries the expected current state in its ``WHERE``
    clause, so zero affected rows means somebody else got there first.
    """

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    STATUSES = (PENDING, PROCESSING, COMPLETED, FAILED, CANCELLED)
    TERMINAL = (COMPLETED, FAILED, CANCELLED)

    @staticmethod
    def _owned_by(job_id: UUID, lease_owner: str | None):
        clause = and_(
            RawJob.id == job_id,
            RawJob.status == BaseJobStore.PROCESSING,
        )
        if lease_owner is not None:
            clause = and_(clause, RawJob.lease_owner == lease_owner)
        return clause

    @staticmethod
    def _claim_statement(
        job_id: UUID,
        lease_owner: str,
        now_ms: int,
        lease_expires_at_ms: int,
    ) -> Update:
        stmt = (
            update(RawJob)
            .where(
                RawJob.id == job_id,
                RawJob.status == BaseJobStore.PENDING,
            )
            .values(
                status=BaseJobStore.PROCESSING,
                started_at=now_ms,
                lease_owner=lease_owner,
                lease_expires_at=lease_expires_at_ms,
                error_message=None,
                error_trace=None,
            )
        )
        return stmt

    @staticmethod
    def _complete_statement(
        job_id: UUID,
        lease_owner: str | None,
        completed_at_ms: int,
    ) -> Update:
        stmt = (
            update(RawJob)
            .where(BaseJobStore._owned_by(job_id, lease_owner))
            .values(
                status=BaseJobStore.COMPLETED,
                attempts=RawJob.attempts + 1,
                completed_at=completed_at_ms,
                lease_owner=None,
                lease_expires_at=None,
            )
        )
        return stmt

    @staticmethod
    def _fail_statement(
        job_id: UUID,
        lease_owner: str | None,
        expected_attempts: int,
        status: str,
        error_message: str | None,
        error_trace: str | None,
        completed_at_ms: int | None,
        scheduled_at_ms: int | None,
    ) -> Update:
        values = dict(
            status=status,
            attempts=expected_attempts + 1,
            error_message=error_message,
            error_trace=error_trace,
            lease_owner=None,
            lease_expires_at=None,
        )
        if status == BaseJobStore.FAILED:
            values["completed_at"] = completed_at_ms
        else:
            # Back in the pool: the next claim sets started_at again
            values["started_at"] = None
            values["scheduled_at"] = scheduled_at_ms

        stmt = (
            update(RawJob)
            .where(
                BaseJobStore._owned_by(job_id, lease_owner),
                RawJob.attempts == expected_attempts,
            )
            .values(**values)
        )
        return stmt

    @staticmethod
    def _cancel_statement(job_id: UUID, completed_at_ms: int) -> Update:
        stmt = (
            update(RawJob)
            .where(
                RawJob.id == job_id,
                RawJob.status == BaseJobStore.PENDING,
            )
            .values(
                status=BaseJobStore.CANCELLED,
                completed_at=completed_at_ms,
            )
        )
        return stmt

    @staticmethod
    def _release_statement(*where_clause) -> Update:
        """Return processing jobs to the pool without touching attempts."""
        stmt = (
            update(RawJob)
            .where(RawJob.status == BaseJobStore.PROCESSING, *where_clause)
            .values(
                status=BaseJobStore.PENDING,
                started_at=None,
                lease_owner=None,
                lease_expires_at=None,
            )
        )
        return stmt

    @staticmethod
    def _retry_failed_statement(
        job_types: list[str],
        reset_attempts: bool,
    ) -> Update:
        where_clause = [RawJob.status == BaseJobStore.FAILED]
        if job_types:
            where_clause.append(RawJob.job_type.in_(job_types))

        values = dict(
            status=BaseJobStore.PENDING,
            error_message=None,
            error_trace=None,
            started_at=None,
            completed_at=None,
            scheduled_at=None,
        )
        if reset_attempts:
            values["attempts"] = 0
        else:
            # Jobs that exhausted their attempts stay failed
            where_clause.append(RawJob.attempts < RawJob.max_attempts)

        stmt = update(RawJob).where(*where_clause).values(**values)
        return stmt
