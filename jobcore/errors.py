class JobCoreError(Exception):
    """Base class for every error raised by jobcore."""


class ValidationError(JobCoreError, ValueError):
    """Invalid parameters passed to a submission or a query."""


class NotFoundError(JobCoreError, LookupError):
    """No job with the given id exists."""

    def __init__(self, job_id) -> None:
        super().__init__(f"Job {job_id} not found")
        self.job_id = job_id


class ConflictError(JobCoreError):
    """The job is not in a state that allows the requested operation.

    Raised when cancelling a job that is no longer pending, or when
    completing or failing a job whose lease belongs to someone else.
    """

    def __init__(self, job_id, message: str, status: str | None = None) -> None:
        super().__init__(f"Job {job_id}: {message}")
        self.job_id = job_id
        self.status = status


class ConfigurationError(JobCoreError):
    """Handler registration is missing or inconsistent."""


class JobError(JobCoreError):
    """Raised by handlers to report a classified failure."""


class TransientError(JobError):
    """The attempt failed but another attempt may succeed."""


class PermanentError(JobError):
    """Retrying cannot help, e.g. a malformed payload."""
