from .config import QueueSettings
from .core import JobStore, StopDispatcher
from .dispatcher import Dispatcher
from .errors import (
    ConfigurationError,
    ConflictError,
    JobCoreError,
    JobError,
    NotFoundError,
    PermanentError,
    TransientError,
    ValidationError,
)
from .models import Job, JobStats, JobType, Page, Priority
from .queue import JobQueue
from .registry import HandlerRegistry
from .retry import RetryPolicy
from .sweepers import CleanupSweeper, Reclaimer


__all__ = [
    "JobQueue",
    "JobStore",
    "Dispatcher",
    "HandlerRegistry",
    "RetryPolicy",
    "Reclaimer",
    "CleanupSweeper",
    "QueueSettings",
    "StopDispatcher",
    "Job",
    "JobStats",
    "JobType",
    "Page",
    "Priority",
    "JobCoreError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ConfigurationError",
    "JobError",
    "TransientError",
    "PermanentError",
]
