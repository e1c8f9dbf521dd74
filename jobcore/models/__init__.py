from .base_sql import BaseSQL
from .enums import JobType, Priority
from .job import Job, TERMINAL_STATUSES
from .page import Page
from .raw_job import RawJob
from .stats import JobStats


__all__ = [
    "BaseSQL",
    "Job",
    "JobStats",
    "JobType",
    "Page",
    "Priority",
    "RawJob",
    "TERMINAL_STATUSES",
]
