from dataclasses import dataclass, field
from typing import Any

from .enums import Priority


@dataclass
class JobStats:
    total: int = 0
    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0
    cancelled: int = 0
    by_priority: dict[str, int] = field(
        default_factory=lambda: {p.name: 0 for p in reversed(Priority)}
    )
    by_type: dict[str, int] = field(default_factory=dict)

    @staticmethod
    def from_rows(
        totals_row: tuple,
        priority_rows: list[tuple],
        type_rows: list[tuple],
    ) -> "JobStats":
        # SUM() over an empty table is NULL
        (
            total,
            pending,
            processing,
            completed,
            failed,
            cancelled,
        ) = (value or 0 for value in totals_row)

        stats = JobStats(
            total=total,
            pending=pending,
            processing=processing,
            completed=completed,
            failed=failed,
            cancelled=cancelled,
        )
        for priority, count in priority_rows:
            stats.by_priority[Priority(priority).name] = count
        for job_type, count in type_rows:
            stats.by_type[job_type] = count
        return stats

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "pending": self.pending,
            "processing": self.processing,
            "completed": self.completed,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "by_priority": dict(self.by_priority),
            "by_type": dict(self.by_type),
        }
