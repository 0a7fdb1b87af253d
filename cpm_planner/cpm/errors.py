"""
Error taxonomy for loading and scheduling.

Row-level problems are recovered by the loader; graph-level problems
propagate to the caller as typed exceptions.
"""

from datetime import date
from typing import Optional


class ScheduleError(Exception):
    """Base class for every planner error."""


class MalformedRowError(ScheduleError):
    """Raised when a plan file row cannot be turned into a task."""

    def __init__(self, line_number: int, reason: str):
        super().__init__(f"Line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason


class EmptyScheduleError(ScheduleError):
    """Raised when there are no valid tasks to schedule."""

    def __init__(self, message: str = "No valid tasks found", skipped_rows: int = 0):
        super().__init__(message)
        self.skipped_rows = skipped_rows


class CyclicDependencyError(ScheduleError, ValueError):
    """Raised when the resolved predecessor graph contains a cycle."""

    def __init__(self, task_ids: list[int], unplaced_count: Optional[int] = None):
        self.task_ids = list(task_ids)
        self.unplaced_count = unplaced_count if unplaced_count is not None else len(self.task_ids)
        chain = ' -> '.join(str(tid) for tid in self.task_ids)
        if self.task_ids:
            chain += f' -> {self.task_ids[0]}'
        super().__init__(
            f"Circular dependency detected involving {self.unplaced_count} tasks: {chain}"
        )


class InvalidManualEditError(ScheduleError):
    """Raised when a manual reschedule would start a task before a predecessor finishes."""

    def __init__(self, task_id: int, predecessor_id: int,
                 proposed_start: date, predecessor_finish: date):
        super().__init__(
            f"Task {task_id} cannot start on {proposed_start.isoformat()}: "
            f"predecessor {predecessor_id} finishes on {predecessor_finish.isoformat()}"
        )
        self.task_id = task_id
        self.predecessor_id = predecessor_id
        self.proposed_start = proposed_start
        self.predecessor_finish = predecessor_finish
