"""
Data models for CPM calculations.

Defines dataclasses for tasks, dependencies, computed schedules and
analysis results. Task records are immutable; the engine never writes to
them and returns computed values in separate structures.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Iterator, Optional

import pandas as pd


@dataclass(frozen=True)
class Task:
    """Represents one line item of the plan file."""

    task_id: int
    wbs: str
    task_name: str
    start: date
    finish: date
    duration_days: int
    predecessors: frozenset[int] = field(default_factory=frozenset)

    def is_milestone(self) -> bool:
        """Check if task is a milestone (zero duration)."""
        return self.duration_days == 0

    def get_indent_level(self) -> int:
        """Display indent level: number of separators in the WBS code."""
        return self.wbs.count('.')

    def get_phase(self) -> Optional[int]:
        """First WBS segment as an integer, or None when it isn't numeric."""
        head = self.wbs.split('.', 1)[0].strip()
        if not head.isdigit():
            return None
        return int(head)

    def shifted(self, days: int) -> 'Task':
        """Return a copy with start and finish moved by whole days."""
        delta = timedelta(days=days)
        return replace(self, start=self.start + delta, finish=self.finish + delta)


@dataclass(frozen=True)
class Dependency:
    """Finish-to-start link between two tasks."""

    pred_task_id: int
    succ_task_id: int


@dataclass(frozen=True)
class TaskSchedule:
    """Computed CPM dates and float for one task."""

    task_id: int
    early_start: date
    early_finish: date
    late_start: date
    late_finish: date
    total_float_days: int
    free_float_days: int
    is_critical: bool


@dataclass(frozen=True)
class ScheduleResult:
    """
    Results from a CPM calculation.

    Fields can't be reassigned, but the result is not hashable because
    ``schedules`` is a dict. Compare results with ==.
    """

    __hash__ = None

    tasks: tuple[Task, ...]                  # original plan order
    schedules: dict[int, TaskSchedule]
    dependencies: tuple[Dependency, ...]     # resolved links only
    critical_path: tuple[int, ...]           # task_ids in topological order
    project_start: date
    project_finish: date
    total_days: int

    def get_schedule(self, task_id: int) -> TaskSchedule:
        """Get the computed schedule for a task."""
        return self.schedules[task_id]

    def iter_rows(self) -> Iterator[tuple[Task, TaskSchedule]]:
        """Yield (task, schedule) pairs in original plan order."""
        for task in self.tasks:
            yield task, self.schedules[task.task_id]

    def get_critical_tasks(self) -> list[Task]:
        """Get Task objects on the critical path."""
        by_id = {task.task_id: task for task in self.tasks}
        return [by_id[tid] for tid in self.critical_path]

    def get_critical_task_count(self) -> int:
        return len(self.critical_path)

    def get_tasks_by_float(self, max_float_days: Optional[int] = None) -> list[Task]:
        """Get tasks sorted by total float (ascending), stable on plan order."""
        rows = list(self.iter_rows())
        if max_float_days is not None:
            rows = [(t, s) for t, s in rows if s.total_float_days <= max_float_days]
        rows.sort(key=lambda row: row[1].total_float_days)
        return [task for task, _ in rows]

    def is_critical_dependency(self, pred_task_id: int, succ_task_id: int) -> bool:
        """True when both ends of a link are critical (drawn as a critical arrow)."""
        pred = self.schedules.get(pred_task_id)
        succ = self.schedules.get(succ_task_id)
        return bool(pred and succ and pred.is_critical and succ.is_critical)

    def get_critical_dependencies(self) -> list[Dependency]:
        return [
            dep for dep in self.dependencies
            if self.is_critical_dependency(dep.pred_task_id, dep.succ_task_id)
        ]

    def get_summary(self) -> str:
        """One-line project summary for status displays."""
        return (f"{len(self.tasks)} Tasks | "
                f"{self.project_start:%b %Y} - {self.project_finish:%b %Y} | "
                f"{self.total_days} days | {self.get_critical_task_count()} Critical Tasks")

    def to_records(self) -> list[dict]:
        """One dict per task in plan order, matching the ScheduleRow schema."""
        records = []
        for task, sched in self.iter_rows():
            records.append({
                'task_id': task.task_id,
                'wbs': task.wbs,
                'task_name': task.task_name,
                'start': task.start.isoformat(),
                'finish': task.finish.isoformat(),
                'duration_days': task.duration_days,
                'predecessors': ';'.join(str(p) for p in sorted(task.predecessors)),
                'early_start': sched.early_start.isoformat(),
                'early_finish': sched.early_finish.isoformat(),
                'late_start': sched.late_start.isoformat(),
                'late_finish': sched.late_finish.isoformat(),
                'total_float_days': sched.total_float_days,
                'free_float_days': sched.free_float_days,
                'is_critical': sched.is_critical,
                'is_milestone': task.is_milestone(),
                'indent_level': task.get_indent_level(),
            })
        return records

    def to_dataframe(self) -> pd.DataFrame:
        """Schedule as a DataFrame, one row per task in plan order."""
        return pd.DataFrame(self.to_records())


@dataclass
class CriticalPathResult:
    """Results from critical path analysis."""

    critical_path: list[Task]
    near_critical_tasks: list[Task]
    float_distribution: dict[str, int]  # float_bucket -> count
    project_finish: date
    near_critical_threshold_days: int
    total_tasks: int
    schedules: dict[int, TaskSchedule] = field(default_factory=dict)

    def get_critical_path_length(self) -> int:
        """Number of tasks on critical path."""
        return len(self.critical_path)

    def get_risk_summary(self) -> str:
        """Get summary of schedule risk."""
        critical = len(self.critical_path)
        near_critical = len(self.near_critical_tasks)
        return (f"{critical} critical tasks, {near_critical} near-critical "
                f"(<= {self.near_critical_threshold_days} days float)")


@dataclass
class RescheduleResult:
    """Results from shifting one task and recomputing the schedule."""

    task_id: int
    task_name: str
    days_delta: int
    original_finish: date
    new_finish: date
    slip_days: int
    affected_task_ids: list[int]
    original_critical_path: list[int]
    new_critical_path: list[int]
    critical_path_changed: bool
    tasks: tuple[Task, ...]
    schedule: ScheduleResult

    def get_slip_summary(self) -> str:
        """Get human-readable slip summary."""
        if self.slip_days == 0:
            return "No impact on project finish"
        if self.slip_days < 0:
            return f"Project finish pulled in by {-self.slip_days} days"
        return f"{self.slip_days} days slip"
