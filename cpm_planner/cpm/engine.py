"""
CPM (Critical Path Method) Engine.

Implements forward and backward pass calculations over whole calendar
days. Links are finish-to-start with a fixed one-day gap: a successor
starts on the day after its latest predecessor finishes.
"""

import logging
from datetime import date, timedelta
from typing import Optional, Sequence

from .errors import EmptyScheduleError
from .models import Task, TaskSchedule, ScheduleResult
from .network import TaskNetwork

logger = logging.getLogger(__name__)

SUCCESSOR_GAP = timedelta(days=1)


class CPMEngine:
    """
    CPM calculation engine.

    Performs forward pass (early dates), backward pass (late dates),
    float calculation, and critical path identification. The network's
    tasks are read, never modified; computed values live on the engine
    until ``run`` packages them into a ScheduleResult.
    """

    def __init__(self, network: TaskNetwork):
        """
        Initialize CPM engine.

        Args:
            network: Task network to calculate
        """
        self.network = network
        self.early_start: dict[int, date] = {}
        self.early_finish: dict[int, date] = {}
        self.late_start: dict[int, date] = {}
        self.late_finish: dict[int, date] = {}
        self.total_float: dict[int, int] = {}
        self.free_float: dict[int, int] = {}
        self._task_order: Optional[list[int]] = None

    def _get_task_order(self) -> list[int]:
        if self._task_order is None:
            self._task_order = self.network.topological_sort()
        return self._task_order

    def forward_pass(self) -> None:
        """
        Calculate early start and early finish for all tasks.

        Processes tasks in topological order. Start tasks keep their own
        start date; every other task starts the day after its latest
        predecessor's early finish.
        """
        for task_id in self._get_task_order():
            task = self.network.tasks[task_id]
            predecessors = self.network.get_predecessors(task_id)

            if predecessors:
                latest_finish = max(self.early_finish[dep.pred_task_id] for dep in predecessors)
                early_start = latest_finish + SUCCESSOR_GAP
            else:
                early_start = task.start

            self.early_start[task_id] = early_start
            # Milestones finish on the day they start
            self.early_finish[task_id] = early_start + timedelta(days=task.duration_days)

    def backward_pass(self, project_end: date = None) -> None:
        """
        Calculate late start and late finish for all tasks.

        Processes tasks in reverse topological order. Tasks without
        successors finish no later than the project end; every other task
        finishes the day before its earliest successor's late start.
        """
        if project_end is None:
            project_end = self._get_project_end()

        for task_id in reversed(self._get_task_order()):
            task = self.network.tasks[task_id]
            successors = self.network.get_successors(task_id)

            if successors:
                earliest_start = min(self.late_start[dep.succ_task_id] for dep in successors)
                late_finish = earliest_start - SUCCESSOR_GAP
            else:
                late_finish = project_end

            self.late_finish[task_id] = late_finish
            self.late_start[task_id] = late_finish - timedelta(days=task.duration_days)

    def _get_project_end(self) -> date:
        """Get the latest early finish as project end."""
        if not self.early_finish:
            raise ValueError("No tasks have early_finish calculated - run forward_pass first")
        return max(self.early_finish.values())

    def calculate_float(self, project_end: date = None) -> None:
        """
        Calculate total float and free float for all tasks.

        Total Float = Late Start - Early Start (days, may be negative)
        Free Float = min(successor early start) - Early Finish - gap
        """
        if project_end is None:
            project_end = self._get_project_end()

        for task_id in self.network.tasks:
            self.total_float[task_id] = (self.late_start[task_id] - self.early_start[task_id]).days

            successors = self.network.get_successors(task_id)
            if successors:
                next_start = min(self.early_start[dep.succ_task_id] for dep in successors)
                free_float = (next_start - SUCCESSOR_GAP - self.early_finish[task_id]).days
            else:
                free_float = (project_end - self.early_finish[task_id]).days
            self.free_float[task_id] = free_float

    def get_critical_path(self) -> list[int]:
        """
        Return task IDs on the critical path in execution order.

        Critical tasks are those with total_float <= 0.
        """
        return [tid for tid in self._get_task_order() if self.total_float[tid] <= 0]

    def get_project_start(self) -> date:
        """Get the earliest original start date as project start."""
        return min(task.start for task in self.network.tasks.values())

    def run(self) -> ScheduleResult:
        """
        Execute full CPM calculation.

        Returns:
            ScheduleResult with all calculated values

        Raises:
            CyclicDependencyError: if the resolved dependency graph has a cycle
        """
        self.forward_pass()
        project_finish = self._get_project_end()
        self.backward_pass(project_finish)
        self.calculate_float(project_finish)

        schedules = {
            tid: TaskSchedule(
                task_id=tid,
                early_start=self.early_start[tid],
                early_finish=self.early_finish[tid],
                late_start=self.late_start[tid],
                late_finish=self.late_finish[tid],
                total_float_days=self.total_float[tid],
                free_float_days=self.free_float[tid],
                is_critical=self.total_float[tid] <= 0,
            )
            for tid in self.network.tasks
        }

        project_start = self.get_project_start()
        critical_path = self.get_critical_path()

        logger.debug(
            f"CPM complete: {len(schedules)} tasks, {len(critical_path)} critical, "
            f"finish {project_finish.isoformat()}"
        )

        return ScheduleResult(
            tasks=tuple(self.network.tasks.values()),
            schedules=schedules,
            dependencies=tuple(self.network.dependencies),
            critical_path=tuple(critical_path),
            project_start=project_start,
            project_finish=project_finish,
            total_days=(project_finish - project_start).days + 1,
        )


def compute_schedule(tasks: Sequence[Task]) -> ScheduleResult:
    """
    Compute the full CPM schedule for a set of tasks.

    Args:
        tasks: Task records with unique ids, in display order

    Returns:
        ScheduleResult keyed by task id, tasks kept in input order

    Raises:
        EmptyScheduleError: if ``tasks`` is empty
        CyclicDependencyError: if the resolved predecessor graph has a cycle
        ValueError: if two tasks share an id
    """
    if not tasks:
        raise EmptyScheduleError("Cannot compute a schedule without tasks")

    network = TaskNetwork.from_tasks(tasks)
    return CPMEngine(network).run()
