"""
Manual Rescheduling.

Shift one task by whole days, the way a drag on the chart does, and
recompute the schedule from scratch. Edits that would start a task
before one of its predecessors finishes are rejected before the engine
runs.
"""

import logging
from datetime import timedelta
from typing import Sequence

from cpm_planner.cpm.engine import compute_schedule
from cpm_planner.cpm.errors import InvalidManualEditError
from cpm_planner.cpm.models import Task, RescheduleResult

logger = logging.getLogger(__name__)


def _find_task(tasks: Sequence[Task], task_id: int) -> Task:
    for task in tasks:
        if task.task_id == task_id:
            return task
    raise ValueError(f"Task {task_id} not found")


def validate_manual_edit(tasks: Sequence[Task], task_id: int, days_delta: int) -> None:
    """
    Check that shifting a task keeps it after all of its predecessors.

    Predecessor ids that don't resolve to a task are ignored, as they
    are by the engine.

    Raises:
        ValueError: if task_id is unknown
        InvalidManualEditError: if the new start is earlier than a
            predecessor's finish
    """
    task = _find_task(tasks, task_id)
    proposed_start = task.start + timedelta(days=days_delta)
    by_id = {t.task_id: t for t in tasks}

    for pred_id in sorted(task.predecessors):
        pred = by_id.get(pred_id)
        if pred is None:
            continue
        if proposed_start < pred.finish:
            raise InvalidManualEditError(
                task_id=task_id,
                predecessor_id=pred_id,
                proposed_start=proposed_start,
                predecessor_finish=pred.finish,
            )


def reschedule_task(tasks: Sequence[Task], task_id: int, days_delta: int) -> RescheduleResult:
    """
    Move one task by ``days_delta`` days and recompute the schedule.

    Only a start task's own dates feed the forward pass. Shifting a task
    that has predecessors in the plan changes ``tasks`` but not the
    computed schedule, which is reported as no impact.

    Args:
        tasks: Current task set (will not be modified)
        task_id: ID of task to move
        days_delta: Whole days to shift start and finish (negative = earlier)

    Returns:
        RescheduleResult with the new task set, its schedule and the impact
        on project finish and critical path

    Raises:
        ValueError: if task_id is unknown
        InvalidManualEditError: if the edit starts the task before a predecessor finishes
        CyclicDependencyError: if the task set has a dependency cycle
    """
    validate_manual_edit(tasks, task_id, days_delta)
    target = _find_task(tasks, task_id)
    if any(t.task_id in target.predecessors for t in tasks):
        logger.debug(
            f"Task {task_id} has predecessors; its early dates come from them, "
            f"so the shift does not move the schedule"
        )

    baseline = compute_schedule(tasks)
    new_tasks = tuple(
        task.shifted(days_delta) if task.task_id == task_id else task
        for task in tasks
    )
    modified = compute_schedule(new_tasks)

    # Tasks whose early dates moved
    affected = [
        tid for tid, sched in modified.schedules.items()
        if (sched.early_start, sched.early_finish)
        != (baseline.schedules[tid].early_start, baseline.schedules[tid].early_finish)
    ]

    moved = modified.get_schedule(task_id)
    logger.info(
        f"Task {task_id} moved {days_delta:+d} days; "
        f"project finish {baseline.project_finish.isoformat()} -> {modified.project_finish.isoformat()}"
    )
    if moved.total_float_days < 0:
        logger.warning(f"Task {task_id} now has negative float ({moved.total_float_days} days)")

    return RescheduleResult(
        task_id=task_id,
        task_name=target.task_name,
        days_delta=days_delta,
        original_finish=baseline.project_finish,
        new_finish=modified.project_finish,
        slip_days=(modified.project_finish - baseline.project_finish).days,
        affected_task_ids=affected,
        original_critical_path=list(baseline.critical_path),
        new_critical_path=list(modified.critical_path),
        critical_path_changed=set(baseline.critical_path) != set(modified.critical_path),
        tasks=new_tasks,
        schedule=modified,
    )
