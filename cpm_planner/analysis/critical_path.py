"""
Critical Path Analysis.

Identifies critical and near-critical tasks, analyzes float distribution,
and groups the critical path into chains and phases.
"""

from collections import defaultdict
from typing import Optional

from cpm_planner.config.settings import settings
from cpm_planner.cpm.models import Task, ScheduleResult, CriticalPathResult


def _float_bucket(total_float_days: int) -> str:
    if total_float_days < 0:
        return '<0 (negative)'
    if total_float_days == 0:
        return '0 (critical)'
    if total_float_days <= 5:
        return '1-5 days'
    if total_float_days <= 10:
        return '6-10 days'
    if total_float_days <= 20:
        return '11-20 days'
    return '>20 days'


def analyze_critical_path(
    result: ScheduleResult,
    near_critical_threshold_days: Optional[int] = None,
) -> CriticalPathResult:
    """
    Analyze critical path and near-critical tasks.

    Args:
        result: Computed schedule
        near_critical_threshold_days: Float threshold for near-critical
            classification (default: settings.NEAR_CRITICAL_DAYS)

    Returns:
        CriticalPathResult with critical path, near-critical tasks, and statistics
    """
    if near_critical_threshold_days is None:
        near_critical_threshold_days = settings.NEAR_CRITICAL_DAYS

    critical = []
    near_critical = []
    float_buckets = defaultdict(int)

    for task, sched in result.iter_rows():
        float_buckets[_float_bucket(sched.total_float_days)] += 1

        if sched.is_critical:
            critical.append(task)
        elif sched.total_float_days <= near_critical_threshold_days:
            near_critical.append(task)

    # Sort critical path by early start; sort() is stable so plan order breaks ties
    critical.sort(key=lambda t: result.schedules[t.task_id].early_start)
    near_critical.sort(key=lambda t: result.schedules[t.task_id].total_float_days)

    return CriticalPathResult(
        critical_path=critical,
        near_critical_tasks=near_critical,
        float_distribution=dict(float_buckets),
        project_finish=result.project_finish,
        near_critical_threshold_days=near_critical_threshold_days,
        total_tasks=len(result.tasks),
        schedules=result.schedules,
    )


def get_critical_chains(result: ScheduleResult) -> list[list[int]]:
    """
    Split the critical path into chains joined by critical dependencies.

    A schedule may have several disjoint zero-float chains. Each chain is
    returned in topological order; chains are ordered by their first task.
    """
    adjacency = defaultdict(set)
    for dep in result.get_critical_dependencies():
        adjacency[dep.pred_task_id].add(dep.succ_task_id)
        adjacency[dep.succ_task_id].add(dep.pred_task_id)

    position = {tid: i for i, tid in enumerate(result.critical_path)}
    chains = []
    visited = set()

    for task_id in result.critical_path:
        if task_id in visited:
            continue

        members = []
        stack = [task_id]
        visited.add(task_id)
        while stack:
            current = stack.pop()
            members.append(current)
            for neighbour in adjacency[current]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    stack.append(neighbour)

        chains.append(sorted(members, key=position.__getitem__))

    return chains


def get_critical_path_by_phase(result: ScheduleResult) -> dict[Optional[int], list[Task]]:
    """
    Get critical tasks grouped by WBS phase.

    Returns:
        Dict mapping phase number (None for non-numeric WBS) to critical tasks
        sorted by early start
    """
    by_phase = defaultdict(list)
    for task in result.get_critical_tasks():
        by_phase[task.get_phase()].append(task)

    for phase in by_phase:
        by_phase[phase].sort(key=lambda t: result.schedules[t.task_id].early_start)

    return dict(by_phase)


def identify_risk_tasks(
    result: ScheduleResult,
    float_threshold_days: Optional[int] = None,
    min_duration_days: int = 5,
) -> list[Task]:
    """
    Identify high-risk tasks that could become critical.

    Criteria:
    - Near-critical (0 < float <= threshold)
    - Significant duration (duration >= min_duration)

    Returns:
        List of risk tasks sorted by (float, duration desc)
    """
    if float_threshold_days is None:
        float_threshold_days = settings.NEAR_CRITICAL_DAYS

    risk_tasks = []
    for task, sched in result.iter_rows():
        if sched.is_critical:
            continue  # Already critical
        if sched.total_float_days > float_threshold_days:
            continue
        if task.duration_days < min_duration_days:
            continue
        risk_tasks.append(task)

    risk_tasks.sort(key=lambda t: (result.schedules[t.task_id].total_float_days, -t.duration_days))
    return risk_tasks


def print_critical_path_report(result: CriticalPathResult) -> None:
    """Print a formatted critical path report."""
    print("=" * 80)
    print("CRITICAL PATH ANALYSIS REPORT")
    print("=" * 80)

    print(f"\nProject Finish: {result.project_finish.isoformat()}")
    print(f"Total Tasks: {result.total_tasks}")
    print(f"Critical Tasks: {len(result.critical_path)}")
    print(f"Near-Critical Tasks (<= {result.near_critical_threshold_days} days float): "
          f"{len(result.near_critical_tasks)}")

    print("\n--- Float Distribution ---")
    for bucket, count in sorted(result.float_distribution.items()):
        pct = count / result.total_tasks * 100
        bar = '#' * int(pct / 2)
        print(f"  {bucket:25s}: {count:5d} ({pct:5.1f}%) {bar}")

    print("\n--- Critical Path (first 20 tasks) ---")
    for i, task in enumerate(result.critical_path[:20]):
        kind = 'milestone' if task.is_milestone() else f"{task.duration_days}d"
        print(f"  {i+1:3d}. {task.task_id:6d} | {task.wbs:10s} | {task.task_name[:40]:40s} | {kind}")

    if len(result.critical_path) > 20:
        print(f"  ... and {len(result.critical_path) - 20} more critical tasks")

    print("\n--- Near-Critical Tasks (first 10) ---")
    for i, task in enumerate(result.near_critical_tasks[:10]):
        float_days = result.schedules[task.task_id].total_float_days if result.schedules else 0
        print(f"  {i+1:3d}. {task.task_id:6d} | Float: {float_days:4d}d | "
              f"{task.task_name[:35]:35s}")

    print("\n" + "=" * 80)
