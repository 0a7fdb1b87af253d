"""
Task Network for CPM calculations.

Manages tasks and dependencies with support for topological sorting
and network traversal.
"""

import logging
from collections import defaultdict, deque
from typing import Iterable, Optional

from .errors import CyclicDependencyError
from .models import Task, Dependency

logger = logging.getLogger(__name__)


class TaskNetwork:
    """
    Task dependency network for CPM calculations.

    Maintains tasks and their predecessor/successor relationships
    with efficient lookups and topological sorting. Tasks keep the
    order they were added in, which is the plan's display order.
    """

    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self.dependencies: list[Dependency] = []
        self.dropped_references: list[Dependency] = []
        self._successors: dict[int, list[Dependency]] = defaultdict(list)
        self._predecessors: dict[int, list[Dependency]] = defaultdict(list)

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> 'TaskNetwork':
        """
        Build a network from task records.

        Predecessor ids that don't match any task are dropped and
        remembered in ``dropped_references``.
        """
        network = cls()
        tasks = list(tasks)
        for task in tasks:
            network.add_task(task)

        for task in tasks:
            for pred_id in sorted(task.predecessors):
                dep = Dependency(pred_task_id=pred_id, succ_task_id=task.task_id)
                if not network.add_dependency_safe(dep):
                    network.dropped_references.append(dep)
                    logger.debug(f"Task {task.task_id}: dropping unresolved predecessor {pred_id}")

        return network

    def add_task(self, task: Task) -> None:
        """Add a task to the network. Task ids must be unique."""
        if task.task_id in self.tasks:
            raise ValueError(f"Duplicate task id {task.task_id}")
        self.tasks[task.task_id] = task

    def add_dependency(self, dep: Dependency) -> None:
        """
        Add a dependency to the network.

        Both predecessor and successor tasks must exist in the network.
        """
        if dep.pred_task_id not in self.tasks:
            raise ValueError(f"Predecessor task {dep.pred_task_id} not in network")
        if dep.succ_task_id not in self.tasks:
            raise ValueError(f"Successor task {dep.succ_task_id} not in network")
        self._link(dep)

    def add_dependency_safe(self, dep: Dependency) -> bool:
        """
        Add a dependency only if both tasks exist.

        Returns True if added, False if skipped.
        """
        if dep.pred_task_id not in self.tasks or dep.succ_task_id not in self.tasks:
            return False
        self._link(dep)
        return True

    def _link(self, dep: Dependency) -> None:
        if dep in self._predecessors[dep.succ_task_id]:
            return
        self.dependencies.append(dep)
        self._successors[dep.pred_task_id].append(dep)
        self._predecessors[dep.succ_task_id].append(dep)

    def get_task(self, task_id: int) -> Optional[Task]:
        """Get a task by ID."""
        return self.tasks.get(task_id)

    def get_successors(self, task_id: int) -> list[Dependency]:
        """Get dependencies where task_id is the predecessor."""
        return self._successors.get(task_id, [])

    def get_predecessors(self, task_id: int) -> list[Dependency]:
        """Get dependencies where task_id is the successor."""
        return self._predecessors.get(task_id, [])

    def get_successor_tasks(self, task_id: int) -> list[Task]:
        """Get successor Task objects."""
        return [self.tasks[d.succ_task_id] for d in self.get_successors(task_id)]

    def get_predecessor_tasks(self, task_id: int) -> list[Task]:
        """Get resolved predecessor Task objects."""
        return [self.tasks[d.pred_task_id] for d in self.get_predecessors(task_id)]

    def get_start_tasks(self) -> list[int]:
        """Get task IDs with no resolved predecessors."""
        return [tid for tid in self.tasks if not self._predecessors.get(tid)]

    def get_end_tasks(self) -> list[int]:
        """Get task IDs with no successors."""
        return [tid for tid in self.tasks if not self._successors.get(tid)]

    def topological_sort(self) -> list[int]:
        """
        Return task IDs in topological order (predecessors before successors).

        Uses Kahn's algorithm seeded in plan order, so the result is
        deterministic. Raises CyclicDependencyError if a cycle is found.
        """
        # Calculate in-degree for each task
        in_degree = {tid: len(self._predecessors.get(tid, [])) for tid in self.tasks}

        # Start with tasks that have no predecessors
        queue = deque(tid for tid, deg in in_degree.items() if deg == 0)
        result = []

        while queue:
            task_id = queue.popleft()
            result.append(task_id)

            # Reduce in-degree for all successors
            for dep in self._successors.get(task_id, []):
                in_degree[dep.succ_task_id] -= 1
                if in_degree[dep.succ_task_id] == 0:
                    queue.append(dep.succ_task_id)

        if len(result) != len(self.tasks):
            placed = set(result)
            remaining = [tid for tid in self.tasks if tid not in placed]
            raise CyclicDependencyError(self._find_cycle(remaining), unplaced_count=len(remaining))

        return result

    def _find_cycle(self, remaining: list[int]) -> list[int]:
        """
        Extract one cycle from the tasks Kahn's algorithm could not place.

        Every unplaced task has at least one unplaced predecessor, so
        walking predecessors from any of them must revisit a task.
        """
        unplaced = set(remaining)
        path: list[int] = []
        seen: dict[int, int] = {}
        current = remaining[0]

        while current not in seen:
            seen[current] = len(path)
            path.append(current)
            current = next(
                d.pred_task_id for d in self._predecessors[current]
                if d.pred_task_id in unplaced
            )

        # Walked backwards along predecessor links; report in dependency order
        cycle = path[seen[current]:]
        cycle.reverse()
        return cycle

    def reverse_topological_sort(self) -> list[int]:
        """Return task IDs in reverse topological order (successors before predecessors)."""
        return list(reversed(self.topological_sort()))

    def get_statistics(self) -> dict:
        """Get network statistics."""
        milestones = sum(1 for task in self.tasks.values() if task.is_milestone())

        return {
            'total_tasks': len(self.tasks),
            'total_dependencies': len(self.dependencies),
            'dropped_references': len(self.dropped_references),
            'start_tasks': len(self.get_start_tasks()),
            'end_tasks': len(self.get_end_tasks()),
            'milestones': milestones,
        }

    def validate(self) -> list[str]:
        """
        Validate network integrity.

        Returns list of issues found (empty if valid).
        """
        issues = []

        for dep in self.dropped_references:
            issues.append(
                f"Task {dep.succ_task_id} references missing predecessor: {dep.pred_task_id}"
            )

        # Check for circular dependencies
        try:
            self.topological_sort()
        except CyclicDependencyError as e:
            issues.append(str(e))

        return issues

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: int) -> bool:
        return task_id in self.tasks

    def __repr__(self) -> str:
        return f"TaskNetwork({len(self.tasks)} tasks, {len(self.dependencies)} dependencies)"
