"""
CPM Planner.

Loads a plan file, computes the Critical Path Method schedule and
provides critical path analysis and manual rescheduling.
"""

from .cpm import (
    Task,
    Dependency,
    TaskSchedule,
    ScheduleResult,
    CriticalPathResult,
    RescheduleResult,
    ScheduleError,
    MalformedRowError,
    EmptyScheduleError,
    CyclicDependencyError,
    InvalidManualEditError,
    TaskNetwork,
    CPMEngine,
    compute_schedule,
)
from .data_loader import LoadResult, load_tasks, parse_tasks

__version__ = '0.1.0'

__all__ = [
    # Models
    'Task',
    'Dependency',
    'TaskSchedule',
    'ScheduleResult',
    'CriticalPathResult',
    'RescheduleResult',
    # Errors
    'ScheduleError',
    'MalformedRowError',
    'EmptyScheduleError',
    'CyclicDependencyError',
    'InvalidManualEditError',
    # Core
    'TaskNetwork',
    'CPMEngine',
    'compute_schedule',
    # Loading
    'LoadResult',
    'load_tasks',
    'parse_tasks',
]
