"""
CPM (Critical Path Method) Calculator for plan files.

This module provides:
- Task network construction with dependency handling
- Forward/backward pass CPM calculations over calendar days
- Float and critical path identification
"""

from .errors import (
    ScheduleError,
    MalformedRowError,
    EmptyScheduleError,
    CyclicDependencyError,
    InvalidManualEditError,
)
from .models import (
    Task,
    Dependency,
    TaskSchedule,
    ScheduleResult,
    CriticalPathResult,
    RescheduleResult,
)
from .network import TaskNetwork
from .engine import CPMEngine, compute_schedule

__all__ = [
    'ScheduleError',
    'MalformedRowError',
    'EmptyScheduleError',
    'CyclicDependencyError',
    'InvalidManualEditError',
    'Task',
    'Dependency',
    'TaskSchedule',
    'ScheduleResult',
    'CriticalPathResult',
    'RescheduleResult',
    'TaskNetwork',
    'CPMEngine',
    'compute_schedule',
]
