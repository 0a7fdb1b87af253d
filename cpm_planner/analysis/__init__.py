"""Schedule analysis on top of computed CPM results."""

from .critical_path import (
    analyze_critical_path,
    get_critical_chains,
    get_critical_path_by_phase,
    identify_risk_tasks,
    print_critical_path_report,
)
from .reschedule import validate_manual_edit, reschedule_task

__all__ = [
    'analyze_critical_path',
    'get_critical_chains',
    'get_critical_path_by_phase',
    'identify_risk_tasks',
    'print_critical_path_report',
    'validate_manual_edit',
    'reschedule_task',
]
