"""Unit tests for manual rescheduling."""
import logging
from datetime import date, timedelta

import pytest

from cpm_planner.analysis.reschedule import reschedule_task, validate_manual_edit
from cpm_planner.cpm.errors import CyclicDependencyError, InvalidManualEditError


class TestValidateManualEdit:
    """Test edit validation before the engine runs."""

    def test_start_before_predecessor_finish_rejected(self, sample_tasks):
        """Design can't start before Kickoff finishes."""
        with pytest.raises(InvalidManualEditError) as exc_info:
            validate_manual_edit(sample_tasks, 2, -2)
        err = exc_info.value
        assert err.task_id == 2
        assert err.predecessor_id == 1
        assert err.proposed_start == date(2025, 1, 5)
        assert err.predecessor_finish == date(2025, 1, 6)

    def test_later_start_accepted(self, sample_tasks):
        validate_manual_edit(sample_tasks, 4, 3)

    def test_unresolved_predecessor_ignored(self, make_task):
        validate_manual_edit([make_task(1, 2, [99])], 1, -30)

    def test_unknown_task(self, sample_tasks):
        with pytest.raises(ValueError, match="Task 42 not found"):
            validate_manual_edit(sample_tasks, 42, 1)


class TestRescheduleTask:
    """Test shifting a task and recomputing."""

    def test_moving_root_shifts_everything(self, sample_tasks):
        """Delaying the start task delays the whole project."""
        change = reschedule_task(sample_tasks, 1, 3)
        assert change.slip_days == 3
        assert change.new_finish == date(2025, 1, 20)
        assert sorted(change.affected_task_ids) == [1, 2, 3, 4, 5]
        assert change.critical_path_changed is False
        assert change.get_slip_summary() == "3 days slip"

    def test_input_tasks_unchanged(self, sample_tasks):
        before = list(sample_tasks)
        change = reschedule_task(sample_tasks, 1, 3)
        assert sample_tasks == before
        assert change.tasks[0].start == date(2025, 1, 9)
        assert change.tasks[1:] == tuple(before[1:])

    def test_dependent_task_dates_are_recomputed(self, sample_tasks):
        """Early dates of a dependent task come from its predecessors, not its own dates."""
        change = reschedule_task(sample_tasks, 3, 1)
        assert change.slip_days == 0
        assert change.affected_task_ids == []
        assert change.schedule.get_schedule(3).early_start == date(2025, 1, 7)

    def test_dependent_task_shift_logged(self, sample_tasks, caplog):
        """Moving a task with predecessors reports no impact and says why."""
        with caplog.at_level(logging.DEBUG, logger='cpm_planner.analysis.reschedule'):
            change = reschedule_task(sample_tasks, 4, 2)

        assert change.get_slip_summary() == "No impact on project finish"
        assert change.tasks[3].start == date(2025, 1, 13)
        assert "Task 4 has predecessors" in caplog.text

    def test_root_shift_not_flagged(self, sample_tasks, caplog):
        with caplog.at_level(logging.DEBUG, logger='cpm_planner.analysis.reschedule'):
            reschedule_task(sample_tasks, 1, 1)
        assert "has predecessors" not in caplog.text

    def test_critical_path_can_move(self, make_task, project_start):
        """Delaying the non-critical root past the critical one swaps the path."""
        tasks = [make_task(1, 5), make_task(2, 3), make_task(3, 1, [1, 2])]
        change = reschedule_task(tasks, 2, 4)
        assert change.original_critical_path == [1, 3]
        assert change.new_critical_path == [2, 3]
        assert change.critical_path_changed is True
        assert change.slip_days == 2
        assert change.affected_task_ids == [2, 3]
        assert change.schedule.get_schedule(1).total_float_days == 2

    def test_pull_in(self, make_task):
        tasks = [make_task(1, 5), make_task(2, 3), make_task(3, 1, [1, 2])]
        change = reschedule_task(tasks, 1, -1)
        assert change.slip_days == -1
        assert change.get_slip_summary() == "Project finish pulled in by 1 days"

    def test_zero_delta_is_noop(self, sample_tasks, sample_schedule):
        change = reschedule_task(sample_tasks, 4, 0)
        assert change.schedule == sample_schedule
        assert change.affected_task_ids == []

    def test_invalid_edit_never_reaches_engine(self, sample_tasks):
        with pytest.raises(InvalidManualEditError):
            reschedule_task(sample_tasks, 4, -3)

    def test_cycle_propagates(self, three_task_cycle):
        with pytest.raises(CyclicDependencyError):
            reschedule_task(three_task_cycle, 1, 10)
