"""Pytest configuration and fixtures."""
import logging
from datetime import date, timedelta
from typing import Iterable, Optional

import pytest

from cpm_planner.cpm.models import Task

PROJECT_START = date(2025, 1, 6)


def _make_task(
    task_id: int,
    duration: int,
    predecessors: Iterable[int] = (),
    start: date = PROJECT_START,
    wbs: Optional[str] = None,
    name: Optional[str] = None,
) -> Task:
    return Task(
        task_id=task_id,
        wbs=wbs or f"1.{task_id}",
        task_name=name or f"Task {task_id}",
        start=start,
        finish=start + timedelta(days=duration),
        duration_days=duration,
        predecessors=frozenset(predecessors),
    )


@pytest.fixture
def make_task():
    """Factory for Task records; finish is derived from start and duration."""
    return _make_task


@pytest.fixture
def project_start() -> date:
    return PROJECT_START


@pytest.fixture
def linear_chain() -> list[Task]:
    """A(3d) -> B(2d) -> C(4d)."""
    return [
        _make_task(1, 3, name='A'),
        _make_task(2, 2, [1], name='B'),
        _make_task(3, 4, [2], name='C'),
    ]


@pytest.fixture
def parallel_paths() -> list[Task]:
    """A(1d) fans out to B(1d) and D(5d), which both feed C(2d)."""
    return [
        _make_task(1, 1, name='A'),
        _make_task(2, 1, [1], name='B'),
        _make_task(4, 5, [1], name='D'),
        _make_task(3, 2, [2, 4], name='C'),
    ]


@pytest.fixture
def three_task_cycle() -> list[Task]:
    """A -> B -> C -> A."""
    return [
        _make_task(1, 2, [3], name='A'),
        _make_task(2, 2, [1], name='B'),
        _make_task(3, 2, [2], name='C'),
    ]


@pytest.fixture
def sample_plan_lines() -> list[str]:
    """A small plan file as read from disk."""
    return [
        'ID,WBS,Task Name,Start,Finish,Duration,Predecessors\n',
        '1,1,Kickoff,2025-01-06,2025-01-06,0,\n',
        '2,1.1,"Design, review",2025-01-07,2025-01-10,3,1\n',
        '3,1.2,Procurement,2025-01-07,2025-01-09,2,1\n',
        '4,2.1,Build,2025-01-11,2025-01-16,5,"2;3"\n',
        '5,2.2,Handover,2025-01-17,2025-01-17,0,4\n',
    ]


@pytest.fixture
def plan_file(tmp_path, sample_plan_lines):
    """The sample plan written to a temporary CSV file."""
    path = tmp_path / 'plan.csv'
    path.write_text(''.join(sample_plan_lines), encoding='utf-8')
    return path


@pytest.fixture
def sample_tasks(sample_plan_lines) -> list[Task]:
    from cpm_planner.data_loader import parse_tasks
    return parse_tasks(sample_plan_lines).tasks


@pytest.fixture
def sample_schedule(sample_tasks):
    """Computed schedule of the sample plan: tasks 1, 2, 4, 5 critical, 3 has 1 day float."""
    from cpm_planner.cpm.engine import compute_schedule
    return compute_schedule(sample_tasks)


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch):
    """Point log and output directories at a temporary directory."""
    from cpm_planner.config.settings import settings

    monkeypatch.setattr(settings, 'LOG_DIR', tmp_path / 'logs')
    monkeypatch.setattr(settings, 'OUTPUT_DATA_DIR', tmp_path / 'output')
    yield settings

    # Drop handlers configure_logging attached so later tests start clean
    package_logger = logging.getLogger('cpm_planner')
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
