"""
Data Loader for plan files.

Reads the delimited task table (ID, WBS, Task Name, Start, Finish,
Duration, Predecessors) into Task records for CPM analysis. Rows that
can't be parsed are skipped and counted rather than aborting the load.
"""

import csv
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from cpm_planner.config.settings import settings
from cpm_planner.cpm.errors import MalformedRowError, EmptyScheduleError
from cpm_planner.cpm.models import Task

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ('ID', 'WBS', 'Task Name', 'Start', 'Finish', 'Duration', 'Predecessors')

_PREDECESSOR_SPLIT = re.compile(r'[;,]')


@dataclass
class LoadResult:
    """Tasks read from a plan file plus the number of rows that were skipped."""

    tasks: list[Task]
    skipped_rows: int = 0
    source: Optional[Path] = None
    skipped_lines: list[int] = field(default_factory=list)

    def get_summary(self) -> str:
        summary = f"Loaded {len(self.tasks)} tasks"
        if self.skipped_rows:
            summary += f" ({self.skipped_rows} rows skipped)"
        return summary


def _normalize_header(name: str) -> str:
    return re.sub(r'[\s_]+', '', name).lower()


def resolve_columns(header: list[str]) -> dict[str, int]:
    """
    Map each required column to its position in the header.

    Columns are matched by name ignoring case, spaces and underscores.
    If any required column is missing from the header, the fixed order
    of REQUIRED_COLUMNS is assumed instead.
    """
    positions = {_normalize_header(name): i for i, name in enumerate(header)}
    by_name = {col: positions.get(_normalize_header(col)) for col in REQUIRED_COLUMNS}

    if all(pos is not None for pos in by_name.values()):
        return by_name

    logger.debug(f"Header {header} does not name every column; using fixed positions")
    return {col: i for i, col in enumerate(REQUIRED_COLUMNS)}


def parse_date(value: str, line_number: int, column: str) -> date:
    """Parse a date cell, raising MalformedRowError when it isn't a date."""
    try:
        parsed = pd.to_datetime(value)
    except (ValueError, TypeError, OverflowError) as e:
        raise MalformedRowError(line_number, f"{column} is not a date: {value!r}") from e
    if pd.isna(parsed):
        raise MalformedRowError(line_number, f"{column} is empty")
    return parsed.date()


def parse_int(value: str, line_number: int, column: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise MalformedRowError(line_number, f"{column} is not an integer: {value!r}") from e


def parse_predecessors(value: str, line_number: int) -> frozenset[int]:
    """Parse a predecessor cell such as ``"3; 5"`` or ``"3,5"``; blank means none."""
    if not value or not value.strip():
        return frozenset()
    return frozenset(
        parse_int(part.strip(), line_number, 'Predecessors')
        for part in _PREDECESSOR_SPLIT.split(value)
        if part.strip()
    )


def parse_row(fields: list[str], columns: dict[str, int], line_number: int) -> Task:
    """
    Turn one split row into a Task.

    Raises:
        MalformedRowError: too few fields, bad integer/date, negative
            duration, or finish before start on a non-milestone
    """
    needed = max(columns.values()) + 1
    if len(fields) < needed:
        raise MalformedRowError(line_number, f"expected {needed} fields, found {len(fields)}")

    def cell(column: str) -> str:
        return fields[columns[column]].strip()

    task_id = parse_int(cell('ID'), line_number, 'ID')
    start = parse_date(cell('Start'), line_number, 'Start')
    finish = parse_date(cell('Finish'), line_number, 'Finish')
    duration = parse_int(cell('Duration'), line_number, 'Duration')

    if duration < 0:
        raise MalformedRowError(line_number, f"Duration must not be negative: {duration}")
    if duration > 0 and finish < start:
        raise MalformedRowError(line_number, "Finish is before Start")

    return Task(
        task_id=task_id,
        wbs=cell('WBS'),
        task_name=cell('Task Name'),
        start=start,
        finish=finish,
        duration_days=duration,
        predecessors=parse_predecessors(cell('Predecessors'), line_number),
    )


def split_line(line: str, delimiter: str, line_number: int) -> list[str]:
    """
    Split one physical line into fields.

    Quoted fields may contain the delimiter. A quote left open at the
    end of the line makes only this line malformed.
    """
    try:
        return next(csv.reader([line], delimiter=delimiter, skipinitialspace=True, strict=True), [])
    except csv.Error as e:
        raise MalformedRowError(line_number, f"unbalanced quotes ({e})") from e


def parse_tasks(lines: Iterable[str], delimiter: str = None) -> LoadResult:
    """
    Parse plan file lines (header first) into tasks.

    Each line is one row. Blank lines are ignored; malformed rows and
    repeated task ids are skipped and counted.

    Raises:
        ValueError: if the delimiter is not a single character
        EmptyScheduleError: if no row produced a valid task
    """
    if delimiter is None:
        delimiter = settings.CSV_DELIMITER
    if len(delimiter) != 1:
        raise ValueError(f"Delimiter must be a single character, got {delimiter!r}")

    numbered = enumerate(lines, start=1)
    first = next(numbered, None)
    if first is None or not first[1].strip():
        raise EmptyScheduleError("Plan file is empty")

    try:
        header = split_line(first[1], delimiter, first[0])
    except MalformedRowError as e:
        logger.warning(f"Unreadable header: {e}")
        header = []

    columns = resolve_columns([name.strip() for name in header])
    tasks: list[Task] = []
    seen_ids: set[int] = set()
    skipped: list[int] = []

    for line_number, line in numbered:
        if not line.strip():
            continue

        try:
            fields = split_line(line, delimiter, line_number)
            task = parse_row(fields, columns, line_number)
            if task.task_id in seen_ids:
                raise MalformedRowError(line_number, f"duplicate ID {task.task_id}")
        except MalformedRowError as e:
            logger.warning(f"Skipping row: {e}")
            skipped.append(line_number)
            continue

        seen_ids.add(task.task_id)
        tasks.append(task)

    if not tasks:
        raise EmptyScheduleError("No valid tasks found", skipped_rows=len(skipped))

    return LoadResult(tasks=tasks, skipped_rows=len(skipped), skipped_lines=skipped)


def load_tasks(path: Path | str, delimiter: str = None) -> LoadResult:
    """
    Load tasks from a plan file.

    Args:
        path: Path to the delimited plan file
        delimiter: Field delimiter (default: settings.CSV_DELIMITER)

    Returns:
        LoadResult with tasks in file order and the skipped row count
    """
    plan_path = Path(path)
    with plan_path.open('r', newline='', encoding=settings.CSV_ENCODING) as handle:
        result = parse_tasks(handle, delimiter=delimiter)

    result.source = plan_path
    logger.info(f"{result.get_summary()} from {plan_path}")
    return result
