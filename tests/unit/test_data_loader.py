"""Unit tests for the plan file loader."""
from datetime import date

import pytest

from cpm_planner.cpm.errors import EmptyScheduleError, MalformedRowError
from cpm_planner.data_loader import (
    REQUIRED_COLUMNS,
    load_tasks,
    parse_predecessors,
    parse_row,
    parse_tasks,
    resolve_columns,
)

HEADER = 'ID,WBS,Task Name,Start,Finish,Duration,Predecessors\n'


class TestParseTasks:
    """Test parsing plan lines into tasks."""

    def test_sample_plan(self, sample_plan_lines):
        """All rows of a well-formed plan load in file order."""
        result = parse_tasks(sample_plan_lines)
        assert [t.task_id for t in result.tasks] == [1, 2, 3, 4, 5]
        assert result.skipped_rows == 0

        build = result.tasks[3]
        assert build.task_name == 'Build'
        assert build.wbs == '2.1'
        assert build.start == date(2025, 1, 11)
        assert build.finish == date(2025, 1, 16)
        assert build.duration_days == 5
        assert build.predecessors == frozenset({2, 3})

    def test_quoted_field_keeps_delimiter(self, sample_plan_lines):
        """A quoted name may contain the delimiter."""
        result = parse_tasks(sample_plan_lines)
        assert result.tasks[1].task_name == 'Design, review'

    def test_unbalanced_quote_skips_only_its_line(self):
        """An unclosed quote does not swallow the rows after it."""
        lines = [
            HEADER,
            '1,1,"Kickoff,2025-01-06,2025-01-06,0,\n',
            '2,1.1,Design,2025-01-07,2025-01-10,3,\n',
            '3,1.2,Build,2025-01-11,2025-01-12,1,2\n',
        ]
        result = parse_tasks(lines)
        assert [t.task_id for t in result.tasks] == [2, 3]
        assert result.skipped_lines == [2]

    def test_delimiter_must_be_one_character(self, sample_plan_lines):
        with pytest.raises(ValueError, match='single character'):
            parse_tasks(sample_plan_lines, delimiter=';;')

    def test_fields_are_trimmed(self):
        lines = [HEADER, ' 7 , 1.2 ,  Survey  , 2025-02-03 , 2025-02-05 , 2 ,  \n']
        task = parse_tasks(lines).tasks[0]
        assert task.task_id == 7
        assert task.wbs == '1.2'
        assert task.task_name == 'Survey'
        assert task.predecessors == frozenset()

    def test_blank_predecessors_make_start_task(self, sample_plan_lines):
        result = parse_tasks(sample_plan_lines)
        assert result.tasks[0].predecessors == frozenset()

    def test_malformed_rows_skipped_and_counted(self):
        """Bad rows are skipped; the rest still load."""
        lines = [
            HEADER,
            '1,1,Good,2025-01-06,2025-01-08,2,\n',
            '2,1.1,Too few fields,2025-01-06\n',
            'x,1.2,Bad id,2025-01-06,2025-01-08,2,\n',
            '4,1.3,Bad date,someday,2025-01-08,2,\n',
            '5,1.4,Bad duration,2025-01-06,2025-01-08,two,\n',
            '6,1.5,Negative,2025-01-06,2025-01-08,-1,\n',
            '7,1.6,Backwards,2025-01-08,2025-01-06,2,\n',
            '8,1.7,Bad predecessor,2025-01-06,2025-01-08,2,1;abc\n',
            '9,1.8,Also good,2025-01-09,2025-01-10,1,1\n',
        ]
        result = parse_tasks(lines)
        assert [t.task_id for t in result.tasks] == [1, 9]
        assert result.skipped_rows == 7
        assert result.skipped_lines == [3, 4, 5, 6, 7, 8, 9]

    def test_duplicate_id_skipped(self):
        lines = [
            HEADER,
            '1,1,First,2025-01-06,2025-01-08,2,\n',
            '1,1.1,Second,2025-01-06,2025-01-08,2,\n',
        ]
        result = parse_tasks(lines)
        assert [t.task_name for t in result.tasks] == ['First']
        assert result.skipped_rows == 1

    def test_blank_lines_ignored(self):
        lines = [HEADER, '\n', '1,1,Only,2025-01-06,2025-01-08,2,\n', '\n']
        result = parse_tasks(lines)
        assert len(result.tasks) == 1
        assert result.skipped_rows == 0

    def test_milestone_may_have_any_finish(self):
        """Finish before start is only malformed when duration is positive."""
        lines = [HEADER, '1,1,Gate,2025-01-06,2025-01-05,0,\n']
        assert parse_tasks(lines).tasks[0].is_milestone()

    def test_no_valid_rows(self):
        """Zero valid tasks raises EmptyScheduleError with the skip count."""
        with pytest.raises(EmptyScheduleError) as exc_info:
            parse_tasks([HEADER, 'garbage\n'])
        assert exc_info.value.skipped_rows == 1

    def test_empty_input(self):
        with pytest.raises(EmptyScheduleError):
            parse_tasks([])

    def test_header_only(self):
        with pytest.raises(EmptyScheduleError):
            parse_tasks([HEADER])

    def test_other_delimiter(self):
        lines = [
            'ID;WBS;Task Name;Start;Finish;Duration;Predecessors\n',
            '1;1;Dig;2025-01-06;2025-01-08;2;\n',
            '2;1.1;Pour;2025-01-09;2025-01-10;1;"1,3"\n',
        ]
        result = parse_tasks(lines, delimiter=';')
        assert result.tasks[1].predecessors == frozenset({1, 3})

    def test_other_date_formats(self):
        lines = [HEADER, '1,1,Plan,01/06/2025,Jan 9 2025,3,\n']
        task = parse_tasks(lines).tasks[0]
        assert task.start == date(2025, 1, 6)
        assert task.finish == date(2025, 1, 9)


class TestColumnResolution:
    """Test header name resolution and positional fallback."""

    def test_columns_resolved_by_name(self):
        """Columns may appear in any order when the header names them."""
        lines = [
            'Predecessors,Task Name,ID,Duration,Finish,Start,WBS\n',
            ',Kickoff,1,2,2025-01-08,2025-01-06,1\n',
            '1,Next,2,1,2025-01-10,2025-01-09,1.1\n',
        ]
        result = parse_tasks(lines)
        assert result.tasks[1].task_name == 'Next'
        assert result.tasks[1].predecessors == frozenset({1})
        assert result.tasks[0].duration_days == 2

    def test_header_matching_ignores_case_and_spacing(self):
        header = ['id', 'wbs', 'task_name', 'START', 'Finish', 'duration', 'predecessors']
        assert resolve_columns(header)['Task Name'] == 2

    def test_unknown_header_uses_fixed_positions(self):
        header = ['a', 'b', 'c', 'd', 'e', 'f', 'g']
        assert resolve_columns(header) == {col: i for i, col in enumerate(REQUIRED_COLUMNS)}


class TestCellParsing:
    """Test individual cell parsers."""

    def test_predecessor_separators(self):
        assert parse_predecessors('1;2, 3 ;2', 1) == frozenset({1, 2, 3})
        assert parse_predecessors('   ', 1) == frozenset()
        assert parse_predecessors('4;', 1) == frozenset({4})

    def test_predecessor_must_be_integer(self):
        with pytest.raises(MalformedRowError) as exc_info:
            parse_predecessors('1;two', 12)
        assert exc_info.value.line_number == 12

    def test_parse_row_reports_field_count(self):
        columns = resolve_columns(list(REQUIRED_COLUMNS))
        with pytest.raises(MalformedRowError, match='expected 7 fields, found 3'):
            parse_row(['1', '1', 'x'], columns, 2)


class TestLoadTasks:
    """Test loading from disk."""

    def test_load_from_file(self, plan_file):
        result = load_tasks(plan_file)
        assert len(result.tasks) == 5
        assert result.source == plan_file
        assert result.get_summary() == 'Loaded 5 tasks'

    def test_byte_order_mark_is_ignored(self, tmp_path, sample_plan_lines):
        path = tmp_path / 'bom.csv'
        path.write_text(''.join(sample_plan_lines), encoding='utf-8-sig')
        assert [t.task_id for t in load_tasks(path).tasks] == [1, 2, 3, 4, 5]

    def test_summary_mentions_skipped_rows(self, tmp_path):
        path = tmp_path / 'partial.csv'
        path.write_text(HEADER + '1,1,Ok,2025-01-06,2025-01-07,1,\nbad\n', encoding='utf-8')
        assert load_tasks(path).get_summary() == 'Loaded 1 tasks (1 rows skipped)'

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_tasks(tmp_path / 'nope.csv')
