"""
Computed schedule table schema.

Output Location: {CPM_OUTPUT_DIR}/<name>.csv (or .json)
"""

from pydantic import BaseModel, Field


class ScheduleRow(BaseModel):
    """
    One task with its CPM results, in plan order.

    Dates are written as ISO ``YYYY-MM-DD`` text.
    """
    task_id: int = Field(description="Task ID from the plan file")
    wbs: str = Field(description="Dot-delimited WBS code")
    task_name: str = Field(description="Task display name")
    start: str = Field(description="Planned start date")
    finish: str = Field(description="Planned finish date")
    duration_days: int = Field(ge=0, description="Duration in days (0 = milestone)")
    predecessors: str = Field(default="", description="Resolved and unresolved predecessor IDs, ';' separated")
    early_start: str = Field(description="Early start date")
    early_finish: str = Field(description="Early finish date")
    late_start: str = Field(description="Late start date")
    late_finish: str = Field(description="Late finish date")
    total_float_days: int = Field(description="Late start minus early start, in days")
    free_float_days: int = Field(description="Slack before any successor's early start moves")
    is_critical: bool = Field(description="True when total float <= 0")
    is_milestone: bool = Field(description="True when duration is 0")
    indent_level: int = Field(ge=0, description="WBS depth used for display indent")
