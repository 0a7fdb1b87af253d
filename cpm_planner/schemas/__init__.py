"""Output schemas for exported schedule files."""
from cpm_planner.schemas.schedule import ScheduleRow
from cpm_planner.schemas.validator import (
    SchemaValidationError,
    validate_dataframe,
    validate_output_file,
    validated_df_to_csv,
)

__all__ = [
    'ScheduleRow',
    'SchemaValidationError',
    'validate_dataframe',
    'validate_output_file',
    'validated_df_to_csv',
]
