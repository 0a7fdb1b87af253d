"""
Schema validation utilities for exported schedule files.

Validates that output files keep the columns and types renderers and
spreadsheets downstream rely on:
  - Missing columns or changed types are errors
  - Extra columns are allowed unless strict
  - A sample of rows is also checked value by value
"""

from pathlib import Path
from typing import Type, List, Optional, Dict, Tuple
import pandas as pd
from pydantic import BaseModel, ValidationError as PydanticValidationError


class SchemaValidationError(Exception):
    """Raised when schema validation fails."""

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.errors = errors or []


def pandas_dtype_to_python_type(dtype) -> str:
    """Convert pandas dtype to a simplified type string."""
    dtype_str = str(dtype)

    if dtype_str.startswith('int'):
        return 'int'
    elif dtype_str.startswith('float'):
        return 'float'
    elif dtype_str in ('object', 'string', 'str'):
        return 'str'
    elif dtype_str == 'bool':
        return 'bool'
    else:
        return dtype_str


def pydantic_type_to_string(field_type) -> str:
    """Convert Pydantic field annotation to a simplified type string."""
    return getattr(field_type, '__name__', str(field_type))


def types_compatible(pandas_type: str, pydantic_type: str) -> bool:
    """
    Check if pandas type is compatible with pydantic type.

    Lenient where CSV type inference is imprecise: an all-empty column
    comes back as float, and numeric columns may widen.
    """
    if pandas_type == pydantic_type:
        return True

    # All-NaN columns are inferred as float
    if pandas_type == 'float' and pydantic_type in ('int', 'str'):
        return True

    if pandas_type in ('int', 'float') and pydantic_type in ('int', 'float'):
        return True

    return False


def string_columns(schema: Type[BaseModel]) -> Dict[str, type]:
    """dtype mapping that keeps text columns as text when reading back."""
    return {
        name: str
        for name, info in schema.model_fields.items()
        if info.annotation is str
    }


def validate_dataframe(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    strict: bool = False,
) -> List[str]:
    """
    Validate a DataFrame's columns and types against a Pydantic schema.

    Args:
        df: DataFrame to validate
        schema: Pydantic model class defining expected columns
        strict: If True, fail on extra columns not in schema

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    schema_fields = schema.model_fields
    expected_columns = set(schema_fields)
    actual_columns = set(df.columns)

    missing = expected_columns - actual_columns
    if missing:
        errors.append(f"Missing required columns: {sorted(missing)}")

    extra = actual_columns - expected_columns
    if extra and strict:
        errors.append(f"Unexpected columns (strict mode): {sorted(extra)}")

    type_mismatches: Dict[str, Tuple[str, str]] = {}
    for col in sorted(expected_columns & actual_columns):
        pandas_type = pandas_dtype_to_python_type(df[col].dtype)
        pydantic_type = pydantic_type_to_string(schema_fields[col].annotation)
        if not types_compatible(pandas_type, pydantic_type):
            type_mismatches[col] = (pandas_type, pydantic_type)

    if type_mismatches:
        mismatch_strs = [
            f"{col}: got {got}, expected {expected}"
            for col, (got, expected) in type_mismatches.items()
        ]
        errors.append(f"Type mismatches: {'; '.join(mismatch_strs)}")

    return errors


def validate_records(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    sample_rows: int = 100,
) -> List[str]:
    """Validate the first ``sample_rows`` rows value by value."""
    errors = []
    for i, record in enumerate(df.head(sample_rows).to_dict(orient='records')):
        try:
            schema.model_validate(record)
        except PydanticValidationError as e:
            errors.append(f"Row {i}: {e.error_count()} invalid values ({e.errors()[0]['loc']})")
    return errors


def read_output_file(file_path: Path, schema: Type[BaseModel]) -> pd.DataFrame:
    """Read an exported CSV or JSON file back with schema-aware dtypes."""
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    dtypes = string_columns(schema)
    if file_path.suffix.lower() == '.json':
        return pd.read_json(file_path, orient='records', dtype=dtypes, convert_dates=False)
    return pd.read_csv(file_path, dtype=dtypes, keep_default_na=False)


def validate_output_file(
    file_path: Path,
    schema: Type[BaseModel],
    strict: bool = False,
    sample_rows: int = 100,
) -> List[str]:
    """
    Validate an output file against a schema.

    Args:
        file_path: Path to CSV or JSON file
        schema: Pydantic model class defining expected schema
        strict: If True, fail on extra columns
        sample_rows: Number of rows to check value by value

    Returns:
        List of validation error messages (empty if valid)

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    df = read_output_file(file_path, schema)

    errors = validate_dataframe(df, schema, strict=strict)
    if not errors:
        errors.extend(validate_records(df, schema, sample_rows=sample_rows))
    return errors


def validated_df_to_csv(
    df: pd.DataFrame,
    file_path: Path,
    schema: Type[BaseModel],
    strict: bool = False,
    **to_csv_kwargs,
) -> None:
    """
    Validate a DataFrame against its schema and write to CSV.

    Raises:
        SchemaValidationError: If validation fails; nothing is written
    """
    file_path = Path(file_path)
    errors = validate_dataframe(df, schema, strict=strict)

    if errors:
        error_msg = (
            f"Schema validation failed for '{file_path.name}':\n"
            + "\n".join(f"  - {e}" for e in errors)
        )
        raise SchemaValidationError(error_msg, errors=errors)

    df.to_csv(file_path, **to_csv_kwargs)
