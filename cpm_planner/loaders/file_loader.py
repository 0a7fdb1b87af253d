"""Loader for file-based schedule outputs (CSV, JSON)."""
from typing import Any, List, Dict, Optional
import logging
import json
from pathlib import Path
import pandas as pd

from cpm_planner.config.settings import settings
from cpm_planner.cpm.models import ScheduleResult
from cpm_planner.schemas.schedule import ScheduleRow
from cpm_planner.schemas.validator import (
    SchemaValidationError,
    read_output_file,
    validate_dataframe,
    validate_records,
    validated_df_to_csv,
)

logger = logging.getLogger(__name__)


def schedule_rows(result: ScheduleResult) -> List[Dict[str, Any]]:
    """Row dictionaries for every task, in plan order."""
    return result.to_records()


class FileLoader:
    """
    Write schedule rows to file formats (CSV, JSON).

    Every row must match ScheduleRow. CSV output is checked before it is
    written, and ``validate_load`` re-reads either format to check the
    result on disk.
    """

    def __init__(self, schema=ScheduleRow):
        """
        Initialize file loader.

        Args:
            schema: Pydantic model each written row must satisfy
        """
        self.name = 'file'
        self.schema = schema
        self.logger = logging.getLogger(f'{__name__}.{self.name}')
        self.file_path: Optional[str] = None
        self.loaded_count = 0

    def load(
        self,
        data: List[Dict[str, Any]],
        file_path: Optional[str] = None,
        format: str = 'csv',
        **kwargs,
    ) -> bool:
        """
        Write rows to a file.

        Args:
            data: List of row dictionaries (see ``schedule_rows``)
            file_path: Output file path (relative to OUTPUT_DATA_DIR if not absolute)
            format: File format ('csv', 'json')
            **kwargs: Additional parameters passed to writer

        Returns:
            True if load successful; False on a write error or when the
            rows don't match the schema (nothing is written then)
        """
        if not data:
            self.logger.warning('No data to load')
            return False

        try:
            if not file_path:
                raise ValueError('file_path is required')

            path = Path(file_path)
            if not path.is_absolute():
                path = Path(settings.OUTPUT_DATA_DIR) / path

            path.parent.mkdir(parents=True, exist_ok=True)

            loaders = {
                'csv': self._load_csv,
                'json': self._load_json,
            }

            if format not in loaders:
                raise ValueError(f'Unsupported format: {format}')

            loaders[format](data, path, **kwargs)
            self.loaded_count = len(data)
            self.file_path = str(path)

            self.logger.info(
                f'Successfully loaded {self.loaded_count} records to {path}'
            )
            return True

        except SchemaValidationError as e:
            for error in e.errors:
                self.logger.error(f'Schema check failed: {error}')
            return False
        except (OSError, ValueError) as e:
            self.logger.error(f'Load failed: {str(e)}')
            return False

    def _load_csv(
        self,
        data: List[Dict[str, Any]],
        file_path: Path,
        **kwargs,
    ) -> None:
        """Write rows as CSV after checking them against the schema."""
        df = pd.DataFrame(data)
        validated_df_to_csv(df, file_path, self.schema, strict=True, index=False, **kwargs)

    def _load_json(
        self,
        data: List[Dict[str, Any]],
        file_path: Path,
        **kwargs,
    ) -> None:
        """Write rows as a JSON array."""
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, default=str)

    def validate_load(self, record_count: int) -> bool:
        """
        Validate the written file.

        Re-reads the file and checks both the row count and the schema.

        Args:
            record_count: Expected number of records

        Returns:
            True if the file matches
        """
        if self.file_path is None or self.loaded_count != record_count:
            return False

        df = read_output_file(Path(self.file_path), self.schema)
        if len(df) != record_count:
            self.logger.error(f'Expected {record_count} rows in {self.file_path}, found {len(df)}')
            return False

        errors = validate_dataframe(df, self.schema) or validate_records(df, self.schema)
        for error in errors:
            self.logger.error(f'Schema check failed for {self.file_path}: {error}')
        return not errors

    def get_load_stats(self) -> Dict[str, Any]:
        """Get load statistics."""
        return {
            'loader': self.name,
            'file_path': self.file_path,
            'loaded_count': self.loaded_count,
        }
