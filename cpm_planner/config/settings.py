"""
Configuration settings for the CPM planner.
Load configuration from environment variables or a .env file.
"""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_file = Path(__file__).parent.parent.parent / '.env'
if env_file.exists():
    load_dotenv(env_file)


class Settings:
    """Application settings loaded from environment variables."""

    # Project paths
    PROJECT_ROOT = Path(__file__).parent.parent.parent
    DATA_DIR = Path(os.getenv('CPM_DATA_DIR', str(PROJECT_ROOT / 'data')))
    OUTPUT_DATA_DIR = Path(os.getenv('CPM_OUTPUT_DIR', str(DATA_DIR / 'output')))

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_DIR = Path(os.getenv('CPM_LOG_DIR', str(PROJECT_ROOT / 'logs')))

    # ============================================================================
    # Plan file parsing
    # ============================================================================
    CSV_DELIMITER = os.getenv('CPM_CSV_DELIMITER', ',')
    CSV_ENCODING = os.getenv('CPM_CSV_ENCODING', 'utf-8-sig')

    # ============================================================================
    # Critical path analysis
    # ============================================================================
    NEAR_CRITICAL_DAYS = int(os.getenv('CPM_NEAR_CRITICAL_DAYS', '5'))

    @classmethod
    def validate_required_settings(cls) -> list[str]:
        """
        Validate settings that have constrained values.
        Returns list of problems found.
        """
        problems = []

        if len(cls.CSV_DELIMITER) != 1:
            problems.append('CPM_CSV_DELIMITER must be a single character')
        if cls.NEAR_CRITICAL_DAYS < 0:
            problems.append('CPM_NEAR_CRITICAL_DAYS must not be negative')

        return problems


# Create settings instance
settings = Settings()
