"""Destinations for computed schedules."""
from cpm_planner.loaders.file_loader import FileLoader, schedule_rows

__all__ = ['FileLoader', 'schedule_rows']
