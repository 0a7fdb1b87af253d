"""Configuration package."""
from cpm_planner.config.settings import settings, Settings

__all__ = ['settings', 'Settings']
