"""
Configuration package for mdfx

Provides application settings via environment variables using
pydantic-settings, and project configuration from .mdfx.yaml files.
"""

from .settings import appsettings, AppSettings
from .project import ProjectConfig, PartialConfig

__all__ = ["appsettings", "AppSettings", "ProjectConfig", "PartialConfig"]
