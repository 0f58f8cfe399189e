"""Common utilities for the ssu repository manager."""

from .logger import setup_logger, get_logger
from .config import CoreConfig, DeviceMode, SettingsStore, load_config
from .errors import (
    ConfigUnavailable,
    FileIOError,
    RecursiveTemplateLimit,
    RepoManagerError,
    ResolutionError,
    UnresolvedVariable,
)

__all__ = [
    "ConfigUnavailable",
    "CoreConfig",
    "DeviceMode",
    "FileIOError",
    "RecursiveTemplateLimit",
    "RepoManagerError",
    "ResolutionError",
    "SettingsStore",
    "UnresolvedVariable",
    "get_logger",
    "load_config",
    "setup_logger",
]
