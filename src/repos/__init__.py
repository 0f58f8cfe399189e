"""Repository management for the ssu update client.

Keeps the managed repository directory in sync with the repositories the
device should use, and records the user's repository choices.
"""

from .base import (
    DeviceFacts,
    RepoFileRecord,
    UpdateResult,
    UpdateStatus,
    plugin_reference,
    render_repo_file,
)
from .manager import RepoReconciler
from .registry import RepoRegistry

__all__ = [
    "DeviceFacts",
    "RepoFileRecord",
    "RepoReconciler",
    "RepoRegistry",
    "UpdateResult",
    "UpdateStatus",
    "plugin_reference",
    "render_repo_file",
]
