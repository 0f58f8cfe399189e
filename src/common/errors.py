"""Error types for the repository manager.

Configuration errors abort the operation that hit them. File errors are
collected per file during reconciliation. Resolution errors always name the
repository whose URL could not be built.
"""

from typing import Optional


class RepoManagerError(Exception):
    """Base class for all repository manager errors."""


class ConfigUnavailable(RepoManagerError):
    """Raised when a settings file cannot be read, parsed or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FileIOError(RepoManagerError):
    """A repository file could not be created or removed.

    Never raised out of a reconciliation run; instances are recorded in
    the run result instead.
    """

    def __init__(self, path: str, action: str, reason: str, repo_name: Optional[str] = None):
        super().__init__(f"Failed to {action} {path}: {reason}")
        self.path = path
        self.action = action
        self.reason = reason
        self.repo_name = repo_name


class ResolutionError(RepoManagerError):
    """Base class for repository URL resolution failures."""

    def __init__(self, message: str, repo_name: Optional[str] = None):
        super().__init__(message)
        self.repo_name = repo_name


class UnresolvedVariable(ResolutionError):
    """A template references a variable with no value."""

    def __init__(self, variable: str, repo_name: Optional[str] = None):
        message = f"Unresolved variable '{variable}'"
        if repo_name:
            message += f" in URL of repository '{repo_name}'"
        super().__init__(message, repo_name)
        self.variable = variable


class RecursiveTemplateLimit(ResolutionError):
    """Template expansion did not converge within the pass limit."""

    def __init__(self, template: str, passes: int, repo_name: Optional[str] = None):
        message = f"Template '{template}' still unexpanded after {passes} passes"
        if repo_name:
            message += f" (repository '{repo_name}')"
        super().__init__(message, repo_name)
        self.template = template
        self.passes = passes
