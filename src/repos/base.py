"""Base classes and protocols for repository management.

Defines the naming and content of managed repository files, the result of
a reconciliation run, and the interface of the device facts provider.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, Protocol

from ..common.config import DeviceMode
from ..common.errors import FileIOError

MANAGED_PREFIX = "ssu_"
REPO_SUFFIX = ".repo"
VARIANTS = ("rnd", "release")


def variant_for(rnd: bool) -> str:
    return "rnd" if rnd else "release"


@dataclass(frozen=True)
class RepoFileRecord:
    """A managed repository file, ``ssu_<name>_<variant>.repo``."""

    name: str
    variant: str

    @classmethod
    def for_repo(cls, name: str, rnd: bool) -> "RepoFileRecord":
        return cls(name=name, variant=variant_for(rnd))

    @classmethod
    def parse(cls, filename: str) -> Optional["RepoFileRecord"]:
        """Parse a managed file name.

        Args:
            filename: Base name of a file in the repository directory

        Returns:
            RepoFileRecord, or None if the name does not split into exactly
            prefix, repository name and ``<variant>.repo``
        """
        parts = filename.split("_")
        if len(parts) != 3 or parts[0] + "_" != MANAGED_PREFIX:
            return None
        if not parts[2].endswith(REPO_SUFFIX):
            return None
        return cls(name=parts[1], variant=parts[2][: -len(REPO_SUFFIX)])

    @property
    def filename(self) -> str:
        return f"{MANAGED_PREFIX}{self.name}_{self.variant}{REPO_SUFFIX}"

    @property
    def rnd(self) -> bool:
        return self.variant == "rnd"


def plugin_reference(name: str, rnd: bool) -> str:
    """Build the deferred ``baseurl`` for a repository.

    The URL itself is resolved at fetch time by the ssu URL resolver
    plugin, not written into the file.
    """
    if rnd:
        return f"plugin:ssu?rnd&repo={name}"
    return f"plugin:ssu?repo={name}"


def render_repo_file(name: str, rnd: bool) -> str:
    """Render the contents of a managed repository file.

    Args:
        name: Repository name
        rnd: Whether the file is for rnd mode

    Returns:
        File contents, one ``key=value`` per line
    """
    lines = [
        f"[{name}]",
        f"name={name}",
        "failovermethod=priority",
        "type=rpm-md",
        "gpgcheck=0",
        "enabled=1",
        f"baseurl={plugin_reference(name, rnd)}",
    ]
    return "\n".join(lines) + "\n"


class UpdateStatus(Enum):
    """Status of a reconciliation run."""

    SUCCESS = auto()
    PARTIAL = auto()  # Some files could not be written or removed
    DISABLED = auto()  # Repository management is switched off


@dataclass
class UpdateResult:
    """Result of a reconciliation run."""

    status: UpdateStatus
    mode: DeviceMode
    desired: List[str] = field(default_factory=list)
    written: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)
    failures: List[FileIOError] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        """Check if the run completed without file errors."""
        return self.status in (UpdateStatus.SUCCESS, UpdateStatus.DISABLED)

    @property
    def failure_count(self) -> int:
        return len(self.failures)


class DeviceFacts(Protocol):
    """Provider of device specific facts.

    Implementations decide which repositories apply to the device and
    supply the variables describing it.
    """

    def repository_names(self, rnd_mode: bool) -> List[str]: ...

    def device_family(self) -> str: ...

    def device_model(self) -> str: ...

    def get_value(self, key: str) -> Optional[str]: ...

    def adaptation_variables(self, repo_name: str, parameters: Dict[str, str]) -> str: ...

    def for_model(self, model: str) -> "DeviceFacts": ...
