"""Configuration management for the ssu repository manager.

Handles loading YAML settings files, section lookups, persisting user
settings, and decoding the device mode bitmask.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigUnavailable
from .logger import get_logger

logger = get_logger("config")

DEFAULT_SETTINGS_PATH = "/etc/ssu/ssu.yaml"
DEFAULT_REPO_SETTINGS_PATH = "/usr/share/ssu/repos.yaml"
DEFAULT_BOARD_MAPPINGS_PATH = "/usr/share/ssu/board-mappings.yaml"
DEFAULT_REPO_DIR = "/etc/zypp/repos.d"

# deviceMode bits
DISABLE_REPO_MANAGER = 0x1
RND_MODE = 0x2
RELEASE_MODE = 0x4
LENIENT_MODE = 0x8
UPDATE_MODE = 0x10
APP_INSTALL_MODE = 0x20


@dataclass(frozen=True)
class DeviceMode:
    """Decoded form of the ``deviceMode`` bitmask."""

    repo_management_enabled: bool = True
    rnd_mode: bool = False
    strict: bool = True

    @classmethod
    def from_bitmask(cls, mask: int) -> "DeviceMode":
        """Decode a ``deviceMode`` value.

        Args:
            mask: Integer bitmask as stored in the settings

        Returns:
            DeviceMode instance
        """
        return cls(
            repo_management_enabled=not (mask & DISABLE_REPO_MANAGER),
            rnd_mode=bool(mask & RND_MODE),
            strict=not (mask & LENIENT_MODE),
        )

    def to_bitmask(self) -> int:
        """Encode back into a ``deviceMode`` value."""
        mask = 0
        if not self.repo_management_enabled:
            mask |= DISABLE_REPO_MANAGER
        mask |= RND_MODE if self.rnd_mode else RELEASE_MODE
        if not self.strict:
            mask |= LENIENT_MODE
        return mask

    @property
    def variant(self) -> str:
        """Repository file variant for this mode."""
        return "rnd" if self.rnd_mode else "release"


def load_config(config_path: str, expand_env: bool = True) -> Dict[str, Any]:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration file
        expand_env: Expand environment variables in string values

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is invalid YAML
        TypeError: If the document root is not a mapping
    """
    config_file = Path(config_path)

    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_file.open("r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise TypeError(
            f"Configuration root must be a mapping, got {type(config).__name__}"
        )

    if expand_env:
        config = _expand_env_vars(config)

    return config


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in configuration.

    Args:
        obj: Configuration object (dict, list, str, etc.)

    Returns:
        Configuration with expanded environment variables
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj


def _to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(_to_string(item) for item in value)
    return str(value)


class SettingsStore:
    """Key/value view over a single YAML settings file.

    Top-level mappings are sections. A key of the form ``section/key``
    addresses an entry inside a section, e.g. ``repository-urls/foo``.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        writable: bool = True,
        missing_ok: bool = False,
        expand_env: bool = False,
        data: Optional[Dict[str, Any]] = None,
    ):
        """Open a settings store.

        Args:
            path: YAML file backing the store (None for an in-memory store)
            writable: Whether sync() may write the file back
            missing_ok: Start empty instead of failing when the file is absent
            expand_env: Expand environment variables in loaded values
            data: Initial contents; skips loading from path

        Raises:
            ConfigUnavailable: If the file is missing, unreadable or invalid
        """
        self.path = path
        self.writable = writable

        if data is not None:
            self._data: Dict[str, Any] = dict(data)
        elif path is None:
            self._data = {}
        else:
            self._data = self._load(path, missing_ok, expand_env)

    @staticmethod
    def _load(path: str, missing_ok: bool, expand_env: bool) -> Dict[str, Any]:
        try:
            return load_config(path, expand_env=expand_env)
        except FileNotFoundError as e:
            if missing_ok:
                logger.debug(f"Settings file {path} not found, starting empty")
                return {}
            raise ConfigUnavailable(str(e), path) from e
        except (OSError, yaml.YAMLError, TypeError) as e:
            raise ConfigUnavailable(f"Cannot read settings file {path}: {e}", path) from e

    @staticmethod
    def _split(key: str):
        if "/" in key:
            section, name = key.split("/", 1)
            return section, name
        return None, key

    def contains(self, key: str) -> bool:
        """Check whether a key (or ``section/key``) is set."""
        section, name = self._split(key)
        if section is None:
            return name in self._data
        group = self._data.get(section)
        return isinstance(group, dict) and name in group

    def value(self, key: str, default: Any = None) -> Any:
        """Get the raw value of a key, or default when unset."""
        section, name = self._split(key)
        if section is None:
            return self._data.get(name, default)
        group = self._data.get(section)
        if not isinstance(group, dict):
            return default
        return group.get(name, default)

    def value_list(self, key: str) -> List[str]:
        """Get a value as a list of strings.

        Comma separated strings are split, so hand-edited files may use
        either a YAML list or ``a, b, c``.
        """
        raw = self.value(key)
        if raw is None:
            return []
        if isinstance(raw, list):
            items = [_to_string(item) for item in raw]
        else:
            items = _to_string(raw).split(",")
        return [item.strip() for item in items if item.strip()]

    def set_value(self, key: str, value: Any) -> None:
        """Set a key (or ``section/key``) in memory; call sync() to persist."""
        section, name = self._split(key)
        if section is None:
            self._data[name] = value
            return
        group = self._data.get(section)
        if not isinstance(group, dict):
            group = {}
            self._data[section] = group
        group[name] = value

    def remove(self, key: str) -> None:
        """Remove a key; empty sections are dropped with their last key."""
        section, name = self._split(key)
        if section is None:
            self._data.pop(name, None)
            return
        group = self._data.get(section)
        if isinstance(group, dict):
            group.pop(name, None)
            if not group:
                del self._data[section]

    def has_section(self, name: str) -> bool:
        return isinstance(self._data.get(name), dict)

    def section(self, name: str) -> Dict[str, str]:
        """Get a copy of a section with all values as strings.

        Args:
            name: Section name

        Returns:
            Ordered dictionary of the section's keys, empty if missing
        """
        group = self._data.get(name)
        if not isinstance(group, dict):
            return {}
        return {str(key): _to_string(value) for key, value in group.items()}

    def sync(self) -> None:
        """Persist the store to its file.

        Writes a temporary file next to the target and renames it into
        place so readers never see a partially written file.

        Raises:
            ConfigUnavailable: If the store is read-only or the write fails
        """
        if not self.writable or self.path is None:
            raise ConfigUnavailable("Settings store is read-only", self.path)

        target = Path(self.path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{target.name}.", dir=str(target.parent)
            )
            try:
                with os.fdopen(fd, "w") as f:
                    yaml.safe_dump(self._data, f, default_flow_style=False, sort_keys=False)
                os.replace(tmp_name, target)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise ConfigUnavailable(f"Cannot write settings file {self.path}: {e}", self.path) from e

    def as_dict(self) -> Dict[str, Any]:
        """Get a shallow copy of the raw contents."""
        return dict(self._data)


@dataclass
class CoreConfig:
    """Configuration context shared by the reconciler, resolver and registry.

    settings holds the writable user settings (device mode, flavour,
    enabled/disabled repositories, URL overrides). repo_settings holds the
    read-only repository URL templates and variable sections.
    """

    settings: SettingsStore
    repo_settings: SettingsStore = field(
        default_factory=lambda: SettingsStore(writable=False)
    )
    repo_dir: str = DEFAULT_REPO_DIR

    @classmethod
    def load(
        cls,
        settings_path: str = DEFAULT_SETTINGS_PATH,
        repo_settings_path: str = DEFAULT_REPO_SETTINGS_PATH,
        repo_dir: str = DEFAULT_REPO_DIR,
    ) -> "CoreConfig":
        """Load the configuration context from files.

        Args:
            settings_path: User settings file; created on first sync
            repo_settings_path: Repository template file
            repo_dir: Managed repository directory

        Returns:
            CoreConfig instance

        Raises:
            ConfigUnavailable: If a settings file cannot be read or parsed
        """
        settings = SettingsStore(settings_path, writable=True, missing_ok=True)
        # templates are taken literally, only %(...) references are expanded
        repo_settings = SettingsStore(repo_settings_path, writable=False, missing_ok=True)
        return cls(settings=settings, repo_settings=repo_settings, repo_dir=repo_dir)

    def device_mode(self) -> DeviceMode:
        """Decode ``deviceMode``; misconfigured values mean release mode."""
        raw = self.settings.value("deviceMode", 0)
        try:
            mask = int(raw)
        except (TypeError, ValueError):
            logger.warning(f"Invalid deviceMode value {raw!r}, assuming release mode")
            mask = 0
        return DeviceMode.from_bitmask(mask)

    def flavour(self) -> str:
        return _to_string(self.settings.value("flavour", "release")) or "release"

    def release(self, rnd: bool = False) -> str:
        """Get the configured release for rnd or release repositories."""
        key = "rndRelease" if rnd else "release"
        return _to_string(self.settings.value(key, ""))

    def domain(self) -> str:
        return _to_string(self.settings.value("domain", ""))

    def arch(self) -> str:
        return _to_string(self.settings.value("arch", ""))
