"""Device facts backed by board mappings.

The board mappings file has one section per device model and optionally
one per device family::

    default-repos:
      release: [jolla, apps]
      rnd: [mer-core, jolla]
    JP-1301:
      family: jolla-family
      adaptation-repos: [sbj]
      chip: msm8930
    jolla-family:
      repos: [hardware]
    adaptation-sbj:
      adaptation-path: sbj/latest

Model keys take precedence over family keys.
"""

import re
from typing import Dict, List, Optional

from ..common.config import CoreConfig, SettingsStore
from ..common.logger import get_logger
from ..variables.resolver import resolve_section

logger = get_logger("device_info")

UNKNOWN = "UNKNOWN"
ADAPTATION_PATTERN = re.compile(r"adaptation(\d*)")


class BoardDeviceFacts:
    """Device facts for one model, looked up in the board mappings."""

    def __init__(
        self,
        config: CoreConfig,
        board_settings: SettingsStore,
        model: Optional[str] = None,
    ):
        """Initialize device facts.

        Args:
            config: Configuration context (for ``model`` and ``enabled-repos``)
            board_settings: Board mappings store
            model: Device model; defaults to the ``model`` setting
        """
        self.config = config
        self.board_settings = board_settings
        self._model = model or str(config.settings.value("model", "") or "") or UNKNOWN

    def for_model(self, model: str) -> "BoardDeviceFacts":
        return BoardDeviceFacts(self.config, self.board_settings, model)

    def device_model(self) -> str:
        return self._model

    def device_family(self) -> str:
        family = self.board_settings.value(f"{self._model}/family")
        return str(family) if family else UNKNOWN

    def _sections(self) -> List[str]:
        sections = [self._model]
        family = self.board_settings.value(f"{self._model}/family")
        if family:
            sections.append(str(family))
        return sections

    def get_value(self, key: str) -> Optional[str]:
        """Look up a device key, model section first.

        Args:
            key: Key name, e.g. ``chip`` or ``vendor``

        Returns:
            The value, or None if neither model nor family defines it
        """
        for section in self._sections():
            if self.board_settings.contains(f"{section}/{key}"):
                return self.board_settings.section(section)[key]
        return None

    def _value_list(self, key: str) -> List[str]:
        for section in self._sections():
            if self.board_settings.contains(f"{section}/{key}"):
                return self.board_settings.value_list(f"{section}/{key}")
        return []

    def adaptation_repos(self) -> List[str]:
        return self._value_list("adaptation-repos")

    def repository_names(self, rnd_mode: bool) -> List[str]:
        """Repositories applicable to this device.

        Default repositories for the mode come first, then device specific
        ones, one ``adaptationN`` entry per adaptation, and finally the
        repositories the user enabled.
        """
        variant = "rnd" if rnd_mode else "release"
        names = self.board_settings.value_list(f"default-repos/{variant}")
        names += self._value_list("repos")
        names += [f"adaptation{index}" for index in range(len(self.adaptation_repos()))]
        names += self.config.settings.value_list("enabled-repos")

        result: List[str] = []
        for name in names:
            if name not in result:
                result.append(name)
        return result

    def adaptation_variables(self, repo_name: str, parameters: Dict[str, str]) -> str:
        """Map ``adaptationN`` repositories to the device's adaptations.

        Exports the adaptation name as ``adaptation`` and fills in the
        variables of its ``adaptation-<name>`` section.

        Args:
            repo_name: Repository being resolved
            parameters: Variable map, updated in place

        Returns:
            ``adaptation`` for adaptation repositories, repo_name otherwise
        """
        match = ADAPTATION_PATTERN.fullmatch(repo_name)
        if not match:
            return repo_name

        adaptations = self.adaptation_repos()
        if not adaptations:
            return repo_name

        index = int(match.group(1) or 0)
        if index >= len(adaptations):
            logger.error(
                f"Repository {repo_name} requested, but device {self._model} "
                f"has only {len(adaptations)} adaptation(s)"
            )
            return repo_name

        adaptation = adaptations[index]
        parameters["adaptation"] = adaptation
        resolve_section(self.board_settings, f"adaptation-{adaptation}", parameters)
        return "adaptation"
