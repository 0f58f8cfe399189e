"""Registry of user repository choices.

Persists which repositories the user explicitly enabled or disabled and
any per-repository URL overrides. Changes take effect on the next
reconciliation run; nothing here touches the repository directory.
"""

from typing import Dict, List

from ..common.config import CoreConfig
from ..common.logger import get_logger

logger = get_logger("repo_registry")

ENABLED_REPOS = "enabled-repos"
DISABLED_REPOS = "disabled-repos"
REPOSITORY_URLS = "repository-urls"


def _dedupe(names: List[str]) -> List[str]:
    result: List[str] = []
    for name in names:
        if name not in result:
            result.append(name)
    return result


class RepoRegistry:
    """Mutations of the persisted repository lists and URL overrides."""

    def __init__(self, config: CoreConfig):
        """Initialize the registry.

        Args:
            config: Configuration context; its user settings are modified
        """
        self.config = config

    @property
    def settings(self):
        return self.config.settings

    def enabled_repos(self) -> List[str]:
        return self.settings.value_list(ENABLED_REPOS)

    def disabled_repos(self) -> List[str]:
        return self.settings.value_list(DISABLED_REPOS)

    def url_overrides(self) -> Dict[str, str]:
        """Get the explicit repository URLs, keyed by repository name."""
        return self.settings.section(REPOSITORY_URLS)

    def add(self, name: str, url: str = "") -> None:
        """Add a repository.

        Without a URL the repository is enabled by name and takes its URL
        from the repository templates. With a URL an explicit override is
        stored instead.

        Args:
            name: Repository name
            url: Optional explicit URL (template syntax allowed)
        """
        if url == "":
            repos = _dedupe(self.enabled_repos() + [name])
            self.settings.set_value(ENABLED_REPOS, repos)
            logger.info(f"Enabled repository {name}")
        else:
            self.settings.set_value(f"{REPOSITORY_URLS}/{name}", url)
            logger.info(f"Set URL for repository {name} to {url}")
        self.settings.sync()

    def disable(self, name: str) -> None:
        """Disable a repository even if the device would include it."""
        repos = _dedupe(self.disabled_repos() + [name])
        self.settings.set_value(DISABLED_REPOS, repos)
        self.settings.sync()
        logger.info(f"Disabled repository {name}")

    def enable(self, name: str) -> None:
        """Undo a previous disable."""
        repos = _dedupe([repo for repo in self.disabled_repos() if repo != name])
        self.settings.set_value(DISABLED_REPOS, repos)
        self.settings.sync()
        logger.info(f"Re-enabled repository {name}")

    def remove(self, name: str) -> None:
        """Remove a user added repository.

        Drops the URL override and the enabled entry. A disabled entry is
        left alone.
        """
        key = f"{REPOSITORY_URLS}/{name}"
        if self.settings.contains(key):
            self.settings.remove(key)

        if self.settings.contains(ENABLED_REPOS):
            repos = self.enabled_repos()
            if name in repos:
                self.settings.set_value(
                    ENABLED_REPOS, _dedupe([repo for repo in repos if repo != name])
                )

        self.settings.sync()
        logger.info(f"Removed repository {name}")
