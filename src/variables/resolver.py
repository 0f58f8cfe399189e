"""Repository URL resolution.

Builds the variable map for a repository from caller parameters, settings
sections, device facts and explicit overrides, picks the URL template for
the repository, and expands it.

RND repositories have a flavour (devel, testing, release) and a release
(latest, next). Release repositories only have a release (latest, next,
a version number).
"""

from typing import Dict, List, Mapping, Optional, Set, Tuple

from ..common.config import CoreConfig, SettingsStore
from ..common.errors import ResolutionError
from ..common.logger import get_logger
from ..repos.base import DeviceFacts
from .expand import expand_template
from .merge import Layer, MergePolicy, merge_layer, merge_layers

logger = get_logger("variables")

INCLUDE_KEY = "variables"
LEGACY_DEVICE_KEYS = ("chip", "adaptation", "vendor")


def resolve_section(
    store: SettingsStore,
    section: str,
    target: Dict[str, str],
    _seen: Optional[Set[str]] = None,
) -> Dict[str, str]:
    """Fill target with the variables of a settings section.

    Keys already present in target are kept. A ``variables`` key lists
    further sections to pull in after the section's own keys.

    Args:
        store: Settings store holding the section
        section: Section name
        target: Map to fill

    Returns:
        The target map
    """
    seen = _seen if _seen is not None else set()
    if section in seen:
        logger.warning(f"Section {section} includes itself, ignoring")
        return target
    seen.add(section)

    values = store.section(section)
    includes = values.pop(INCLUDE_KEY, "")
    merge_layer(target, values, MergePolicy.FILL)

    for included in (name.strip() for name in includes.split(",")):
        if included:
            resolve_section(store, included, target, seen)
    return target


class VariableResolver:
    """Resolves the final URL of a repository."""

    def __init__(self, config: CoreConfig, device_facts: DeviceFacts):
        """Initialize the resolver.

        Args:
            config: Configuration context
            device_facts: Device facts provider
        """
        self.config = config
        self.device_facts = device_facts

    def config_sections(self, rnd_repo: bool) -> List[str]:
        """Sections searched for URL templates, in order."""
        if rnd_repo:
            return [f"{self.config.flavour()}-flavour", "rnd", "all"]
        return ["release", "all"]

    def resolve_parameters(
        self,
        repo_name: str,
        rnd_repo: bool = False,
        parameters: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, Dict[str, str]]:
        """Build the finalized variable map for a repository.

        Args:
            repo_name: Repository name
            rnd_repo: Resolve for rnd mode
            parameters: Caller supplied variables (lowest precedence)
            overrides: Variables applied last, replacing everything else

        Returns:
            Tuple of the possibly rewritten repository name and the map
        """
        settings = self.config.settings
        repo_settings = self.config.repo_settings
        overrides = dict(overrides or {})
        params: Dict[str, str] = dict(parameters or {})

        # generic defaults from the user settings
        resolve_section(settings, "repository-url-variables", params)

        if rnd_repo:
            flavour = self.config.flavour()
            pattern = str(repo_settings.value(f"{flavour}-flavour/flavour-pattern", ""))
            merge_layer(
                params,
                {"flavour": pattern, "flavourPattern": pattern, "flavourName": flavour},
                MergePolicy.OVERWRITE,
            )
            # may be overridden later by the domain sections
            resolve_section(repo_settings, f"{flavour}-flavour", params)

        merge_layers(
            [
                Layer({"release": self.config.release(rnd_repo)}, MergePolicy.OVERWRITE, "release"),
                Layer({"debugSplit": "packages"}, MergePolicy.FILL, "debugSplit"),
                Layer({"arch": self.config.arch()}, MergePolicy.FILL, "arch"),
            ],
            params,
        )

        device = self.device_facts
        if "model" in overrides:
            device = device.for_model(overrides["model"])

        merge_layer(
            params,
            {"deviceFamily": device.device_family(), "deviceModel": device.device_model()},
            MergePolicy.OVERWRITE,
        )

        legacy = {}
        for key in LEGACY_DEVICE_KEYS:
            value = device.get_value(key)
            if value is not None:
                legacy[key] = value
        merge_layer(params, legacy, MergePolicy.FILL)

        # obsolete, only used when the board mappings lack an adaptation
        legacy_adaptation = settings.value("adaptation")
        if legacy_adaptation is not None:
            merge_layer(params, {"adaptation": str(legacy_adaptation)}, MergePolicy.FILL)

        repo_name = device.adaptation_variables(repo_name, params)

        # the current domain replaces default-domain values, but neither
        # replaces anything set above
        domain_params = resolve_section(repo_settings, "default-domain", {})
        domain = self.config.domain()
        if domain:
            merge_layer(
                domain_params,
                resolve_section(repo_settings, f"{domain}-domain", {}),
                MergePolicy.OVERWRITE,
            )
        merge_layer(params, domain_params, MergePolicy.FILL)

        merge_layer(params, overrides, MergePolicy.OVERWRITE)
        return repo_name, params

    def url_template(self, repo_name: str, rnd_repo: bool = False) -> str:
        """Select the URL template for a repository.

        An explicit ``repository-urls/<name>`` setting wins outright;
        otherwise the first configured section with a matching key is used.

        Returns:
            Template string, empty if the repository is not configured
        """
        url_overrides = self.config.settings.section("repository-urls")
        if repo_name in url_overrides:
            logger.debug(f"Using URL override for {repo_name}")
            return url_overrides[repo_name]

        repo_settings = self.config.repo_settings
        for section in self.config_sections(rnd_repo):
            values = repo_settings.section(section)
            if repo_name in values:
                logger.debug(f"Using URL template for {repo_name} from section {section}")
                return values[repo_name]

        logger.debug(f"No URL template for {repo_name}")
        return ""

    def resolve_url(
        self,
        repo_name: str,
        rnd_repo: bool = False,
        parameters: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Resolve the final URL of a repository.

        Args:
            repo_name: Repository name
            rnd_repo: Resolve for rnd mode
            parameters: Caller supplied variables (lowest precedence)
            overrides: Variables applied last, replacing everything else

        Returns:
            Expanded URL, empty if no template is configured

        Raises:
            UnresolvedVariable: If the template references an unknown variable
            RecursiveTemplateLimit: If expansion does not converge
        """
        final_name, params = self.resolve_parameters(repo_name, rnd_repo, parameters, overrides)
        template = self.url_template(final_name, rnd_repo)
        try:
            return expand_template(template, params, repo_name)
        except ResolutionError as e:
            logger.error(f"Cannot resolve URL for repository {repo_name}: {e}")
            raise

    def resolve_urls(
        self,
        repo_names: List[str],
        rnd_repo: bool = False,
        parameters: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ) -> Tuple[Dict[str, str], Dict[str, ResolutionError]]:
        """Resolve several repositories, collecting failures per repository.

        Returns:
            Tuple of (name -> URL, name -> error)
        """
        urls: Dict[str, str] = {}
        errors: Dict[str, ResolutionError] = {}
        for name in repo_names:
            try:
                urls[name] = self.resolve_url(name, rnd_repo, parameters, overrides)
            except ResolutionError as e:
                errors[name] = e
        return urls, errors
