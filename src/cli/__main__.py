"""CLI interface for repository management.

Usage::

    python -m src.cli ar <repo> [url]   add (enable) a repository
    python -m src.cli rr <repo>         remove a user added repository
    python -m src.cli er <repo>         enable a disabled repository
    python -m src.cli dr <repo>         disable a repository
    python -m src.cli ur                update repository files
    python -m src.cli lr                list repositories and their URLs
"""

import os
import sys

from ..common.config import (
    DEFAULT_BOARD_MAPPINGS_PATH,
    DEFAULT_REPO_DIR,
    DEFAULT_REPO_SETTINGS_PATH,
    DEFAULT_SETTINGS_PATH,
    CoreConfig,
    SettingsStore,
)
from ..common.errors import ConfigUnavailable
from ..common.logger import setup_logger
from ..device.info import BoardDeviceFacts
from ..repos.manager import RepoReconciler
from ..repos.registry import RepoRegistry
from ..variables.resolver import VariableResolver

USAGE = """Usage: python -m src.cli <command> [args]

Commands:
  ar <repo> [url]  add a repository, optionally with an explicit URL
  rr <repo>        remove a repository
  er <repo>        enable a repository
  dr <repo>        disable a repository
  ur               update repository files
  lr               list repositories"""

REGISTRY_COMMANDS = {"ar": "add", "rr": "remove", "er": "enable", "dr": "disable"}


def usage(message: str = "") -> None:
    if message:
        print(message, file=sys.stderr)
    print(USAGE, file=sys.stderr)
    sys.exit(1)


def load_context():
    """Build the configuration context and device facts from the environment."""
    config = CoreConfig.load(
        settings_path=os.environ.get("SSU_SETTINGS", DEFAULT_SETTINGS_PATH),
        repo_settings_path=os.environ.get("SSU_REPO_SETTINGS", DEFAULT_REPO_SETTINGS_PATH),
        repo_dir=os.environ.get("SSU_REPO_DIR", DEFAULT_REPO_DIR),
    )
    board_settings = SettingsStore(
        os.environ.get("SSU_BOARD_MAPPINGS", DEFAULT_BOARD_MAPPINGS_PATH),
        writable=False,
        missing_ok=True,
    )
    return config, BoardDeviceFacts(config, board_settings)


def list_repos(config: CoreConfig, device_facts: BoardDeviceFacts) -> int:
    """Print the device's repositories with their resolved URLs."""
    mode = config.device_mode()
    reconciler = RepoReconciler(config, device_facts)
    resolver = VariableResolver(config, device_facts)

    names = reconciler.desired_repos(mode)
    urls, errors = resolver.resolve_urls(names, mode.rnd_mode)

    print(f"Repositories ({mode.variant} mode):")
    for name in names:
        if name in errors:
            print(f" - {name} ... ERROR: {errors[name]}")
        else:
            print(f" - {name} ... {urls[name]}")

    disabled = RepoRegistry(config).disabled_repos()
    if disabled:
        print("Disabled repositories:")
        for name in disabled:
            print(f" - {name}")

    return 1 if errors else 0


def main(argv=None):
    """Main entry point for repository management CLI."""
    args = sys.argv[1:] if argv is None else argv
    if not args:
        usage()

    command, params = args[0], args[1:]

    try:
        config, device_facts = load_context()
    except ConfigUnavailable as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    setup_logger(
        "ssu",
        log_dir=os.environ.get("SSU_LOG_DIR", "/var/log/ssu"),
        level=str(config.settings.value("logLevel", "INFO")),
    )

    try:
        if command in REGISTRY_COMMANDS:
            if command == "ar" and len(params) not in (1, 2):
                usage("ar takes a repository name and an optional URL")
            if command != "ar" and len(params) != 1:
                usage(f"{command} takes exactly one repository name")
            registry = RepoRegistry(config)
            getattr(registry, REGISTRY_COMMANDS[command])(*params)
            sys.exit(0)

        if command == "ur":
            result = RepoReconciler(config, device_facts).update()
            if not result.is_success:
                print(
                    f"Repository update finished with {result.failure_count} error(s)",
                    file=sys.stderr,
                )
                sys.exit(1)
            sys.exit(0)

        if command == "lr":
            sys.exit(list_repos(config, device_facts))
    except ConfigUnavailable as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    usage(f"Unknown command: {command}")


if __name__ == "__main__":
    main()
