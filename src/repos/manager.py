"""Reconciliation of the managed repository directory.

Brings the repository directory in line with the repositories the device
should have in the current mode:

- in strict mode, remove every entry not carrying the ``ssu_`` prefix
- remove ``ssu_*`` files that are malformed, no longer wanted, or written
  for the other mode
- (re)write a file for every wanted repository
"""

import os
import tempfile
from pathlib import Path
from typing import List, Optional

from ..common.config import CoreConfig, DeviceMode
from ..common.errors import FileIOError
from ..common.logger import get_logger
from .base import (
    MANAGED_PREFIX,
    DeviceFacts,
    RepoFileRecord,
    UpdateResult,
    UpdateStatus,
    render_repo_file,
)

logger = get_logger("repo_manager")

REPO_FILE_MODE = 0o644


class RepoReconciler:
    """Synchronizes repository files with the device's repository set."""

    def __init__(self, config: CoreConfig, device_facts: DeviceFacts):
        """Initialize the reconciler.

        Args:
            config: Configuration context
            device_facts: Device facts provider
        """
        self.config = config
        self.device_facts = device_facts

    @property
    def repo_dir(self) -> Path:
        return Path(self.config.repo_dir)

    def desired_repos(self, mode: DeviceMode) -> List[str]:
        """Repositories that should exist for the device in a mode.

        Args:
            mode: Device mode

        Returns:
            Device repositories minus user-disabled ones, in order
        """
        disabled = set(self.config.settings.value_list("disabled-repos"))
        desired: List[str] = []
        for name in self.device_facts.repository_names(mode.rnd_mode):
            if name in disabled:
                logger.debug(f"Skipping disabled repository {name}")
                continue
            if name not in desired:
                desired.append(name)
        return desired

    def update(self, mode: Optional[DeviceMode] = None) -> UpdateResult:
        """Reconcile the repository directory.

        Files that cannot be written or removed are logged and recorded in
        the result; the run always continues with the remaining files.

        Args:
            mode: Device mode to reconcile for (configured mode if None)

        Returns:
            UpdateResult describing what was written, removed and failed
        """
        if mode is None:
            mode = self.config.device_mode()

        if not mode.repo_management_enabled:
            logger.info("Repo management requested, but not enabled (option 'deviceMode')")
            return UpdateResult(status=UpdateStatus.DISABLED, mode=mode)

        desired = self.desired_repos(mode)
        result = UpdateResult(status=UpdateStatus.SUCCESS, mode=mode, desired=list(desired))

        # no device repositories means a broken device configuration, so
        # strict mode must not wipe the directory
        if mode.strict and desired:
            self._purge_unmanaged(result)
        elif mode.strict:
            logger.warning("No repositories configured for this device, skipping strict mode cleanup")

        self._purge_stale(desired, mode, result)

        for name in desired:
            self._write_repo(name, mode.rnd_mode, result)

        if result.failures:
            result.status = UpdateStatus.PARTIAL

        logger.info(
            f"Repository update finished ({mode.variant}): {len(result.written)} written, "
            f"{len(result.removed)} removed, {result.failure_count} failed"
        )
        return result

    def _entries(self, result: UpdateResult) -> List[os.DirEntry]:
        try:
            with os.scandir(self.repo_dir) as it:
                return sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self._record_failure(result, str(self.repo_dir), "list", e)
            return []

    def _purge_unmanaged(self, result: UpdateResult) -> None:
        for entry in self._entries(result):
            if entry.name.startswith(MANAGED_PREFIX):
                continue
            if entry.is_dir(follow_symlinks=False):
                logger.debug(f"Not removing directory {entry.path}")
                continue
            logger.info(f"Strict mode enabled, removing unmanaged repository {entry.name}")
            self._remove(entry.path, result)

    def _purge_stale(self, desired: List[str], mode: DeviceMode, result: UpdateResult) -> None:
        for entry in self._entries(result):
            if not entry.name.startswith(MANAGED_PREFIX) or entry.is_dir(follow_symlinks=False):
                continue

            record = RepoFileRecord.parse(entry.name)
            if record is None:
                logger.info(f"Removing malformed repository file {entry.name}")
            elif record.name not in desired:
                logger.info(f"Removing repository {record.name} ({entry.name})")
            elif record.variant != mode.variant:
                logger.info(f"Removing {record.variant} repository file {entry.name}")
            else:
                continue

            self._remove(entry.path, result, record.name if record else None)

    def _remove(self, path: str, result: UpdateResult, repo_name: Optional[str] = None) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug(f"{path} already removed")
            return
        except OSError as e:
            self._record_failure(result, path, "remove", e, repo_name)
            return
        result.removed.append(os.path.basename(path))

    def _write_repo(self, name: str, rnd: bool, result: UpdateResult) -> None:
        record = RepoFileRecord.for_repo(name, rnd)
        path = self.repo_dir / record.filename

        if "_" in name:
            logger.warning(
                f"Repository name {name} contains '_', its file {record.filename} "
                f"will be treated as malformed on the next update"
            )

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{record.filename}.", dir=str(self.repo_dir)
            )
            with os.fdopen(fd, "w") as f:
                f.write(render_repo_file(name, rnd))
            os.chmod(tmp_name, REPO_FILE_MODE)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            self._record_failure(result, str(path), "write", e, name)
            return

        logger.debug(f"Wrote repository file {path}")
        result.written.append(record.filename)

    @staticmethod
    def _record_failure(
        result: UpdateResult,
        path: str,
        action: str,
        error: OSError,
        repo_name: Optional[str] = None,
    ) -> None:
        failure = FileIOError(path, action, error.strerror or str(error), repo_name)
        if repo_name:
            logger.error(f"Repository {repo_name}: {failure}")
        else:
            logger.error(str(failure))
        result.failures.append(failure)
