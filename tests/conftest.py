"""Pytest configuration and shared fixtures."""

from typing import Optional

import pytest

from src.common.config import CoreConfig, SettingsStore
from tests.factories import FakeDeviceFacts


@pytest.fixture
def device_facts():
    """Device with the same repositories in both modes."""
    return FakeDeviceFacts(release_repos=["jolla", "apps"], rnd_repos=["jolla", "mer-core"])


@pytest.fixture
def repo_dir(tmp_path):
    """Empty managed repository directory."""
    path = tmp_path / "repos.d"
    path.mkdir()
    return path


@pytest.fixture
def make_config(tmp_path, repo_dir):
    """Factory for configuration contexts backed by tmp_path."""

    def factory(settings: Optional[dict] = None, repo_settings: Optional[dict] = None) -> CoreConfig:
        return CoreConfig(
            settings=SettingsStore(str(tmp_path / "ssu.yaml"), data=settings or {}),
            repo_settings=SettingsStore(writable=False, data=repo_settings or {}),
            repo_dir=str(repo_dir),
        )

    return factory


@pytest.fixture
def sample_repo_settings():
    """Repository templates and variable sections."""
    return {
        "all": {
            "jolla": "https://releases.example.com/%(release)/jolla/%(arch)/",
            "apps": "https://apps.example.com/%(release)/%(arch)/",
        },
        "release": {
            "jolla": "https://releases.example.com/releases/%(release)/jolla/%(arch)/",
        },
        "rnd": {
            "mer-core": "https://%(rndHost)/%(flavour)/mer/%(release)/%(arch)/",
        },
        "devel-flavour": {
            "flavour-pattern": "devel-pattern",
            "jolla": "https://%(rndHost)/devel/jolla/%(arch)/",
        },
        "default-domain": {
            "rndHost": "rnd.example.com",
            "domainOnly": "default",
        },
        "sales-domain": {
            "rndHost": "rnd.sales.example.com",
        },
    }
