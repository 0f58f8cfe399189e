"""Tests for the repository registry."""

import pytest

from src.common.config import SettingsStore
from src.repos.registry import RepoRegistry


class TestRepoRegistry:
    """Tests for RepoRegistry mutations."""

    @pytest.fixture
    def registry(self, make_config):
        return RepoRegistry(make_config())

    def reload(self, tmp_path):
        """Read the persisted settings back from disk."""
        return SettingsStore(str(tmp_path / "ssu.yaml"))

    def test_add_enables(self, registry, tmp_path):
        """Test adding without URL enables the repository."""
        registry.add("foo")

        assert registry.enabled_repos() == ["foo"]
        assert self.reload(tmp_path).value_list("enabled-repos") == ["foo"]

    def test_add_twice(self, registry):
        """Test adding twice keeps one entry."""
        registry.add("foo")
        registry.add("foo")

        assert registry.enabled_repos() == ["foo"]

    def test_add_keeps_order(self, make_config):
        """Test existing entries keep their order."""
        registry = RepoRegistry(make_config({"enabled-repos": ["b", "a", "b"]}))
        registry.add("c")
        registry.add("a")

        assert registry.enabled_repos() == ["b", "a", "c"]

    def test_add_with_url(self, registry, tmp_path):
        """Test adding with URL stores an override only."""
        registry.add("foo", "http://example/foo")

        assert registry.url_overrides() == {"foo": "http://example/foo"}
        assert registry.enabled_repos() == []
        assert self.reload(tmp_path).value("repository-urls/foo") == "http://example/foo"

    def test_disable(self, registry, tmp_path):
        """Test disabling a repository."""
        registry.disable("foo")
        registry.disable("foo")

        assert registry.disabled_repos() == ["foo"]
        assert self.reload(tmp_path).value_list("disabled-repos") == ["foo"]

    def test_enable_reverses_disable(self, registry, tmp_path):
        """Test enable removes the disabled entry."""
        registry.disable("foo")
        registry.disable("bar")
        registry.enable("foo")

        assert registry.disabled_repos() == ["bar"]
        assert self.reload(tmp_path).value_list("disabled-repos") == ["bar"]

    def test_enable_not_disabled(self, registry):
        """Test enabling a repository that was never disabled."""
        registry.enable("foo")

        assert registry.disabled_repos() == []

    def test_remove(self, make_config, tmp_path):
        """Test remove drops URL override and enabled entry."""
        registry = RepoRegistry(
            make_config(
                {
                    "enabled-repos": ["foo", "bar"],
                    "disabled-repos": ["foo"],
                    "repository-urls": {"foo": "http://example/foo"},
                }
            )
        )
        registry.remove("foo")

        assert registry.enabled_repos() == ["bar"]
        assert registry.url_overrides() == {}
        assert registry.disabled_repos() == ["foo"]

        stored = self.reload(tmp_path)
        assert not stored.contains("repository-urls/foo")
        assert stored.value_list("disabled-repos") == ["foo"]

    def test_remove_unknown(self, registry, tmp_path):
        """Test removing an unknown repository still persists."""
        registry.remove("nothing")

        assert (tmp_path / "ssu.yaml").exists()
        assert registry.enabled_repos() == []

    def test_mutations_do_not_touch_repo_dir(self, registry, repo_dir):
        """Test registry changes never write repository files."""
        registry.add("foo")
        registry.disable("bar")

        assert list(repo_dir.iterdir()) == []
