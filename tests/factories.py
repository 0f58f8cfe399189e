"""Test doubles and builders shared across test modules.

Usage::

    from tests.factories import FakeDeviceFacts

    def test_something(make_config):
        facts = FakeDeviceFacts(release_repos=["jolla"])
"""

from typing import Dict, List, Optional


class FakeDeviceFacts:
    """In-memory device facts for tests."""

    def __init__(
        self,
        release_repos: Optional[List[str]] = None,
        rnd_repos: Optional[List[str]] = None,
        family: str = "test-family",
        model: str = "test-model",
        values: Optional[Dict[str, str]] = None,
        adaptations: Optional[List[str]] = None,
    ):
        self.release_repos = list(release_repos or [])
        self.rnd_repos = list(rnd_repos if rnd_repos is not None else self.release_repos)
        self.family = family
        self.model = model
        self.values = dict(values or {})
        self.adaptations = list(adaptations or [])

    def repository_names(self, rnd_mode: bool) -> List[str]:
        return list(self.rnd_repos if rnd_mode else self.release_repos)

    def device_family(self) -> str:
        return self.family

    def device_model(self) -> str:
        return self.model

    def get_value(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def adaptation_variables(self, repo_name: str, parameters: Dict[str, str]) -> str:
        if repo_name.startswith("adaptation") and self.adaptations:
            index = int(repo_name[len("adaptation"):] or 0)
            parameters["adaptation"] = self.adaptations[index]
            return "adaptation"
        return repo_name

    def for_model(self, model: str) -> "FakeDeviceFacts":
        return FakeDeviceFacts(
            release_repos=self.release_repos,
            rnd_repos=self.rnd_repos,
            family=f"{model}-family",
            model=model,
            values=self.values,
            adaptations=self.adaptations,
        )

