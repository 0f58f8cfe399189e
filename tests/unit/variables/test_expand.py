"""Tests for template expansion."""

import pytest

from src.common.errors import RecursiveTemplateLimit, UnresolvedVariable
from src.variables.expand import MAX_EXPANSION_PASSES, expand_template, resolve_variable


class TestResolveVariable:
    """Tests for single reference evaluation."""

    def test_plain(self):
        """Test plain reference."""
        assert resolve_variable("arch", {"arch": "armv7hl"}) == "armv7hl"

    def test_plain_missing(self):
        """Test missing plain reference raises."""
        with pytest.raises(UnresolvedVariable) as exc_info:
            resolve_variable("arch", {}, repo_name="jolla")

        assert exc_info.value.variable == "arch"
        assert exc_info.value.repo_name == "jolla"
        assert "jolla" in str(exc_info.value)

    def test_default_operator(self):
        """Test :- uses the default for missing or empty values."""
        assert resolve_variable("flavour:-devel", {}) == "devel"
        assert resolve_variable("flavour:-devel", {"flavour": ""}) == "devel"
        assert resolve_variable("flavour:-devel", {"flavour": "testing"}) == "testing"

    def test_alternate_operator(self):
        """Test :+ gives the alternate only for set values."""
        assert resolve_variable("debug:+-debug", {"debug": "1"}) == "-debug"
        assert resolve_variable("debug:+-debug", {}) == ""
        assert resolve_variable("debug:+-debug", {"debug": ""}) == ""


class TestExpandTemplate:
    """Tests for expand_template."""

    def test_no_references(self):
        """Test plain string is returned unchanged."""
        assert expand_template("http://example/foo", {}) == "http://example/foo"

    def test_empty(self):
        """Test empty template."""
        assert expand_template("", {}) == ""

    def test_multiple(self):
        """Test several references."""
        url = expand_template(
            "https://%(host)/%(release)/%(arch)/", {"host": "h", "release": "r", "arch": "a"}
        )

        assert url == "https://h/r/a/"

    def test_recursive_values(self):
        """Test values containing references are expanded."""
        variables = {
            "base": "https://%(host)/%(path)",
            "host": "example.com",
            "path": "%(release)/jolla",
            "release": "latest",
        }

        assert expand_template("%(base)/", variables) == "https://example.com/latest/jolla/"

    def test_nested_reference(self):
        """Test a reference whose name is built from another."""
        variables = {"device": "sbj", "path-sbj": "adaptation/sbj"}

        assert expand_template("%(path-%(device))", variables) == "adaptation/sbj"

    def test_default_with_reference(self):
        """Test a default value that is itself a reference."""
        assert expand_template("%(missing:-%(arch))", {"arch": "i486"}) == "i486"

    def test_missing_variable(self):
        """Test missing variable raises with repository name."""
        with pytest.raises(UnresolvedVariable) as exc_info:
            expand_template("https://%(host)/", {}, repo_name="jolla")

        assert exc_info.value.variable == "host"
        assert exc_info.value.repo_name == "jolla"

    def test_self_reference(self):
        """Test self-referential variables hit the pass limit."""
        with pytest.raises(RecursiveTemplateLimit) as exc_info:
            expand_template("%(loop)", {"loop": "x%(loop)"}, repo_name="jolla")

        assert exc_info.value.passes == MAX_EXPANSION_PASSES
        assert exc_info.value.repo_name == "jolla"

    def test_mutual_reference(self):
        """Test two variables referencing each other."""
        with pytest.raises(RecursiveTemplateLimit):
            expand_template("%(a)", {"a": "%(b)", "b": "%(a)"})

    def test_custom_pass_limit(self):
        """Test chains longer than the limit fail."""
        variables = {"a": "%(b)", "b": "%(c)", "c": "done"}

        assert expand_template("%(a)", variables, max_passes=3) == "done"
        with pytest.raises(RecursiveTemplateLimit):
            expand_template("%(a)", variables, max_passes=2)

    def test_literal_percent(self):
        """Test percent signs outside references are kept."""
        assert expand_template("http://h/a%20b", {}) == "http://h/a%20b"
