"""Tests for layered variable merging."""

from src.variables.merge import Layer, MergePolicy, merge_layer, merge_layers


class TestMergeLayer:
    """Tests for merge_layer."""

    def test_fill_keeps_existing(self):
        """Test fill only adds missing keys."""
        target = {"arch": "x1"}
        merge_layer(target, {"arch": "x2", "release": "latest"}, MergePolicy.FILL)

        assert target == {"arch": "x1", "release": "latest"}

    def test_overwrite_replaces(self):
        """Test overwrite replaces existing keys."""
        target = {"arch": "x1"}
        merge_layer(target, {"arch": "x2"}, MergePolicy.OVERWRITE)

        assert target == {"arch": "x2"}

    def test_default_policy_is_fill(self):
        """Test fill is the default policy."""
        target = {"a": "1"}

        assert merge_layer(target, {"a": "2"}) == {"a": "1"}


class TestMergeLayers:
    """Tests for merge_layers."""

    def test_precedence(self):
        """Test layers apply lowest precedence first."""
        result = merge_layers(
            [
                Layer({"arch": "x1", "flavour": "devel"}),
                Layer({"arch": "ignored", "release": "latest"}, MergePolicy.FILL),
                Layer({"arch": "x2"}, MergePolicy.OVERWRITE),
            ]
        )

        assert result == {"arch": "x2", "flavour": "devel", "release": "latest"}

    def test_into_existing_target(self):
        """Test merging into a given map."""
        target = {"a": "1"}
        result = merge_layers([Layer({"a": "2", "b": "2"})], target)

        assert result is target
        assert target == {"a": "1", "b": "2"}

    def test_no_layers(self):
        """Test empty layer list."""
        assert merge_layers([]) == {}
