"""Layered merging of variable maps.

A parameter map is built by applying layers in order. Each layer either
fills keys that are still missing or overwrites whatever is already set.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Mapping, Optional


class MergePolicy(Enum):
    """How a layer combines with keys already present."""

    FILL = auto()  # only add missing keys
    OVERWRITE = auto()  # replace existing keys


@dataclass
class Layer:
    """One source of variables in a layered merge."""

    source: Mapping[str, str]
    policy: MergePolicy = MergePolicy.FILL
    name: str = ""


def merge_layer(
    target: Dict[str, str],
    source: Mapping[str, str],
    policy: MergePolicy = MergePolicy.FILL,
) -> Dict[str, str]:
    """Merge a single source map into target in place.

    Args:
        target: Map being built
        source: Values to merge in
        policy: FILL keeps existing keys, OVERWRITE replaces them

    Returns:
        The target map
    """
    for key, value in source.items():
        if policy is MergePolicy.FILL and key in target:
            continue
        target[key] = value
    return target


def merge_layers(
    layers: Iterable[Layer],
    target: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """Apply layers in order, lowest precedence first.

    Args:
        layers: Layers to apply
        target: Existing map to merge into (a new map if None)

    Returns:
        The merged map
    """
    if target is None:
        target = {}
    for layer in layers:
        merge_layer(target, layer.source, layer.policy)
    return target
