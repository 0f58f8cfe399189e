"""Variable handling for repository URLs.

Layered merging of variable maps, template expansion and the resolver that
combines them into final repository URLs.
"""

from .expand import MAX_EXPANSION_PASSES, expand_template
from .merge import Layer, MergePolicy, merge_layer, merge_layers
from .resolver import VariableResolver, resolve_section

__all__ = [
    "Layer",
    "MAX_EXPANSION_PASSES",
    "MergePolicy",
    "VariableResolver",
    "expand_template",
    "merge_layer",
    "merge_layers",
    "resolve_section",
]
