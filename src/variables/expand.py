"""Template token expansion for repository URLs.

Supported references:

- ``%(name)``: value of ``name``; an unknown name is an error
- ``%(name:-default)``: value of ``name`` if set and non-empty, else ``default``
- ``%(name:+alternate)``: ``alternate`` if ``name`` is set and non-empty, else empty

The innermost references are replaced first. Values may contain further
references, which are expanded on the next pass.
"""

import re
from typing import Mapping, Optional

from ..common.errors import RecursiveTemplateLimit, UnresolvedVariable

VARIABLE_PATTERN = re.compile(r"%\(([^%()]*)\)")
OPERATOR_PATTERN = re.compile(r"^([^:]*):([-+])(.*)$", re.DOTALL)

MAX_EXPANSION_PASSES = 8


def resolve_variable(
    expression: str,
    variables: Mapping[str, str],
    repo_name: Optional[str] = None,
) -> str:
    """Evaluate the inside of a single ``%(...)`` reference.

    Args:
        expression: Reference body, e.g. ``arch`` or ``flavour:-devel``
        variables: Finalized parameter map
        repo_name: Repository being resolved, for error reporting

    Returns:
        Replacement text

    Raises:
        UnresolvedVariable: If a plain reference names an unknown variable
    """
    match = OPERATOR_PATTERN.match(expression)
    if match:
        name, operator, operand = match.groups()
        value = variables.get(name, "")
        if operator == "-":
            return value if value else operand
        return operand if value else ""

    if expression not in variables:
        raise UnresolvedVariable(expression, repo_name)
    return variables[expression]


def has_references(text: str) -> bool:
    return VARIABLE_PATTERN.search(text) is not None


def expand_template(
    template: str,
    variables: Mapping[str, str],
    repo_name: Optional[str] = None,
    max_passes: int = MAX_EXPANSION_PASSES,
) -> str:
    """Expand every variable reference in a template.

    Args:
        template: Template string, e.g. ``https://%(host)/%(release)/``
        variables: Finalized parameter map
        repo_name: Repository being resolved, for error reporting
        max_passes: Number of substitution passes before giving up

    Returns:
        Fully expanded string

    Raises:
        UnresolvedVariable: If a referenced variable has no value
        RecursiveTemplateLimit: If references remain after max_passes
    """
    result = template
    for _ in range(max_passes):
        if not has_references(result):
            return result
        result = VARIABLE_PATTERN.sub(
            lambda m: resolve_variable(m.group(1), variables, repo_name), result
        )

    if has_references(result):
        raise RecursiveTemplateLimit(template, max_passes, repo_name)
    return result
