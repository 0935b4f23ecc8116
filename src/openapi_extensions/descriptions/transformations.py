"""
Description Transformations

Text transformations applied to descriptions in OpenAPI documents.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

DescriptionTransformation = Callable[[str], str]

# Boilerplate prefixes used by property documentation conventions, longest first
BOILERPLATE_PREFIXES: tuple[str, ...] = (
    "Gets or sets a value indicating ",
    "Gets a value indicating ",
    "Gets or sets ",
    "Gets ",
)


def remove_backticks(description: str) -> str:
    """Remove any backtick characters from a description."""
    return description.replace("`", "")


def remove_boilerplate_prefixes(description: str) -> str:
    """
    Remove boilerplate getter/setter prefixes from a description.

    The first character of the result is upper-cased.

    Args:
        description: Description text

    Returns:
        Transformed description
    """
    for prefix in BOILERPLATE_PREFIXES:
        description = description.replace(prefix, "")

    if not description:
        return description

    return description[0].upper() + description[1:]


DEFAULT_TRANSFORMATIONS: tuple[DescriptionTransformation, ...] = (
    remove_backticks,
    remove_boilerplate_prefixes,
)


def compose_transformations(
    transformations: Sequence[DescriptionTransformation],
) -> DescriptionTransformation | None:
    """
    Compose transformations left-to-right into a single function.

    Args:
        transformations: Transformations in application order

    Returns:
        Composed transformation, or None if there are none
    """
    if not transformations:
        return None

    if len(transformations) == 1:
        return transformations[0]

    steps = tuple(transformations)

    def transform(description: str) -> str:
        for step in steps:
            description = step(description)
        return description

    return transform
