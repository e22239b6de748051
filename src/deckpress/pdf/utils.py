"""Pure string helpers for artifact naming.

All functions are deterministic and have no external dependencies.
"""

import re

_UNSAFE = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_UNDERSCORES = re.compile(r"_+")


def to_snake_case(text: str) -> str:
    """Lower-case, ASCII-only, underscore separated form of a display name.

    Args:
        text: Card or deck name

    Returns:
        Snake-cased slug (may be empty if nothing survives)

    Examples:
        >>> to_snake_case("Jace, the Mind Sculptor")
        'jace_the_mind_sculptor'
        >>> to_snake_case("Fire // Ice")
        'fire_ice'
        >>> to_snake_case("  Æther Vial ")
        'ther_vial'
    """
    slug = _UNSAFE.sub("", text.lower())
    slug = _WHITESPACE.sub("_", slug)
    slug = _UNDERSCORES.sub("_", slug)
    return slug.strip("_")


def mm_to_points(value_mm: float) -> float:
    """Millimetres to PDF points (1/72 inch).

    Examples:
        >>> round(mm_to_points(25.4), 6)
        72.0
    """
    return value_mm * 72.0 / 25.4
