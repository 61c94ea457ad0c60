"""Conflict marker patterns shared by the diff parser and the annotator."""

import re
from functools import lru_cache

DEFAULT_MARKER_SIZE = 7

# A marker of any length git can write by default or larger. The annotator
# applies the exact configured size.
BARE_MARKER = re.compile(r"^(?:<{7,}(?:\s.*)?|={7,}\s*|>{7,}(?:\s.*)?)$")


@lru_cache(maxsize=16)
def marker_patterns(size: int) -> tuple[re.Pattern, re.Pattern, re.Pattern]:
    """Start, middle and end marker patterns for a marker length."""
    return (
        re.compile(rf"^<{{{size}}}(?:\s.*)?$"),
        re.compile(rf"^={{{size}}}\s*$"),
        re.compile(rf"^>{{{size}}}(?:\s.*)?$"),
    )


def is_bare_marker(text: str) -> bool:
    """Check for a conflict marker written without any diff prefix."""
    return BARE_MARKER.match(text) is not None
