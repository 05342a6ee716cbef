"""Detection of hidden (``# ``-prefixed) lines in documentation code blocks."""

from __future__ import annotations

import re
from collections.abc import Iterable

HiddenRange = tuple[int, int]
"""An inclusive, one-based range of line numbers."""

_HIDDEN_LINE = re.compile(r"^\s*#(?: |\Z)")


def get_hidden_ranges(code: Iterable[str]) -> list[HiddenRange]:
    """Return the inclusive one-based line ranges that are hidden.

    A line is hidden when it starts, after optional indentation, with ``#``
    followed by a space or the end of the line. Consecutive hidden lines
    are merged into one range.
    """
    ranges: list[HiddenRange] = []
    current: HiddenRange | None = None

    for number, line in enumerate(code, start=1):
        if _HIDDEN_LINE.match(line):
            current = (number, number) if current is None else (current[0], number)
        elif current is not None:
            ranges.append(current)
            current = None

    if current is not None:
        ranges.append(current)

    return ranges