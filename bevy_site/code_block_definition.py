"""Parsing and rendering of fenced Rust code block headers and their annotations."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from bevy_site.hidden_ranges import HiddenRange

_HIDE_LINES = "hide_lines="
_FENCE = re.compile(r"(\s*)```(.+)")
_RUST_TAGS = ("rs", "rust")


@dataclass
class HideLinesAnnotation:
    """A ``hide_lines=`` annotation holding inclusive line ranges."""

    ranges: list[HiddenRange] = field(default_factory=list)

    def __str__(self) -> str:
        rendered = " ".join(
            str(start) if start == end else f"{start}-{end}" for start, end in self.ranges
        )
        return f"{_HIDE_LINES}{rendered}"


@dataclass
class OtherAnnotation:
    """Any annotation that is kept verbatim."""

    content: str

    def __str__(self) -> str:
        return self.content


Annotation = HideLinesAnnotation | OtherAnnotation


def _parse_range(text: str) -> HiddenRange:
    if "-" in text:
        parts = text.split("-")
        return int(parts[0]), int(parts[1])
    line_no = int(text)
    return line_no, line_no


def parse_annotation(text: str) -> Annotation:
    """Parse a single comma-separated annotation of a code block header.

    Raises ValueError if a ``hide_lines`` annotation holds a malformed range.
    """
    if not text.startswith(_HIDE_LINES):
        return OtherAnnotation(text)
    body = text[len(_HIDE_LINES):]
    return HideLinesAnnotation(
        [_parse_range(part) for part in body.split(" ") if part.strip()]
    )


@dataclass
class CodeBlockDefinition:
    """The opening line of a Rust code block: its fence tag and annotations."""

    tag: str
    annotations: list[Annotation] = field(default_factory=list)
    hide_lines_idx: int | None = None

    @classmethod
    def parse(cls, line: str) -> CodeBlockDefinition | None:
        """Parse an opening fence line; return None unless it opens a Rust block."""
        match = _FENCE.search(line)
        if match is None:
            return None
        whitespace, lang = match.group(1), match.group(2)

        tag, *rest = lang.split(",")
        if tag not in _RUST_TAGS:
            return None

        annotations = [parse_annotation(part) for part in rest]
        hide_lines_idx = None
        for idx, annotation in enumerate(annotations):
            if isinstance(annotation, HideLinesAnnotation):
                hide_lines_idx = idx

        return cls(f"{whitespace}```{tag}", annotations, hide_lines_idx)

    def get_hidden_ranges(self) -> list[HiddenRange] | None:
        """Return the ranges of the ``hide_lines`` annotation, if there is one."""
        if self.hide_lines_idx is None:
            return None
        annotation = self.annotations[self.hide_lines_idx]
        assert isinstance(annotation, HideLinesAnnotation)
        return annotation.ranges

    def set_hidden_ranges(self, hidden_ranges: list[HiddenRange]) -> None:
        """Replace, add or (for an empty list) remove the ``hide_lines`` annotation."""
        if not hidden_ranges:
            if self.hide_lines_idx is not None:
                del self.annotations[self.hide_lines_idx]
                self.hide_lines_idx = None
            return

        annotation = HideLinesAnnotation(list(hidden_ranges))
        if self.hide_lines_idx is None:
            self.annotations.append(annotation)
            self.hide_lines_idx = len(self.annotations) - 1
        else:
            self.annotations[self.hide_lines_idx] = annotation

    def __str__(self) -> str:
        if not self.annotations:
            return self.tag
        return self.tag + "," + ",".join(str(a) for a in self.annotations)