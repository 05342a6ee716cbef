"""Checking and rewriting ``hide_lines`` annotations in Markdown files."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterator
from pathlib import Path

from bevy_site.code_block_definition import CodeBlockDefinition
from bevy_site.hidden_ranges import get_hidden_ranges

_CODE_BLOCK_DELIM = re.compile(r"\s*```(\w*)")


def _lines(src: str) -> Iterator[str]:
    parts = src.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part.removesuffix("\r")


def format_file(src: str) -> str:
    """Return the Markdown text with correct ``hide_lines`` annotations on Rust blocks.

    Raises ValueError if a Rust block opens with a header that cannot be parsed.
    """
    contents: list[str] = []
    rust_block: list[str] = []
    is_rust = False
    inside_code_block = False

    for line in _lines(src):
        match = _CODE_BLOCK_DELIM.search(line)
        if match is not None:
            if not inside_code_block:
                if match.group(1) in ("rust", "rs"):
                    is_rust = True
                inside_code_block = True
            else:
                inside_code_block = False

        if not is_rust:
            contents.append(line + "\n")
            continue

        rust_block.append(line)
        if inside_code_block:
            continue

        real_hidden_ranges = get_hidden_ranges(rust_block[1:-1])
        definition = CodeBlockDefinition.parse(rust_block[0])
        if definition is None:
            raise ValueError(f"Cannot parse code block header: {rust_block[0]!r}")

        existing = definition.get_hidden_ranges()
        if existing is not None:
            if existing != real_hidden_ranges:
                definition.set_hidden_ranges(real_hidden_ranges)
        elif real_hidden_ranges:
            definition.set_hidden_ranges(real_hidden_ranges)

        rust_block[0] = str(definition)
        contents.append("\n".join(rust_block) + "\n")

        rust_block = []
        is_rust = False

    return "".join(contents)


def _visit_md_files(directory: Path, callback: Callable[[Path], None]) -> None:
    directory = Path(directory)
    if not directory.is_dir():
        raise NotADirectoryError(
            f"Tried visiting the path {str(directory)!r} that was not a directory."
        )
    for path in sorted(directory.iterdir()):
        if path.is_dir():
            _visit_md_files(path, callback)
        elif path.suffix and path.suffix[1:].lower() == "md":
            callback(path)


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def check(directory: Path) -> list[Path]:
    """Return the Markdown files under ``directory`` whose annotations are wrong."""
    unformatted: list[Path] = []

    def visit(path: Path) -> None:
        print(f"- {path}")
        src = _read(path)
        if format_file(src) != src:
            unformatted.append(path)

    _visit_md_files(directory, visit)
    return unformatted


def format_tree(directory: Path) -> None:
    """Rewrite every Markdown file under ``directory`` with correct annotations."""

    def visit(path: Path) -> None:
        print(f"- {path}")
        formatted = format_file(_read(path))
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(formatted)

    _visit_md_files(directory, visit)