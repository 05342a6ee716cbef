"""Generation of the error reference pages from the engine's error files."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

_ERROR_FILE_NAME = re.compile(r"B[0-9]{4}")
_ERROR_HEADER = re.compile(r"# B[0-9]{4}")

SECTION_CONTENT = """+++
title = "Errors"
template = "docs.html"
page_template = "docs.html"
redirect_to = "/learn/errors/introduction"
+++
"""

INTRODUCTION_CONTENT = """+++
title = "Introduction"
[extra]
weight = 0
+++

These pages document Bevy's error codes for the _current release_.

In case you are looking for the latest error codes from Bevy's main branch, you can find them in the `errors` folder of the Bevy engine repository. 
"""


def _lines(text: str) -> Iterator[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    for part in parts:
        yield part.removesuffix("\r")


def _reorder_rust_fence(line: str) -> str:
    """Move every annotation of a ```rust fence before the language."""
    annotations = [part for part in line[3:].split(",") if part != "rust"]
    return "```" + "".join(f"{annotation}," for annotation in annotations) + "rust"


def _clean_page(content: str) -> str:
    # The title header is supplied by the site generator, so drop the built-in one.
    content = _ERROR_HEADER.sub("", content, count=1)
    out = []
    for line in _lines(content):
        if line.startswith("```rust"):
            line = _reorder_rust_fence(line)
        out.append(line + "\n")
    return "".join(out)


def get_error_pages(errors_path: Path) -> dict[str, str]:
    """Read the error files in ``errors_path`` and return their cleaned content by file name.

    Raises FileNotFoundError if the path does not exist.
    """
    errors_path = Path(errors_path)
    if not errors_path.exists():
        raise FileNotFoundError(f"The path ({str(errors_path)!r}) is invalid")

    pages: dict[str, str] = {}
    for entry in sorted(errors_path.iterdir()):
        if entry.is_dir() or not _ERROR_FILE_NAME.search(entry.name):
            continue
        pages[entry.name] = _clean_page(entry.read_text(encoding="utf-8"))
    return pages


def write_section(output_path: Path) -> None:
    """Write the ``errors`` section index and introduction page under ``output_path``."""
    errors_folder = Path(output_path) / "errors"
    errors_folder.mkdir(parents=True, exist_ok=True)
    (errors_folder / "_index.md").write_text(SECTION_CONTENT, encoding="utf-8")
    (errors_folder / "introduction.md").write_text(INTRODUCTION_CONTENT, encoding="utf-8")


def write_pages(output_path: Path, pages: Mapping[str, str]) -> None:
    """Write one page per error, weighted by the sorted order of the file names."""
    errors_folder = Path(output_path) / "errors"
    errors_folder.mkdir(parents=True, exist_ok=True)

    # The introduction page holds weight 0, so the pages start at 1.
    for weight, key in enumerate(sorted(pages), start=1):
        page = (
            "+++\n"
            f'title = "{key.removesuffix(".md")}"\n'
            "[extra]\n"
            f"weight = {weight}\n"
            "+++\n"
            "\n"
            f"{pages[key]}"
        )
        (errors_folder / key.lower()).write_text(page, encoding="utf-8")


def main(argv: Sequence[str] | None = None) -> int:
    """Generate the error reference section from the command line."""
    parser = argparse.ArgumentParser(
        description="Generate error reference pages for use on the website."
    )
    parser.add_argument(
        "--errors-path",
        type=Path,
        required=True,
        help="directory containing the original error files",
    )
    parser.add_argument(
        "--output-path",
        type=Path,
        required=True,
        help="folder in which the errors section is generated",
    )
    args = parser.parse_args(argv)

    print("Writing section index & introduction . . .")
    write_section(args.output_path)
    print("Getting error page contents . . .")
    pages = get_error_pages(args.errors_path)
    print("Writing error pages content to output path . . .")
    write_pages(args.output_path, pages)

    print("All good!")
    return 0


if __name__ == "__main__":
    sys.exit(main())