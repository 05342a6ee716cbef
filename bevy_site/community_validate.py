"""Validation of the community members tree."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

import regex

from bevy_site.community import CommunityNode, Section, parse_members

MAX_BIO_LENGTH = 180

_GRAPHEME = regex.compile(r"\X")


class CommunityValidationError(Exception):
    """A member of the community tree is invalid."""


def _quoted(path: Path | None) -> str:
    return f'"{path}"'


def validate_section(section: Section) -> None:
    """Validate every node of a section; raise CommunityValidationError on the first problem."""
    for node in section.content:
        validate_node(node)


def validate_node(node: CommunityNode) -> None:
    """Validate a section recursively or a single member."""
    if isinstance(node, Section):
        validate_section(node)
        return

    picture = node.profile_picture
    if picture is not None:
        if picture.is_github:
            if node.github is None:
                raise CommunityValidationError(
                    f"{_quoted(node.original_path)}: Profile Picture set to GitHub, "
                    "but no GitHub profile found"
                )
        elif node.original_path is None or not (node.original_path.parent / picture.file).exists():
            raise CommunityValidationError(
                f"{_quoted(node.original_path)}: Profile Picture set to a file, but file not found"
            )

    if node.bio is not None:
        grapheme_count = len(_GRAPHEME.findall(node.bio))
        if grapheme_count > MAX_BIO_LENGTH:
            raise CommunityValidationError(
                f"Bio is longer than the maximum allowed length of {MAX_BIO_LENGTH}. "
                f"It is currently {grapheme_count} characters long."
            )

    if node.roles is not None:
        raise CommunityValidationError("Roles must be defined in the roles.toml file")


def main(argv: Sequence[str] | None = None) -> int:
    """Validate the community directory; return 0 when it is valid."""
    parser = argparse.ArgumentParser(description="Validate the community directory.")
    parser.add_argument("community_dir", type=Path)
    args = parser.parse_args(argv)

    root = parse_members(args.community_dir)
    try:
        validate_section(root)
    except CommunityValidationError as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())