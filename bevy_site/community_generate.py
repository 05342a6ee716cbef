"""Writing the community section tree as front-matter Markdown pages."""

from __future__ import annotations

import argparse
import contextlib
import copy
import random
import shutil
import sys
import tomllib
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import tomli_w

from bevy_site.community import (
    CommunityNode,
    Member,
    Roles,
    Section,
    node_name,
    node_order,
    parse_members,
)

ORGANIZATION_SECTION = "The Bevy Organization"


def _ascii_lower(text: str) -> str:
    return "".join(char.lower() if char.isascii() else char for char in text)


def _without_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _document(front_matter: dict[str, Any]) -> str:
    return f"+++\n{tomli_w.dumps(front_matter)}\n+++\n"


def member_front_matter(member: Member) -> dict[str, Any]:
    """Return the front matter of a member's page, with a weight of 0.

    Raises ValueError if the picture is the GitHub avatar but no GitHub id is set.
    """
    picture = member.profile_picture
    if picture is None:
        picture_link = None
    elif picture.is_github:
        if member.github is None:
            raise ValueError(
                f"{member.name}: profile picture is GitHub but no GitHub id is set"
            )
        picture_link = f"https://github.com/{member.github}.png"
    else:
        picture_link = picture.file

    mastodon = member.mastodon
    extra = _without_none(
        {
            "profile_picture": picture_link,
            "sponsor": member.sponsor,
            "bio": member.bio,
            "discord": member.discord,
            "discord_userid": member.discord_userid,
            "github": member.github,
            "mastodon_user": mastodon.username if mastodon else None,
            "mastodon_instance": mastodon.instance if mastodon else None,
            "twitter": member.twitter,
            "instagram": member.instagram,
            "itch_io": member.itch_io,
            "steam_developer": member.steam_developer,
            "website": member.website,
            "roles": list(member.roles) if member.roles is not None else None,
        }
    )
    return {"title": member.name, "weight": 0, "extra": extra}


def section_front_matter(section: Section) -> dict[str, Any]:
    """Return the front matter of a section's ``_index.md``."""
    return _without_none(
        {
            "title": section.name,
            "sort_by": "weight",
            "template": section.template,
            "weight": section.order if section.order is not None else 0,
            "extra": _without_none(
                {
                    "header_message": section.header,
                    "sort_order_reversed": section.sort_order_reversed,
                }
            ),
        }
    )


def write_member(member: Member, root_path: Path, current_path: Path, weight: int) -> None:
    """Write a member page, copying a local profile picture next to it."""
    root_path, current_path = Path(root_path), Path(current_path)
    path = root_path / current_path
    if member.original_path is None:
        raise ValueError(f"{member.name}: Failed to get file_name")

    front_matter = member_front_matter(member)
    front_matter["weight"] = weight

    picture = member.profile_picture
    if picture is not None and not picture.is_github:
        front_matter["extra"]["profile_picture"] = str(current_path / picture.file)
        with contextlib.suppress(OSError):
            shutil.copy(member.original_path.parent / picture.file, path / picture.file)

    file_name = member.original_path.name.replace(".toml", "")
    (path / f"{file_name}.md").write_text(_document(front_matter), encoding="utf-8")


def write_section(section: Section, root_path: Path, current_path: Path, weight: int) -> None:
    """Create the section's directory and write its index and all its content.

    Subsections come first, then members grouped by role, shuffled within a group.
    Raises FileExistsError if the directory already exists.
    """
    root_path = Path(root_path)
    folder = section.filename if section.filename is not None else _ascii_lower(section.name)
    section_path = Path(current_path) / folder
    path = root_path / section_path
    path.mkdir()

    front_matter = section_front_matter(section)
    if section.order is None:
        front_matter["weight"] = weight
    (path / "_index.md").write_text(_document(front_matter), encoding="utf-8")

    subsections = sorted(
        (node for node in section.content if isinstance(node, Section)),
        key=lambda node: f"{node_order(node)}-{node_name(node)}",
    )

    groups: dict[int, list[Member]] = {}
    for node in section.content:
        if isinstance(node, Member):
            groups.setdefault(node_order(node), []).append(node)

    members: list[Member] = []
    for order in sorted(groups):
        group = list(groups[order])
        random.shuffle(group)
        members.extend(group)

    for index, node in enumerate([*subsections, *members]):
        write_node(node, root_path, section_path, index)


def write_node(node: CommunityNode, root_path: Path, current_path: Path, weight: int) -> None:
    """Write a section or a member."""
    if isinstance(node, Section):
        write_section(node, root_path, current_path, weight)
    else:
        write_member(node, root_path, current_path, weight)


def main(argv: Sequence[str] | None = None) -> int:
    """Generate the community pages and the donation page."""
    parser = argparse.ArgumentParser(description="Generate the community pages.")
    parser.add_argument("community_dir", type=Path, help="path to the community directory")
    parser.add_argument("content_dir", type=Path, help="path to the website content directory")
    parser.add_argument("content_sub_dir", type=Path, help="name of the community directory")
    args = parser.parse_args(argv)

    args.content_dir.mkdir(parents=True, exist_ok=True)

    root = parse_members(args.community_dir)
    roles_text = (args.community_dir / "_roles.toml").read_text(encoding="utf-8")
    roles = Roles.from_dict(tomllib.loads(roles_text))
    root.apply_roles(roles.into_map())

    write_section(root, args.content_dir, args.content_sub_dir, 0)

    organization = next(
        (node for node in root.content if node_name(node) == ORGANIZATION_SECTION), None
    )
    if not isinstance(organization, Section):
        raise ValueError(f"unexpected kind of node or missing for {ORGANIZATION_SECTION}")

    donate = copy.deepcopy(organization)
    donate.name = "Supporting Bevy Development"
    donate.filename = "donate"
    donate.header = "Supporting Bevy"
    donate.template = "donate-community.html"
    if any(isinstance(node, Section) for node in donate.content):
        raise ValueError("got an unexpected subsection")
    donate.content = [node for node in donate.content if node.sponsor is not None]

    write_section(donate, args.content_dir, args.content_sub_dir, 0)
    return 0


if __name__ == "__main__":
    sys.exit(main())