"""Sorting the assets tree and writing it as front-matter Markdown pages."""

from __future__ import annotations

import argparse
import contextlib
import os
import random
import re
import shutil
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import semver
import tomli_w

from bevy_site.assets_model import Asset, AssetNode, Section, node_name, node_order
from bevy_site.cratesio import get_latest_bevy_version, open_crates_db
from bevy_site.github_client import GithubClient
from bevy_site.gitlab_client import GitlabClient
from bevy_site.metadata import MetadataSource, parse_assets

DEFAULT_CRATES_DB = Path("data") / "crates.db"

_COMPARATOR = re.compile(
    r"(?P<op>>=|<=|=|>|<|~|\^)?\s*(?P<major>\d+)"
    r"(?:\.(?P<minor>\d+|[*xX]))?(?:\.(?P<patch>\d+|[*xX]))?"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?"
)
_WILDCARDS = ("*", "x", "X")


@dataclass(frozen=True)
class _Comparator:
    op: str
    major: int
    minor: int | None
    patch: int | None
    pre: str


def _parse_comparator(text: str) -> _Comparator:
    match = _COMPARATOR.fullmatch(text.strip())
    if match is None:
        raise ValueError(f"invalid version requirement: {text!r}")
    minor_text, patch_text = match["minor"], match["patch"]
    wildcard = False
    if minor_text is not None and not minor_text.isdigit():
        if patch_text is not None and patch_text.isdigit():
            raise ValueError(f"unexpected character after wildcard: {text!r}")
        minor, patch, wildcard = None, None, True
    else:
        minor = int(minor_text) if minor_text is not None else None
        if patch_text is not None and not patch_text.isdigit():
            patch, wildcard = None, True
        else:
            patch = int(patch_text) if patch_text is not None else None
    pre = match["pre"] or ""
    if pre and patch is None:
        raise ValueError(f"pre-release on an incomplete version: {text!r}")
    op = match["op"] or ("=" if wildcard else "^")
    return _Comparator(op, int(match["major"]), minor, patch, pre)


def _parse_requirement(requirement: str) -> list[_Comparator]:
    text = requirement.strip()
    if text in _WILDCARDS:
        return []
    if not text:
        raise ValueError("empty version requirement")
    return [_parse_comparator(part) for part in text.split(",")]


def _pre_cmp(left: str, right: str) -> int:
    return semver.Version(0, 0, 0, prerelease=left or None).compare(
        semver.Version(0, 0, 0, prerelease=right or None)
    )


def _matches_exact(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is not None and ver.minor != cmp.minor:
        return False
    if cmp.patch is not None and ver.patch != cmp.patch:
        return False
    return pre == cmp.pre


def _matches_greater(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if ver.major != cmp.major:
        return ver.major > cmp.major
    if cmp.minor is None:
        return False
    if ver.minor != cmp.minor:
        return ver.minor > cmp.minor
    if cmp.patch is None:
        return False
    if ver.patch != cmp.patch:
        return ver.patch > cmp.patch
    return _pre_cmp(pre, cmp.pre) > 0


def _matches_less(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if ver.major != cmp.major:
        return ver.major < cmp.major
    if cmp.minor is None:
        return False
    if ver.minor != cmp.minor:
        return ver.minor < cmp.minor
    if cmp.patch is None:
        return False
    if ver.patch != cmp.patch:
        return ver.patch < cmp.patch
    return _pre_cmp(pre, cmp.pre) < 0


def _matches_tilde(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is not None and ver.minor != cmp.minor:
        return False
    if cmp.patch is not None and ver.patch != cmp.patch:
        return ver.patch > cmp.patch
    return _pre_cmp(pre, cmp.pre) >= 0


def _matches_caret(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if ver.major != cmp.major:
        return False
    if cmp.minor is None:
        return True
    if cmp.patch is None:
        return ver.minor >= cmp.minor if cmp.major > 0 else ver.minor == cmp.minor
    if cmp.major > 0:
        if ver.minor != cmp.minor:
            return ver.minor > cmp.minor
        if ver.patch != cmp.patch:
            return ver.patch > cmp.patch
    elif cmp.minor > 0:
        if ver.minor != cmp.minor:
            return False
        if ver.patch != cmp.patch:
            return ver.patch > cmp.patch
    elif ver.minor != cmp.minor or ver.patch != cmp.patch:
        return False
    return _pre_cmp(pre, cmp.pre) >= 0


def _matches(cmp: _Comparator, ver: semver.Version, pre: str) -> bool:
    if cmp.op == "=":
        return _matches_exact(cmp, ver, pre)
    if cmp.op == ">":
        return _matches_greater(cmp, ver, pre)
    if cmp.op == ">=":
        return _matches_exact(cmp, ver, pre) or _matches_greater(cmp, ver, pre)
    if cmp.op == "<":
        return _matches_less(cmp, ver, pre)
    if cmp.op == "<=":
        return _matches_exact(cmp, ver, pre) or _matches_less(cmp, ver, pre)
    if cmp.op == "~":
        return _matches_tilde(cmp, ver, pre)
    return _matches_caret(cmp, ver, pre)


def version_req_matches(requirement: str, version: semver.Version | str) -> bool:
    """Return whether a Cargo-style version requirement accepts the version.

    Raises ValueError if the requirement cannot be parsed.
    """
    if isinstance(version, str):
        version = semver.Version.parse(version)
    comparators = _parse_requirement(requirement)
    pre = version.prerelease or ""
    if not all(_matches(cmp, version, pre) for cmp in comparators):
        return False
    if not pre:
        return True
    return any(
        cmp.major == version.major
        and cmp.minor == version.minor
        and cmp.patch == version.patch
        and cmp.pre
        for cmp in comparators
    )


def node_semver_compat_with(node: AssetNode, version: semver.Version) -> bool:
    """Return whether an asset's first bevy version requirement accepts ``version``."""
    if not isinstance(node, Asset) or not node.bevy_versions:
        return False
    try:
        return version_req_matches(node.bevy_versions[0], version)
    except ValueError:
        return False


def sort_section(nodes: list[AssetNode], latest_bevy_version: semver.Version) -> None:
    """Assign every asset an order, recursively.

    Manually ordered assets come first, then assets compatible with the latest
    bevy version, and ties are broken at random.
    """
    if isinstance(latest_bevy_version, str):
        latest_bevy_version = semver.Version.parse(latest_bevy_version)
    for node in nodes:
        if isinstance(node, Section):
            sort_section(node.content, latest_bevy_version)

    keyed = [
        (
            (
                node.order if node.order is not None else sys.maxsize,
                not node_semver_compat_with(node, latest_bevy_version),
                random.random(),
            ),
            node,
        )
        for node in nodes
        if isinstance(node, Asset)
    ]
    keyed.sort(key=lambda entry: entry[0])
    for index, (_, asset) in enumerate(keyed):
        asset.order = index


def _without_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def _document(front_matter: dict[str, Any]) -> str:
    return f"+++\n{tomli_w.dumps(front_matter)}\n+++\n"


def _ascii_lower(text: str) -> str:
    return "".join(char.lower() if char.isascii() else char for char in text)


def _page_name(name: str) -> str:
    lowered = _ascii_lower(name).replace("/", "-").replace(" ", "_")
    return "".join(
        char for char in lowered if (char.isascii() and char.isalnum()) or char in "-_"
    )


def asset_front_matter(asset: Asset) -> dict[str, Any]:
    """Return the front matter of an asset's page."""
    return {
        "title": asset.name,
        "description": asset.description,
        "weight": asset.order if asset.order is not None else 0,
        "extra": _without_none(
            {
                "link": asset.link,
                "image": asset.image,
                "licenses": list(asset.licenses) if asset.licenses is not None else None,
                "bevy_versions": (
                    list(asset.bevy_versions) if asset.bevy_versions is not None else None
                ),
            }
        ),
    }


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


def write_asset(asset: Asset, root_path: Path, current_path: Path, weight: int) -> None:
    """Write an asset page, copying its image next to it."""
    root_path, current_path = Path(root_path), Path(current_path)
    path = root_path / current_path

    front_matter = asset_front_matter(asset)
    if asset.order is None:
        front_matter["weight"] = weight
    if asset.image is not None:
        if asset.original_path is None:
            raise ValueError(f"{asset.name}: the asset file path is unknown")
        front_matter["extra"]["image"] = str(current_path / asset.image)
        with contextlib.suppress(OSError):
            shutil.copy(asset.original_path.parent / asset.image, path / asset.image)

    page = path / f"{_page_name(asset.name)}.md"
    page.write_text(_document(front_matter), encoding="utf-8")


def write_section(section: Section, root_path: Path, current_path: Path, weight: int) -> None:
    """Create the section's directory and write its index and all its content.

    Subsections come first, then manually ordered assets, then the others shuffled.
    """
    root_path = Path(root_path)
    section_path = Path(current_path) / _ascii_lower(section.name)
    path = root_path / section_path
    path.mkdir(exist_ok=True)

    front_matter = section_front_matter(section)
    if section.order is None:
        front_matter["weight"] = weight
    (path / "_index.md").write_text(_document(front_matter), encoding="utf-8")

    subsections = sorted(
        (node for node in section.content if isinstance(node, Section)),
        key=lambda node: f"{node_order(node)}-{node_name(node)}",
    )
    assets = [node for node in section.content if isinstance(node, Asset)]
    manually_sorted = sorted(
        (asset for asset in assets if asset.order is not None), key=node_order
    )
    randomized = [asset for asset in assets if asset.order is None]
    random.shuffle(randomized)

    for index, node in enumerate([*subsections, *manually_sorted, *randomized]):
        write_node(node, root_path, section_path, index)


def write_node(node: AssetNode, root_path: Path, current_path: Path, weight: int) -> None:
    """Write a section or an asset."""
    if isinstance(node, Section):
        write_section(node, root_path, current_path, weight)
    else:
        write_asset(node, root_path, current_path, weight)


def main(argv: Sequence[str] | None = None) -> int:
    """Generate the asset pages from the assets directory."""
    parser = argparse.ArgumentParser(description="Generate the asset pages.")
    parser.add_argument("asset_dir", type=Path, help="path to the assets directory")
    parser.add_argument("content_dir", type=Path, help="path to the website content directory")
    parser.add_argument(
        "--crates-db",
        type=Path,
        default=DEFAULT_CRATES_DB,
        help="SQLite copy of the crates.io database dump",
    )
    args = parser.parse_args(argv)

    github_token = os.environ.get("GITHUB_TOKEN")
    if github_token is None:
        print("GITHUB_TOKEN not found, github links will be skipped")
    github_client = GithubClient(github_token) if github_token is not None else None

    gitlab_token = os.environ.get("GITLAB_TOKEN")
    if gitlab_token is None:
        print("GITLAB_TOKEN not found, gitlab links will be skipped")
    gitlab_client = GitlabClient(gitlab_token or "")

    with contextlib.closing(open_crates_db(args.crates_db)) as db:
        with contextlib.suppress(OSError):
            args.content_dir.mkdir()
        root = parse_assets(
            args.asset_dir,
            MetadataSource(
                crates_io_db=db, github_client=github_client, gitlab_client=gitlab_client
            ),
        )
        latest = get_latest_bevy_version(db)

    sort_section(root.content, latest)
    write_section(root, args.content_dir, Path(""), 0)
    return 0


if __name__ == "__main__":
    sys.exit(main())