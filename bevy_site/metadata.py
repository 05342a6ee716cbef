"""Reading the assets tree and gathering license and bevy version metadata."""

from __future__ import annotations

import dataclasses
import sqlite3
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import requests

from bevy_site.assets_model import Asset, Section
from bevy_site.cratesio import get_metadata_from_crates_db, get_official_bevy_crates
from bevy_site.manifest import CargoManifest, get_bevy_version_from_manifest, get_license

_SKIPPED_DIRS = (".git", ".github")
_CATEGORY_FILE = "_category.toml"
_METADATA_ERRORS = (requests.RequestException, ValueError, LookupError, sqlite3.Error)

Metadata = tuple[str | None, str | None]


@dataclass
class MetadataSource:
    """Where to find license and bevy version metadata for assets."""

    crates_io_db: sqlite3.Connection | None = None
    github_client: Any = None
    gitlab_client: Any = None
    bevy_crates_names: list[str] | None = None
    bevy_crates_ids: list[str] | None = None


def parse_assets(asset_dir: Path, metadata_source: MetadataSource | None = None) -> Section:
    """Read every asset below ``asset_dir`` into the root section, gathering metadata."""
    source = dataclasses.replace(metadata_source or MetadataSource())
    root = Section(name="Assets", template="assets.html", header="Assets")

    if source.crates_io_db is not None:
        try:
            names, ids = get_official_bevy_crates(source.crates_io_db)
        except LookupError:
            source.bevy_crates_ids = []
        else:
            source.bevy_crates_names = names
            source.bevy_crates_ids = ids

    _visit_dirs(Path(asset_dir), root, source)
    return root


def _read_category(directory: Path) -> tuple[int | None, bool]:
    category = directory / _CATEGORY_FILE
    if not category.exists():
        return None, False
    data = tomllib.loads(category.read_text(encoding="utf-8"))
    order = data.get("order")
    if isinstance(order, bool) or not isinstance(order, int):
        order = None
    reversed_order = data.get("sort_order_reversed")
    return order, reversed_order if isinstance(reversed_order, bool) else False


def _visit_dirs(directory: Path, section: Section, source: MetadataSource) -> None:
    if directory.is_file():
        return
    for path in sorted(directory.iterdir()):
        if path.name in _SKIPPED_DIRS:
            continue
        if path.is_dir():
            order, sort_order_reversed = _read_category(path)
            subsection = Section(
                name=path.name, order=order, sort_order_reversed=sort_order_reversed
            )
            _visit_dirs(path, subsection, source)
            section.content.append(subsection)
            continue
        if path.name == _CATEGORY_FILE:
            continue
        if not path.suffix:
            raise ValueError(f"file must have an extension: {path}")
        if path.suffix != ".toml":
            continue

        asset = Asset.from_dict(tomllib.loads(path.read_text(encoding="utf-8")), path)
        try:
            get_extra_metadata(asset, source)
        except _METADATA_ERRORS as error:
            print(f"Failed to get metadata for {asset.name}", file=sys.stderr)
            print(f"ERROR: {error!r}", file=sys.stderr)
        section.content.append(asset)


def _segment(segments: list[str], index: int, link: str) -> str:
    try:
        return segments[index]
    except IndexError:
        raise ValueError(f"Link has too few path segments: {link}") from None


def get_extra_metadata(asset: Asset, metadata_source: MetadataSource) -> None:
    """Fill in the asset's licenses and bevy versions from the source matching its link.

    Raises ValueError for a malformed link or an unknown host.
    """
    print(f"Getting extra metadata for {asset.name}")

    link = (
        f"https://crates.io/crates/{asset.crate_name}"
        if asset.crate_name is not None
        else asset.link
    )
    url = urlsplit(link)
    if not url.scheme:
        raise ValueError(f"relative URL without a base: {link}")
    segments = url.path.removeprefix("/").split("/")
    host = url.hostname

    metadata: Metadata | None = None
    if host == "crates.io":
        if metadata_source.crates_io_db is not None:
            metadata = get_metadata_from_crates_db(
                metadata_source.crates_io_db,
                _segment(segments, 1, link),
                metadata_source.bevy_crates_ids,
            )
    elif host == "github.com":
        if metadata_source.github_client is not None:
            metadata = get_metadata_from_github(
                metadata_source.github_client,
                _segment(segments, 0, link),
                _segment(segments, 1, link),
                metadata_source.bevy_crates_names,
            )
    elif host == "gitlab.com":
        if metadata_source.gitlab_client is not None:
            metadata = get_metadata_from_gitlab(
                metadata_source.gitlab_client,
                _segment(segments, 1, link),
                metadata_source.bevy_crates_names,
            )
    elif host:
        raise ValueError(f"Unknown host: {asset.link}")

    if metadata is not None:
        license, version = metadata
        asset.set_license(license)
        asset.set_bevy_version(version)


def merge_license(license1: str | None, license2: str | None) -> str | None:
    """Combine two license expressions, keeping one when it contains the other."""
    if license1 is None:
        return license2
    if license2 is None:
        return license1
    if license2 in license1:
        return license1
    if license1 in license2:
        return license2
    return f"{license1} {license2}"


def merge_version(version1: str | None, version2: str | None) -> str | None:
    """Return the first version when known, else the second."""
    return version1 if version1 is not None else version2


def get_metadata_from_github(
    client: Any, username: str, repository_name: str, bevy_crates: list[str] | None
) -> Metadata:
    """Gather license and bevy version from a GitHub repository.

    The root ``Cargo.toml`` is read first, then the repository license, then
    the other ``Cargo.toml`` files until both values are known.
    """
    try:
        license, version = get_metadata_from_github_manifest(
            client, username, repository_name, bevy_crates, "Cargo.toml"
        )
    except _METADATA_ERRORS as error:
        print(f"Error getting metadata from root cargo file from github: {error}")
        license, version = None, None

    if license is None:
        try:
            license = client.get_license(username, repository_name)
        except _METADATA_ERRORS:
            license = None

    if license is not None and version is not None:
        return license, version

    try:
        cargo_files = client.search_file(username, repository_name, "Cargo.toml")
    except _METADATA_ERRORS as error:
        print(f"Error fetching cargo files from github: {error}")
        return license, version

    for cargo_file in (path for path in cargo_files if path != "Cargo.toml"):
        if license is not None and version is not None:
            break
        try:
            new_license, new_version = get_metadata_from_github_manifest(
                client, username, repository_name, bevy_crates, cargo_file
            )
        except _METADATA_ERRORS as error:
            print(f"Error getting metadata from other cargo file from github: {error}")
            return license, version
        license = merge_license(license, new_license)
        version = merge_version(version, new_version)

    return license, version


def get_metadata_from_github_manifest(
    client: Any,
    username: str,
    repository_name: str,
    bevy_crates: list[str] | None,
    path: str,
) -> Metadata:
    """Read license and bevy version from one ``Cargo.toml`` in a GitHub repository."""
    content = client.get_content(username, repository_name, path)
    manifest = CargoManifest.from_toml(content)
    return get_license(manifest), get_bevy_version_from_manifest(manifest, bevy_crates)


def get_metadata_from_gitlab(
    client: Any, repository_name: str, bevy_crates: list[str] | None
) -> Metadata:
    """Read license and bevy version from the root ``Cargo.toml`` of a GitLab project.

    Raises LookupError if no project matches the name.
    """
    projects = client.search_project_by_name(repository_name)
    if not projects:
        raise LookupError("Failed to find gitlab repo")
    project = projects[0]
    content = client.get_content(project.id, project.default_branch, "Cargo.toml")
    manifest = CargoManifest.from_toml(content)
    return get_license(manifest), get_bevy_version_from_manifest(manifest, bevy_crates)