"""Community members, roles and sections read from a directory of TOML files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

NO_ORDER = 99999

_SKIPPED_DIRS = (".git", ".github")
_SKIPPED_FILES = ("_category.toml", "_roles.toml")

_MEMBER_STRING_KEYS = (
    "name",
    "sponsor",
    "bio",
    "discord",
    "discord-userid",
    "github",
    "twitter",
    "instagram",
    "itch-io",
    "steam-developer",
    "website",
)
_MEMBER_KEYS = frozenset(_MEMBER_STRING_KEYS) | {"profile-picture", "mastodon", "roles"}


def _reject_unknown(data: dict[str, Any], allowed: frozenset[str] | set[str]) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValueError(f"unknown field(s): {', '.join(unknown)}")


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return data[key]


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected a string")
    return value


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"invalid type for `{key}`: expected an array")
    return [_as_str(item, key) for item in value]


@dataclass(frozen=True)
class ProfilePicture:
    """A profile picture: the GitHub avatar when ``file`` is None, else a local file."""

    file: str | None = None

    @property
    def is_github(self) -> bool:
        return self.file is None

    @classmethod
    def parse(cls, value: str) -> ProfilePicture:
        """Parse the ``profile-picture`` value: ``GitHub`` or a file name."""
        return cls() if value == "GitHub" else cls(value)


@dataclass(frozen=True)
class Mastodon:
    """A Mastodon account written as ``@username@instance``."""

    username: str
    instance: str

    @classmethod
    def parse(cls, value: str) -> Mastodon:
        """Parse ``@username@instance``; raise ValueError if a part is missing."""
        parts = value.split("@")
        if len(parts) < 3:
            raise ValueError(f"invalid mastodon account: {value!r}")
        return cls(username=parts[1], instance=parts[2])


@dataclass
class Member:
    """A community member read from a TOML file."""

    name: str
    profile_picture: ProfilePicture | None = None
    sponsor: str | None = None
    bio: str | None = None
    discord: str | None = None
    discord_userid: str | None = None
    github: str | None = None
    mastodon: Mastodon | None = None
    twitter: str | None = None
    instagram: str | None = None
    itch_io: str | None = None
    steam_developer: str | None = None
    website: str | None = None
    original_path: Path | None = None
    roles: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], original_path: Path | None = None) -> Member:
        """Build a member from kebab-case TOML data; raise ValueError on bad data."""
        _reject_unknown(data, _MEMBER_KEYS)
        _require(data, "name")
        strings = {
            key.replace("-", "_"): _as_str(data[key], key)
            for key in _MEMBER_STRING_KEYS
            if key in data
        }
        picture = data.get("profile-picture")
        mastodon = data.get("mastodon")
        roles = data.get("roles")
        return cls(
            **strings,
            profile_picture=(
                ProfilePicture.parse(_as_str(picture, "profile-picture"))
                if picture is not None
                else None
            ),
            mastodon=Mastodon.parse(_as_str(mastodon, "mastodon")) if mastodon is not None else None,
            roles=_as_str_list(roles, "roles") if roles is not None else None,
            original_path=Path(original_path) if original_path is not None else None,
        )


@dataclass(frozen=True)
class Sme:
    """A subject matter expert and their area."""

    area: str
    id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Sme:
        if not isinstance(data, dict):
            raise ValueError("invalid type for `sme`: expected a table")
        _reject_unknown(data, {"area", "id"})
        return cls(
            area=_as_str(_require(data, "area"), "area"),
            id=_as_str(_require(data, "id"), "id"),
        )


@dataclass
class Roles:
    """The organisation's roles, by GitHub id."""

    project_lead: list[str] = field(default_factory=list)
    maintainer: list[str] = field(default_factory=list)
    sme: list[Sme] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Roles:
        """Build roles from kebab-case TOML data; raise ValueError on bad data."""
        _reject_unknown(data, {"project-lead", "maintainer", "sme"})
        sme = _require(data, "sme")
        if not isinstance(sme, list):
            raise ValueError("invalid type for `sme`: expected an array")
        return cls(
            project_lead=_as_str_list(_require(data, "project-lead"), "project-lead"),
            maintainer=_as_str_list(_require(data, "maintainer"), "maintainer"),
            sme=[Sme.from_dict(item) for item in sme],
        )

    def into_map(self) -> dict[str, list[str]]:
        """Return the role names held by each GitHub id."""
        roles: dict[str, list[str]] = {}
        for member_id in self.project_lead:
            roles.setdefault(member_id, []).append("Project Lead")
        for member_id in self.maintainer:
            roles.setdefault(member_id, []).append("Maintainer")
        for sme in self.sme:
            roles.setdefault(sme.id, []).append(f"SME-{sme.area}")
        return roles


@dataclass
class Section:
    """A directory of members and nested sections."""

    name: str
    filename: str | None = None
    content: list[CommunityNode] = field(default_factory=list)
    template: str | None = None
    header: str | None = None
    order: int | None = None
    sort_order_reversed: bool = False

    def apply_roles(self, roles: dict[str, list[str]]) -> None:
        """Set every member's roles, recursively, from their GitHub id."""
        for node in self.content:
            if isinstance(node, Section):
                node.apply_roles(roles)
            else:
                found = roles.get(node.github) if node.github is not None else None
                node.roles = list(found) if found is not None else None


CommunityNode = Union[Section, Member]


def node_name(node: CommunityNode) -> str:
    """Return the name of a section or member."""
    return node.name


def node_order(node: CommunityNode) -> int:
    """Return the sort order of a section, or of a member according to their roles."""
    if isinstance(node, Section):
        return node.order if node.order is not None else NO_ORDER
    roles = node.roles
    if not roles:
        return NO_ORDER
    if "Project Lead" in roles:
        return 0
    if "Maintainer" in roles:
        return 1
    return 2


def _read_category(directory: Path) -> tuple[int | None, bool]:
    category = directory / "_category.toml"
    if not category.exists():
        return None, False
    data = tomllib.loads(category.read_text(encoding="utf-8"))
    order = data.get("order")
    if isinstance(order, bool) or not isinstance(order, int):
        order = None
    reversed_order = data.get("sort_order_reversed")
    return order, reversed_order if isinstance(reversed_order, bool) else False


def _visit_dirs(directory: Path, section: Section) -> None:
    if not directory.is_dir():
        return
    for path in sorted(directory.iterdir()):
        if path.name in _SKIPPED_DIRS:
            continue
        if path.is_dir():
            order, sort_order_reversed = _read_category(path)
            subsection = Section(
                name=path.name, order=order, sort_order_reversed=sort_order_reversed
            )
            _visit_dirs(path, subsection)
            section.content.append(subsection)
            continue
        if path.name in _SKIPPED_FILES:
            continue
        if not path.suffix:
            raise ValueError(f"file must have an extension: {path}")
        if path.suffix != ".toml":
            continue
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        section.content.append(Member.from_dict(data, path))


def parse_members(community_dir: Path) -> Section:
    """Read every member and section below ``community_dir`` into the root section."""
    root = Section(name="People", template="people.html", header="People")
    _visit_dirs(Path(community_dir), root)
    return root