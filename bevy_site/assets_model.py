"""Assets and asset sections read from a directory of TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

NO_ORDER = 99999

_ASSET_KEYS = frozenset(
    {"name", "link", "description", "order", "image", "crate", "licenses", "bevy_versions"}
)


def _require_str(data: dict[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    return _as_str(data[key], key)


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"invalid type for `{key}`: expected a string")
    return value


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list):
        raise ValueError(f"invalid type for `{key}`: expected an array")
    return [_as_str(item, key) for item in value]


def _as_order(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError("invalid type for `order`: expected a non-negative integer")
    return value


@dataclass
class Asset:
    """A community asset described by a TOML file."""

    name: str
    link: str
    description: str
    order: int | None = None
    image: str | None = None
    crate_name: str | None = None
    licenses: list[str] | None = None
    bevy_versions: list[str] | None = None
    original_path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], original_path: Path | None = None) -> Asset:
        """Build an asset from TOML data; raise ValueError on unknown or malformed fields."""
        unknown = sorted(set(data) - _ASSET_KEYS)
        if unknown:
            raise ValueError(f"unknown field(s): {', '.join(unknown)}")
        return cls(
            name=_require_str(data, "name"),
            link=_require_str(data, "link"),
            description=_require_str(data, "description"),
            order=_as_order(data["order"]) if "order" in data else None,
            image=_as_str(data["image"], "image") if "image" in data else None,
            crate_name=_as_str(data["crate"], "crate") if "crate" in data else None,
            licenses=_as_str_list(data["licenses"], "licenses") if "licenses" in data else None,
            bevy_versions=(
                _as_str_list(data["bevy_versions"], "bevy_versions")
                if "bevy_versions" in data
                else None
            ),
            original_path=Path(original_path) if original_path is not None else None,
        )

    def set_license(self, license: str | None) -> None:
        """Set the licenses from an ``A OR B`` expression unless they are already known."""
        if self.licenses is not None or license is None:
            return
        self.licenses = [part.strip() for part in license.split(" OR ")]

    def set_bevy_version(self, version: str | None) -> None:
        """Set the supported bevy version unless the versions are already known."""
        if self.bevy_versions is not None or version is None:
            return
        self.bevy_versions = [version]


@dataclass
class Section:
    """A directory of assets and nested sections."""

    name: str
    content: list[AssetNode] = field(default_factory=list)
    template: str | None = None
    header: str | None = None
    order: int | None = None
    sort_order_reversed: bool = False


AssetNode = Union[Section, Asset]


def node_name(node: AssetNode) -> str:
    """Return the name of a section or asset."""
    return node.name


def node_order(node: AssetNode) -> int:
    """Return the order of a section or asset, or a large default when it has none."""
    return node.order if node.order is not None else NO_ORDER