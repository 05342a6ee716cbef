"""Reading license and bevy version information out of ``Cargo.toml`` manifests."""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

OFFICIAL_BEVY_CRATE_PREFIX_RANGE_START = "bevy"
OFFICIAL_BEVY_CRATE_PREFIX_RANGE_END = "bevz"

Dependency = Union[str, dict[str, Any]]
"""A dependency: a version requirement string, or a detailed table."""


def _dependencies(value: Any, key: str) -> dict[str, Dependency]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"invalid type for `{key}`: expected a table")
    for name, dependency in value.items():
        if not isinstance(dependency, (str, dict)):
            raise ValueError(f"invalid dependency `{name}` in `{key}`")
    return dict(value)


@dataclass
class CargoManifest:
    """The parts of a ``Cargo.toml`` needed to find a license and a bevy version.

    ``workspace_dependencies`` is None when the manifest has no workspace.
    """

    package: dict[str, Any] | None = None
    dependencies: dict[str, Dependency] = field(default_factory=dict)
    dev_dependencies: dict[str, Dependency] = field(default_factory=dict)
    workspace_dependencies: dict[str, Dependency] | None = None

    @classmethod
    def from_toml(cls, text: str) -> CargoManifest:
        """Parse manifest text; raise ValueError if it is not a valid manifest."""
        data = tomllib.loads(text)
        package = data.get("package")
        if package is not None and not isinstance(package, dict):
            raise ValueError("invalid type for `package`: expected a table")
        dev_key = "dev-dependencies" if "dev-dependencies" in data else "dev_dependencies"
        workspace = data.get("workspace")
        if workspace is not None and not isinstance(workspace, dict):
            raise ValueError("invalid type for `workspace`: expected a table")
        return cls(
            package=package,
            dependencies=_dependencies(data.get("dependencies"), "dependencies"),
            dev_dependencies=_dependencies(data.get(dev_key), dev_key),
            workspace_dependencies=(
                _dependencies(workspace.get("dependencies"), "workspace.dependencies")
                if workspace is not None
                else None
            ),
        )


def get_license(manifest: CargoManifest) -> str | None:
    """Return the package license, ``non-standard`` for a license file, else None."""
    package = manifest.package
    if package is None:
        return None
    license = package.get("license")
    if isinstance(license, str):
        return license
    if package.get("license-file") is not None:
        return "non-standard"
    return None


def _bevy_range(dependencies: Mapping[str, Dependency]) -> list[tuple[str, Dependency]]:
    return sorted(
        (name, dependency)
        for name, dependency in dependencies.items()
        if OFFICIAL_BEVY_CRATE_PREFIX_RANGE_START <= name < OFFICIAL_BEVY_CRATE_PREFIX_RANGE_END
    )


def get_bevy_version_from_manifest(
    manifest: CargoManifest, bevy_crates: list[str] | None
) -> str | None:
    """Find the bevy version a manifest depends on.

    Official bevy crates are searched in the dependencies, then the dev
    dependencies, then the workspace dependencies. If none of them gives a
    version, the first ``bevy``-prefixed regular dependency with a version is
    used. Returns None when ``bevy_crates`` is None.
    """
    if bevy_crates is None:
        return None

    dependencies = _bevy_range(manifest.dependencies)
    candidates = [dependencies, _bevy_range(manifest.dev_dependencies)]
    if manifest.workspace_dependencies is not None:
        candidates.append(_bevy_range(manifest.workspace_dependencies))

    for group in candidates:
        version = search_bevy_in_manifest_dependencies(group, bevy_crates)
        if version is not None:
            return version

    for _, dependency in dependencies:
        version = get_bevy_manifest_dependency_version(dependency)
        if version is not None:
            return version
    return None


def search_bevy_in_manifest_dependencies(
    dependencies: Iterable[tuple[str, Dependency]], bevy_crates: Iterable[str]
) -> str | None:
    """Return the version of the first official bevy crate found in the dependencies.

    Both inputs must be sorted by name; official crates without a usable
    version are skipped.
    """
    dependency_iter = iter(dependencies)
    crate_iter = iter(bevy_crates)
    dependency = next(dependency_iter, None)
    bevy_crate = next(crate_iter, None)

    while dependency is not None and bevy_crate is not None:
        name, detail = dependency
        if name < bevy_crate:
            dependency = next(dependency_iter, None)
        elif name > bevy_crate:
            bevy_crate = next(crate_iter, None)
        else:
            version = get_bevy_manifest_dependency_version(detail)
            if version is not None:
                return version
            dependency = next(dependency_iter, None)
            bevy_crate = next(crate_iter, None)
    return None


def get_bevy_manifest_dependency_version(dependency: Dependency) -> str | None:
    """Return the version of a dependency, ``main`` or ``git`` for git sources, else None."""
    if isinstance(dependency, str):
        return dependency
    if dependency.get("workspace") is True:
        return None
    version = dependency.get("version")
    if version is not None:
        return str(version)
    if dependency.get("git") is not None:
        return "main" if dependency.get("branch") == "main" else "git"
    return None