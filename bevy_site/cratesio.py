"""Queries against a local SQLite copy of the crates.io database dump."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from pathlib import Path

import semver

BEVY_HOMEPAGE = "https://bevyengine.org"
BEVY_REPOSITORY = "https://github.com/bevyengine/bevy"

_METADATA_QUERY = """
SELECT last_version.license, dep.req
FROM (
    SELECT version_id, license, major,
        CAST(SUBSTR(minor_and_patch,0,second_point) AS INTEGER) minor,
        CAST(SUBSTR(minor_and_patch,second_point+1) AS INTEGER) patch
    FROM (
        SELECT version_id, license, major, minor_and_patch,
            INSTR(minor_and_patch, '.') second_point
        FROM (
            SELECT version_id, license,
                CAST(SUBSTR(num,0,first_point) AS INTEGER) major,
                SUBSTR(num,first_point+1) minor_and_patch
            FROM (
                SELECT v.id version_id, v.license license, v.num num,
                    INSTR(v.num, '.') first_point
                FROM crates c
                    INNER JOIN versions v ON c.id = v.crate_id
                WHERE c.name = ?
            )
        )
    )
    ORDER BY major DESC, minor DESC, patch DESC
    LIMIT 1
) last_version
    LEFT JOIN dependencies dep ON
    (
        last_version.version_id = dep.version_id AND
        dep.crate_id IN ({placeholders})
    )
ORDER BY dep.kind
LIMIT 1
"""


def open_crates_db(path: Path) -> sqlite3.Connection:
    """Open the crates.io database dump stored at ``path``.

    Raises FileNotFoundError if there is no such file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"crates.io database not found: {path}")
    return sqlite3.connect(path)


def get_official_bevy_crates(db: sqlite3.Connection) -> tuple[list[str], list[str]]:
    """Return the names and ids of the official bevy crates, ordered by name.

    Raises LookupError if the crates cannot be read.
    """
    try:
        rows = db.execute(
            "SELECT name, id FROM crates WHERE homepage = ? AND repository = ?",
            (BEVY_HOMEPAGE, BEVY_REPOSITORY),
        ).fetchall()
    except sqlite3.Error as error:
        raise LookupError("Problem fetching official bevy crates from crates.io") from error
    crates = sorted(((str(name), str(crate_id)) for name, crate_id in rows), key=lambda row: row[0])
    return [name for name, _ in crates], [crate_id for _, crate_id in crates]


def get_latest_bevy_version(db: sqlite3.Connection) -> semver.Version:
    """Return the highest semver version of the ``bevy`` crate in the database.

    Raises LookupError if the crate or any parsable version is missing.
    """
    row = db.execute("SELECT id FROM crates WHERE name = 'bevy'").fetchone()
    if row is None:
        raise LookupError("The bevy crate is not in the crates.io db")

    versions = []
    for (num,) in db.execute("SELECT num FROM versions WHERE crate_id = ?", (row[0],)):
        try:
            versions.append(semver.Version.parse(str(num)))
        except (ValueError, TypeError):
            continue
    if not versions:
        raise LookupError("Failed to retrieve Bevy versions from crates.io db")
    return max(versions)


def get_metadata_from_cratesio(
    db: sqlite3.Connection, crate_name: str, bevy_crates_ids: Sequence[str] | None = None
) -> tuple[str, str | None]:
    """Return the license of the crate's latest version and its bevy requirement.

    The requirement is None when the latest version depends on no official
    bevy crate. Raises LookupError if the crate has no version.
    """
    ids = list(bevy_crates_ids or [])
    query = _METADATA_QUERY.format(placeholders=",".join("?" * len(ids)))
    row = db.execute(query, (crate_name, *ids)).fetchone()
    if row is None:
        raise LookupError(f"Not found in crates.io db: {crate_name}")
    license, requirement = row
    return (license or ""), (str(requirement) if requirement is not None else None)


def _metadata_by_name(
    db: sqlite3.Connection, crate_name: str, bevy_crates_ids: Sequence[str] | None
) -> tuple[str | None, str | None]:
    license, version = get_metadata_from_cratesio(db, crate_name, bevy_crates_ids)
    return (license or None), version


def get_metadata_from_crates_db(
    db: sqlite3.Connection, crate_name: str, bevy_crates_ids: Sequence[str] | None = None
) -> tuple[str | None, str | None]:
    """Return the license and bevy version of a crate, retrying with ``-`` for ``_``.

    Raises LookupError if neither name is found.
    """
    for name in (crate_name, crate_name.replace("_", "-")):
        try:
            return _metadata_by_name(db, name, bevy_crates_ids)
        except (LookupError, sqlite3.Error):
            continue
    raise LookupError(f"Failed to get data from crates.io db for {crate_name}")