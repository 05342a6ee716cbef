import sqlite3

import pytest
import requests

from bevy_site.assets_model import Asset, Section
from bevy_site.gitlab_client import GitlabProject
from bevy_site.metadata import (
    MetadataSource,
    get_extra_metadata,
    get_metadata_from_github,
    get_metadata_from_github_manifest,
    get_metadata_from_gitlab,
    merge_license,
    merge_version,
    parse_assets,
)

ROOT_FULL = '[package]\nname = "x"\nlicense = "MIT"\n[dependencies]\nbevy = "0.10"\n'
ROOT_NO_LICENSE = '[package]\nname = "x"\n[dependencies]\nbevy = "0.10"\n'
ROOT_NO_VERSION = '[package]\nname = "x"\nlicense = "MIT"\n'
SUB_CRATE = '[package]\nname = "a"\nlicense = "Apache-2.0"\n[dependencies]\nbevy = "0.11"\n'


class FakeGithub:
    def __init__(self, files, license_id=None, search=None, search_error=False):
        self.files = files
        self.license_id = license_id
        self.search = search or []
        self.search_error = search_error
        self.calls = []

    def get_content(self, username, repository_name, content_path):
        self.calls.append(content_path)
        if content_path not in self.files:
            raise requests.HTTPError("404 Not Found")
        return self.files[content_path]

    def get_license(self, username, repository_name):
        if self.license_id is None:
            raise ValueError("No spdx license assertion")
        return self.license_id

    def search_file(self, username, repository_name, file_name):
        if self.search_error:
            raise requests.HTTPError("403 Forbidden")
        return list(self.search)


class FakeGitlab:
    def __init__(self, projects, files):
        self.projects = projects
        self.files = files

    def search_project_by_name(self, repository_name):
        return list(self.projects)

    def get_content(self, project_id, default_branch, content_path):
        return self.files[(project_id, default_branch, content_path)]


def test_merge_license():
    assert merge_license(None, "MIT") == "MIT"
    assert merge_license("MIT", None) == "MIT"
    assert merge_license(None, None) is None
    assert merge_license("MIT OR Apache-2.0", "MIT") == "MIT OR Apache-2.0"
    assert merge_license("MIT", "MIT OR Apache-2.0") == "MIT OR Apache-2.0"
    assert merge_license("MIT", "Apache-2.0") == "MIT Apache-2.0"


def test_merge_version():
    assert merge_version("0.10", "0.11") == "0.10"
    assert merge_version(None, "0.11") == "0.11"
    assert merge_version(None, None) is None


def test_github_manifest():
    client = FakeGithub({"Cargo.toml": ROOT_FULL})
    assert get_metadata_from_github_manifest(client, "u", "r", ["bevy"], "Cargo.toml") == (
        "MIT",
        "0.10",
    )


def test_github_root_is_enough():
    client = FakeGithub({"Cargo.toml": ROOT_FULL}, search=["crates/a/Cargo.toml"])
    assert get_metadata_from_github(client, "u", "r", ["bevy"]) == ("MIT", "0.10")
    assert client.calls == ["Cargo.toml"]


def test_github_license_from_repository():
    client = FakeGithub({"Cargo.toml": ROOT_NO_LICENSE}, license_id="Apache-2.0")
    assert get_metadata_from_github(client, "u", "r", ["bevy"]) == ("Apache-2.0", "0.10")


def test_github_version_from_other_manifest():
    client = FakeGithub(
        {"Cargo.toml": ROOT_NO_VERSION, "crates/a/Cargo.toml": SUB_CRATE},
        search=["Cargo.toml", "crates/a/Cargo.toml"],
    )
    license, version = get_metadata_from_github(client, "u", "r", ["bevy"])
    assert version == "0.11"
    assert "MIT" in license and "Apache-2.0" in license
    assert client.calls == ["Cargo.toml", "crates/a/Cargo.toml"]


def test_github_missing_root_manifest():
    client = FakeGithub({"crates/a/Cargo.toml": SUB_CRATE}, search=["crates/a/Cargo.toml"])
    assert get_metadata_from_github(client, "u", "r", ["bevy"]) == ("Apache-2.0", "0.11")


def test_github_search_error_returns_partial():
    client = FakeGithub({"Cargo.toml": ROOT_NO_VERSION}, search_error=True)
    assert get_metadata_from_github(client, "u", "r", ["bevy"]) == ("MIT", None)


def test_github_other_manifest_error_stops():
    client = FakeGithub(
        {"Cargo.toml": ROOT_NO_VERSION, "b/Cargo.toml": SUB_CRATE},
        search=["missing/Cargo.toml", "b/Cargo.toml"],
    )
    assert get_metadata_from_github(client, "u", "r", ["bevy"]) == ("MIT", None)
    assert "b/Cargo.toml" not in client.calls


def test_gitlab_metadata():
    client = FakeGitlab([GitlabProject(7, "main")], {(7, "main", "Cargo.toml"): ROOT_FULL})
    assert get_metadata_from_gitlab(client, "repo", ["bevy"]) == ("MIT", "0.10")


def test_gitlab_no_project():
    with pytest.raises(LookupError):
        get_metadata_from_gitlab(FakeGitlab([], {}), "repo", ["bevy"])


def test_extra_metadata_from_github():
    client = FakeGithub(
        {"Cargo.toml": ROOT_FULL.replace('"MIT"', '"MIT OR Apache-2.0"')}
    )
    asset = Asset(name="a", link="https://github.com/user/repo", description="d")
    get_extra_metadata(asset, MetadataSource(github_client=client, bevy_crates_names=["bevy"]))
    assert asset.licenses == ["MIT", "Apache-2.0"]
    assert asset.bevy_versions == ["0.10"]


def test_extra_metadata_keeps_existing_values():
    client = FakeGithub({"Cargo.toml": ROOT_FULL})
    asset = Asset(
        name="a",
        link="https://github.com/user/repo",
        description="d",
        licenses=["Zlib"],
        bevy_versions=["0.8"],
    )
    get_extra_metadata(asset, MetadataSource(github_client=client, bevy_crates_names=["bevy"]))
    assert asset.licenses == ["Zlib"]
    assert asset.bevy_versions == ["0.8"]


def test_extra_metadata_without_client_changes_nothing():
    asset = Asset(name="a", link="https://github.com/user/repo", description="d")
    get_extra_metadata(asset, MetadataSource())
    assert asset.licenses is None
    assert asset.bevy_versions is None


def test_extra_metadata_unknown_host():
    asset = Asset(name="a", link="https://example.com/x/y", description="d")
    with pytest.raises(ValueError):
        get_extra_metadata(asset, MetadataSource())


def _crates_db():
    conn = sqlite3.connect(":memory:")
    conn.executescript(
        """
        CREATE TABLE crates (id TEXT, name TEXT, homepage TEXT, repository TEXT);
        CREATE TABLE versions (id TEXT, crate_id TEXT, num TEXT, license TEXT);
        CREATE TABLE dependencies (version_id TEXT, crate_id TEXT, req TEXT, kind INTEGER);
        INSERT INTO crates VALUES
            ('1', 'bevy', 'https://bevyengine.org', 'https://github.com/bevyengine/bevy'),
            ('3', 'my-crate', '', '');
        INSERT INTO versions VALUES ('20', '3', '0.2.0', 'MIT OR Apache-2.0');
        INSERT INTO dependencies VALUES ('20', '1', '^0.10', 0);
        """
    )
    return conn


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_parse_assets_tree(tmp_path):
    _write(tmp_path / "Tools" / "_category.toml", "order = 2\nsort_order_reversed = true\n")
    _write(
        tmp_path / "Tools" / "tool.toml",
        'name = "Tool"\nlink = "https://example.com"\ndescription = "d"\n',
    )
    _write(tmp_path / "Tools" / "tool.png", "x")
    _write(tmp_path / ".git" / "config.toml", "garbage")
    root = parse_assets(tmp_path)
    assert (root.name, root.template, root.header) == ("Assets", "assets.html", "Assets")
    assert [node.name for node in root.content] == ["Tools"]
    tools = root.content[0]
    assert isinstance(tools, Section)
    assert (tools.order, tools.sort_order_reversed) == (2, True)
    assert [node.name for node in tools.content] == ["Tool"]
    assert tools.content[0].original_path == tmp_path / "Tools" / "tool.toml"


def test_parse_assets_failing_metadata_keeps_asset(tmp_path):
    _write(
        tmp_path / "Stuff" / "a.toml",
        'name = "A"\nlink = "https://example.com/a/b"\ndescription = "d"\n',
    )
    root = parse_assets(tmp_path, MetadataSource())
    asset = root.content[0].content[0]
    assert asset.name == "A"
    assert asset.licenses is None


def test_parse_assets_with_crates_db(tmp_path):
    _write(
        tmp_path / "Stuff" / "a.toml",
        'name = "A"\nlink = "https://example.com"\ndescription = "d"\ncrate = "my_crate"\n',
    )
    db = _crates_db()
    root = parse_assets(tmp_path, MetadataSource(crates_io_db=db))
    asset = root.content[0].content[0]
    assert asset.licenses == ["MIT", "Apache-2.0"]
    assert asset.bevy_versions == ["^0.10"]


def test_parse_assets_rejects_unknown_field(tmp_path):
    _write(
        tmp_path / "Stuff" / "a.toml",
        'name = "A"\nlink = "https://example.com"\ndescription = "d"\nbogus = 1\n',
    )
    with pytest.raises(ValueError):
        parse_assets(tmp_path)


def test_parse_assets_requires_extension(tmp_path):
    _write(tmp_path / "Stuff" / "README", "text")
    with pytest.raises(ValueError):
        parse_assets(tmp_path)