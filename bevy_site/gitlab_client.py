"""A small client for the GitLab projects API used to gather asset metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from bevy_site.github_client import USER_AGENT, _decode_base64_content

BASE_URL = "https://gitlab.com/api/v4/projects"


@dataclass(frozen=True)
class GitlabProject:
    """A project found by name: its id and default branch."""

    id: int
    default_branch: str


class GitlabClient:
    """Anonymous access to GitLab project search and repository files."""

    def __init__(self, token: str) -> None:
        # Kept for symmetry with the GitHub client; requests are made anonymously.
        self._token = token
        self._session = requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT

    def _get_json(self, url: str) -> Any:
        response = self._session.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()

    def search_project_by_name(self, repository_name: str) -> list[GitlabProject]:
        """Return the projects matching a name, with their id and default branch."""
        payload = self._get_json(f"{BASE_URL}?search={repository_name}")
        try:
            return [
                GitlabProject(id=int(item["id"]), default_branch=str(item["default_branch"]))
                for item in payload
            ]
        except (KeyError, TypeError) as error:
            raise ValueError(f"malformed project search response: {error}") from error

    def get_content(self, project_id: int, default_branch: str, content_path: str) -> str:
        """Return the text of a file in a project at the given branch."""
        payload = self._get_json(
            f"{BASE_URL}/{project_id}/repository/files/{content_path}?ref={default_branch}"
        )
        return _decode_base64_content(payload)