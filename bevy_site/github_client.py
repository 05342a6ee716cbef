"""A small client for the GitHub REST API used to gather asset metadata."""

from __future__ import annotations

import base64
from typing import Any

import requests

BASE_URL = "https://api.github.com"
USER_AGENT = "bevy-website-generate-assets"


def _decode_base64_content(payload: Any) -> str:
    """Decode the base64 ``content`` of an API file response to text."""
    try:
        encoding, content = payload["encoding"], payload["content"]
    except (KeyError, TypeError) as error:
        raise ValueError(f"malformed content response: {error}") from error
    if encoding != "base64":
        raise ValueError("Content is not in base64")
    data = base64.b64decode(content.replace("\n", "").strip(), validate=True)
    return data.decode("utf-8")


class GithubClient:
    """Authenticated access to repository files, licenses and code search."""

    def __init__(self, token: str) -> None:
        self._token = token
        self._session = requests.Session()
        self._session.headers["User-Agent"] = USER_AGENT

    def _get_json(self, url: str) -> Any:
        response = self._session.get(
            url,
            headers={
                "Accept": "application/json",
                "Authorization": f"Bearer {self._token}",
            },
        )
        response.raise_for_status()
        return response.json()

    def get_content(self, username: str, repository_name: str, content_path: str) -> str:
        """Return the text of a file in a repository."""
        payload = self._get_json(
            f"{BASE_URL}/repos/{username}/{repository_name}/contents/{content_path}"
        )
        return _decode_base64_content(payload)

    def get_license(self, username: str, repository_name: str) -> str:
        """Return the SPDX id of the repository's license.

        Raises ValueError when GitHub makes no SPDX assertion.
        """
        payload = self._get_json(f"{BASE_URL}/repos/{username}/{repository_name}/license")
        try:
            license_id = payload["license"]["spdx_id"]
        except (KeyError, TypeError) as error:
            raise ValueError(f"malformed license response: {error}") from error
        if license_id == "NOASSERTION":
            raise ValueError("No spdx license assertion")
        return license_id

    def search_file(self, username: str, repository_name: str, file_name: str) -> list[str]:
        """Return the paths of files with the given name in the repository."""
        payload = self._get_json(
            f"{BASE_URL}/search/code?q=repo:{username}/{repository_name}+filename:{file_name}"
        )
        try:
            items = payload["items"]
            if payload["incomplete_results"]:
                print(
                    f"Too many {file_name} files in repository, checking only the first "
                    f"{payload['total_count']} ones."
                )
            return [str(item["path"]) for item in items]
        except (KeyError, TypeError) as error:
            raise ValueError(f"malformed search response: {error}") from error