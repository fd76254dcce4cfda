"""Release host client.

Thin wrapper over the GitHub REST API for the operations the nightly
release needs: create a release, upload assets, list releases, and delete
releases and their tags.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import httpx

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

# Page size for release listing (API maximum)
RELEASES_PAGE_SIZE = 100


class PublishError(Exception):
    """Raised when a release host request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str = "publish_error",
    ) -> None:
        """Initialize PublishError.

        Args:
            message: Error description.
            status_code: HTTP status code, if a response was received.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.status_code = status_code
        self.code = code


def create_http_client(
    token: str | None,
    api_url: str = GITHUB_API_URL,
    timeout: float = 300,
) -> httpx.Client:
    """Create an HTTPX client configured for the release host.

    Args:
        token: API token (anonymous if None).
        api_url: Base URL of the API.
        timeout: Request timeout in seconds.

    Returns:
        Configured httpx.Client; the caller closes it.
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.Client(base_url=api_url, headers=headers, timeout=timeout)


class GitHubReleaseClient:
    """Release operations for one repository.

    Args:
        client: HTTPX client whose base URL is the API root.
        repository: Repository as ``owner/name``.
    """

    def __init__(self, client: httpx.Client, repository: str) -> None:
        if repository.count("/") != 1:
            raise ValueError(f"repository must be 'owner/name', got '{repository}'")
        self.client = client
        self.repository = repository

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise PublishError(
                f"HTTP error {method} {url}: {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
                code="http_error",
            ) from e
        except httpx.TimeoutException as e:
            raise PublishError(f"Timeout {method} {url}", code="timeout") from e
        except httpx.RequestError as e:
            raise PublishError(
                f"Network error {method} {url}: {e}", code="network_error"
            ) from e

    def create_release(
        self,
        tag: str,
        name: str,
        body: str = "",
        prerelease: bool = False,
    ) -> dict[str, Any]:
        """Create a release (and its tag) at the default branch head."""
        logger.info("Creating release %s in %s", tag, self.repository)
        response = self._request(
            "POST",
            f"/repos/{self.repository}/releases",
            json={
                "tag_name": tag,
                "name": name,
                "body": body,
                "prerelease": prerelease,
            },
        )
        release: dict[str, Any] = response.json()
        return release

    def get_release_by_tag(self, tag: str) -> dict[str, Any] | None:
        """Look up the release of a tag.

        Returns:
            The release, or None if the tag has no release.
        """
        try:
            response = self._request("GET", f"/repos/{self.repository}/releases/tags/{tag}")
        except PublishError as e:
            if e.status_code == 404:
                return None
            raise
        release: dict[str, Any] = response.json()
        return release

    def update_release(
        self,
        release_id: int,
        name: str,
        body: str = "",
        prerelease: bool = False,
    ) -> dict[str, Any]:
        """Update the name, body and pre-release flag of a release."""
        response = self._request(
            "PATCH",
            f"/repos/{self.repository}/releases/{release_id}",
            json={"name": name, "body": body, "prerelease": prerelease},
        )
        release: dict[str, Any] = response.json()
        return release

    def upload_asset(self, release: dict[str, Any], path: Path) -> dict[str, Any]:
        """Upload a file as a release asset named after its basename.

        Raises:
            PublishError: If the release has no upload URL or the upload fails.
        """
        upload_url = release.get("upload_url")
        if not upload_url:
            raise PublishError(
                f"Release {release.get('tag_name')} has no upload URL",
                code="invalid_release",
            )
        # The API returns a URI template like ".../assets{?name,label}"
        upload_url = upload_url.split("{", 1)[0]

        size = path.stat().st_size
        logger.info("Uploading %s (%d bytes)", path.name, size)
        with path.open("rb") as f:
            response = self._request(
                "POST",
                upload_url,
                params={"name": path.name},
                content=f,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Content-Length": str(size),
                },
            )
        asset: dict[str, Any] = response.json()
        return asset

    def list_releases(self) -> list[dict[str, Any]]:
        """List every release of the repository, following pagination."""
        releases: list[dict[str, Any]] = []
        page = 1
        while True:
            response = self._request(
                "GET",
                f"/repos/{self.repository}/releases",
                params={"per_page": RELEASES_PAGE_SIZE, "page": page},
            )
            batch = response.json()
            releases.extend(batch)
            if len(batch) < RELEASES_PAGE_SIZE:
                break
            page += 1
        logger.debug("Listed %d release(s) in %s", len(releases), self.repository)
        return releases

    def delete_asset(self, asset_id: int) -> None:
        """Delete a release asset."""
        self._request("DELETE", f"/repos/{self.repository}/releases/assets/{asset_id}")

    def delete_release(self, release_id: int) -> None:
        """Delete a release (the tag is left in place)."""
        self._request("DELETE", f"/repos/{self.repository}/releases/{release_id}")

    def delete_tag(self, tag: str) -> None:
        """Delete a tag ref."""
        self._request("DELETE", f"/repos/{self.repository}/git/refs/tags/{tag}")


__all__ = [
    "GITHUB_API_URL",
    "GitHubReleaseClient",
    "PublishError",
    "RELEASES_PAGE_SIZE",
    "create_http_client",
]
