"""Async GitHub REST API client built on aiohttp."""

import urllib.parse
from typing import Any, Dict, List, Optional

import aiohttp


class GitHubAPIError(Exception):
    """Custom exception for GitHub API errors."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class GitHubClient:
    """GitHub contents API client.

    Use as an async context manager; the client opens its own
    ``aiohttp.ClientSession`` unless one is passed in, and only closes
    sessions it opened itself.
    """

    BASE_URL = "https://api.github.com"
    USER_AGENT = "repo-content-migrator/0.1.0"

    def __init__(self, token: str, session: Optional[aiohttp.ClientSession] = None,
                 base_url: str = BASE_URL):
        """Initialize client with GitHub token."""
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    @property
    def headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self.USER_AGENT
        }

    async def __aenter__(self) -> 'GitHubClient':
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _contents_url(self, owner: str, repo: str, path: str) -> str:
        quoted = urllib.parse.quote(path.strip("/"), safe="/")
        return f"{self.base_url}/repos/{owner}/{repo}/contents/{quoted}"

    async def _make_request(self, url: str, method: str = "GET",
                            data: Optional[Dict] = None) -> Any:
        """Make HTTP request to GitHub API."""
        if self._session is None:
            raise GitHubAPIError("Client session is not open; use 'async with GitHubClient(...)'")

        try:
            async with self._session.request(method, url, json=data, headers=self.headers) as response:
                if response.status >= 400:
                    error_msg = f"GitHub API error {response.status}: {response.reason}"
                    try:
                        error_body = await response.json(content_type=None)
                        if isinstance(error_body, dict) and 'message' in error_body:
                            error_msg += f" - {error_body['message']}"
                    except (aiohttp.ContentTypeError, ValueError):
                        pass
                    raise GitHubAPIError(error_msg, status=response.status)

                return await response.json(content_type=None)
        except aiohttp.ClientError as e:
            raise GitHubAPIError(f"Network error: {e}") from e

    async def get_authenticated_user(self) -> Dict[str, Any]:
        """Get the user the token authenticates as."""
        return await self._make_request(f"{self.base_url}/user")

    async def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        """Get repository metadata; fails if the repository is not reachable."""
        return await self._make_request(f"{self.base_url}/repos/{owner}/{repo}")

    async def list_contents(self, owner: str, repo: str, path: str = "") -> List[Dict[str, Any]]:
        """List a directory. A file path yields a single-item list."""
        data = await self._make_request(self._contents_url(owner, repo, path))
        return data if isinstance(data, list) else [data]

    async def get_file_content(self, owner: str, repo: str, path: str) -> Optional[str]:
        """Get the base64 encoded content of a file.

        Returns None when the response carries no inline content (files over
        1MB); read those with ``get_blob``. An empty file yields "".
        """
        data = await self._make_request(self._contents_url(owner, repo, path))
        if isinstance(data, list):
            raise GitHubAPIError(f"{path} is a directory, not a file")

        content = data.get("content")
        if content is None or data.get("encoding") == "none":
            return None
        return content

    async def get_blob(self, owner: str, repo: str, sha: str) -> str:
        """Get the base64 encoded content of a blob by sha."""
        blob = await self._make_request(f"{self.base_url}/repos/{owner}/{repo}/git/blobs/{sha}")
        return blob.get("content", "")

    async def get_file_sha(self, owner: str, repo: str, path: str) -> Optional[str]:
        """Get the blob sha of an existing file, or None if it does not exist."""
        try:
            data = await self._make_request(self._contents_url(owner, repo, path))
        except GitHubAPIError as e:
            if e.status == 404:
                return None
            raise
        if isinstance(data, list):
            raise GitHubAPIError(f"{path} is a directory in {owner}/{repo}")
        return data.get("sha")

    async def create_or_update_file(self, owner: str, repo: str, path: str, message: str,
                                    content: str, sha: str = None) -> Dict[str, Any]:
        """Create a file, or overwrite it when the current blob sha is given."""
        data = {"message": message, "content": content}
        if sha:
            data["sha"] = sha

        return await self._make_request(self._contents_url(owner, repo, path), method="PUT", data=data)
