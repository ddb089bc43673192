"""Loads the folders and files of a GitHub repository into a RepositoryContent.

The loader walks the recursive git tree of a branch, lists every folder with
the contents API and downloads each file from its `download_url`. Requests are
issued one after the other; the whole tree is loaded before anything is
summarized.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..errors import ConfigurationError, RetrievalError
from ..utils import get_logger
from .models import File, Folder, RepositoryContent

logger = get_logger(__name__)

USER_AGENT = "gitsum"


class GitHubContentLoader:
    """Fetches repository content through the GitHub REST API."""

    def __init__(
        self,
        git_key: str,
        api_base: str = "https://api.github.com",
        timeout: int = 60,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            git_key: GitHub token sent as a bearer token.
            api_base: Base URL of the GitHub REST API.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used to fake GitHub in tests.
        """
        self.git_key = git_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _headers(self, accept: str = "application/vnd.github+json") -> dict[str, str]:
        return {
            "Accept": accept,
            "User-Agent": USER_AGENT,
            "Authorization": f"Bearer {self.git_key}",
        }

    async def _get(self, client: httpx.AsyncClient, url: str, target: str, **kwargs) -> httpx.Response:
        try:
            response = await client.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("GitHub returned %s for %s", status, target)
            raise RetrievalError(
                f"Failed to fetch {target}: GitHub returned status {status}",
                target=target,
                status_code=status,
            ) from e
        except httpx.HTTPError as e:
            logger.error("Request for %s failed: %s", target, e)
            raise RetrievalError(f"Failed to fetch {target}: {e}", target=target) from e
        return response

    @staticmethod
    def _json(response: httpx.Response, target: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RetrievalError(f"Unexpected response for {target}: {e}", target=target) from e

    async def load(self, owner: str, repo: str, branch: str) -> RepositoryContent:
        """Return the populated content of `owner/repo` at `branch`.

        Raises:
            ConfigurationError: If owner, repo, branch or the token is empty.
            RetrievalError: If any request fails.
        """
        if not owner:
            raise ConfigurationError("No username provided")
        if not repo:
            raise ConfigurationError("No repo name provided")
        if not branch:
            raise ConfigurationError("No branch provided")
        if not self.git_key:
            raise ConfigurationError("No GitHub key provided")

        repo_base = f"{self.api_base}/repos/{owner}/{repo}"
        content = RepositoryContent()

        async with httpx.AsyncClient(
            timeout=self.timeout, headers=self._headers(), transport=self.transport
        ) as client:
            tree_target = f"{owner}/{repo}@{branch}"
            response = await self._get(
                client, f"{repo_base}/git/trees/{branch}", tree_target, params={"recursive": "1"}
            )
            listing = self._json(response, tree_target)
            if not isinstance(listing, dict) or not isinstance(listing.get("tree", []), list):
                raise RetrievalError(f"Expected a git tree for {tree_target}", target=tree_target)
            tree = listing.get("tree", [])

            for item in tree:
                if isinstance(item, dict) and item.get("type") == "tree":
                    content.add_folder(Folder(name=item["path"]))
            logger.info(f"Discovered {len(content.folders)} folders in {tree_target}")

            for folder in content.folders.values():
                await self._load_folder(client, repo_base, branch, folder)

            content.readme = await self._load_readme(client, repo_base, tree_target)

        logger.info(f"Loaded {content.file_count()} files from {tree_target}")
        return content

    async def _load_folder(
        self, client: httpx.AsyncClient, repo_base: str, branch: str, folder: Folder
    ) -> None:
        response = await self._get(
            client, f"{repo_base}/contents/{quote(folder.name)}", folder.name, params={"ref": branch}
        )
        entries = self._json(response, folder.name)
        if not isinstance(entries, list):
            raise RetrievalError(f"Expected a directory listing for {folder.name}", target=folder.name)

        for entry in entries:
            if not isinstance(entry, dict) or entry.get("type") != "file":
                continue
            path = entry["path"]
            download_url = entry.get("download_url")
            if not download_url:
                raise RetrievalError(f"No download URL for {path}", target=path)
            file_response = await self._get(client, download_url, path)
            folder.add_file(File(name=path, content=file_response.text, source_url=download_url))

    async def _load_readme(self, client: httpx.AsyncClient, repo_base: str, target: str) -> Optional[str]:
        try:
            response = await self._get(
                client,
                f"{repo_base}/readme",
                f"README of {target}",
                headers={"Accept": "application/vnd.github.raw+json"},
            )
        except RetrievalError as e:
            if e.status_code == 404:
                logger.info(f"No README found for {target}")
                return None
            raise
        return response.text


__all__ = ["GitHubContentLoader", "USER_AGENT"]
