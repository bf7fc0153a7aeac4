"""GitHub REST API connector for repository metadata, languages and stars."""

import asyncio
import logging
import os

import httpx

from ..config import GH_API, REPO_FETCH_TIMEOUT, STAR_FETCH_TIMEOUT, USER_AGENT
from ..models import RepositoryMetadata

logger = logging.getLogger(__name__)


class GitHubClient:
    """Thin async client over the GitHub REST API.

    Every call is attempted once. Transport errors, timeouts, non-2xx
    statuses and malformed bodies are logged and reported as ``None``.
    """

    def __init__(self, token: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        if token is None:
            token = os.environ.get("GITHUB_TOKEN")
        self.headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"
        self._transport = transport

    async def _request(self, path: str, timeout: float) -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
            return await client.get(f"{GH_API}{path}", headers=self.headers)

    async def _get_json(self, path: str, timeout: float, deadline: float | None = None):
        """GET ``path`` and decode it. ``deadline`` bounds the whole exchange, body included."""
        try:
            if deadline is None:
                resp = await self._request(path, timeout)
            else:
                resp = await asyncio.wait_for(self._request(path, timeout), deadline)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.error("GitHub API request timed out: %s", path)
            return None
        except httpx.HTTPError as e:
            logger.error("GitHub API request failed: %s (%s)", path, e)
            return None

        if not resp.is_success:
            logger.error("GitHub API error: %d %s for %s", resp.status_code, resp.reason_phrase, path)
            return None

        try:
            return resp.json()
        except ValueError:
            logger.warning("GitHub API returned a malformed body for %s", path)
            return None

    async def fetch_repository(self, owner: str, repo: str) -> RepositoryMetadata | None:
        """Fetch repository metadata, or None if missing or unreachable."""
        data = await self._get_json(f"/repos/{owner}/{repo}", REPO_FETCH_TIMEOUT)
        if not isinstance(data, dict):
            return None
        try:
            return RepositoryMetadata.from_api(data)
        except (KeyError, TypeError, ValueError):
            logger.warning("Unexpected repository payload for %s/%s", owner, repo)
            return None

    async def fetch_languages(self, owner: str, repo: str) -> dict[str, int] | None:
        """Fetch the language -> bytes mapping for a repository."""
        data = await self._get_json(f"/repos/{owner}/{repo}/languages", REPO_FETCH_TIMEOUT)
        if not isinstance(data, dict):
            return None
        if not all(isinstance(v, int) and not isinstance(v, bool) for v in data.values()):
            logger.warning("Unexpected languages payload for %s/%s", owner, repo)
            return None
        return data

    async def fetch_star_count(self, owner: str, repo: str) -> int | float | None:
        """Fetch the stargazer count with a hard 5 second deadline.

        Any JSON number is returned as is; range and integrality are the
        caller's to check. Non-numbers count as a failed fetch.
        """
        data = await self._get_json(f"/repos/{owner}/{repo}", STAR_FETCH_TIMEOUT, deadline=STAR_FETCH_TIMEOUT)
        if not isinstance(data, dict):
            return None
        count = data.get("stargazers_count")
        if not isinstance(count, (int, float)) or isinstance(count, bool):
            return None
        return count
