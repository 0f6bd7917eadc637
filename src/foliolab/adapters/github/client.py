"""GitHub REST API client."""

import logging
from typing import Any, Optional

import httpx

from foliolab.config import GitHubConfig
from foliolab.core.entities import OwnerType, Repository, RepositoryMetadata, RepositoryOwner
from foliolab.core.errors import NotFoundError, RateLimitError, SourceControlError
from foliolab.core.interfaces import SourceControlHost

logger = logging.getLogger(__name__)


class GitHubClient(SourceControlHost):
    """Source-control host backed by the GitHub REST API, bound to one token."""

    def __init__(self, token: str, config: Optional[GitHubConfig] = None) -> None:
        self.token = token
        self.config = config or GitHubConfig()
        self.api_base = self.config.api_base.rstrip("/")

    async def get_authenticated_user(self) -> dict[str, Any]:
        return await self._get_json("/user")

    async def list_user_repos(self) -> list[Repository]:
        data = await self._get_json(
            "/user/repos",
            params={"visibility": "public", "sort": "updated", "per_page": self.config.per_page},
        )
        return [self._to_repository(repo) for repo in data]

    async def list_orgs_for_user(self) -> list[dict[str, Any]]:
        return await self._get_json("/user/orgs")

    async def list_org_repos(self, org: str) -> list[Repository]:
        data = await self._get_json(
            f"/orgs/{org}/repos",
            params={"type": "public", "sort": "updated", "per_page": self.config.per_page},
        )
        return [self._to_repository(repo, OwnerType.ORGANIZATION) for repo in data]

    async def get_root_contents(self, owner: str, repo: str) -> list[dict[str, Any]]:
        return await self._get_json(f"/repos/{owner}/{repo}/contents/")

    async def get_file_raw(self, owner: str, repo: str, path: str) -> str:
        response = await self._request(
            f"/repos/{owner}/{repo}/contents/{path.lstrip('/')}", raw=True
        )
        return response.text

    async def get_readme(self, owner: str, repo: str) -> Optional[str]:
        try:
            response = await self._request(f"/repos/{owner}/{repo}/readme", raw=True)
        except NotFoundError:
            logger.debug("No README in %s/%s", owner, repo)
            return None
        return response.text

    async def _get_json(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        response = await self._request(path, params=params)
        try:
            return response.json()
        except ValueError as e:
            raise SourceControlError(f"GitHub returned invalid JSON for {path}: {e}") from e

    async def _request(
        self, path: str, params: Optional[dict[str, Any]] = None, raw: bool = False
    ) -> httpx.Response:
        headers = self._get_headers(raw)
        url = f"{self.api_base}{path}"
        logger.debug("GET %s", url)

        try:
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.TimeoutException as e:
            raise SourceControlError(f"GitHub request timed out: {path}") from e
        except httpx.RequestError as e:
            raise SourceControlError(f"GitHub request failed for {path}: {e}") from e

        if response.status_code == 200:
            return response

        message = self._error_message(response)
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {path}", status_code=404)
        if response.status_code == 429 or (
            response.status_code == 403
            and response.headers.get("x-ratelimit-remaining") == "0"
        ):
            retry_after = response.headers.get("retry-after")
            raise RateLimitError(
                f"GitHub rate limit hit: {message}",
                status_code=response.status_code,
                retry_after=float(retry_after) if retry_after else None,
            )
        raise SourceControlError(
            f"GitHub API error {response.status_code} for {path}: {message}",
            status_code=response.status_code,
        )

    def _error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return str(data)[:200]

    def _get_headers(self, raw: bool = False) -> dict[str, str]:
        """Get headers for GitHub API requests."""
        headers = {
            "Accept": "application/vnd.github.raw" if raw else "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "FolioLab",
        }

        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        return headers

    def _to_repository(
        self, repo: dict[str, Any], default_owner_type: OwnerType = OwnerType.USER
    ) -> Repository:
        owner = repo.get("owner") or {}
        try:
            owner_type = OwnerType(owner.get("type", default_owner_type.value))
        except ValueError:
            owner_type = default_owner_type

        stars = repo.get("stargazers_count")
        return Repository(
            id=repo["id"],
            name=repo["name"],
            url=repo["html_url"],
            description=repo.get("description") or None,
            owner=RepositoryOwner(
                login=owner.get("login") or repo["html_url"].rstrip("/").split("/")[-2],
                type=owner_type,
                avatar_url=owner.get("avatar_url") or None,
            ),
            metadata=RepositoryMetadata(
                stars=stars if isinstance(stars, int) else 0,
                language=repo.get("language") or None,
                topics=repo.get("topics") or [],
                updated_at=repo.get("updated_at") or "",
                homepage=repo.get("homepage") or None,
            ),
        )
