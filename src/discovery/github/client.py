# src/discovery/github/client.py

import base64
import time
from typing import Any, Callable, List, Optional, Tuple

import httpx

from core.logging.logger import get_logger
from discovery.github.auth import CredentialResolver
from discovery.github.cache import DEFAULT_TTL_SECONDS, RepoCache
from discovery.github.errors import (
    GitHubApiError,
    GitHubAuthError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    classify_response,
)
from discovery.github.rate_limit import QuotaPolicy, RateLimitGuard
from discovery.github.stats import ApiCallStats


GITHUB_API_URL = "https://api.github.com"


class GitHubClient:
    """
    Low-level GitHub API wrapper.

    One instance owns everything that used to be process-wide: the HTTP
    connection pool, the quota estimate, the response caches and the call
    counters. Every request goes through the same path: resolve headers,
    count the call, send, classify.
    """

    def __init__(
        self,
        app_token: Optional[str] = None,
        *,
        base_url: str = GITHUB_API_URL,
        user_agent: str = "SourceSeekr-App",
        api_version: str = "2022-11-28",
        timeout: float = 10.0,
        retries: int = 2,
        cache_ttl: float = DEFAULT_TTL_SECONDS,
        cache_max_entries: Optional[int] = None,
        quota_policy: Optional[QuotaPolicy] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.logger = get_logger(__name__)
        self.credentials = CredentialResolver(app_token, user_agent=user_agent, api_version=api_version)
        self.stats = ApiCallStats()
        self.cache = RepoCache(ttl=cache_ttl, max_entries=cache_max_entries, clock=clock)
        self.guard = RateLimitGuard(self.get_rate_limit, policy=quota_policy, clock=clock)
        self.http = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport or httpx.AsyncHTTPTransport(retries=retries),
        )

    async def aclose(self):
        await self.http.aclose()

    # --------------------
    # Core request path
    # --------------------

    async def request(
        self,
        method: str,
        path: str,
        *,
        endpoint: str,
        user_token: Optional[str] = None,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        request_headers = self.credentials.resolve_headers(user_token)
        if headers:
            request_headers.update(headers)

        self.stats.track_call(endpoint)

        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=request_headers
            )
        except httpx.HTTPError as e:
            raise GitHubApiError(
                500, f"Unexpected error during GitHub API call: {e}"
            ) from e

        try:
            return classify_response(response)
        except GitHubRateLimitError as e:
            self.guard.record_exhausted(e.reset_at.timestamp() if e.reset_at else None)
            raise

    async def get_json(self, path: str, *, endpoint: str, user_token: Optional[str] = None, params: Optional[dict] = None) -> Any:
        response = await self.request("GET", path, endpoint=endpoint, user_token=user_token, params=params)
        return response.json()

    async def check_quota(self, user_token: Optional[str] = None) -> bool:
        return await self.guard.check_quota(user_token)

    # --------------------
    # REST endpoints
    # --------------------

    async def get_rate_limit(self, user_token: Optional[str] = None) -> Tuple[int, Optional[float]]:
        """
        Authoritative core quota: (remaining, reset epoch seconds)
        """
        data = await self.get_json("/rate_limit", endpoint="rate_limit", user_token=user_token)
        core = data["resources"]["core"]
        reset = core.get("reset")
        return int(core["remaining"]), float(reset) if reset is not None else None

    async def get_authenticated_user(self, token: str) -> httpx.Response:
        return await self.request("GET", "/user", endpoint="user", user_token=token)

    async def get_repo(self, full_name: str, user_token: Optional[str] = None) -> dict:
        return await self.get_json(f"/repos/{full_name}", endpoint="repos", user_token=user_token)

    async def get_repo_by_id(self, repo_id: int, user_token: Optional[str] = None) -> dict:
        return await self.get_json(f"/repositories/{repo_id}", endpoint="repositories", user_token=user_token)

    async def get_contributors(self, full_name: str, limit: int = 10, user_token: Optional[str] = None) -> List[dict]:
        response = await self.request(
            "GET",
            f"/repos/{full_name}/contributors",
            endpoint="contributors",
            user_token=user_token,
            params={"per_page": limit},
        )
        # 빈 repo는 204, 통계 계산 중인 대형 repo는 202
        if response.status_code in (202, 204) or not response.content:
            return []
        return response.json()

    async def get_open_issues(self, full_name: str, limit: int = 5, user_token: Optional[str] = None) -> List[dict]:
        return await self.get_json(
            f"/repos/{full_name}/issues",
            endpoint="issues",
            user_token=user_token,
            params={"state": "open", "per_page": limit},
        )

    async def count_open_pull_requests(self, full_name: str, user_token: Optional[str] = None) -> int:
        data = await self.get_json(
            "/search/issues",
            endpoint="search/issues:pulls",
            user_token=user_token,
            params={"q": f"repo:{full_name} is:pr is:open"},
        )
        return data.get("total_count", 0)

    async def get_readme(self, full_name: str, user_token: Optional[str] = None) -> Optional[str]:
        """
        README 콘텐츠 (decoded text) or None if not found
        """
        try:
            data = await self.get_json(f"/repos/{full_name}/readme", endpoint="readme", user_token=user_token)
        except GitHubNotFoundError:
            return None

        if data.get("encoding") == "base64" and data.get("content"):
            return base64.b64decode(data["content"]).decode("utf-8", errors="replace")
        return data.get("content")

    async def search_repositories(
        self,
        query: str,
        page: int = 1,
        per_page: int = 10,
        user_token: Optional[str] = None,
    ) -> List[dict]:
        data = await self.get_json(
            "/search/repositories",
            endpoint="search/repositories",
            user_token=user_token,
            params={
                "q": query,
                "sort": "stars",
                "order": "desc",
                "per_page": per_page,
                "page": page,
            },
        )
        return data.get("items") or []

    # --------------------
    # GraphQL
    # --------------------

    async def graphql(self, query: str, variables: dict, user_token: Optional[str] = None) -> Optional[dict]:
        """
        POST /graphql and return `data`, or None when GitHub reports the
        requested object as missing.

        GraphQL answers many failures with 200 and an `errors` list, so those
        are classified here after the status check.
        """
        if not self.credentials.has_token(user_token):
            raise GitHubAuthError("GitHub token is required for GraphQL API")

        response = await self.request(
            "POST",
            "/graphql",
            endpoint="graphql",
            user_token=user_token,
            json={"query": query, "variables": variables},
        )
        payload = response.json()

        errors = payload.get("errors")
        if errors:
            error_types = {e.get("type") for e in errors}
            message = ", ".join(e.get("message", "") for e in errors)

            if "RATE_LIMITED" in error_types:
                raise GitHubRateLimitError(f"GitHub GraphQL API rate limit exceeded: {message}")
            if "NOT_FOUND" in error_types:
                return None
            if "authentication" in message.lower() or "token" in message.lower():
                raise GitHubAuthError(f"GitHub GraphQL API authentication error: {message}")
            raise GitHubApiError(400, f"GitHub GraphQL API error: {message}")

        return payload.get("data")

