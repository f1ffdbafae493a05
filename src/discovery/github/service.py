# src/discovery/github/service.py

import copy
from typing import List, Optional

from core.logging.logger import get_logger
from discovery.github.aggregators.aggregator import RepositoryAggregator
from discovery.github.batch import BatchProcessor
from discovery.github.client import GitHubClient
from discovery.github.errors import (
    GitHubApiError,
    GitHubAuthError,
    GitHubError,
    GitHubRateLimitError,
)
from discovery.github.filters import filter_banned
from discovery.github.queries import (
    FALLBACK_QUERY,
    build_quality_query,
    build_search_query,
    build_similar_fallback_query,
    build_similar_query,
    build_trending_fallback_query,
    build_trending_query,
    is_simpler,
    normalize_query,
)
from discovery.mappers.repository_mapper import map_contributors, map_issues
from discovery.models import ProcessedRepository, TokenValidation, UserPreferences


EXPLORE_PREVIEW_COUNT = 3


def _listing(repos) -> List[dict]:
    # 캐시된 tuple을 호출자가 수정해도 되는 사본으로
    return copy.deepcopy(list(repos))


class GitHubRepositoryService:
    """
    Repository discovery use-cases on top of GitHubClient.

    Listing queries share one pipeline: cache lookup, quota check, search
    (with one simpler retry), banned-keyword filter, cache write.
    """

    def __init__(
        self,
        client: GitHubClient,
        aggregator: RepositoryAggregator,
        batch: BatchProcessor,
        per_page: int = 10,
    ):
        self.client = client
        self.aggregator = aggregator
        self.batch = batch
        self.per_page = per_page
        self.logger = get_logger(__name__)

    async def check_quota(self, user_token: Optional[str] = None) -> bool:
        return await self.client.check_quota(user_token)

    async def _require_quota(self, user_token: Optional[str]):
        if not await self.client.check_quota(user_token):
            raise GitHubRateLimitError()

    async def _search_with_fallback(
        self,
        query: str,
        fallback: str,
        page: int,
        per_page: int,
        user_token: Optional[str],
    ) -> Optional[List[dict]]:
        """
        Search once, retry once with `fallback` on an API error.
        Returns None when both attempts failed.
        """
        try:
            return await self.client.search_repositories(query, page, per_page, user_token)
        except (GitHubAuthError, GitHubRateLimitError):
            raise
        except GitHubApiError as e:
            if not is_simpler(fallback, query):
                self.logger.error(f"Search failed for '{query}': {e}")
                return None
            self.logger.warning(f"Search failed for '{query}' ({e.status}), retrying with '{fallback}'")

        try:
            return await self.client.search_repositories(fallback, page, per_page, user_token)
        except (GitHubAuthError, GitHubRateLimitError):
            raise
        except GitHubApiError as e:
            self.logger.error(f"Fallback search failed for '{fallback}': {e}")
            return None

    # --------------------
    # Listings
    # --------------------

    async def fetch_quality_repos(
        self,
        page: int = 1,
        query: str = "",
        beginner_friendly: bool = False,
        language: Optional[str] = None,
        topic: Optional[str] = None,
        user_token: Optional[str] = None,
    ) -> List[dict]:
        search_query = build_quality_query(query, beginner_friendly, language, topic)
        cache_key = (page, normalize_query(search_query))

        cached = self.client.cache.popular.get(cache_key)
        if cached is not None:
            return _listing(cached)

        await self._require_quota(user_token)

        items = await self._search_with_fallback(search_query, FALLBACK_QUERY, page, self.per_page, user_token)
        if items is None:
            return []

        repos = filter_banned(items)
        self.client.cache.popular.put(cache_key, tuple(repos))
        return _listing(repos)

    async def fetch_trending_repos(self, page: int = 1, user_token: Optional[str] = None) -> List[dict]:
        cached = self.client.cache.trending.get(page)
        if cached is not None:
            return _listing(cached)

        await self._require_quota(user_token)

        items = await self._search_with_fallback(
            build_trending_query(),
            build_trending_fallback_query(),
            page,
            self.per_page,
            user_token,
        )
        if items is None:
            return []

        repos = filter_banned(items)
        self.client.cache.trending.put(page, tuple(repos))
        return _listing(repos)

    async def search_repositories(
        self,
        query: str,
        page: int = 1,
        limit: Optional[int] = None,
        preferences: Optional[UserPreferences] = None,
        user_token: Optional[str] = None,
    ) -> List[dict]:
        limit = limit or self.per_page
        search_query = build_search_query(query, preferences)
        cache_key = (normalize_query(search_query), page, limit)

        cached = self.client.cache.search_results.get(cache_key)
        if cached is not None:
            return _listing(cached)

        await self._require_quota(user_token)

        items = await self._search_with_fallback(search_query, FALLBACK_QUERY, page, limit, user_token)
        if items is None:
            return []

        repos = filter_banned(items)[:limit]
        self.client.cache.search_results.put(cache_key, tuple(repos))
        return _listing(repos)

    async def fetch_similar_repositories(
        self,
        language: Optional[str],
        topics: List[str],
        exclude_full_name: str,
        limit: int = 3,
        user_token: Optional[str] = None,
    ) -> List[dict]:
        try:
            await self._require_quota(user_token)
            items = await self._search_with_fallback(
                build_similar_query(language, topics),
                build_similar_fallback_query(language),
                1,
                limit,
                user_token,
            )
        except GitHubError as e:
            self.logger.error(f"Error fetching similar repositories: {e}")
            return []

        return [
            repo for repo in filter_banned(items or [])
            if repo.get("full_name") != exclude_full_name
        ]

    # --------------------
    # Single repository
    # --------------------

    def _remember(self, processed: ProcessedRepository, *names: str):
        self.client.cache.by_id.put(processed.id, processed)
        for name in {processed.full_name, *names}:
            self.client.cache.by_full_name.put(name, processed)

    async def fetch_repository_by_full_name(
        self,
        owner: str,
        name: str,
        user_token: Optional[str] = None,
    ) -> ProcessedRepository:
        full_name = f"{owner}/{name}"

        cached = self.client.cache.by_full_name.get(full_name)
        if cached is not None:
            return cached

        await self._require_quota(user_token)

        raw = await self.client.get_repo(full_name, user_token)
        processed = await self.aggregator.aggregate(raw, user_token, include_readme=True)

        self._remember(processed, full_name)
        return processed

    async def fetch_repository_by_id(self, repo_id: int, user_token: Optional[str] = None) -> ProcessedRepository:
        cached = self.client.cache.by_id.get(repo_id)
        if cached is not None:
            return cached

        await self._require_quota(user_token)

        raw = await self.client.get_repo_by_id(repo_id, user_token)
        processed = await self.aggregator.aggregate(raw, user_token, include_readme=True)

        self._remember(processed)
        return processed

    async def fetch_contributors(
        self,
        owner: str,
        repo: str,
        limit: int = 10,
        user_token: Optional[str] = None,
    ) -> tuple:
        await self._require_quota(user_token)
        items = await self.client.get_contributors(f"{owner}/{repo}", limit, user_token)
        return map_contributors(items)[:limit]

    async def fetch_repo_issues(
        self,
        owner: str,
        repo: str,
        limit: int = 5,
        user_token: Optional[str] = None,
    ) -> tuple:
        await self._require_quota(user_token)
        items = await self.client.get_open_issues(f"{owner}/{repo}", limit, user_token)
        return map_issues(items)[:limit]

    # --------------------
    # Pages
    # --------------------

    async def get_explore_page_repositories(self, page: int = 1, user_token: Optional[str] = None) -> dict:
        """
        Popular + trending previews for the explore page
        """
        try:
            await self._require_quota(user_token)

            popular = await self.fetch_quality_repos(page, user_token=user_token)
            trending = await self.fetch_trending_repos(page, user_token=user_token)

            return {
                "popular": await self.batch.process_many(popular, EXPLORE_PREVIEW_COUNT, user_token),
                "trending": await self.batch.process_many(trending, EXPLORE_PREVIEW_COUNT, user_token),
            }
        except GitHubRateLimitError:
            raise
        except GitHubError as e:
            self.logger.error(f"Error fetching explore page repositories: {e}")
            return {"popular": [], "trending": []}

    # --------------------
    # Token / maintenance
    # --------------------

    async def verify_token(self, token: Optional[str]) -> TokenValidation:
        if not token:
            return TokenValidation(valid=False, error="No token provided")

        try:
            response = await self.client.get_authenticated_user(token)
        except GitHubError as e:
            return TokenValidation(valid=False, error=e.message)

        scopes_header = response.headers.get("X-OAuth-Scopes") or ""
        scopes = [scope.strip() for scope in scopes_header.split(",") if scope.strip()]

        return TokenValidation(valid=True, user=response.json().get("login"), scopes=scopes)

    def clear_cache(self):
        self.client.cache.clear()

    def get_usage_stats(self) -> dict:
        return self.client.stats.get_stats()

    def reset_usage_stats(self) -> dict:
        self.client.stats.reset()
        return {"success": True, "message": "GitHub API usage statistics reset successfully"}
