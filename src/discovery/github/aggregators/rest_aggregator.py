# src/discovery/github/aggregators/rest_aggregator.py

from typing import Optional

from core.logging.logger import get_logger
from discovery.github.aggregators.base import DetailStrategy
from discovery.github.client import GitHubClient
from discovery.github.errors import GitHubError, GitHubRateLimitError
from discovery.mappers.repository_mapper import map_contributors, map_issues, map_rest_repository
from discovery.models import ProcessedRepository


CONTRIBUTORS_MIN_STARS = 100
PULL_REQUESTS_MIN_STARS = 500


class RestAggregator(DetailStrategy):
    """
    Sequential REST calls, each gated by a popularity threshold.

    Secondary fetches degrade to empty defaults on failure. A rate-limit
    error aborts the remaining steps and propagates.

    The open pull-request count stays 0 unless `fetch_pull_requests` is
    enabled: the search endpoint it relies on answers with permission errors
    for some repositories.
    """

    def __init__(self, client: GitHubClient, fetch_pull_requests: bool = False):
        self.client = client
        self.fetch_pull_requests = fetch_pull_requests
        self.logger = get_logger(__name__)

    async def aggregate(
        self,
        raw: dict,
        user_token: Optional[str] = None,
        include_readme: bool = False,
    ) -> ProcessedRepository:
        full_name = raw["full_name"]
        stars = raw.get("stargazers_count", 0)

        contributors = ()
        if stars > CONTRIBUTORS_MIN_STARS:
            items = await self._soft(
                self.client.get_contributors(full_name, 10, user_token), full_name, "contributors"
            )
            contributors = map_contributors(items or [])

        issues = ()
        if raw.get("open_issues_count", 0) > 0:
            items = await self._soft(
                self.client.get_open_issues(full_name, 5, user_token), full_name, "issues"
            )
            issues = map_issues(items or [])

        pull_requests = 0
        if self.fetch_pull_requests and stars > PULL_REQUESTS_MIN_STARS:
            pull_requests = await self._soft(
                self.client.count_open_pull_requests(full_name, user_token), full_name, "pull requests"
            ) or 0

        # 목록 화면에서는 README를 가져오지 않음
        readme = ""
        if include_readme:
            readme = await self._soft(
                self.client.get_readme(full_name, user_token), full_name, "readme"
            ) or ""

        return map_rest_repository(
            raw,
            contributors=contributors,
            issues=issues,
            pull_requests=pull_requests,
            readme=readme,
        )

    async def _soft(self, call, full_name: str, what: str):
        try:
            return await call
        except GitHubRateLimitError:
            raise
        except GitHubError as e:
            self.logger.warning(f"Failed to fetch {what} for {full_name}: {e}")
            return None
