# src/discovery/github/aggregators/aggregator.py

from typing import Optional

from core.logging.logger import get_logger
from discovery.github.aggregators.base import DetailStrategy
from discovery.github.aggregators.graphql_aggregator import GraphQLAggregator
from discovery.github.aggregators.rest_aggregator import RestAggregator
from discovery.github.client import GitHubClient
from discovery.github.errors import GitHubError, GitHubRateLimitError
from discovery.models import ProcessedRepository


class RepositoryAggregator:
    """
    Repository detail use-case

    1) quota check
    2) GraphQL (credential available)
    3) REST fallback (no credential, or GraphQL failed)
    """

    def __init__(
        self,
        client: GitHubClient,
        graphql: Optional[DetailStrategy] = None,
        rest: Optional[DetailStrategy] = None,
    ):
        self.client = client
        self.graphql = graphql or GraphQLAggregator(client)
        self.rest = rest or RestAggregator(client)
        self.logger = get_logger(__name__)

    async def aggregate(
        self,
        raw: dict,
        user_token: Optional[str] = None,
        include_readme: bool = False,
    ) -> ProcessedRepository:
        if not await self.client.check_quota(user_token):
            raise GitHubRateLimitError()

        if self.client.credentials.has_token(user_token):
            try:
                processed = await self.graphql.aggregate(raw, user_token, include_readme)
                if processed is not None:
                    return processed
                self.logger.warning(
                    f"GraphQL returned no repository for {raw['full_name']}, falling back to REST API"
                )
            except GitHubRateLimitError:
                raise
            except (GitHubError, KeyError, TypeError, ValueError) as e:
                # 응답 형태가 예상과 달라도 REST로 진행
                self.logger.warning(
                    f"GraphQL fetch failed for {raw['full_name']}, falling back to REST API: {e}"
                )

        return await self.rest.aggregate(raw, user_token, include_readme)
