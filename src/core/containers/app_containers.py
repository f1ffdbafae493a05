from dependency_injector import containers, providers

from core.config.settings import settings
from discovery.github.aggregators.aggregator import RepositoryAggregator
from discovery.github.batch import BatchProcessor
from discovery.github.client import GitHubClient
from discovery.github.rate_limit import QuotaPolicy
from discovery.github.service import GitHubRepositoryService


class AppContainer(containers.DeclarativeContainer):

    quota_policy = providers.Singleton(
        QuotaPolicy,
        refresh_interval=settings.GITHUB_RATE_LIMIT_REFRESH_SECONDS,
        low_water=settings.GITHUB_RATE_LIMIT_LOW_WATER,
        floor=settings.GITHUB_RATE_LIMIT_FLOOR,
    )

    github_client = providers.Singleton(
        GitHubClient,
        app_token=settings.GITHUB_TOKEN,
        base_url=settings.GITHUB_API_URL,
        user_agent=settings.GITHUB_USER_AGENT,
        api_version=settings.GITHUB_API_VERSION,
        timeout=settings.GITHUB_HTTP_TIMEOUT,
        retries=settings.GITHUB_HTTP_RETRIES,
        cache_ttl=settings.GITHUB_CACHE_TTL_SECONDS,
        cache_max_entries=settings.GITHUB_CACHE_MAX_ENTRIES,
        quota_policy=quota_policy,
    )

    repository_aggregator = providers.Singleton(
        RepositoryAggregator,
        client=github_client,
    )

    batch_processor = providers.Singleton(
        BatchProcessor,
        client=github_client,
        aggregator=repository_aggregator,
        max_count=settings.GITHUB_BATCH_MAX_COUNT,
    )

    repository_service = providers.Singleton(
        GitHubRepositoryService,
        client=github_client,
        aggregator=repository_aggregator,
        batch=batch_processor,
        per_page=settings.GITHUB_REPOS_PER_PAGE,
    )
