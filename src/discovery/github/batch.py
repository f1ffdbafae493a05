# src/discovery/github/batch.py

from typing import List, Optional

from core.logging.logger import get_logger
from discovery.github.aggregators.aggregator import RepositoryAggregator
from discovery.github.client import GitHubClient
from discovery.github.errors import GitHubAuthError, GitHubRateLimitError
from discovery.models import ProcessedRepository


DEFAULT_MAX_COUNT = 5


class BatchProcessor:
    """
    Applies the aggregator to a bounded list of repositories, one at a time.

    Items run sequentially so quota use stays predictable; once quota runs
    out, whatever was processed so far is returned.
    """

    def __init__(
        self,
        client: GitHubClient,
        aggregator: RepositoryAggregator,
        max_count: int = DEFAULT_MAX_COUNT,
    ):
        self.client = client
        self.aggregator = aggregator
        self.max_count = max_count
        self.logger = get_logger(__name__)

    async def process_many(
        self,
        raws: List[dict],
        max_count: Optional[int] = None,
        user_token: Optional[str] = None,
    ) -> List[ProcessedRepository]:
        # 네트워크 호출 전에 자름
        to_process = raws[:max_count or self.max_count]
        processed: List[ProcessedRepository] = []

        for raw in to_process:
            if not await self.client.check_quota(user_token):
                self.logger.warning(
                    "Rate limit reached during repository processing. "
                    f"Returning partial results ({len(processed)}/{len(to_process)})"
                )
                return processed

            try:
                processed.append(await self.aggregator.aggregate(raw, user_token))
            except GitHubRateLimitError:
                self.logger.warning(
                    f"Rate limit hit while processing {raw.get('full_name')}. "
                    f"Returning partial results ({len(processed)}/{len(to_process)})"
                )
                return processed
            except GitHubAuthError:
                raise
            except Exception as e:
                self.logger.error(
                    f"Error processing repository {raw.get('full_name')}: {e}", exc_info=True
                )

        return processed
