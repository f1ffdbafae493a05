# src/discovery/github/aggregators/graphql_aggregator.py

from typing import Optional

from discovery.github.aggregators.base import DetailStrategy
from discovery.github.client import GitHubClient
from discovery.mappers.repository_mapper import map_graphql_repository
from discovery.models import ProcessedRepository


REPOSITORY_QUERY = """
query RepositoryData($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    id
    name
    description
    stargazerCount
    forkCount
    openIssues: issues(states: OPEN, first: 5) {
      totalCount
      nodes {
        title
        number
        url
      }
    }
    pullRequests(states: OPEN) {
      totalCount
    }
    primaryLanguage {
      name
    }
    owner {
      login
      avatarUrl
    }
    mentionableUsers(first: 10) {
      nodes {
        login
        avatarUrl
        contributionsCollection {
          totalCommitContributions
        }
      }
    }
    repositoryTopics(first: 20) {
      nodes {
        topic {
          name
        }
      }
    }
    homepageUrl
    createdAt
    updatedAt
    licenseInfo {
      name
    }
    diskUsage
    defaultBranchRef {
      name
    }
    object(expression: "HEAD:README.md") {
      ... on Blob {
        text
      }
    }
  }
}
"""


class GraphQLAggregator(DetailStrategy):
    """
    Fetches every secondary field in a single GraphQL round trip.

    Needs a credential; the caller decides whether one is available.
    """

    def __init__(self, client: GitHubClient):
        self.client = client

    async def aggregate(
        self,
        raw: dict,
        user_token: Optional[str] = None,
        include_readme: bool = False,
    ) -> Optional[ProcessedRepository]:
        owner, name = raw["full_name"].split("/", 1)

        data = await self.client.graphql(
            REPOSITORY_QUERY,
            {"owner": owner, "name": name},
            user_token=user_token,
        )
        node = (data or {}).get("repository")
        if not node:
            return None

        # README는 같은 요청에 포함되어 있으므로 추가 비용 없음
        return map_graphql_repository(raw, node)
