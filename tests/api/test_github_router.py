from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from api.main import create_app
from discovery.github.client import GitHubClient
from discovery.github.errors import (
    GitHubApiError,
    GitHubAuthError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
)
from discovery.models import TokenValidation


def make_service():
    service = MagicMock()
    service.fetch_quality_repos = AsyncMock(return_value=[{"name": "popular"}])
    service.fetch_trending_repos = AsyncMock(return_value=[{"name": "trending"}])
    service.search_repositories = AsyncMock(return_value=[{"name": "found"}])
    service.fetch_repository_by_full_name = AsyncMock(return_value={"full_name": "o/n"})
    service.fetch_contributors = AsyncMock(return_value=[{"login": "alice"}])
    service.fetch_repo_issues = AsyncMock(return_value=[{"number": 7}])
    service.fetch_similar_repositories = AsyncMock(return_value=[])
    service.get_explore_page_repositories = AsyncMock(return_value={"popular": [], "trending": []})
    service.verify_token = AsyncMock(return_value=TokenValidation(valid=True, user="octocat"))
    service.check_quota = AsyncMock(return_value=True)
    service.get_usage_stats = MagicMock(return_value={"total_calls": 3, "by_endpoint": {}, "since": "now"})
    service.reset_usage_stats = MagicMock(return_value={"success": True, "message": "reset"})
    return service


@pytest.fixture
def service():
    return make_service()


@pytest.fixture
def client(service):
    app = create_app()
    app.container.repository_service.override(providers.Object(service))
    yield TestClient(app)
    app.container.repository_service.reset_override()


class TestRepos:
    def test_popular(self, client, service):
        response = client.get("/api/github/repos", params={"type": "popular", "page": 2})

        assert response.status_code == 200
        assert response.json()["repositories"] == [{"name": "popular"}]
        service.fetch_quality_repos.assert_awaited_once_with(2, user_token=None)

    def test_trending(self, client, service):
        response = client.get("/api/github/repos", params={"type": "trending"})
        assert response.json()["data"] == [{"name": "trending"}]

    def test_search_builds_preferences(self, client, service):
        response = client.get(
            "/api/github/repos",
            params={"type": "search", "q": "cli", "limit": 5, "language": "Rust", "skill_level": "beginner"},
        )

        assert response.status_code == 200
        assert response.json()["total_count"] == 1
        query, page, limit, preferences, token = service.search_repositories.await_args.args
        assert (query, page, limit, token) == ("cli", 1, 5, None)
        assert preferences.preferred_languages == ["Rust"]
        assert preferences.skill_level == "beginner"

    def test_repository(self, client, service):
        response = client.get(
            "/api/github/repos",
            params={"type": "repository", "owner": "o", "name": "n"},
            headers={"Authorization": "Bearer user-token"},
        )

        assert response.json()["repository"] == {"full_name": "o/n"}
        service.fetch_repository_by_full_name.assert_awaited_once_with("o", "n", "user-token")

    def test_invalid_parameters(self, client):
        response = client.get("/api/github/repos", params={"type": "repository"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Invalid request parameters"}


class TestErrorMapping:
    def test_rate_limit_is_429(self, client, service):
        reset_at = datetime(2030, 1, 1, tzinfo=timezone.utc)
        service.fetch_quality_repos.side_effect = GitHubRateLimitError(reset_at=reset_at)

        response = client.get("/api/github/repos", params={"type": "popular"})

        assert response.status_code == 429
        assert response.json()["success"] is False
        assert response.headers["X-RateLimit-Reset"] == str(int(reset_at.timestamp()))

    def test_auth_error_is_401(self, client, service):
        service.fetch_trending_repos.side_effect = GitHubAuthError()
        assert client.get("/api/github/repos", params={"type": "trending"}).status_code == 401

    def test_not_found_is_404(self, client, service):
        service.fetch_repository_by_full_name.side_effect = GitHubNotFoundError()

        response = client.get("/api/github/repos", params={"owner": "o", "name": "missing"})

        assert response.status_code == 404
        assert response.json()["error"] == "Repository not found."

    def test_api_error_is_502(self, client, service):
        service.fetch_quality_repos.side_effect = GitHubApiError(500, "boom")

        response = client.get("/api/github/repos", params={"type": "popular"})

        assert response.status_code == 502
        assert response.json()["error"] == "boom"

    def test_unclassified_error_is_500(self, client, service):
        service.fetch_trending_repos.side_effect = GitHubError()

        response = client.get("/api/github/repos", params={"type": "trending"})

        assert response.status_code == 500
        assert response.json()["success"] is False


class TestOtherRoutes:
    def test_rate_limit(self, client):
        body = client.get("/api/github/rate-limit").json()
        assert body["success"] is True
        assert body["hasQuota"] is True
        assert "timestamp" in body

    def test_contributors_requires_owner_and_repo(self, client):
        assert client.get("/api/github/contributors", params={"owner": "o"}).status_code == 400

    def test_contributors(self, client, service):
        response = client.get("/api/github/contributors", params={"owner": "o", "repo": "n", "limit": 3})

        assert response.json()["contributors"] == [{"login": "alice"}]
        service.fetch_contributors.assert_awaited_once_with("o", "n", 3, None)

    def test_issues(self, client, service):
        response = client.get("/api/github/issues", params={"owner": "o", "repo": "n"})

        assert response.json()["issues"] == [{"number": 7}]
        service.fetch_repo_issues.assert_awaited_once_with("o", "n", 5, None)

    def test_similar_passes_topics(self, client, service):
        client.get(
            "/api/github/similar",
            params={"owner": "o", "name": "n", "language": "Go", "topics": ["cli", "web"]},
        )
        service.fetch_similar_repositories.assert_awaited_once_with("Go", ["cli", "web"], "o/n", 3, None)

    def test_validate_token(self, client):
        body = client.get("/api/github/validate-token", headers={"Authorization": "Bearer tok"}).json()
        assert body["success"] is True
        assert body["data"]["user"] == "octocat"

    def test_non_bearer_header_is_ignored(self, client, service):
        client.get("/api/github/explore", headers={"Authorization": "token abc"})
        service.get_explore_page_repositories.assert_awaited_once_with(1, None)


class TestStats:
    def test_get_stats(self, client):
        assert client.get("/api/github-stats").json()["total_calls"] == 3

    def test_reset_stats(self, client, service):
        assert client.post("/api/github-stats").json()["success"] is True
        service.reset_usage_stats.assert_called_once()


class TestHealth:
    def test_health_reports_local_estimate(self):
        app = create_app()
        app.container.github_client.override(providers.Object(GitHubClient()))

        body = TestClient(app).get("/health/").json()

        assert body["status"] == "ok"
        assert body["github"]["quota_estimate"] == 5000
        assert body["github"]["quota_checked"] is False
