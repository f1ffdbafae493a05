# src/discovery/github/errors.py

from datetime import datetime, timezone
from typing import Optional

import httpx


class GitHubError(Exception):
    """Base class for every classified GitHub API failure."""

    default_message = "GitHub API request failed."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class GitHubAuthError(GitHubError):
    default_message = "GitHub API authentication failed. Please login again."


class GitHubRateLimitError(GitHubError):
    default_message = "GitHub API rate limit exceeded. Please try again later."

    def __init__(self, message: Optional[str] = None, reset_at: Optional[datetime] = None):
        super().__init__(message)
        self.reset_at = reset_at


class GitHubApiError(GitHubError):
    def __init__(self, status: int, message: Optional[str] = None):
        super().__init__(message or f"GitHub API error: {status}")
        self.status = status


class GitHubNotFoundError(GitHubApiError):
    def __init__(self, message: Optional[str] = None):
        super().__init__(404, message or "GitHub resource not found.")


def parse_reset_time(value: Optional[str]) -> Optional[datetime]:
    """
    X-RateLimit-Reset (epoch seconds) -> aware datetime
    """
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def classify_response(response: httpx.Response) -> httpx.Response:
    """
    Raise the typed error matching a failed response, or return it unchanged.

    Only the status code and headers are inspected. Error bodies are not
    guaranteed to be JSON, so they are never read here.
    """
    if response.is_success:
        return response

    status = response.status_code

    if status == 401:
        raise GitHubAuthError(
            "Authentication failed. Your GitHub token may have expired. Please login again."
        )

    if status == 403:
        # rate limit 소진
        if response.headers.get("X-RateLimit-Remaining") == "0":
            reset_at = parse_reset_time(response.headers.get("X-RateLimit-Reset"))
            reset_label = reset_at.strftime("%H:%M:%S UTC") if reset_at else "unknown time"
            raise GitHubRateLimitError(
                f"GitHub API rate limit exceeded. Limit resets at {reset_label}.",
                reset_at=reset_at,
            )

        # OAuth scope 부족 (헤더는 있는데 비어 있음)
        if response.headers.get("X-OAuth-Scopes") == "":
            raise GitHubAuthError(
                "Your GitHub token doesn't have the required permissions. "
                "Please login again to grant access."
            )

        raise GitHubApiError(
            403,
            "GitHub API access forbidden. You may not have permission to access this resource.",
        )

    if status == 404:
        raise GitHubNotFoundError()

    raise GitHubApiError(status, f"GitHub API error: {status} {response.reason_phrase}")
