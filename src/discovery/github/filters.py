# src/discovery/github/filters.py

from typing import Iterable, List


BANNED_KEYWORDS = [
    "nazi",
    "racist",
    "hate",
]


def is_allowed_repo(repo: dict) -> bool:
    """
    Name/description denylist filter
    """
    name = (repo.get("name") or "").lower()
    description = (repo.get("description") or "").lower()

    return not any(bad in name or bad in description for bad in BANNED_KEYWORDS)


def filter_banned(repos: Iterable[dict]) -> List[dict]:
    return [repo for repo in repos if is_allowed_repo(repo)]
