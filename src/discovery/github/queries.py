# src/discovery/github/queries.py

"""
Search query builders for the three listing shapes.

GitHub answers overly qualified searches with 422, so builders stop adding
optional qualifiers once a query already carries MAX_QUALIFIERS of them.
"""

from datetime import date, timedelta
from typing import Optional

from discovery.models import UserPreferences


DEFAULT_QUERY = "stars:>100"
FALLBACK_QUERY = "stars:>100"
MAX_QUALIFIERS = 3
BEGINNER_QUALIFIER = "good-first-issues:>0"


def count_qualifiers(query: str) -> int:
    return sum(1 for token in query.split() if ":" in token)


def normalize_query(query: str) -> str:
    """
    Case- and whitespace-insensitive form used in cache keys
    """
    return " ".join(query.lower().split())


def _append(query: str, qualifier: str) -> str:
    if count_qualifiers(query) >= MAX_QUALIFIERS:
        return query
    return f"{query} {qualifier}".strip()


def one_month_ago(today: date) -> date:
    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    # 31일 -> 30일/28일 보정
    day = today.day
    while True:
        try:
            return date(year, month, day)
        except ValueError:
            day -= 1


def build_quality_query(
    query: str = "",
    beginner_friendly: bool = False,
    language: Optional[str] = None,
    topic: Optional[str] = None,
) -> str:
    search_query = query.strip() or DEFAULT_QUERY

    if language and "language:" not in search_query:
        search_query = _append(search_query, f"language:{language.lower()}")
    if topic and "topic:" not in search_query:
        search_query = _append(search_query, f"topic:{topic.lower()}")
    if beginner_friendly and "good-first-issues" not in search_query:
        search_query = _append(search_query, BEGINNER_QUALIFIER)

    return search_query


def build_trending_query(today: Optional[date] = None) -> str:
    since = one_month_ago(today or date.today())
    return f"created:>{since.isoformat()} is:public stars:>20 has:issues"


def build_trending_fallback_query(today: Optional[date] = None) -> str:
    since = one_month_ago(today or date.today())
    return f"created:>{since.isoformat()} is:public stars:>20"


def build_search_query(query: str, preferences: Optional[UserPreferences] = None) -> str:
    """
    Free-form query plus preference qualifiers the user did not type.
    """
    search_query = query.strip() or DEFAULT_QUERY

    if preferences is not None:
        if "language:" not in search_query and preferences.preferred_languages:
            first_language = preferences.preferred_languages[0].lower()
            search_query = _append(search_query, f"language:{first_language}")

        if preferences.skill_level == "beginner" and "good-first-issues" not in search_query:
            search_query = _append(search_query, BEGINNER_QUALIFIER)

    if "is:public" not in search_query:
        search_query = f"{search_query} is:public"

    return search_query


def build_similar_query(language: Optional[str], topics: list) -> str:
    query = "stars:>10"
    if language:
        query += f" language:{language}"
    # 토픽은 하나만
    if topics:
        query += f" topic:{topics[0]}"
    return query


def build_similar_fallback_query(language: Optional[str]) -> str:
    if language:
        return f"language:{language} stars:>50"
    return FALLBACK_QUERY


def is_simpler(fallback: str, query: str) -> bool:
    return fallback != query and count_qualifiers(fallback) <= count_qualifiers(query)
