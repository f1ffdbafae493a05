from datetime import date

from discovery.github.filters import filter_banned, is_allowed_repo
from discovery.github.queries import (
    build_quality_query,
    build_search_query,
    build_similar_fallback_query,
    build_similar_query,
    build_trending_fallback_query,
    build_trending_query,
    count_qualifiers,
    normalize_query,
    one_month_ago,
)
from discovery.models import UserPreferences


class TestQualityQuery:
    def test_default(self):
        assert build_quality_query() == "stars:>100"

    def test_beginner_friendly(self):
        assert build_quality_query("", beginner_friendly=True) == "stars:>100 good-first-issues:>0"

    def test_qualifier_cap(self):
        query = build_quality_query("stars:>100", beginner_friendly=True, language="Go", topic="cli")
        assert count_qualifiers(query) == 3
        assert "good-first-issues" not in query


class TestTrendingQuery:
    def test_created_within_last_month(self):
        assert build_trending_query(date(2024, 3, 15)) == "created:>2024-02-15 is:public stars:>20 has:issues"

    def test_fallback_drops_has_issues(self):
        assert build_trending_fallback_query(date(2024, 3, 15)) == "created:>2024-02-15 is:public stars:>20"

    def test_month_rollover_clamps_day(self):
        assert one_month_ago(date(2024, 3, 31)) == date(2024, 2, 29)
        assert one_month_ago(date(2024, 1, 10)) == date(2023, 12, 10)


class TestSearchQuery:
    def test_empty_uses_default(self):
        assert build_search_query("  ") == "stars:>100 is:public"

    def test_existing_language_is_kept(self):
        prefs = UserPreferences(preferred_languages=["Rust"])
        assert build_search_query("language:python stars:>1000", prefs) == "language:python stars:>1000 is:public"

    def test_preferences_are_applied(self):
        prefs = UserPreferences(preferred_languages=["Rust", "Go"], skill_level="beginner")
        assert build_search_query("cli", prefs) == "cli language:rust good-first-issues:>0 is:public"

    def test_normalize_is_case_and_space_insensitive(self):
        assert normalize_query("  Language:Python   CLI ") == normalize_query("language:python cli")


class TestSimilarQuery:
    def test_one_language_one_topic(self):
        assert build_similar_query("Python", ["web", "api"]) == "stars:>10 language:Python topic:web"

    def test_fallback(self):
        assert build_similar_fallback_query("Python") == "language:Python stars:>50"
        assert build_similar_fallback_query(None) == "stars:>100"


class TestBannedFilter:
    def test_name_match(self):
        assert is_allowed_repo({"name": "nazi-tools", "description": None}) is False

    def test_description_match_is_case_insensitive(self):
        assert is_allowed_repo({"name": "tools", "description": "A RACIST bot"}) is False

    def test_filter_keeps_clean_repos(self):
        repos = [{"name": "good"}, {"name": "hate-speech"}, {"name": "fine", "description": "ok"}]
        assert [r["name"] for r in filter_banned(repos)] == ["good", "fine"]
