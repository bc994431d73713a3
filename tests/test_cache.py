"""Tests for the team currency cache."""

import pytest

from insights_mcp.data.cache import TeamCurrencyCache


@pytest.fixture
def currency_cache(tmp_path):
    cache = TeamCurrencyCache(str(tmp_path / "cache"), ttl=60)
    yield cache
    cache.close()


class TestTeamCurrencyCache:
    """Tests for TeamCurrencyCache."""

    def test_store_and_get(self, currency_cache) -> None:
        """Test stored currencies are returned uppercase."""
        currency_cache.store("team-1", "sek")
        assert currency_cache.get("team-1") == "SEK"

    def test_missing_team(self, currency_cache) -> None:
        """Test unknown teams return None."""
        assert currency_cache.get("team-unknown") is None

    def test_teams_are_separate(self, currency_cache) -> None:
        """Test each team keeps its own currency."""
        currency_cache.store("team-1", "SEK")
        currency_cache.store("team-2", "NOK")

        assert currency_cache.get("team-1") == "SEK"
        assert currency_cache.get("team-2") == "NOK"

    def test_expired_entry(self, currency_cache) -> None:
        """Test entries past their TTL are treated as missing."""
        currency_cache.store("team-1", "SEK", ttl=0)
        assert currency_cache.get("team-1") is None

    def test_entries_survive_reopen(self, tmp_path) -> None:
        """Test the cache is persisted on disk."""
        cache_dir = str(tmp_path / "cache")
        first = TeamCurrencyCache(cache_dir)
        first.store("team-1", "EUR")
        first.close()

        second = TeamCurrencyCache(cache_dir)
        assert second.get("team-1") == "EUR"
        second.close()
