"""Tests for environment-driven settings."""

import pytest

from insights_mcp.config import InsightsSettings, get_enabled_team_ids, is_team_enabled_for_insights


class TestEnabledTeams:
    """Tests for the enabled-team allowlist."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (None, []),
            ("", []),
            ("*", None),
            (" * ", None),
            ("team-1", ["team-1"]),
            (" team-1, team-2 ,,", ["team-1", "team-2"]),
        ],
    )
    def test_get_enabled_team_ids(self, raw, expected) -> None:
        """Test allowlist parsing."""
        assert get_enabled_team_ids(raw) == expected

    def test_unset_disables_every_team(self) -> None:
        """Test no team is enabled without an allowlist."""
        assert not is_team_enabled_for_insights("team-1", InsightsSettings())

    def test_wildcard_enables_every_team(self) -> None:
        """Test '*' enables all teams."""
        assert is_team_enabled_for_insights("team-1", InsightsSettings(enabled_team_ids="*"))

    def test_allowlist(self) -> None:
        """Test only listed teams are enabled."""
        settings = InsightsSettings(enabled_team_ids="team-1,team-2")
        assert is_team_enabled_for_insights("team-2", settings)
        assert not is_team_enabled_for_insights("team-3", settings)


class TestFromEnv:
    """Tests for InsightsSettings.from_env."""

    def test_defaults(self, monkeypatch) -> None:
        """Test defaults apply when nothing is set."""
        for name in ("INSIGHTS_LLM_MODEL", "INSIGHTS_TIMEZONE", "INSIGHTS_ENABLED_TEAM_IDS"):
            monkeypatch.delenv(name, raising=False)

        settings = InsightsSettings.from_env()
        assert settings.llm_model == "gpt-4o-mini"
        assert settings.timezone == "UTC"
        assert settings.enabled_team_ids is None

    def test_overrides(self, monkeypatch) -> None:
        """Test environment variables override defaults."""
        monkeypatch.setenv("INSIGHTS_LLM_TIMEOUT", "12.5")
        monkeypatch.setenv("INSIGHTS_TIMEZONE", "Europe/Stockholm")
        monkeypatch.setenv("INSIGHTS_ENABLED_TEAM_IDS", "team-1")

        settings = InsightsSettings.from_env()
        assert settings.llm_timeout_seconds == 12.5
        assert settings.timezone == "Europe/Stockholm"
        assert is_team_enabled_for_insights("team-1")
