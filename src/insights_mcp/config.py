"""Environment-driven settings."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class InsightsSettings:
    """Runtime settings, read once from the environment."""

    llm_model: str = "gpt-4o-mini"
    llm_timeout_seconds: float = 30.0
    llm_max_tokens: int = 600
    cache_dir: str = ".cache/insights"
    currency_cache_ttl: int = 3600  # 1 hour
    timezone: str = "UTC"
    locale: str = "en-US"
    enabled_team_ids: str | None = None

    @classmethod
    def from_env(cls) -> "InsightsSettings":
        return cls(
            llm_model=os.environ.get("INSIGHTS_LLM_MODEL", cls.llm_model),
            llm_timeout_seconds=float(os.environ.get("INSIGHTS_LLM_TIMEOUT", str(cls.llm_timeout_seconds))),
            llm_max_tokens=int(os.environ.get("INSIGHTS_LLM_MAX_TOKENS", str(cls.llm_max_tokens))),
            cache_dir=os.environ.get("INSIGHTS_CACHE_DIR", cls.cache_dir),
            currency_cache_ttl=int(os.environ.get("INSIGHTS_CURRENCY_CACHE_TTL", str(cls.currency_cache_ttl))),
            timezone=os.environ.get("INSIGHTS_TIMEZONE", cls.timezone),
            locale=os.environ.get("INSIGHTS_LOCALE", cls.locale),
            enabled_team_ids=os.environ.get("INSIGHTS_ENABLED_TEAM_IDS"),
        )


def get_enabled_team_ids(raw: str | None) -> list[str] | None:
    """
    Parse the enabled-team allowlist.

    Returns None when every team is enabled ("*"), and an empty list when
    the variable is unset (safe default for staging).
    """
    if not raw:
        return []
    if raw.strip() == "*":
        return None
    return [team_id.strip() for team_id in raw.split(",") if team_id.strip()]


def is_team_enabled_for_insights(team_id: str, settings: InsightsSettings | None = None) -> bool:
    """Check if a specific team is enabled for insights generation."""
    if settings is None:
        settings = InsightsSettings.from_env()
    enabled_ids = get_enabled_team_ids(settings.enabled_team_ids)
    if enabled_ids is None:
        return True
    return team_id in enabled_ids
