"""Team currency caching."""

from datetime import datetime, timezone
from typing import Any

import diskcache


class TeamCurrencyCache:
    """
    Cache of each team's base currency with a bounded TTL.

    Constructed once and injected into the service. Entries expire so a
    currency change on the team reaches insights within one TTL.
    """

    def __init__(self, cache_dir: str, ttl: int = 3600):
        self.cache: diskcache.Cache = diskcache.Cache(cache_dir)
        self._default_ttl = ttl

    @staticmethod
    def _key(team_id: str) -> str:
        return f"currency://{team_id}"

    def store(self, team_id: str, currency: str, ttl: int | None = None) -> None:
        """
        Store a team's currency.

        Args:
            team_id: Team identifier
            currency: ISO 4217 code
            ttl: Cache TTL in seconds (default: the cache's TTL)
        """
        entry: dict[str, Any] = {
            "currency": currency.upper(),
            "stored_at": datetime.now(timezone.utc).isoformat(),
        }
        expire = ttl if ttl is not None else self._default_ttl
        self.cache.set(self._key(team_id), entry, expire=expire)

    def get(self, team_id: str) -> str | None:
        """Cached currency for a team, or None if missing or expired."""
        entry = self.cache.get(self._key(team_id))
        if not entry:
            return None
        return entry["currency"]

    def close(self) -> None:
        self.cache.close()
