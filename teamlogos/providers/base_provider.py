from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from teamlogos.config.settings import settings
from teamlogos.models.enums import LogoSource
from teamlogos.normalization.normalizer import normalize_team_name


class LogoProvider(ABC):
    """Abstract base class for third-party team logo providers.

    Lookups never raise for provider trouble: an unreachable provider and a
    provider that found nothing both come back as None.
    """

    source: LogoSource = LogoSource.UNKNOWN
    # False when the provider's team ids live in a different id space than
    # the apiTeamId stored on our teams.
    accepts_stored_team_ids: bool = True

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            follow_redirects=True,
        )

    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def lookup_by_id(self, team_id: str) -> Optional[str]:
        """Returns the logo URL for a provider team id, or None."""

    @abstractmethod
    async def _search_by_name(self, name: str) -> Optional[str]:
        """Single keyword search; returns the first match's logo URL or None."""

    async def lookup_by_name(self, name: str) -> Optional[str]:
        """Searches by the raw name, then once more by its normalized form.

        Keyword search on non-ASCII names often misses teams the provider knows
        under an ASCII spelling.
        """
        logo_url = await self._search_by_name(name)
        if logo_url:
            return logo_url

        normalized = normalize_team_name(name)
        if normalized and normalized != name:
            logger.debug(
                f"[{self.source.value}] Trying normalized name: '{name}' -> '{normalized}'"
            )
            return await self._search_by_name(normalized)
        return None

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Any]:
        """GETs a JSON document; any failure is logged and turned into None."""
        try:
            response = await self.client.get(url, params=params, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"[{self.source.value}] Request to {url} failed: {e!r}")
            return None

        if response.status_code == 429:
            logger.error(f"[{self.source.value}] Rate limit exceeded at {url}.")
            return None
        if not response.is_success:
            logger.warning(
                f"[{self.source.value}] API request failed: {response.status_code} {response.reason_phrase}"
            )
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"[{self.source.value}] Invalid JSON from {url}: {e}")
            return None

    async def close(self):
        """Closes the underlying HTTP client."""
        await self.client.aclose()
        logger.debug(f"Closed HTTP client for {self.source.value}")
