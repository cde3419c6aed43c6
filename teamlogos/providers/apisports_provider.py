# teamlogos/providers/apisports_provider.py
"""API-Sports football v3 client.

Paid provider with a free tier of 100 requests/day; tried before TheSportsDB
when a key is configured. See https://api-sports.io/documentation/football/v3
"""

from typing import Any, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from teamlogos.config.settings import settings
from teamlogos.models.enums import LogoSource
from teamlogos.models.logo import ApiQuota
from teamlogos.models.provider import ApiSportsTeamsResponse
from .base_provider import LogoProvider


class ApiSportsProvider(LogoProvider):
    source: LogoSource = LogoSource.API_SPORTS
    # API-Sports team ids are not TheSportsDB ids
    accepts_stored_team_ids: bool = False

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        super().__init__(client)
        self.api_key = api_key if api_key is not None else (settings.api_sports_key or "")
        self.base_url = (base_url or settings.api_sports_base_url).rstrip("/")

    def is_configured(self) -> bool:
        return len(self.api_key) > 0

    @property
    def _headers(self):
        return {"x-apisports-key": self.api_key}

    def _first_logo(self, data: Any, what: str) -> Optional[str]:
        if data is None:
            return None
        try:
            parsed = ApiSportsTeamsResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"[API-Sports] Unexpected response for {what}: {e.error_count()} error(s)")
            return None
        if parsed.errors:
            logger.error(f"[API-Sports] API returned errors: {parsed.errors}")
            return None
        if not parsed.response:
            logger.debug(f"[API-Sports] No teams found for: {what}")
            return None
        team = parsed.response[0].team
        logo = team.logo if team else None
        if logo:
            logger.debug(f"[API-Sports] Found logo for {what}: {logo}")
        return logo or None

    async def lookup_by_id(self, team_id: str) -> Optional[str]:
        if not self.is_configured():
            logger.warning("[API-Sports] API key not configured. Set API_SPORTS_KEY.")
            return None
        data = await self._get_json(
            f"{self.base_url}/teams", params={"id": team_id}, headers=self._headers
        )
        return self._first_logo(data, f"team ID {team_id}")

    async def _search_by_name(self, name: str) -> Optional[str]:
        if not self.is_configured():
            logger.warning("[API-Sports] API key not configured. Set API_SPORTS_KEY.")
            return None
        data = await self._get_json(
            f"{self.base_url}/teams", params={"search": name}, headers=self._headers
        )
        return self._first_logo(data, name)

    async def check_quota(self) -> Optional[ApiQuota]:
        """Reads the daily request quota from the rate-limit headers of /status."""
        if not self.is_configured():
            logger.warning("[API-Sports] API key not configured.")
            return None
        try:
            response = await self.client.get(f"{self.base_url}/status", headers=self._headers)
        except httpx.RequestError as e:
            logger.error(f"[API-Sports] Error checking API quota: {e!r}")
            return None

        def _int_header(name: str) -> Optional[int]:
            value = response.headers.get(name)
            return int(value) if value and value.isdigit() else None

        return ApiQuota(
            remaining=_int_header("x-ratelimit-requests-remaining"),
            limit=_int_header("x-ratelimit-requests-limit"),
        )
