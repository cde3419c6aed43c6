# teamlogos/providers/thesportsdb_provider.py
from typing import Dict, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from teamlogos.config.settings import settings
from teamlogos.models.enums import LogoSource
from teamlogos.models.provider import SportsDbTeam, SportsDbTeamsResponse
from .base_provider import LogoProvider


def pick_team_image(team: SportsDbTeam) -> Optional[str]:
    """Prefers the team badge over the logo image."""
    return team.str_badge or team.str_logo or None


class TheSportsDbProvider(LogoProvider):
    """Free TheSportsDB v1 JSON API; works with the public key."""

    source: LogoSource = LogoSource.THESPORTSDB

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
    ):
        super().__init__(client)
        base_url = base_url or settings.thesportsdb_base_url
        api_key = api_key or settings.thesportsdb_api_key
        self.api_base = f"{base_url.rstrip('/')}/{api_key}"

    async def _teams(self, endpoint: str, params: Dict[str, str]) -> List[SportsDbTeam]:
        data = await self._get_json(f"{self.api_base}/{endpoint}", params=params)
        if data is None:
            return []
        try:
            parsed = SportsDbTeamsResponse.model_validate(data)
        except ValidationError as e:
            logger.error(f"[TheSportsDB] Unexpected response from {endpoint}: {e.error_count()} error(s)")
            return []
        return parsed.teams or []

    async def lookup_by_id(self, team_id: str) -> Optional[str]:
        teams = await self._teams("lookupteam.php", {"id": team_id})
        if not teams:
            logger.debug(f"[TheSportsDB] No team found with ID: {team_id}")
            return None
        return pick_team_image(teams[0])

    async def _search_by_name(self, name: str) -> Optional[str]:
        teams = await self._teams("searchteams.php", {"t": name})
        if not teams:
            return None
        return pick_team_image(teams[0])

    async def search_teams(self, name: str) -> List[SportsDbTeam]:
        """Candidate records for a name search, used by diagnostics."""
        return await self._teams("searchteams.php", {"t": name})
