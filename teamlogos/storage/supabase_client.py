# teamlogos/storage/supabase_client.py
from typing import Any, Dict, List, Optional

from loguru import logger
from postgrest.exceptions import APIError
from supabase import AsyncClient, create_async_client

from teamlogos.config.settings import settings
from teamlogos.models.team import TEAM_COLUMNS, Team

TEAMS_TABLE = "teams"


class TeamLogosError(Exception):
    """Base class for errors raised by the Supabase adapters."""

    pass


class RepositoryError(TeamLogosError):
    """Raised when a read against the teams table fails."""

    pass


async def initialize_supabase() -> Optional[AsyncClient]:
    """Creates the async Supabase client from settings."""
    api_key = settings.supabase_api_key
    if not settings.supabase_url or not api_key:
        logger.critical("Supabase URL or Key not configured in settings.")
        raise SystemExit("Supabase configuration missing.")

    logger.debug(
        f"Attempting to initialize Async Supabase client with URL: {settings.supabase_url}"
    )
    try:
        client: AsyncClient = await create_async_client(settings.supabase_url, api_key)
        logger.success("Async Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.exception(f"Failed to initialize Async Supabase client: {e}")
        return None


class TeamRepository:
    """Reads and updates the logo-related columns of the teams table.

    Reads raise RepositoryError; updates log and return False, matching the
    best-effort way callers treat writes.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    def _teams(self):
        return self.client.table(TEAMS_TABLE)

    async def _fetch(self, query, action: str) -> List[Dict[str, Any]]:
        try:
            response = await query.execute()
        except APIError as e:
            logger.error(f"Error fetching teams ({action}): {e.message}")
            raise RepositoryError(f"Failed to fetch teams: {e.message}") from e
        return response.data or []

    async def fetch_teams(self) -> List[Team]:
        rows = await self._fetch(self._teams().select(TEAM_COLUMNS), "all")
        return [Team.model_validate(row) for row in rows]

    async def fetch_team(self, team_id: str) -> Optional[Team]:
        rows = await self._fetch(
            self._teams().select(TEAM_COLUMNS).eq("id", team_id).limit(1),
            f"id={team_id}",
        )
        return Team.model_validate(rows[0]) if rows else None

    async def find_teams_by_name(self, fragment: str) -> List[Team]:
        """Case-insensitive substring match on the team name."""
        rows = await self._fetch(
            self._teams().select(TEAM_COLUMNS).ilike("name", f"%{fragment}%"),
            f"name~{fragment}",
        )
        return [Team.model_validate(row) for row in rows]

    async def fetch_teams_with_resolved_logo(self) -> List[Team]:
        rows = await self._fetch(
            self._teams().select(TEAM_COLUMNS).not_.is_("resolvedLogoUrl", "null"),
            "with resolved logo",
        )
        return [Team.model_validate(row) for row in rows]

    async def fetch_teams_without_api_name(self) -> List[Team]:
        rows = await self._fetch(
            self._teams().select(TEAM_COLUMNS).is_("apiTeamName", "null"),
            "without apiTeamName",
        )
        return [Team.model_validate(row) for row in rows]

    async def update_team(self, team_id: str, fields: Dict[str, Any]) -> bool:
        try:
            await self._teams().update(fields).eq("id", team_id).execute()
        except APIError as e:
            logger.error(f"Error updating team {team_id} with {list(fields)}: {e.message}")
            return False
        except Exception as e:
            logger.exception(f"Unexpected error updating team {team_id}: {e}")
            return False
        logger.debug(f"Updated team {team_id}: {list(fields)}")
        return True

    async def save_resolved_logo_url(self, team_id: str, logo_url: str) -> bool:
        return await self.update_team(team_id, {"resolvedLogoUrl": logo_url})
