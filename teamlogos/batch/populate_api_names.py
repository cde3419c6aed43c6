# teamlogos/batch/populate_api_names.py
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel

from teamlogos.normalization.normalizer import normalize_team_name
from teamlogos.providers.thesportsdb_provider import TheSportsDbProvider, pick_team_image
from teamlogos.storage.supabase_client import RepositoryError, TeamRepository


class PopulateStats(BaseModel):
    success: int = 0
    errors: int = 0


async def populate_api_team_names(repository: TeamRepository) -> PopulateStats:
    """Fills apiTeamName from the display name for teams that have none."""
    stats = PopulateStats()
    try:
        teams = await repository.fetch_teams_without_api_name()
    except RepositoryError as e:
        logger.error(f"Error fetching teams: {e}")
        return stats

    if not teams:
        logger.info("No teams to update")
        return stats
    logger.info(f"Found {len(teams)} teams to update")

    for team in teams:
        api_team_name = normalize_team_name(team.name)
        if await repository.update_team(team.id, {"apiTeamName": api_team_name}):
            logger.info(f"Updated: {team.name} -> {api_team_name}")
            stats.success += 1
        else:
            stats.errors += 1

    logger.info(f"Complete! Success: {stats.success}, Errors: {stats.errors}")
    return stats


async def set_team_api_id(repository: TeamRepository, team_id: str, api_team_id: str) -> bool:
    """Pins the TheSportsDB id of a team when name search picks the wrong club."""
    if await repository.update_team(team_id, {"apiTeamId": api_team_id}):
        logger.success(f"Successfully set API team ID: {api_team_id}")
        return True
    return False


async def diagnose_team_logo(
    repository: TeamRepository, provider: TheSportsDbProvider, team_name: str
) -> Optional[Dict[str, Any]]:
    """Diagnostic: shows the stored API fields of a team and what a name search returns."""
    try:
        teams = await repository.find_teams_by_name(team_name)
    except RepositoryError as e:
        logger.error(f"Team lookup failed: {e}")
        return None
    if not teams:
        logger.error(f"Team not found: {team_name}")
        return None

    team = teams[0]
    report: Dict[str, Any] = {
        "name": team.name,
        "apiTeamId": team.api_team_id,
        "apiTeamName": team.api_team_name,
        "logoUrl": team.logo_url,
        "apiResult": None,
    }
    search_name = team.api_team_name or team.name
    candidates = await provider.search_teams(search_name)
    if candidates:
        first = candidates[0]
        report["apiResult"] = {
            "foundTeam": first.str_team,
            "apiId": first.id_team,
            "badge": first.str_badge,
            "logo": first.str_logo,
            "picked": pick_team_image(first),
        }
    else:
        logger.info(f"No results from API for '{search_name}'")
    return report
