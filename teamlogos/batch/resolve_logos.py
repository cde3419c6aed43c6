# teamlogos/batch/resolve_logos.py
"""Bulk logo resolution.

Resolves every team through LogoResolver and stores hosted URLs in
resolvedLogoUrl. Teams that only have a local asset are counted as failed
because nothing authoritative was found for them.
"""

from typing import Optional

from loguru import logger

from teamlogos.config.settings import settings
from teamlogos.models.enums import MigrationStatus
from teamlogos.models.migration import MigrationStats
from teamlogos.models.team import Team
from teamlogos.resolution.logo_resolver import LogoResolver
from teamlogos.storage.supabase_client import RepositoryError, TeamRepository
from teamlogos.utils.misc_utils import describe_logo_source, sleep_ms


async def _resolve_and_save(
    resolver: LogoResolver, repository: TeamRepository, team: Team
) -> MigrationStatus:
    # persist=False: the save below is awaited so failures are counted
    logo_url = await resolver.resolve_team(team, persist=False)

    if not logo_url:
        logger.warning(f"  ⚠️  No logo found for {team.name}")
        return MigrationStatus.FAILED
    if resolver.is_local_asset(logo_url):
        logger.warning("  ⚠️  Only local logo available (not saved to DB)")
        return MigrationStatus.FAILED

    if not await repository.save_resolved_logo_url(team.id, logo_url):
        logger.error(f"  ❌ Error saving logo for {team.name}")
        return MigrationStatus.FAILED

    logger.info(f"  ✅ Found via {describe_logo_source(logo_url).value}")
    logger.info(f"  💾 Saved to database: {logo_url[:60]}...")
    return MigrationStatus.SUCCESS


async def resolve_all_team_logos(
    resolver: LogoResolver,
    repository: TeamRepository,
    force_update: bool = False,
    delay_ms: Optional[int] = None,
) -> MigrationStats:
    """Resolves and saves logos for all teams.

    Args:
        force_update: Re-resolve teams that already have a resolvedLogoUrl.
        delay_ms: Pause between provider round trips, to stay under rate limits.
    """
    delay_ms = settings.resolve_delay_ms if delay_ms is None else delay_ms
    stats = MigrationStats()
    logger.info("Starting bulk logo resolution...")

    try:
        teams = await repository.fetch_teams()
    except RepositoryError as e:
        logger.error(f"Error fetching teams: {e}")
        return stats

    stats.total = len(teams)
    if not teams:
        logger.info("No teams found")
        return stats
    logger.info(f"Found {len(teams)} teams")

    for team in teams:
        if team.resolved_logo_url and not force_update:
            logger.info(f"⏭️  Skipping {team.name} (already resolved)")
            stats.record(MigrationStatus.SKIPPED)
            continue

        logger.info(f"🔍 Resolving logo for: {team.name}")
        try:
            status = await _resolve_and_save(resolver, repository, team)
        except Exception:
            logger.exception(f"  ❌ Error resolving {team.name}")
            status = MigrationStatus.FAILED
        stats.record(status)

        await sleep_ms(delay_ms)

    logger.info(
        f"Resolution complete! Success: {stats.success}, Failed: {stats.failed}, Skipped: {stats.skipped}"
    )
    return stats


async def resolve_team_logo(
    resolver: LogoResolver, repository: TeamRepository, team_id: str
) -> bool:
    logger.info(f"Resolving logo for team {team_id}")
    try:
        team = await repository.fetch_team(team_id)
    except RepositoryError as e:
        logger.error(f"Team lookup failed: {e}")
        return False
    if team is None:
        logger.error(f"Team not found: {team_id}")
        return False

    logger.info(f"Team: {team.name}")
    try:
        status = await _resolve_and_save(resolver, repository, team)
    except Exception:
        logger.exception(f"Unexpected error resolving {team.name}")
        return False
    return status == MigrationStatus.SUCCESS
