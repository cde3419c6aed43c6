# teamlogos/batch/migrate_logos.py
from typing import List, Optional

from loguru import logger

from teamlogos.config.settings import settings
from teamlogos.models.enums import MigrationStatus
from teamlogos.models.migration import MigrationResult, MigrationStats
from teamlogos.storage.logo_storage import LogoStorageService
from teamlogos.utils.misc_utils import sleep_ms


def log_migration_summary(stats: MigrationStats, results: List[MigrationResult]) -> None:
    logger.info("=" * 60)
    logger.info("MIGRATION SUMMARY")
    logger.info(f"Total Teams:   {stats.total}")
    logger.info(f"Successful:    {stats.success}")
    logger.info(f"Failed:        {stats.failed}")
    logger.info(f"Skipped:       {stats.skipped}")
    logger.info("=" * 60)

    failed = [r for r in results if r.status == MigrationStatus.FAILED]
    if failed:
        logger.warning("FAILED TEAMS:")
        for r in failed:
            logger.warning(f"  - {r.team_name} ({r.team_id}): {r.error}")


async def migrate_all_logos_to_storage(
    service: LogoStorageService,
    force_update: bool = False,
    delay_ms: Optional[int] = None,
) -> MigrationStats:
    """Copies every externally hosted team logo into Supabase Storage.

    Teams are processed one at a time with a fixed pause between them. A
    failing team is recorded and the run moves on.
    """
    delay_ms = settings.migrate_delay_ms if delay_ms is None else delay_ms
    stats = MigrationStats()
    results: List[MigrationResult] = []

    logger.info("Starting logo migration to Supabase Storage...")
    if force_update:
        teams = await service.repository.fetch_teams_with_resolved_logo()
    else:
        teams = await service.get_teams_needing_migration()

    stats.total = len(teams)
    if stats.total == 0:
        logger.success("No teams need migration. All logos are already in Supabase Storage!")
        return stats

    logger.info(f"Found {stats.total} teams to migrate")

    for i, team in enumerate(teams):
        progress = f"[{i + 1}/{stats.total}]"

        if not team.resolved_logo_url:
            result = MigrationResult(
                team_id=team.id, team_name=team.name, status=MigrationStatus.SKIPPED
            )
            logger.info(f"{progress} ⏭️  Skipped {team.name} - No logo URL")
        elif not force_update and service.in_storage(team.resolved_logo_url):
            result = MigrationResult(
                team_id=team.id, team_name=team.name, status=MigrationStatus.SKIPPED
            )
            logger.info(f"{progress} ⏭️  Skipped {team.name} - Already in storage")
        else:
            logger.info(f"{progress} Migrating {team.name}...")
            try:
                upload = await service.migrate_logo_to_storage(
                    team.id, team.name, team.resolved_logo_url, force_update
                )
            except Exception as e:
                logger.exception(f"{progress} Unexpected error migrating {team.name}")
                result = MigrationResult(
                    team_id=team.id,
                    team_name=team.name,
                    status=MigrationStatus.FAILED,
                    error=str(e) or type(e).__name__,
                )
            else:
                if upload.success:
                    result = MigrationResult(
                        team_id=team.id,
                        team_name=team.name,
                        status=MigrationStatus.SUCCESS,
                        url=upload.url,
                    )
                    logger.info(f"{progress} ✅ Success: {team.name}")
                else:
                    result = MigrationResult(
                        team_id=team.id,
                        team_name=team.name,
                        status=MigrationStatus.FAILED,
                        error=upload.error,
                    )
                    logger.info(f"{progress} ❌ Failed: {team.name} - {upload.error}")

            if i < len(teams) - 1:
                await sleep_ms(delay_ms)

        stats.record(result.status)
        results.append(result)

    log_migration_summary(stats, results)
    return stats


async def migrate_team_logo_to_storage(
    service: LogoStorageService, team_id: str, force_update: bool = False
) -> bool:
    logger.info(f"Migrating logo for team {team_id}...")
    try:
        team = await service.repository.fetch_team(team_id)
    except Exception as e:
        logger.error(f"❌ Team lookup failed: {e}")
        return False

    if team is None:
        logger.error(f"❌ Team not found: {team_id}")
        return False

    if not team.resolved_logo_url:
        logger.warning(
            f"{team.name} has no resolved logo URL. Run populateApiNames and resolveAllLogos first."
        )
        return False

    if not force_update and service.in_storage(team.resolved_logo_url):
        logger.info(f"{team.name} logo is already in Supabase Storage: {team.resolved_logo_url}")
        return True

    try:
        result = await service.migrate_logo_to_storage(
            team.id, team.name, team.resolved_logo_url, force_update
        )
    except Exception:
        logger.exception(f"❌ Unexpected error migrating {team.name}")
        return False
    if result.success:
        logger.success(f"✅ Successfully migrated {team.name} to: {result.url}")
        return True
    logger.error(f"❌ Failed to migrate {team.name}: {result.error}")
    return False
