# teamlogos/devtools/commands.py
"""Admin commands for logo maintenance.

Typical workflow:
  1. populateApiNames        fill apiTeamName from team names
  2. resolveAllLogos         resolve logos from the providers
  3. migrateLogosToStorage   copy them into Supabase Storage
"""

import functools
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from teamlogos.batch.migrate_logos import (
    migrate_all_logos_to_storage,
    migrate_team_logo_to_storage,
)
from teamlogos.batch.populate_api_names import (
    diagnose_team_logo,
    populate_api_team_names,
    set_team_api_id,
)
from teamlogos.batch.resolve_logos import resolve_all_team_logos, resolve_team_logo
from teamlogos.cache.logo_cache import LogoCache
from teamlogos.config.settings import settings
from teamlogos.devtools.registry import CommandRegistry
from teamlogos.models.logo import UploadResult
from teamlogos.models.migration import MigrationStats, StorageStats
from teamlogos.providers.apisports_provider import ApiSportsProvider
from teamlogos.providers.thesportsdb_provider import TheSportsDbProvider
from teamlogos.resolution.logo_resolver import LogoResolver
from teamlogos.storage.logo_storage import LogoStorageService
from teamlogos.storage.supabase_client import RepositoryError, TeamRepository


class DevTools:
    def __init__(
        self,
        repository: TeamRepository,
        resolver: LogoResolver,
        storage: LogoStorageService,
        cache: LogoCache,
        thesportsdb: TheSportsDbProvider,
        api_sports: Optional[ApiSportsProvider] = None,
        console: Optional[Console] = None,
    ):
        self.repository = repository
        self.resolver = resolver
        self.storage = storage
        self.cache = cache
        self.thesportsdb = thesportsdb
        self.api_sports = api_sports
        self.console = console or Console()
        self.registry = CommandRegistry()

    # --- Logo resolution ---

    async def resolve_all_logos(self, force_update: bool = False, delay_ms: int = -1) -> MigrationStats:
        stats = await resolve_all_team_logos(
            self.resolver,
            self.repository,
            force_update,
            settings.resolve_delay_ms if delay_ms < 0 else delay_ms,
        )
        self._print_counts("Logo Resolution", stats)
        return stats

    async def resolve_team_logo(self, team_id: str) -> bool:
        success = await resolve_team_logo(self.resolver, self.repository, team_id)
        self.console.print(
            "[green]✅ Logo resolved and saved![/green]" if success else "[red]❌ Failed to resolve logo[/red]"
        )
        return success

    # --- Storage migration ---

    async def migrate_logos_to_storage(self, force_update: bool = False, delay_ms: int = -1) -> MigrationStats:
        stats = await migrate_all_logos_to_storage(
            self.storage,
            force_update,
            settings.migrate_delay_ms if delay_ms < 0 else delay_ms,
        )
        self._print_counts("Storage Migration", stats)
        return stats

    async def migrate_team_logo_to_storage(self, team_id: str, force_update: bool = False) -> bool:
        success = await migrate_team_logo_to_storage(self.storage, team_id, force_update)
        self.console.print(
            "[green]✅ Logo migrated to Supabase Storage![/green]"
            if success
            else "[red]❌ Failed to migrate logo[/red]"
        )
        return success

    async def get_storage_stats(self) -> StorageStats:
        stats = await self.storage.get_storage_stats()
        table = Table(title="📊 Storage Statistics", show_header=False)
        table.add_row("Total Teams", str(stats.total_teams))
        table.add_row("In Storage", str(stats.teams_in_storage))
        table.add_row("Need Migration", str(stats.teams_needing_migration))
        table.add_row("Without Logos", str(stats.teams_without_logos))
        self.console.print(table)
        return stats

    async def check_storage_migration_status(self) -> Optional[StorageStats]:
        try:
            stats = await self.storage.get_storage_stats()
        except RepositoryError as e:
            logger.error(f"❌ Error checking status: {e}")
            return None

        percent = round(stats.teams_in_storage / stats.total_teams * 100) if stats.total_teams else 0
        self.console.print(
            Panel.fit(
                f"Total Teams:            {stats.total_teams}\n"
                f"✅ In Supabase Storage: {stats.teams_in_storage} ({percent}%)\n"
                f"⏳ Need Migration:      {stats.teams_needing_migration}\n"
                f"❌ Without Logos:       {stats.teams_without_logos}",
                title="📊 STORAGE MIGRATION STATUS",
            )
        )
        if stats.teams_needing_migration > 0:
            self.console.print("💡 Run 'migrateLogosToStorage' to migrate remaining logos.")
        elif stats.teams_without_logos > 0:
            self.console.print(
                f"💡 {stats.teams_without_logos} teams have no logos. Run 'resolveAllLogos' first."
            )
        else:
            self.console.print("🎉 All teams with logos are migrated to Supabase Storage!")
        return stats

    async def list_teams_needing_migration(self) -> List[Dict[str, Any]]:
        try:
            teams = await self.storage.get_teams_needing_migration()
        except RepositoryError as e:
            logger.error(f"❌ Error listing teams: {e}")
            return []

        if not teams:
            self.console.print("✅ No teams need migration!")
            return []

        table = Table(title=f"{len(teams)} teams needing migration")
        table.add_column("#", justify="right")
        table.add_column("Team")
        table.add_column("ID")
        table.add_column("URL", overflow="fold")
        for i, team in enumerate(teams, start=1):
            table.add_row(str(i), escape(team.name), escape(team.id), escape(team.resolved_logo_url or ""))
        self.console.print(table)
        return [{"id": t.id, "name": t.name, "resolvedLogoUrl": t.resolved_logo_url} for t in teams]

    async def test_team_storage_migration(self, team_name: str) -> bool:
        try:
            teams = await self.repository.find_teams_by_name(team_name)
        except RepositoryError as e:
            logger.error(f"❌ Test error: {e}")
            return False
        if not teams:
            logger.error(f"❌ Team not found: {team_name}")
            return False

        team = teams[0]
        self.console.print(f"Found: {escape(team.name)} ({escape(team.id)})")
        self.console.print(f"Current URL: {escape(team.resolved_logo_url or '')}")

        if not team.resolved_logo_url:
            self.console.print("❌ Team has no resolved logo URL. Run resolveAllLogos first.")
            return False
        if self.storage.in_storage(team.resolved_logo_url):
            self.console.print("✅ Logo is already in Supabase Storage!")
            return True

        success = await migrate_team_logo_to_storage(self.storage, team.id, False)
        self.console.print(
            "✅ Test migration successful!" if success else "❌ Test migration failed. Check logs above."
        )
        return success

    async def upload_team_logo(self, team_id: str, file_path: str) -> UploadResult:
        path = Path(file_path)
        if not path.is_file():
            return UploadResult(success=False, error=f"No such file: {file_path}")
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        result = await self.storage.upload_team_logo(team_id, path.read_bytes(), content_type)
        self.console.print(result.model_dump(exclude_none=True))
        return result

    async def delete_team_logo(self, team_id: str) -> List[str]:
        removed = await self.storage.delete_logo_from_storage(team_id)
        self.console.print(f"🗑️  Removed {len(removed)} object(s): {escape(', '.join(removed)) or '-'}")
        return removed

    # --- Diagnostics & maintenance ---

    async def test_team_logo(self, team_name: str) -> Optional[Dict[str, Any]]:
        self.console.print(f"🧪 Testing logo for: {escape(team_name)}")
        report = await diagnose_team_logo(self.repository, self.thesportsdb, team_name)
        if report is not None:
            self.console.print(report)
        return report

    def clear_cache(self) -> int:
        removed = self.cache.clear_all()
        self.console.print(f"✅ Cache cleared! ({removed} entries)")
        return removed

    async def populate_api_names(self) -> Dict[str, int]:
        stats = await populate_api_team_names(self.repository)
        self.console.print(f"✅ Complete! Success: {stats.success}, Errors: {stats.errors}")
        return stats.model_dump()

    async def set_team_api_id(self, team_id: str, api_team_id: str) -> bool:
        return await set_team_api_id(self.repository, team_id, api_team_id)

    async def check_api_quota(self) -> Optional[Dict[str, Optional[int]]]:
        if self.api_sports is None:
            self.console.print("API-Sports is not configured.")
            return None
        quota = await self.api_sports.check_quota()
        if quota is None:
            return None
        self.console.print(f"API-Sports quota: {quota.remaining} / {quota.limit} requests remaining")
        return quota.model_dump()

    def help(self) -> str:
        table = Table(title="🛠️  Development Tools - Available Commands", show_lines=False)
        table.add_column("Command", style="cyan", no_wrap=True)
        table.add_column("Description")
        for name in self.registry.names():
            table.add_row(escape(self.registry.usage(name)), escape(self.registry.get(name).help or ""))
        self.console.print(table)
        self.console.print(__doc__.strip())
        return "\n".join(self.registry.names())

    def _print_counts(self, title: str, stats: MigrationStats) -> None:
        self.console.print(
            Panel.fit(
                f"Total:   {stats.total}\n"
                f"Success: {stats.success}\n"
                f"Failed:  {stats.failed}\n"
                f"Skipped: {stats.skipped}",
                title=f"✅ {title} complete",
            )
        )


def build_registry(devtools: DevTools) -> CommandRegistry:
    """Registers every DevTools command under its console name."""
    registry = devtools.registry
    command = functools.partial(registry.command, options_metavar="")
    force_arg = click.argument("force_update", type=click.BOOL, default=False, required=False, metavar="[force]")
    delay_arg = click.argument("delay_ms", type=click.INT, default=-1, required=False, metavar="[delayMs]")
    team_id_arg = click.argument("team_id", metavar="<teamId>")
    # Team names may contain spaces: take every remaining word
    team_name_arg = click.argument("team_name", nargs=-1, required=True, metavar="<name>")

    @command("resolveAllLogos", help="Resolve all team logos from the APIs")
    @force_arg
    @delay_arg
    def resolve_all_logos(force_update, delay_ms):
        return devtools.resolve_all_logos(force_update, delay_ms)

    @command("resolveTeamLogo", help="Resolve a single team logo")
    @team_id_arg
    def resolve_team_logo(team_id):
        return devtools.resolve_team_logo(team_id)

    @command("migrateLogosToStorage", help="Migrate all logos to Supabase Storage")
    @force_arg
    @delay_arg
    def migrate_logos_to_storage(force_update, delay_ms):
        return devtools.migrate_logos_to_storage(force_update, delay_ms)

    @command("migrateTeamLogoToStorage", help="Migrate a single team logo")
    @team_id_arg
    @force_arg
    def migrate_team_logo_to_storage(team_id, force_update):
        return devtools.migrate_team_logo_to_storage(team_id, force_update)

    @command("checkStorageMigrationStatus", help="Check migration progress")
    def check_storage_migration_status():
        return devtools.check_storage_migration_status()

    @command("getStorageStats", help="Storage statistics")
    def get_storage_stats():
        return devtools.get_storage_stats()

    @command("listTeamsNeedingMigration", help="List teams needing migration")
    def list_teams_needing_migration():
        return devtools.list_teams_needing_migration()

    @command("testTeamStorageMigration", help="Test storage migration for one team")
    @team_name_arg
    def test_team_storage_migration(team_name):
        return devtools.test_team_storage_migration(" ".join(team_name))

    @command("uploadTeamLogo", help="Upload a logo file for a team")
    @team_id_arg
    @click.argument("file_path", type=click.Path(exists=True, dir_okay=False), metavar="<file>")
    def upload_team_logo(team_id, file_path):
        return devtools.upload_team_logo(team_id, file_path)

    @command("deleteTeamLogo", help="Delete a team logo from storage")
    @team_id_arg
    def delete_team_logo(team_id):
        return devtools.delete_team_logo(team_id)

    @command("testTeamLogo", help="Test API logo resolution by name")
    @team_name_arg
    def test_team_logo(team_name):
        return devtools.test_team_logo(" ".join(team_name))

    @command("clearCache", help="Clear the local logo cache")
    def clear_cache():
        return devtools.clear_cache()

    @command("populateApiNames", help="Populate API names for all teams")
    def populate_api_names():
        return devtools.populate_api_names()

    @command("setTeamApiId", help="Pin a team's TheSportsDB id")
    @team_id_arg
    @click.argument("api_team_id", metavar="<apiTeamId>")
    def set_team_api_id(team_id, api_team_id):
        return devtools.set_team_api_id(team_id, api_team_id)

    @command("checkApiQuota", help="Remaining API-Sports requests")
    def check_api_quota():
        return devtools.check_api_quota()

    @command("help", help="Show this help message")
    def show_help():
        return devtools.help()

    return registry
