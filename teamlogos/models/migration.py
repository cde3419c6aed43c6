from typing import Optional

from pydantic import BaseModel

from .enums import MigrationStatus


class MigrationResult(BaseModel):
    """Per-team outcome of one batch run; summarized in logs, never persisted."""

    team_id: str
    team_name: str
    status: MigrationStatus
    error: Optional[str] = None
    url: Optional[str] = None


class MigrationStats(BaseModel):
    """Aggregate counters for one batch run (migration or resolution)."""

    success: int = 0
    failed: int = 0
    skipped: int = 0
    total: int = 0

    def record(self, status: MigrationStatus) -> None:
        if status == MigrationStatus.SUCCESS:
            self.success += 1
        elif status == MigrationStatus.FAILED:
            self.failed += 1
        else:
            self.skipped += 1


class StorageStats(BaseModel):
    total_teams: int
    teams_in_storage: int
    teams_needing_migration: int
    teams_without_logos: int


class TeamMigrationStatus(BaseModel):
    team_id: str
    team_name: str
    resolved_logo_url: Optional[str] = None
    is_in_storage: bool
