"""Shared fakes for the Supabase adapters and the logo cache."""

from typing import Any, Dict, List, Optional, Set

import httpx
import pytest

from teamlogos.cache.local_store import LocalStore
from teamlogos.cache.logo_cache import LogoCache
from teamlogos.models.team import Team
from teamlogos.storage.logo_storage import LogoBucket, LogoStorageError
from teamlogos.storage.supabase_client import RepositoryError, TeamRepository

STORAGE_PUBLIC_BASE = "https://proj.supabase.co/storage/v1/object/public/team-logos"

# "resolvedLogoUrl" -> "resolved_logo_url", etc.
_FIELD_BY_ALIAS = {
    (field.alias or name): name for name, field in Team.model_fields.items()
}


class FakeTeamRepository(TeamRepository):
    """In-memory teams table."""

    def __init__(self, teams: Optional[List[Team]] = None):
        super().__init__(client=None)
        self.rows: Dict[str, Team] = {t.id: t for t in teams or []}
        self.updates: List[tuple] = []
        self.failing_updates: Set[str] = set()
        self.fail_reads = False

    def _check_reads(self):
        if self.fail_reads:
            raise RepositoryError("Failed to fetch teams: boom")

    async def fetch_teams(self) -> List[Team]:
        self._check_reads()
        return list(self.rows.values())

    async def fetch_team(self, team_id: str) -> Optional[Team]:
        self._check_reads()
        return self.rows.get(team_id)

    async def find_teams_by_name(self, fragment: str) -> List[Team]:
        self._check_reads()
        return [t for t in self.rows.values() if fragment.lower() in t.name.lower()]

    async def fetch_teams_with_resolved_logo(self) -> List[Team]:
        self._check_reads()
        return [t for t in self.rows.values() if t.resolved_logo_url]

    async def fetch_teams_without_api_name(self) -> List[Team]:
        self._check_reads()
        return [t for t in self.rows.values() if t.api_team_name is None]

    async def update_team(self, team_id: str, fields: Dict[str, Any]) -> bool:
        self.updates.append((team_id, fields))
        if team_id in self.failing_updates or team_id not in self.rows:
            return False
        self.rows[team_id] = self.rows[team_id].model_copy(
            update={_FIELD_BY_ALIAS.get(k, k): v for k, v in fields.items()}
        )
        return True


class FakeBucket(LogoBucket):
    def __init__(self):
        super().__init__(client=None, bucket="team-logos")
        self.objects: Dict[str, bytes] = {}
        self.content_types: Dict[str, str] = {}
        self.failing_keys: Set[str] = set()

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        if key in self.failing_keys:
            raise LogoStorageError("Failed to upload to storage: simulated outage")
        self.objects[key] = data
        self.content_types[key] = content_type
        return f"{STORAGE_PUBLIC_BASE}/{key}"

    async def remove(self, key: str) -> bool:
        return self.objects.pop(key, None) is not None


def image_transport(content_type: str = "image/png", body: bytes = b"\x89PNG fake") -> httpx.MockTransport:
    """Serves the same image for every URL; '/missing' paths answer 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        if "missing" in request.url.path:
            return httpx.Response(404)
        return httpx.Response(200, content=body, headers={"content-type": content_type})

    return httpx.MockTransport(handler)


@pytest.fixture
def clock():
    class Clock:
        now = 1_700_000_000_000

        def __call__(self) -> int:
            return self.now

    return Clock()


@pytest.fixture
def store(tmp_path) -> LocalStore:
    return LocalStore(tmp_path / "logo_cache.json")


@pytest.fixture
def cache(store, clock) -> LogoCache:
    return LogoCache(store, clock=clock)
