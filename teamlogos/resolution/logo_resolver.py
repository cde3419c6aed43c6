"""Team logo resolution with caching and fallback.

Resolution order for one team:

1. a resolvedLogoUrl already stored on the team (no I/O at all)
2. the local logo cache
3. each configured provider in order, by stored id when the provider shares
   that id space, then by name
4. the locally bundled asset named by the team's logoUrl
5. "" (nothing available)

A provider hit is cached and, when the database team id is known, written back
to the team row by a detached task. That write is best effort: its failure is
logged, never awaited by the caller and never retried, and a concurrent writer
simply wins. The database stays the source of truth; the cache can be dropped
at any time.
"""

import asyncio
from typing import Iterable, List, Optional, Sequence, Set

from loguru import logger

from teamlogos.cache.logo_cache import LogoCache, cache_key_for
from teamlogos.config.settings import settings
from teamlogos.models.team import Team
from teamlogos.providers.base_provider import LogoProvider
from teamlogos.storage.supabase_client import TeamRepository
from teamlogos.utils.misc_utils import local_logo_path


class LogoResolver:
    def __init__(
        self,
        providers: Sequence[LogoProvider],
        cache: LogoCache,
        repository: Optional[TeamRepository] = None,
        local_logo_base: Optional[str] = None,
    ):
        self.providers = list(providers)
        self.cache = cache
        self.repository = repository
        self.local_logo_base = local_logo_base or settings.local_logo_base
        self._pending_writes: Set[asyncio.Task] = set()

    def is_local_asset(self, url: Optional[str]) -> bool:
        return bool(url) and url.startswith(f"{self.local_logo_base.rstrip('/')}/")

    async def get_team_logo_url(
        self,
        team_id: Optional[str] = None,
        api_team_id: Optional[str] = None,
        api_team_name: Optional[str] = None,
        fallback_logo_url: Optional[str] = None,
        resolved_logo_url: Optional[str] = None,
    ) -> str:
        """Returns the best available logo URL for a team, or "" if none.

        Args:
            team_id: Database id of the team. When given, a provider hit is
                persisted to the team row in the background.
            api_team_id: Provider team id (TheSportsDB id space).
            api_team_name: Name used for provider keyword search.
            fallback_logo_url: Locally bundled logo filename.
            resolved_logo_url: URL already stored on the team, if any.
        """
        if resolved_logo_url:
            return resolved_logo_url

        cache_key = cache_key_for(api_team_id, api_team_name, fallback_logo_url)
        if cache_key:
            cached = self.cache.get(cache_key)
            if cached:
                return cached

        logo_url = await self._lookup_providers(api_team_id, api_team_name)
        if logo_url:
            if cache_key:
                self.cache.set(cache_key, logo_url)
            if team_id:
                self._persist_in_background(team_id, logo_url)
            return logo_url

        if fallback_logo_url:
            local_path = local_logo_path(fallback_logo_url, self.local_logo_base)
            if cache_key:
                self.cache.set(cache_key, local_path)
            return local_path

        return ""

    async def resolve_team(self, team: Team, persist: bool = True) -> str:
        """Resolves a Team row, ignoring any URL it already carries."""
        return await self.get_team_logo_url(
            team.id if persist else None,
            team.api_team_id,
            team.api_team_name,
            team.logo_url,
            None,
        )

    async def _lookup_providers(
        self, api_team_id: Optional[str], api_team_name: Optional[str]
    ) -> Optional[str]:
        for provider in self.providers:
            if not provider.is_configured():
                continue
            if api_team_id and provider.accepts_stored_team_ids:
                logo_url = await provider.lookup_by_id(api_team_id)
                if logo_url:
                    logger.debug(f"Logo for id {api_team_id} found via {provider.source.value}")
                    return logo_url
            if api_team_name:
                logo_url = await provider.lookup_by_name(api_team_name)
                if logo_url:
                    logger.debug(f"Logo for '{api_team_name}' found via {provider.source.value}")
                    return logo_url
        return None

    def _persist_in_background(self, team_id: str, logo_url: str) -> None:
        if self.repository is None:
            return
        task = asyncio.create_task(self._persist(team_id, logo_url))
        # Keep a reference so the task is not garbage collected mid-flight
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _persist(self, team_id: str, logo_url: str) -> None:
        try:
            saved = await self.repository.save_resolved_logo_url(team_id, logo_url)
        except Exception as e:
            logger.error(f"Background save of resolvedLogoUrl for {team_id} failed: {e}")
            return
        if saved:
            logger.debug(f"Saved resolvedLogoUrl for team {team_id}")
        else:
            logger.warning(f"Could not save resolvedLogoUrl for team {team_id}")

    async def drain(self) -> None:
        """Waits for outstanding background writes (shutdown, tests)."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def preload(self, teams: Iterable[Team]) -> List[str]:
        """Resolves a batch of teams one after another; errors are logged and skipped."""
        urls = []
        for team in teams:
            try:
                urls.append(
                    await self.get_team_logo_url(
                        team.id,
                        team.api_team_id,
                        team.api_team_name,
                        team.logo_url,
                        team.resolved_logo_url,
                    )
                )
            except Exception:
                logger.exception(f"Error preloading logo for {team.name}")
                urls.append("")
        return urls
