# teamlogos/storage/logo_storage.py
"""Moves team logos into first-party Supabase Storage.

Downloads the image behind a team's resolvedLogoUrl, validates it, uploads it
to the team-logos bucket under "<team id>.<ext>" (overwriting) and points the
team row at the new public URL.
"""

import inspect
from typing import List, Optional, Tuple

import httpx
from loguru import logger
from supabase import AsyncClient
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from teamlogos.config.settings import settings
from teamlogos.models.logo import UploadResult
from teamlogos.models.migration import StorageStats, TeamMigrationStatus
from teamlogos.models.team import Team
from teamlogos.storage.supabase_client import (
    RepositoryError,
    TeamLogosError,
    TeamRepository,
)

MIME_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/svg+xml": "svg",
    "image/webp": "webp",
    "image/gif": "gif",
}
ALLOWED_TYPES = list(MIME_EXTENSIONS)
# Extensions tried when deleting, since the stored one is not tracked
DELETE_EXTENSIONS = ["png", "jpg", "svg", "webp"]


class LogoStorageError(TeamLogosError):
    """Raised for download, validation or storage API failures."""

    pass


def extension_for(content_type: str) -> str:
    return MIME_EXTENSIONS.get(content_type, "png")


def is_logo_in_storage(
    resolved_logo_url: Optional[str], bucket: Optional[str] = None
) -> bool:
    """True when the URL already points at our Supabase Storage bucket."""
    if not resolved_logo_url:
        return False
    bucket = bucket or settings.storage_bucket
    return (
        "supabase.co/storage" in resolved_logo_url
        or f"/storage/v1/object/public/{bucket}/" in resolved_logo_url
    )


def format_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / 1024 / 1024:.3g}MB"
    return f"{size / 1024:.3g}KB"


def size_limit_error(max_bytes: int, got: str) -> str:
    return f"File size must be less than {format_size(max_bytes)} (got {got})"


def validate_image(content_type: str, size: int, max_bytes: int) -> Optional[str]:
    """Returns an error message when the file may not be uploaded, else None."""
    if size > max_bytes:
        return size_limit_error(max_bytes, format_size(size))
    if content_type not in ALLOWED_TYPES:
        return f"File type must be one of: {', '.join(ALLOWED_TYPES)} (got {content_type or 'unknown'})"
    return None


class LogoBucket:
    """Thin wrapper over one Supabase Storage bucket."""

    def __init__(self, client: AsyncClient, bucket: Optional[str] = None):
        self.client = client
        self.bucket = bucket or settings.storage_bucket

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    async def upload(self, key: str, data: bytes, content_type: str) -> str:
        """Uploads (overwriting) and returns the object's public URL."""
        try:
            await self._bucket().upload(
                path=key,
                file=data,
                file_options={"content-type": content_type, "upsert": "true"},
            )
            public_url = self._bucket().get_public_url(key)
            if inspect.isawaitable(public_url):
                public_url = await public_url
        except Exception as e:
            raise LogoStorageError(f"Failed to upload to storage: {e}") from e
        return public_url

    async def remove(self, key: str) -> bool:
        try:
            await self._bucket().remove([key])
        except Exception as e:
            logger.debug(f"Could not remove {key} from {self.bucket}: {e}")
            return False
        return True


class LogoStorageService:
    def __init__(
        self,
        repository: TeamRepository,
        bucket: LogoBucket,
        http_client: Optional[httpx.AsyncClient] = None,
        max_bytes: Optional[int] = None,
    ):
        self.repository = repository
        self.bucket = bucket
        self.http_client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout_seconds),
            follow_redirects=True,
        )
        self.max_bytes = max_bytes or settings.max_logo_bytes

    def in_storage(self, url: Optional[str]) -> bool:
        return is_logo_in_storage(url, self.bucket.bucket)

    @retry(
        stop=stop_after_attempt(settings.download_attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch_image(self, url: str) -> Tuple[bytes, str]:
        # Reading stops as soon as the body grows past max_bytes
        async with self.http_client.stream("GET", url) as response:
            if not response.is_success:
                raise LogoStorageError(
                    f"Failed to download image: {response.status_code} {response.reason_phrase}"
                )

            content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
            if not content_type.startswith("image/"):
                raise LogoStorageError(f"Downloaded content is not an image: {content_type or 'unknown'}")

            declared = response.headers.get("content-length", "")
            if declared.isdigit() and int(declared) > self.max_bytes:
                raise LogoStorageError(size_limit_error(self.max_bytes, format_size(int(declared))))

            chunks = []
            received = 0
            async for chunk in response.aiter_bytes():
                received += len(chunk)
                if received > self.max_bytes:
                    raise LogoStorageError(
                        size_limit_error(self.max_bytes, f"more than {format_size(self.max_bytes)}")
                    )
                chunks.append(chunk)

        return b"".join(chunks), content_type

    async def download_image(self, url: str) -> Tuple[bytes, str]:
        """Downloads an image; returns (content, bare content type)."""
        logger.debug(f"Downloading image from: {url[:60]}...")
        try:
            content, content_type = await self._fetch_image(url)
        except httpx.RequestError as e:
            raise LogoStorageError(f"Failed to download image: {e!r}") from e
        logger.debug(f"Downloaded successfully: {content_type}, {round(len(content) / 1024)}KB")
        return content, content_type

    async def _store(self, team_id: str, content: bytes, content_type: str) -> str:
        error = validate_image(content_type, len(content), self.max_bytes)
        if error:
            raise LogoStorageError(error)
        key = f"{team_id}.{extension_for(content_type)}"
        logger.debug(f"Uploading {key} ({round(len(content) / 1024)}KB)")
        return await self.bucket.upload(key, content, content_type)

    async def migrate_logo_to_storage(
        self,
        team_id: str,
        team_name: str,
        source_url: str,
        force_update: bool = False,
    ) -> UploadResult:
        """Copies one team's external logo into storage and repoints the team row."""
        if not force_update and self.in_storage(source_url):
            logger.info(f"Already in Supabase Storage, skipping: {team_name}")
            return UploadResult(success=True, url=source_url)

        logger.info(f"Migrating logo for {team_name}...")
        try:
            content, content_type = await self.download_image(source_url)
            public_url = await self._store(team_id, content, content_type)
            logger.debug(f"Uploaded to storage: {public_url}")
            if not await self.repository.save_resolved_logo_url(team_id, public_url):
                raise LogoStorageError("Failed to update team logo URL")
        except LogoStorageError as e:
            logger.error(f"❌ Failed to migrate {team_name}: {e}")
            return UploadResult(success=False, error=str(e))

        logger.success(f"✅ Successfully migrated {team_name}")
        return UploadResult(success=True, url=public_url)

    async def upload_team_logo(
        self, team_id: str, content: bytes, content_type: str
    ) -> UploadResult:
        """Admin upload of a logo file; stores it and points the team at it."""
        try:
            public_url = await self._store(team_id, content, content_type)
        except LogoStorageError as e:
            logger.error(f"Upload for team {team_id} rejected: {e}")
            return UploadResult(success=False, error=str(e))
        if not await self.repository.update_team(team_id, {"resolvedLogoUrl": public_url}):
            return UploadResult(success=False, error="Failed to update team logo URL")
        logger.success(f"Uploaded logo for team {team_id}: {public_url}")
        return UploadResult(success=True, url=public_url)

    async def delete_logo_from_storage(self, team_id: str) -> List[str]:
        """Removes every known-extension object for the team; returns the keys removed."""
        removed = []
        for ext in DELETE_EXTENSIONS:
            key = f"{team_id}.{ext}"
            if await self.bucket.remove(key):
                logger.info(f"Deleted {key} from storage")
                removed.append(key)
        return removed

    async def get_team_migration_status(self, team_id: str) -> TeamMigrationStatus:
        team = await self.repository.fetch_team(team_id)
        if team is None:
            raise RepositoryError(f"Failed to fetch team: {team_id} not found")
        return TeamMigrationStatus(
            team_id=team.id,
            team_name=team.name,
            resolved_logo_url=team.resolved_logo_url,
            is_in_storage=self.in_storage(team.resolved_logo_url),
        )

    async def get_teams_needing_migration(self) -> List[Team]:
        teams = await self.repository.fetch_teams_with_resolved_logo()
        return [t for t in teams if not self.in_storage(t.resolved_logo_url)]

    async def get_storage_stats(self) -> StorageStats:
        teams = await self.repository.fetch_teams()
        total = len(teams)
        in_storage = sum(1 for t in teams if self.in_storage(t.resolved_logo_url))
        without_logos = sum(1 for t in teams if not t.resolved_logo_url)
        return StorageStats(
            total_teams=total,
            teams_in_storage=in_storage,
            teams_needing_migration=total - in_storage - without_logos,
            teams_without_logos=without_logos,
        )

    async def close(self):
        await self.http_client.aclose()
