"""Single-team storage migration, upload validation and storage queries."""

import httpx
import pytest

from conftest import STORAGE_PUBLIC_BASE, FakeBucket, FakeTeamRepository, image_transport
from teamlogos.models.team import Team
from teamlogos.storage.logo_storage import (
    LogoStorageService,
    extension_for,
    is_logo_in_storage,
    validate_image,
)
from teamlogos.storage.supabase_client import RepositoryError

EXTERNAL_URL = "https://r2.thesportsdb.com/images/media/team/badge/arsenal.png"


def make_service(repository, bucket=None, transport=None, max_bytes=None) -> LogoStorageService:
    return LogoStorageService(
        repository,
        bucket or FakeBucket(),
        http_client=httpx.AsyncClient(transport=transport or image_transport()),
        max_bytes=max_bytes,
    )


@pytest.fixture
def repository():
    return FakeTeamRepository(
        [
            Team(id="t1", name="Arsenal", resolvedLogoUrl=EXTERNAL_URL),
            Team(id="t2", name="Chelsea", resolvedLogoUrl=f"{STORAGE_PUBLIC_BASE}/t2.png"),
            Team(id="t3", name="Everton"),
        ]
    )


class TestIsLogoInStorage:
    def test_supabase_host(self):
        assert is_logo_in_storage(f"{STORAGE_PUBLIC_BASE}/t1.png")

    def test_custom_domain_public_bucket_path(self):
        assert is_logo_in_storage("https://img.example.com/storage/v1/object/public/team-logos/t1.png")

    def test_external_and_empty(self):
        assert not is_logo_in_storage(EXTERNAL_URL)
        assert not is_logo_in_storage(None)
        assert not is_logo_in_storage("")

    def test_other_bucket_on_custom_domain(self):
        assert not is_logo_in_storage("https://img.example.com/storage/v1/object/public/avatars/t1.png")


class TestValidation:
    def test_accepts_small_png(self):
        assert validate_image("image/png", 1024, 5 * 1024 * 1024) is None

    def test_rejects_large_file(self):
        assert "File size" in validate_image("image/png", 6 * 1024 * 1024, 5 * 1024 * 1024)

    def test_rejects_unknown_type(self):
        assert "File type" in validate_image("image/tiff", 10, 5 * 1024 * 1024)

    def test_extension_mapping(self):
        assert extension_for("image/jpeg") == "jpg"
        assert extension_for("image/svg+xml") == "svg"
        assert extension_for("image/x-unknown") == "png"


class TestMigrateLogoToStorage:
    @pytest.mark.asyncio
    async def test_downloads_uploads_and_repoints_team(self, repository):
        bucket = FakeBucket()
        service = make_service(repository, bucket)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert result.success
        assert result.url == f"{STORAGE_PUBLIC_BASE}/t1.png"
        assert bucket.objects["t1.png"] == b"\x89PNG fake"
        assert bucket.content_types["t1.png"] == "image/png"
        assert repository.rows["t1"].resolved_logo_url == result.url

    @pytest.mark.asyncio
    async def test_key_uses_content_type_extension(self, repository):
        bucket = FakeBucket()
        service = make_service(repository, bucket, transport=image_transport("image/svg+xml; charset=utf-8", b"<svg/>"))

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert result.url.endswith("/t1.svg")
        assert bucket.content_types["t1.svg"] == "image/svg+xml"

    @pytest.mark.asyncio
    async def test_already_in_storage_is_not_downloaded(self, repository):
        def refuse(request):
            raise AssertionError("no download expected")

        service = make_service(repository, transport=httpx.MockTransport(refuse))
        url = f"{STORAGE_PUBLIC_BASE}/t2.png"

        result = await service.migrate_logo_to_storage("t2", "Chelsea", url)

        assert result.success and result.url == url
        assert repository.updates == []

    @pytest.mark.asyncio
    async def test_force_reuploads_stored_logo(self, repository):
        bucket = FakeBucket()
        service = make_service(repository, bucket)

        result = await service.migrate_logo_to_storage("t2", "Chelsea", f"{STORAGE_PUBLIC_BASE}/t2.png", force_update=True)

        assert result.success
        assert "t2.png" in bucket.objects

    @pytest.mark.asyncio
    async def test_download_404_is_a_failed_result(self, repository):
        service = make_service(repository)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", "https://cdn.example/missing.png")

        assert not result.success
        assert "404" in result.error
        assert repository.updates == []

    @pytest.mark.asyncio
    async def test_non_image_is_rejected(self, repository):
        service = make_service(repository, transport=image_transport("text/html", b"<html/>"))

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "not an image" in result.error

    @pytest.mark.asyncio
    async def test_oversized_image_is_rejected(self, repository):
        bucket = FakeBucket()
        service = make_service(repository, bucket, transport=image_transport(body=b"x" * 2048), max_bytes=1024)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "File size" in result.error
        assert bucket.objects == {}

    @pytest.mark.asyncio
    async def test_upload_failure_is_a_failed_result(self, repository):
        bucket = FakeBucket()
        bucket.failing_keys.add("t1.png")
        service = make_service(repository, bucket)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "simulated outage" in result.error
        assert repository.rows["t1"].resolved_logo_url == EXTERNAL_URL

    @pytest.mark.asyncio
    async def test_database_write_failure_is_a_failed_result(self, repository):
        repository.failing_updates.add("t1")
        service = make_service(repository)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "update team logo URL" in result.error


class TestUploadTeamLogo:
    @pytest.mark.asyncio
    async def test_upload_sets_resolved_url(self, repository):
        bucket = FakeBucket()
        service = make_service(repository, bucket)

        result = await service.upload_team_logo("t3", b"webp-bytes", "image/webp")

        assert result.success
        assert result.url == f"{STORAGE_PUBLIC_BASE}/t3.webp"
        assert repository.rows["t3"].resolved_logo_url == result.url

    @pytest.mark.asyncio
    async def test_wrong_type_is_reported_not_raised(self, repository):
        service = make_service(repository)

        result = await service.upload_team_logo("t3", b"%PDF", "application/pdf")

        assert not result.success
        assert "File type" in result.error
        assert repository.updates == []


class TestStorageQueries:
    @pytest.mark.asyncio
    async def test_stats(self, repository):
        stats = await make_service(repository).get_storage_stats()

        assert stats.total_teams == 3
        assert stats.teams_in_storage == 1
        assert stats.teams_needing_migration == 1
        assert stats.teams_without_logos == 1

    @pytest.mark.asyncio
    async def test_teams_needing_migration(self, repository):
        teams = await make_service(repository).get_teams_needing_migration()
        assert [t.id for t in teams] == ["t1"]

    @pytest.mark.asyncio
    async def test_team_migration_status(self, repository):
        status = await make_service(repository).get_team_migration_status("t2")
        assert status.team_name == "Chelsea"
        assert status.is_in_storage

    @pytest.mark.asyncio
    async def test_team_migration_status_unknown_team(self, repository):
        with pytest.raises(RepositoryError):
            await make_service(repository).get_team_migration_status("nope")

    @pytest.mark.asyncio
    async def test_delete_removes_every_known_extension(self, repository):
        bucket = FakeBucket()
        bucket.objects.update({"t1.png": b"a", "t1.svg": b"b", "t2.png": b"c"})
        service = make_service(repository, bucket)

        removed = await service.delete_logo_from_storage("t1")

        assert removed == ["t1.png", "t1.svg"]
        assert list(bucket.objects) == ["t2.png"]


class TestDownloadLimits:
    @staticmethod
    def chunked(pulled, chunk_size=512, chunks=10, headers=None):
        async def body():
            for _ in range(chunks):
                pulled.append(chunk_size)
                yield b"x" * chunk_size

        def handler(request):
            return httpx.Response(200, content=body(), headers={"content-type": "image/png", **(headers or {})})

        return httpx.MockTransport(handler)

    @pytest.mark.asyncio
    async def test_declared_length_over_limit_is_rejected_unread(self, repository):
        pulled = []
        transport = self.chunked(pulled, headers={"content-length": str(10 * 1024 * 1024)})
        service = make_service(repository, transport=transport, max_bytes=1024)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "File size" in result.error
        assert pulled == []

    @pytest.mark.asyncio
    async def test_reading_stops_past_the_limit(self, repository):
        pulled = []
        bucket = FakeBucket()
        service = make_service(repository, bucket, transport=self.chunked(pulled), max_bytes=1024)

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "File size" in result.error
        assert len(pulled) == 3
        assert bucket.objects == {}

    @pytest.mark.asyncio
    async def test_chunked_body_within_limit(self, repository):
        pulled = []
        service = make_service(repository, transport=self.chunked(pulled, chunks=2), max_bytes=1024)

        content, content_type = await service.download_image(EXTERNAL_URL)

        assert len(content) == 1024
        assert content_type == "image/png"

    @pytest.mark.asyncio
    async def test_transient_network_error_is_retried(self, repository):
        attempts = []

        def handler(request):
            attempts.append(request.url)
            if len(attempts) == 1:
                raise httpx.ConnectError("connection reset", request=request)
            return httpx.Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})

        service = make_service(repository, transport=httpx.MockTransport(handler))

        content, _ = await service.download_image(EXTERNAL_URL)

        assert content == b"\x89PNG"
        assert len(attempts) == 2

    @pytest.mark.asyncio
    async def test_persistent_network_error_is_a_failed_result(self, repository):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(repository, transport=httpx.MockTransport(handler))

        result = await service.migrate_logo_to_storage("t1", "Arsenal", EXTERNAL_URL)

        assert not result.success
        assert "Failed to download image" in result.error
