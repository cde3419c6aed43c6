# teamlogos/utils/misc_utils.py
import asyncio

from teamlogos.models.enums import LogoSource


def local_logo_path(logo_url: str, base: str) -> str:
    """Maps a team's legacy logoUrl (filename or URL) to its bundled asset path.

    Only the last path segment is kept and ".png" is assumed when it has no
    extension.
    """
    filename = logo_url.rstrip("/").rsplit("/", 1)[-1]
    if "." not in filename:
        filename = f"{filename}.png"
    return f"{base.rstrip('/')}/{filename}"


def describe_logo_source(url: str) -> LogoSource:
    """Best guess at where a resolved URL came from, for log output."""
    if "thesportsdb" in url:
        return LogoSource.THESPORTSDB
    if "api-sports" in url or "api-football" in url:
        return LogoSource.API_SPORTS
    if "supabase" in url:
        return LogoSource.SUPABASE_STORAGE
    return LogoSource.UNKNOWN


async def sleep_ms(delay_ms: int) -> None:
    if delay_ms > 0:
        await asyncio.sleep(delay_ms / 1000)
