import re
import time
from typing import Callable, Optional

from loguru import logger
from pydantic import ValidationError

from teamlogos.cache.local_store import LocalStore
from teamlogos.models.logo import CachedLogo

CACHE_KEY_PREFIX = "team_logo_"
DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60


def _now_ms() -> int:
    return int(time.time() * 1000)


def cache_key_for(
    api_team_id: Optional[str] = None,
    api_team_name: Optional[str] = None,
    fallback_logo_url: Optional[str] = None,
) -> Optional[str]:
    """Derives the cache key from the most specific identifier available."""
    if api_team_id:
        return f"{CACHE_KEY_PREFIX}id_{api_team_id}"
    if api_team_name:
        slug = re.sub(r"\s+", "_", api_team_name.lower())
        return f"{CACHE_KEY_PREFIX}name_{slug}"
    if fallback_logo_url:
        return f"{CACHE_KEY_PREFIX}local_{fallback_logo_url}"
    return None


class LogoCache:
    """TTL cache of logo URLs on top of a LocalStore.

    The cache is an accelerator only: any storage problem is logged and
    reported as a miss, never raised.
    """

    def __init__(
        self,
        store: LocalStore,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.ttl_ms = ttl_seconds * 1000
        self.clock = clock

    def get(self, key: str) -> Optional[str]:
        try:
            raw = self.store.get_item(key)
            if raw is None:
                return None
            entry = CachedLogo.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Dropping malformed cache entry {key}: {e.error_count()} error(s)")
            self._evict(key)
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Error reading logo cache for {key}: {e}")
            return None

        if self.clock() - entry.timestamp < self.ttl_ms:
            return entry.url

        logger.debug(f"Cache entry {key} expired, removing it.")
        self._evict(key)
        return None

    def set(self, key: str, url: str) -> None:
        entry = CachedLogo(url=url, timestamp=self.clock())
        try:
            self.store.set_item(key, entry.model_dump_json())
        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Error writing logo cache for {key}: {e}")

    def clear_all(self) -> int:
        """Removes every logo entry, leaving unrelated keys untouched."""
        try:
            keys = [k for k in self.store.keys() if k.startswith(CACHE_KEY_PREFIX)]
            self.store.remove_items(keys)
        except (OSError, ValueError) as e:
            logger.error(f"Error clearing logo cache: {e}")
            return 0
        logger.info(f"Logo cache cleared ({len(keys)} entries).")
        return len(keys)

    def _evict(self, key: str) -> None:
        try:
            self.store.remove_item(key)
        except (OSError, ValueError) as e:
            logger.error(f"Error evicting cache entry {key}: {e}")
