"""Response caches keyed by request URI.

A cache stores the body, ETag and next-page link of successful GET
responses so a later 304 Not Modified can be answered locally.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from datetime import timedelta
from pathlib import Path

from cachetta import Cachetta, async_read_cache, async_write_cache

from .errors import CacheError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = Path.home() / ".cache/azure-devops-client"
DEFAULT_DURATION = timedelta(days=30)


class HttpCache(ABC):
    """Where the request executor keeps validated response bodies."""

    enabled = True

    @abstractmethod
    async def cache_response(self, uri: str, body: bytes, etag: str, next_link: str | None) -> None:
        """Store a response. Raises CacheError if it cannot be written."""

    @abstractmethod
    async def lookup_etag(self, uri: str) -> str | None:
        """Validator of the stored response, or None when nothing is stored."""

    @abstractmethod
    async def lookup_body(self, uri: str) -> bytes:
        """Body of the stored response. Raises CacheError when nothing is stored."""

    @abstractmethod
    async def lookup_next_link(self, uri: str) -> str | None:
        """Next-page link of the stored response, if it had one."""


class NoopHttpCache(HttpCache):
    """Cache that never stores anything. The default."""

    enabled = False

    async def cache_response(self, uri, body, etag, next_link):
        return None

    async def lookup_etag(self, uri):
        return None

    async def lookup_body(self, uri):
        raise CacheError(f"No cached body for {uri} (caching disabled)")

    async def lookup_next_link(self, uri):
        return None


class MemoryHttpCache(HttpCache):
    """In-process cache; entries live as long as the instance."""

    def __init__(self):
        self._entries: dict[str, dict] = {}

    async def cache_response(self, uri, body, etag, next_link):
        self._entries[uri] = {"body": bytes(body), "etag": etag, "next_link": next_link}

    async def lookup_etag(self, uri):
        entry = self._entries.get(uri)
        return entry["etag"] if entry else None

    async def lookup_body(self, uri):
        entry = self._entries.get(uri)
        if entry is None:
            raise CacheError(f"No cached body for {uri}")
        return entry["body"]

    async def lookup_next_link(self, uri):
        entry = self._entries.get(uri)
        return entry["next_link"] if entry else None


def _cache_key(uri: str) -> str:
    return hashlib.sha256(uri.encode()).hexdigest()[:16]


class FileHttpCache(HttpCache):
    """File-based cache, one Cachetta file per URI under ``cache_dir``.

    Entries older than ``duration`` are ignored on read, which drops the
    conditional header and lets the next 200 overwrite them.
    """

    def __init__(self, cache_dir: Path | None = None, duration: timedelta = DEFAULT_DURATION):
        self.cache_dir = Path(cache_dir or DEFAULT_CACHE_DIR)

        def _path(uri):
            return self.cache_dir / f"{_cache_key(uri)}.pkl"

        self._cache = Cachetta(path=_path, duration=duration)

    async def _read(self, uri: str) -> dict | None:
        async with async_read_cache(self._cache, uri) as entry:
            return entry

    async def cache_response(self, uri, body, etag, next_link):
        entry = {"uri": uri, "body": bytes(body), "etag": etag, "next_link": next_link}
        try:
            await async_write_cache(self._cache, entry, uri)
        except OSError as e:
            raise CacheError(f"Failed to write cache entry for {uri}: {e}") from e
        logger.debug("cached %s (etag %s)", uri, etag)

    async def lookup_etag(self, uri):
        entry = await self._read(uri)
        return entry["etag"] if entry else None

    async def lookup_body(self, uri):
        entry = await self._read(uri)
        if entry is None:
            raise CacheError(f"No cached body for {uri}")
        return entry["body"]

    async def lookup_next_link(self, uri):
        entry = await self._read(uri)
        return entry["next_link"] if entry else None
