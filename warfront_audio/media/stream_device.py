"""
A simulated device that verifies every source before "playing" it: remote
sources must answer over HTTP, local files must exist and are timed with mutagen.
"""

import asyncio
import logging

import aiohttp

from warfront_audio.exceptions import DeviceError

from .device import SimulatedDevice
from .probe import probe_duration, source_to_path

log = logging.getLogger(__name__)

_connection_pool: aiohttp.ClientSession | None = None
_pool_lock = asyncio.Lock()


async def get_connection_pool(timeout: float = 15.0) -> aiohttp.ClientSession:
    """
    Gets or creates a shared aiohttp ClientSession for source checks.

    Only one connection pool is created for the lifetime of the application run.
    """
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            return _connection_pool

        connector = aiohttp.TCPConnector(
            limit=8,
            ttl_dns_cache=600,  # 10 minutes
            enable_cleanup_closed=True,
        )
        _connection_pool = aiohttp.ClientSession(
            connector=connector,
            timeout=aiohttp.ClientTimeout(total=timeout, sock_connect=timeout),
        )
        log.debug(f"Created source check pool with timeout={timeout}s")

    return _connection_pool


async def close_connection_pool() -> None:
    """Closes the shared global connection pool."""
    global _connection_pool
    async with _pool_lock:
        if _connection_pool and not _connection_pool.closed:
            await _connection_pool.close()
            _connection_pool = None
            log.debug("Shared source check pool closed.")


class HttpStreamDevice(SimulatedDevice):
    """A `SimulatedDevice` whose `load` fails the way a real player would."""

    def __init__(
        self,
        name: str = "music",
        load_latency: float = 0.0,
        track_length: float = 180.0,
        request_timeout: float = 15.0,
    ):
        super().__init__(name, load_latency=load_latency, track_length=track_length)
        self.request_timeout = request_timeout

    async def _resolve_length(self, source: str) -> float:
        path = source_to_path(source)
        if path is not None:
            if not await asyncio.to_thread(path.is_file):
                raise DeviceError(f"[{self.name}] File not found: {path}")
            length = await asyncio.to_thread(probe_duration, path)
            return length or self.track_length

        session = await get_connection_pool(self.request_timeout)
        try:
            async with session.get(source, allow_redirects=True) as response:
                response.raise_for_status()
                content_type = response.headers.get("Content-Type", "")
                log.debug(f"[{self.name}] '{source}' answered with {content_type!r}.")
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DeviceError(f"[{self.name}] Could not open '{source}': {e}") from e
        return self.track_length
