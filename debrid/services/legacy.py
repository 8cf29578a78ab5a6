from datetime import datetime, timedelta
from typing import Callable, List, Optional

import httpx
from loguru import logger

from debrid.core.cache import Cache, is_fresh, utcnow
from debrid.core.config import REALDEBRID_BASE_URL, ClientOptions
from debrid.core.errors import ConfigurationError, DebridError
from debrid.models import common
from debrid.models.realdebrid import FAILED_STATUSES, READY_STATUS, Auth
from debrid.services.realdebrid import RealDebridService
from debrid.utils.polling import poll_until_ready
from debrid.utils.selection import select_largest


class RealDebridResolver:
    """
    Turns a magnet into a streamable Real-Debrid URL for many users.
    Remembers valid API tokens and instantly available info hashes for cache_age,
    so repeated calls don't hit the API. Only successes are remembered: an
    invalid token may become valid after a payment and availability changes often.

    Both caches are owned by the caller and can be shared between resolvers.
    """

    def __init__(
        self,
        token_cache: Cache,
        availability_cache: Cache,
        opts: Optional[ClientOptions] = None,
        cache_age: timedelta = timedelta(hours=24),
        wait_budget: float = 5.0,
        poll_interval: float = 1.0,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.opts = opts or ClientOptions(base_url=REALDEBRID_BASE_URL)
        if not self.opts.base_url:
            raise ConfigurationError("base_url must not be empty")
        self.token_cache = token_cache
        self.availability_cache = availability_cache
        self.cache_age = cache_age
        self.wait_budget = wait_budget
        self.poll_interval = poll_interval
        self._clock = clock
        # One connection pool for all users
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=self.opts.timeout)
        self.log = logger.bind(service=RealDebridService.NAME)

    def _service(self, auth: Auth) -> RealDebridService:
        return RealDebridService(auth, self.opts, http_client=self.client)

    async def test_token(self, auth: Auth):
        """Raises if the token isn't valid"""
        if is_fresh(self.token_cache, auth.key_or_token, self.cache_age, now=self._clock()):
            self.log.debug("Token cached as valid")
            return

        self.log.debug("Token not cached or expired, testing token...")
        await self._service(auth).get_user()

        self.log.debug("Token OK")
        self.token_cache.set(auth.key_or_token)

    async def check_instant_availability(self, auth: Auth, *info_hashes: str) -> List[str]:
        """
        Returns the (upper case) info hashes that are instantly available.
        Hashes that were recently seen as available are answered from the cache,
        the rest is checked with a single request.
        """
        if not info_hashes:
            return []

        result = []
        unknown = []
        # Upper-cased, without duplicates, in the given order
        for info_hash in dict.fromkeys(h.upper() for h in info_hashes):
            if is_fresh(self.availability_cache, info_hash, self.cache_age, now=self._clock()):
                result.append(info_hash)
            else:
                unknown.append(info_hash)
        self.log.debug(f"Availability cached as valid for {len(result)}/{len(info_hashes)} info hashes")

        if not unknown:
            return result

        availabilities = await self._service(auth).get_instant_availability(*unknown)
        for info_hash in unknown:
            if info_hash not in availabilities:
                continue
            result.append(info_hash)
            self.availability_cache.set(info_hash)
        return result

    async def resolve(self, magnet: str, auth: Auth, remote: bool = False) -> common.Download:
        """
        1. Add magnet -> torrent ID
        2. Get torrent info -> file list
        3. Select the largest file for download
        4. Poll until the torrent is downloaded (bounded by wait_budget)
        5. Unrestrict the link
        """
        service = self._service(auth)

        self.log.debug("Adding torrent to Real-Debrid...")
        torrent_id = await service.add_magnet(magnet)

        info = await service.get_torrent_info(torrent_id)
        if not info.files:
            raise DebridError(f"torrent {torrent_id} has no files")
        largest = select_largest(info.files, lambda f: f.bytes)
        self.log.debug(f"Selected file {largest.id}: {largest.path} ({largest.bytes} bytes)")
        await service.select_files(torrent_id, largest.id)

        self.log.debug("Checking torrent status...")
        info = await poll_until_ready(
            lambda: service.get_torrent_info(torrent_id),
            status_of=lambda i: i.status,
            is_ready=lambda i: i.status == READY_STATUS,
            is_failed=lambda i: i.status in FAILED_STATUSES,
            wait_budget=self.wait_budget,
            poll_interval=self.poll_interval,
        )
        if not info.links:
            raise DebridError(f"torrent {torrent_id} is downloaded but has no links")
        self.log.info(f"Torrent {torrent_id} is downloaded")

        dl = await service.unrestrict(info.links[0], remote=remote)
        return common.Download(url=dl.download, filename=dl.filename, size=dl.filesize)

    async def get_stream_url(self, magnet: str, auth: Auth, remote: bool = False) -> str:
        dl = await self.resolve(magnet, auth, remote=remote)
        return dl.url

    async def close(self):
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
