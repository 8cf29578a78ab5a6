from datetime import datetime
from typing import Dict

from loguru import logger

from debrid.models.common import AvailableFile, Download, Info, TorrentStatus
from debrid.services.base import Adapter
from debrid.utils.polling import poll_until_ready
from debrid.utils.selection import select_largest


class Client:
    """
    Debrid client with the generic Adapter interface,
    backed by a service specific adapter.
    """

    def __init__(self, adapter: Adapter, wait_budget: float = 5.0, poll_interval: float = 1.0):
        self.adapter = adapter
        self.wait_budget = wait_budget
        self.poll_interval = poll_interval

    async def get_user(self) -> datetime:
        return await self.adapter.get_user()

    async def get_instant_availability(self, *hashes: str) -> Dict[str, Dict[int, AvailableFile]]:
        return await self.adapter.get_instant_availability(*hashes)

    async def add_magnet(self, magnet: str) -> str:
        return await self.adapter.add_magnet(magnet)

    async def get_info(self, torrent_id: str) -> Info:
        return await self.adapter.get_info(torrent_id)

    async def create_ddl(self, torrent_id: str) -> Dict[int, Download]:
        return await self.adapter.create_ddl(torrent_id)

    async def resolve(self, magnet: str) -> Download:
        """
        Adds the magnet, waits until the torrent is downloaded
        and returns the direct download of its largest file.
        """
        torrent_id = await self.adapter.add_magnet(magnet)
        logger.debug(f"Waiting for torrent {torrent_id}...")
        await poll_until_ready(
            lambda: self.adapter.get_info(torrent_id),
            # Errors name the provider's own status
            status_of=lambda info: info.raw_status or info.status.value,
            is_ready=lambda info: info.status == TorrentStatus.DOWNLOADED,
            is_failed=lambda info: info.status == TorrentStatus.FAILED,
            wait_budget=self.wait_budget,
            poll_interval=self.poll_interval,
        )
        downloads = await self.adapter.create_ddl(torrent_id)
        return select_largest(downloads.values(), lambda dl: dl.size)
