from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import httpx

from debrid.core.config import REALDEBRID_BASE_URL, ClientOptions
from debrid.core.errors import (
    BadRequestError,
    BadTokenError,
    ConfigurationError,
    DebridError,
    InvalidIDError,
    PermissionDeniedError,
    ServiceUnavailableError,
)
from debrid.models import common
from debrid.models.realdebrid import (
    FAILED_STATUSES,
    READY_STATUS,
    Auth,
    AvailableFile,
    Download,
    InstantAvailability,
    TorrentInfo,
    TorrentsInfo,
    User,
)
from debrid.services.base import Adapter, DebridService


class RealDebridService(DebridService):
    """
    Client for Real-Debrid API.
    Docs: https://api.real-debrid.com/
    """
    NAME = "RealDebrid"
    DEFAULT_BASE_URL = REALDEBRID_BASE_URL
    ERROR_MAP = {
        400: BadRequestError,
        401: BadTokenError,
        403: PermissionDeniedError,
        404: InvalidIDError,
        503: ServiceUnavailableError,
    }

    def __init__(self, auth: Auth, opts: Optional[ClientOptions] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(opts, http_client)
        self.auth = auth

    @property
    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.auth.key_or_token}"}

    async def _get(self, endpoint: str, params: Optional[Dict] = None):
        return await self._request("GET", endpoint, params=params, headers=self.headers)

    async def _post(self, endpoint: str, data: Dict):
        # RealDebrid asks for the original IP on all POST requests
        if self.opts.forward_origin_ip:
            if not self.auth.ip:
                raise ConfigurationError("auth.ip is empty but the client is configured to forward the user's original IP")
            data = {**data, "ip": self.auth.ip}
        # Different POST endpoints answer with different success codes
        return await self._request("POST", endpoint, data=data, headers=self.headers, ok_statuses=(200, 201, 204))

    async def get_user(self) -> User:
        self.log.debug("Getting user...")
        user = self._parse(User, await self._get("/user"))
        self.log.debug(f"Got user: {user.username}")
        return user

    async def unrestrict(self, link: str, remote: bool = False) -> Download:
        """
        Unrestrict a hoster link to get a direct download URL.
        For torrents the link appears after a file was selected and downloaded.
        remote lifts account sharing restrictions but needs "sharing traffic".
        """
        self.log.debug("Unrestricting link...")
        data = {"link": link}
        if remote:
            data["remote"] = "1"
        dl = self._parse(Download, await self._post("/unrestrict/link", data))
        self.log.debug(f"Unrestricted link: {dl.download}")
        return dl

    async def get_torrents_info(self, active_first: bool = False) -> List[TorrentsInfo]:
        """Up to 100 of the user's torrents"""
        params = {"offset": 0, "limit": 100}
        if active_first:
            params["filter"] = "active"
        result = await self._get("/torrents", params=params)
        return [self._parse(TorrentsInfo, t) for t in result or []]

    async def get_torrent_info(self, torrent_id: str) -> TorrentInfo:
        info = self._parse(TorrentInfo, await self._get(f"/torrents/info/{torrent_id}"))
        self.log.debug(f"Torrent {torrent_id} status: {info.status}, files: {len(info.files)}")
        return info

    async def get_instant_availability(self, *hashes: str) -> Dict[str, InstantAvailability]:
        """
        Returns the instantly available torrents, keyed by the hash as passed in.
        Structure: { hash: { "rd": [ {"1":{...}, "2":{...}}, ... ] } }
        """
        if not hashes:
            return {}

        data = await self._get("/torrents/instantAvailability/" + "/".join(hashes))
        if not isinstance(data, dict):
            data = {}
        by_lower = {h.lower(): h for h in hashes}

        availabilities = {}
        for available_hash, value in data.items():
            # Unknown hashes come back as an empty list
            variants = value.get("rd") if isinstance(value, dict) else None
            if not variants:
                continue
            files: InstantAvailability = {}
            for variant in variants:
                for file_id, available_file in variant.items():
                    files[int(file_id)] = self._parse(AvailableFile, available_file)
            availabilities[by_lower.get(available_hash.lower(), available_hash)] = files

        self.log.debug(f"Instant availability: {len(availabilities)}/{len(hashes)} cached")
        return availabilities

    async def add_magnet(self, magnet: str) -> str:
        self.log.debug("Adding magnet...")
        result = await self._post("/torrents/addMagnet", {"magnet": magnet})
        torrent_id = result.get("id")
        if not torrent_id:
            raise DebridError("RealDebrid did not return a torrent ID")
        self.log.info(f"Added magnet -> ID: {torrent_id}")
        return str(torrent_id)

    async def select_files(self, torrent_id: str, *file_ids: int):
        """Start downloading the given files of a torrent. No IDs selects all files."""
        files = ",".join(str(i) for i in file_ids) if file_ids else "all"
        self.log.debug(f"Selecting files {files} of torrent {torrent_id}")
        await self._post(f"/torrents/selectFiles/{torrent_id}", {"files": files})

    async def delete_torrent(self, torrent_id: str):
        await self._request("DELETE", f"/torrents/delete/{torrent_id}", headers=self.headers, ok_statuses=(200, 204))


def to_torrent_status(status: str) -> common.TorrentStatus:
    if status in FAILED_STATUSES:
        return common.TorrentStatus.FAILED
    if status == READY_STATUS:
        return common.TorrentStatus.DOWNLOADED
    if status == "magnet_conversion":
        return common.TorrentStatus.CONVERTING
    if status in ("downloading", "compressing", "uploading"):
        return common.TorrentStatus.DOWNLOADING
    return common.TorrentStatus.QUEUED


class RealDebridAdapter(Adapter):
    """
    Adapter over RealDebridService.
    File indexes are RealDebrid's file IDs (starting at 1).
    """

    def __init__(self, service: RealDebridService):
        self.service = service

    async def get_user(self) -> datetime:
        user = await self.service.get_user()
        if user.expiration:
            return user.expiration
        return datetime.now(timezone.utc) + timedelta(seconds=user.premium)

    async def get_instant_availability(self, *hashes: str) -> Dict[str, Dict[int, common.AvailableFile]]:
        availabilities = await self.service.get_instant_availability(*hashes)
        return {
            info_hash: {
                file_id: common.AvailableFile(filename=f.filename, size=f.filesize)
                for file_id, f in files.items()
            }
            for info_hash, files in availabilities.items()
        }

    async def _select_if_waiting(self, info: TorrentInfo) -> TorrentInfo:
        # Nothing gets downloaded (or turns into links) before files are selected
        if info.status != "waiting_files_selection":
            return info
        await self.service.select_files(info.id)
        return await self.service.get_torrent_info(info.id)

    async def add_magnet(self, magnet: str) -> str:
        torrent_id = await self.service.add_magnet(magnet)
        await self._select_if_waiting(await self.service.get_torrent_info(torrent_id))
        return torrent_id

    async def get_info(self, torrent_id: str) -> common.Info:
        info = await self._select_if_waiting(await self.service.get_torrent_info(torrent_id))
        return common.Info(
            id=info.id,
            name=info.filename,
            status=to_torrent_status(info.status),
            raw_status=info.status,
            progress=info.progress,
            files=[common.File(id=f.id, path=f.path, size=f.bytes) for f in info.files],
        )

    async def create_ddl(self, torrent_id: str) -> Dict[int, common.Download]:
        info = await self.service.get_torrent_info(torrent_id)
        if info.status != READY_STATUS:
            raise DebridError(f"torrent {torrent_id} is not downloaded yet (status: {info.status})")

        # Links belong to the selected files, in order
        file_ids = [f.id for f in info.files if f.selected == 1]
        if len(file_ids) != len(info.links):
            file_ids = list(range(1, len(info.links) + 1))

        downloads = {}
        for file_id, link in zip(file_ids, info.links):
            dl = await self.service.unrestrict(link)
            downloads[file_id] = common.Download(url=dl.download, filename=dl.filename, size=dl.filesize)
        return downloads
