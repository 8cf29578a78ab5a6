from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

import httpx

from debrid.core.config import ALLDEBRID_BASE_URL, ClientOptions
from debrid.core.errors import (
    BadRequestError,
    BadTokenError,
    DebridError,
    ProviderError,
    ServerError,
    TooManyRequestsError,
)
from debrid.models import common
from debrid.models.alldebrid import Download, Magnet, Status, StatusCode, User
from debrid.services.base import Adapter, DebridService


class AllDebridService(DebridService):
    """
    Client for AllDebrid API (v4).
    Docs: https://docs.alldebrid.com/
    """
    NAME = "AllDebrid"
    DEFAULT_BASE_URL = ALLDEBRID_BASE_URL
    ERROR_MAP = {
        400: BadRequestError,
        401: BadTokenError,
        # See https://docs.alldebrid.com/#rate-limiting
        429: TooManyRequestsError,
        500: ServerError,
        502: ServerError,
        503: ServerError,
        504: ServerError,
    }

    def __init__(
        self,
        api_key: str,
        opts: Optional[ClientOptions] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        agent: str = "python-debrid",
    ):
        super().__init__(opts, http_client)
        self.api_key = api_key
        self.agent = agent

    def _params(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        params = {"agent": self.agent, "apikey": self.api_key}
        if extra:
            params.update(extra)
        return params

    def _unwrap(self, result: Any) -> Dict[str, Any]:
        if not isinstance(result, dict):
            raise DebridError(f"unexpected {self.NAME} response: {result!r}")
        if result.get("status") != "success":
            error = result.get("error") or {}
            raise ProviderError(self.NAME, error.get("message", "unknown error"), error.get("code"))
        return result.get("data") or {}

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._unwrap(await self._request("GET", endpoint, params=self._params(params)))

    async def _post(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._unwrap(await self._request("POST", endpoint, params=self._params(), data=data))

    async def get_user(self) -> User:
        self.log.debug("Getting user...")
        data = await self._get("/user")
        user = self._parse(User, data.get("user") or {})
        self.log.debug(f"Got user: {user.username}")
        return user

    async def unlock(self, link: str) -> Download:
        """
        Unlock a link. For torrents, the links appear in the magnet status
        once AllDebrid has the torrent ready.
        """
        self.log.debug("Unlocking link...")
        dl = self._parse(Download, await self._get("/link/unlock", {"link": link}))
        self.log.debug(f"Unlocked link: {dl.link}")
        return dl

    async def upload_magnet(self, magnet: str) -> Magnet:
        """The magnet can also be an info hash"""
        self.log.debug("Uploading magnet...")
        data = await self._post("/magnet/upload", {"magnets[]": [magnet]})
        magnets = data.get("magnets") or []
        if not magnets:
            raise DebridError("AllDebrid did not return the uploaded magnet")
        # Errors for single magnets are reported per element
        if magnets[0].get("error"):
            error = magnets[0]["error"]
            raise ProviderError(self.NAME, error.get("message", "unknown error"), error.get("code"))
        m = self._parse(Magnet, magnets[0])
        self.log.info(f"Uploaded magnet -> ID: {m.id} (ready: {m.ready})")
        return m

    async def get_status(self) -> List[Status]:
        """Status of all of the user's magnets"""
        data = await self._get("/magnet/status")
        return [self._parse(Status, s) for s in data.get("magnets") or []]

    async def get_status_by_id(self, magnet_id: int) -> Status:
        data = await self._get("/magnet/status", {"id": magnet_id})
        status = self._parse(Status, data.get("magnets") or {})
        self.log.debug(f"Magnet {magnet_id} status: {status.status} ({status.status_code})")
        return status

    async def delete_magnet(self, magnet_id: int):
        await self._get("/magnet/delete", {"id": magnet_id})
        self.log.debug(f"Deleted magnet {magnet_id}")

    async def get_instant_availability(self, *hashes: str) -> Set[str]:
        """
        The hashes can also be magnet URLs.
        Returns the hashes / magnets that are instantly available.
        """
        if not hashes:
            return set()
        data = await self._post("/magnet/instant", {"magnets[]": list(hashes)})
        available = {m.get("magnet") for m in data.get("magnets") or [] if m.get("instant")}
        self.log.debug(f"Instant availability: {len(available)}/{len(hashes)} cached")
        return available


def to_torrent_status(code: int) -> common.TorrentStatus:
    if code == StatusCode.READY:
        return common.TorrentStatus.DOWNLOADED
    if code in (StatusCode.DOWNLOADING, StatusCode.COMPRESSING_MOVING, StatusCode.UPLOADING):
        return common.TorrentStatus.DOWNLOADING
    # Codes from 5 up are errors, including ones added later
    if code >= StatusCode.UPLOAD_FAIL:
        return common.TorrentStatus.FAILED
    return common.TorrentStatus.QUEUED


class AllDebridAdapter(Adapter):
    """
    Adapter over AllDebridService.
    AllDebrid caches whole torrents, so availability never has file details.
    File indexes are positions in the magnet's link list.
    """

    def __init__(self, service: AllDebridService):
        self.service = service

    async def get_user(self) -> datetime:
        user = await self.service.get_user()
        return datetime.fromtimestamp(user.premium_until, tz=timezone.utc)

    async def get_instant_availability(self, *hashes: str) -> Dict[str, Dict[int, common.AvailableFile]]:
        available = await self.service.get_instant_availability(*hashes)
        return {info_hash: {} for info_hash in available}

    async def add_magnet(self, magnet: str) -> str:
        m = await self.service.upload_magnet(magnet)
        return str(m.id)

    async def get_info(self, torrent_id: str) -> common.Info:
        status = await self.service.get_status_by_id(int(torrent_id))
        progress = status.downloaded / status.size * 100 if status.size else 0
        return common.Info(
            id=str(status.id),
            name=status.filename,
            status=to_torrent_status(status.status_code),
            raw_status=status.status,
            progress=progress,
            files=[common.File(id=i, path=link.filename, size=link.size) for i, link in enumerate(status.links)],
        )

    async def create_ddl(self, torrent_id: str) -> Dict[int, common.Download]:
        status = await self.service.get_status_by_id(int(torrent_id))
        if status.status_code != StatusCode.READY:
            raise DebridError(f"magnet {torrent_id} is not ready yet (status: {status.status})")

        downloads = {}
        for i, link in enumerate(status.links):
            dl = await self.service.unlock(link.link)
            downloads[i] = common.Download(url=dl.link, filename=dl.filename or link.filename, size=dl.filesize or link.size)
        return downloads
