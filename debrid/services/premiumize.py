from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from debrid.core.config import PREMIUMIZE_BASE_URL, ClientOptions
from debrid.core.errors import ConfigurationError, DebridError, InvalidIDError, ProviderError
from debrid.models import common
from debrid.models.premiumize import AccountInfo, Auth, CachedFile, CreatedTransfer, Download, Transfer
from debrid.services.base import Adapter, DebridService

QUEUED_STATUSES = frozenset({"waiting", "queued"})
READY_STATUSES = frozenset({"finished", "seeding"})
FAILED_STATUSES = frozenset({"error", "deleted", "banned", "timeout"})


class PremiumizeService(DebridService):
    """
    Client for Premiumize.me API.
    Docs: https://app.swaggerhub.com/apis-docs/premiumize.me/api
    Premiumize doesn't document specific HTTP status codes, every non-200
    response is an HTTPStatusError.
    """
    NAME = "Premiumize"
    DEFAULT_BASE_URL = PREMIUMIZE_BASE_URL

    def __init__(self, auth: Auth, opts: Optional[ClientOptions] = None, http_client: Optional[httpx.AsyncClient] = None):
        super().__init__(opts, http_client)
        self.auth = auth

    def _params(self, extra: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        key = "access_token" if self.auth.oauth2 else "apikey"
        params = {key: self.auth.key_or_token}
        if extra:
            params.update(extra)
        return params

    def _check(self, result: Any) -> Dict[str, Any]:
        if not isinstance(result, dict):
            raise DebridError(f"unexpected {self.NAME} response: {result!r}")
        if result.get("status") != "success":
            raise ProviderError(self.NAME, result.get("message", "unknown error"))
        return result

    async def _get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._check(await self._request("GET", endpoint, params=self._params(params)))

    async def _post(self, endpoint: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self._check(await self._request("POST", endpoint, params=self._params(), data=data))

    async def create_transfer(self, source: str) -> CreatedTransfer:
        """
        Source can be an HTTP(S) link to a supported container file, website or a magnet link.
        The transfer shows up in the transfer list.
        """
        self.log.debug("Creating transfer...")
        transfer = self._parse(CreatedTransfer, await self._post("/transfer/create", {"src": source}))
        self.log.info(f"Created transfer -> ID: {transfer.id}")
        return transfer

    async def create_ddl(self, source: str) -> List[Download]:
        """
        Create direct download links. Only works if the source is cached or a
        transfer for it finished downloading. One Download per file of the source.
        """
        self.log.debug("Creating direct download link...")
        data = {"src": source}
        # Premiumize asks for the original IP only for directdl requests
        if self.opts.forward_origin_ip:
            if not self.auth.ip:
                raise ConfigurationError("auth.ip is empty but the client is configured to forward the user's original IP")
            data["download_ip"] = self.auth.ip
        result = await self._post("/transfer/directdl", data)
        downloads = [self._parse(Download, d) for d in result.get("content") or []]
        self.log.debug(f"Created {len(downloads)} direct download links")
        return downloads

    async def list_transfers(self) -> List[Transfer]:
        """Doesn't include downloads created with create_ddl alone"""
        result = await self._get("/transfer/list")
        return [self._parse(Transfer, t) for t in result.get("transfers") or []]

    async def get_account_info(self) -> AccountInfo:
        self.log.debug("Getting account info...")
        return self._parse(AccountInfo, await self._get("/account/info"))

    async def check_cache(self, *items: str) -> Dict[str, CachedFile]:
        """
        Items can be anything Premiumize supports: containers, direct links,
        magnet URLs, torrent info hashes.
        Only cached items are in the result, keyed by the item.
        """
        if not items:
            return {}
        result = await self._get("/cache/check", {"items[]": list(items)})
        responses = result.get("response") or []
        transcoded = result.get("transcoded") or []
        filenames = result.get("filename") or []
        filesizes = result.get("filesize") or []

        cached = {}
        for i, item in enumerate(items):
            if i < len(responses) and responses[i]:
                cached[item] = CachedFile(
                    transcoded=bool(transcoded[i]) if i < len(transcoded) else False,
                    filename=(filenames[i] if i < len(filenames) else None) or "",
                    filesize=str((filesizes[i] if i < len(filesizes) else None) or ""),
                )
        self.log.debug(f"Checked cache: {len(cached)}/{len(items)} cached")
        return cached

    async def get_transfer(self, transfer_id: str) -> Transfer:
        for transfer in await self.list_transfers():
            if transfer.id == transfer_id:
                return transfer
        raise InvalidIDError(404, f"transfer {transfer_id} not found")


def to_torrent_status(status: str) -> common.TorrentStatus:
    if status in READY_STATUSES:
        return common.TorrentStatus.DOWNLOADED
    if status in FAILED_STATUSES:
        return common.TorrentStatus.FAILED
    if status == "running":
        return common.TorrentStatus.DOWNLOADING
    return common.TorrentStatus.QUEUED


class PremiumizeAdapter(Adapter):
    """
    Adapter over PremiumizeService.
    The cache check has no file details, and transfers have no file listing.
    File indexes are positions in the directdl content list.
    """

    def __init__(self, service: PremiumizeService):
        self.service = service

    async def get_user(self) -> datetime:
        account = await self.service.get_account_info()
        return datetime.fromtimestamp(account.premium_until, tz=timezone.utc)

    async def get_instant_availability(self, *hashes: str) -> Dict[str, Dict[int, common.AvailableFile]]:
        cached = await self.service.check_cache(*hashes)
        return {info_hash: {} for info_hash in cached}

    async def add_magnet(self, magnet: str) -> str:
        transfer = await self.service.create_transfer(magnet)
        return transfer.id

    async def get_info(self, torrent_id: str) -> common.Info:
        transfer = await self.service.get_transfer(torrent_id)
        return common.Info(
            id=transfer.id,
            name=transfer.name,
            status=to_torrent_status(transfer.status),
            raw_status=transfer.status,
            progress=(transfer.progress or 0) * 100,
        )

    async def create_ddl(self, torrent_id: str) -> Dict[int, common.Download]:
        transfer = await self.service.get_transfer(torrent_id)
        if not transfer.src:
            raise DebridError(f"transfer {torrent_id} has no source")
        downloads = await self.service.create_ddl(transfer.src)
        return {
            i: common.Download(url=dl.link, filename=dl.path.rsplit("/", 1)[-1], size=dl.size)
            for i, dl in enumerate(downloads)
        }
