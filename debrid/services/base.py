from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional, Tuple, Type, TypeVar

import httpx
from loguru import logger
from pydantic import BaseModel, ValidationError

from debrid.core.config import ClientOptions
from debrid.core.errors import ConfigurationError, DebridError, HTTPStatusError, ProviderStatusError
from debrid.models.common import AvailableFile, Download, Info

M = TypeVar("M", bound=BaseModel)


class Adapter(ABC):
    """
    Abstract Base Class for Debrid Providers (AllDebrid, RealDebrid, Premiumize)
    """

    @abstractmethod
    async def get_user(self) -> datetime:
        """Returns until when the user's premium subscription is valid."""
        pass

    @abstractmethod
    async def get_instant_availability(self, *hashes: str) -> Dict[str, Dict[int, AvailableFile]]:
        """
        Checks which torrents are cached on the debrid service.
        The returned map only contains the instantly available torrents.
        Some services cache *all* files of a torrent, some don't: an empty
        per-file map means the torrent is cached but file details are unknown.
        """
        pass

    @abstractmethod
    async def add_magnet(self, magnet: str) -> str:
        """
        Adds a torrent via magnet URL. The service either has it cached already
        or starts downloading it. Adding the same magnet twice is not an error.
        Returns the ID to use with get_info and create_ddl.
        """
        pass

    @abstractmethod
    async def get_info(self, torrent_id: str) -> Info:
        pass

    @abstractmethod
    async def create_ddl(self, torrent_id: str) -> Dict[int, Download]:
        """Creates direct download links for the files of a previously added torrent."""
        pass


class DebridService:
    """
    HTTP transport shared by the provider clients.
    Subclasses set NAME, DEFAULT_BASE_URL and ERROR_MAP and add their auth.
    """
    NAME = "Debrid"
    DEFAULT_BASE_URL = ""
    ERROR_MAP: Dict[int, Type[ProviderStatusError]] = {}

    def __init__(self, opts: Optional[ClientOptions] = None, http_client: Optional[httpx.AsyncClient] = None):
        self.opts = opts or ClientOptions(base_url=self.DEFAULT_BASE_URL)
        if not self.opts.base_url:
            raise ConfigurationError("base_url must not be empty")
        self.base_url = self.opts.base_url.rstrip("/")
        self._owns_client = http_client is None
        self.client = http_client or httpx.AsyncClient(timeout=self.opts.timeout)
        self.log = logger.bind(service=self.NAME)

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        ok_statuses: Tuple[int, ...] = (200,),
    ) -> Any:
        """Make request to the provider API and decode the JSON body"""
        url = endpoint if endpoint.startswith(("http://", "https://")) else f"{self.base_url}{endpoint}"
        request_headers = dict(self.opts.extra_headers)
        request_headers.update(headers or {})

        # Params and headers can carry credentials, only the URL is logged
        self.log.debug(f"Sending {method} request to {url}")
        response = await self.client.request(
            method,
            url,
            params=params,
            data=data,
            headers=request_headers,
            timeout=self.opts.timeout,
        )
        self.log.debug(f"Got response: {response.status_code} - {response.text}")

        if response.status_code not in ok_statuses:
            error_cls = self.ERROR_MAP.get(response.status_code, HTTPStatusError)
            raise error_cls(response.status_code, response.text)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise DebridError(f"couldn't decode {self.NAME} response: {e}") from e

    def _parse(self, model: Type[M], data: Any) -> M:
        """Validate a decoded response body into model"""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise DebridError(f"unexpected {self.NAME} response for {model.__name__}: {e}") from e

    async def close(self):
        """Close HTTP client (only if it was created by this service)"""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()
