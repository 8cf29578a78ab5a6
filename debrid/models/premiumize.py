"""
Premiumize response models.
Docs: https://app.swaggerhub.com/apis-docs/premiumize.me/api
"""
from typing import Optional

from pydantic import BaseModel, field_validator


class CreatedTransfer(BaseModel):
    type: str = ""
    id: str = ""
    name: str = ""


class Download(BaseModel):
    """A direct download. For a torrent transfer it's one file of the torrent."""
    path: str = ""
    size: int = 0
    link: str = ""
    stream_link: Optional[str] = None
    transcode_status: str = ""

    @field_validator("size", mode="before")
    @classmethod
    def _size_from_string(cls, value):
        # Premiumize sends sizes as strings
        if value in (None, ""):
            return 0
        return int(value)


class Transfer(BaseModel):
    id: str = ""
    # Torrent name when the transfer was created from a torrent
    name: str = ""
    message: Optional[str] = None
    # "waiting", "finished" etc.
    status: str = ""
    # Can be 0 for cached files that don't have to be downloaded
    progress: Optional[float] = None
    # The magnet URL when the transfer was created from a magnet
    src: str = ""
    folder_id: Optional[str] = None
    file_id: Optional[str] = None


class AccountInfo(BaseModel):
    customer_id: str = ""
    premium_until: int = 0
    limit_used: float = 0
    space_used: float = 0

    @field_validator("customer_id", mode="before")
    @classmethod
    def _customer_id_str(cls, value):
        return "" if value is None else str(value)

    @field_validator("premium_until", mode="before")
    @classmethod
    def _not_premium(cls, value):
        # false / null for non-premium accounts
        return value or 0


class CachedFile(BaseModel):
    transcoded: bool = False
    filename: str = ""
    filesize: str = ""


class Auth(BaseModel):
    # Long lasting API key or expiring OAuth2 access token
    key_or_token: str
    # True if key_or_token is an OAuth2 access token
    oauth2: bool = False
    # The user's original IP. Only required with ClientOptions.forward_origin_ip
    ip: str = ""
