"""
Real-Debrid response models.
Docs: https://api.real-debrid.com/
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Possible torrent statuses: magnet_error, magnet_conversion, waiting_files_selection,
# queued, downloading, downloaded, error, virus, compressing, uploading, dead
FAILED_STATUSES = frozenset({"magnet_error", "error", "virus", "dead"})
READY_STATUS = "downloaded"


class User(BaseModel):
    id: int
    username: str = ""
    email: str = ""
    # Fidelity points
    points: int = 0
    locale: str = ""
    avatar: str = ""
    # "premium" or "free"
    type: str = ""
    # Seconds left as a premium user
    premium: int = 0
    expiration: Optional[datetime] = None


class Download(BaseModel):
    """An unrestricted link"""
    id: str = ""
    filename: str = ""
    mime_type: str = Field("", alias="mimeType")
    # 0 if unknown
    filesize: int = 0
    # Original link
    link: str = ""
    host: str = ""
    chunks: int = 0
    crc: int = 0
    # Generated link
    download: str = ""
    streamable: int = 0

    model_config = ConfigDict(populate_by_name=True)


class File(BaseModel):
    id: int
    # Path inside the torrent, starting with "/"
    path: str = ""
    bytes: int = 0
    # 0 or 1
    selected: int = 0


class TorrentsInfo(BaseModel):
    """One element of the user's torrent list. Lacks the file listing."""
    id: str
    filename: str = ""
    hash: str = ""
    # Size of selected files only
    bytes: int = 0
    host: str = ""
    split: int = 0
    progress: float = 0
    status: str = ""
    added: Optional[datetime] = None
    links: List[str] = []
    # Only present when finished
    ended: Optional[str] = None
    # Only present in "downloading", "compressing", "uploading" status
    speed: Optional[int] = None
    # Only present in "downloading", "magnet_conversion" status
    seeders: Optional[int] = None


class TorrentInfo(TorrentsInfo):
    original_filename: str = ""
    # Total size of the torrent
    original_bytes: int = 0
    files: List[File] = []


class AvailableFile(BaseModel):
    filename: str = ""
    filesize: int = 0


# Torrent file ID -> instantly available file
InstantAvailability = Dict[int, AvailableFile]


class Auth(BaseModel):
    # Long lasting API key or expiring OAuth2 access token
    key_or_token: str
    # The user's original IP. Only required with ClientOptions.forward_origin_ip
    ip: str = ""
