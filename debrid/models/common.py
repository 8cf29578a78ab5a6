from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class TorrentStatus(str, Enum):
    """Provider independent torrent status, as returned by Adapter.get_info"""
    QUEUED = "queued"
    CONVERTING = "converting"
    DOWNLOADING = "downloading"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


class File(BaseModel):
    id: int
    path: str = ""
    size: int = 0


class Info(BaseModel):
    id: str
    name: str = ""
    status: TorrentStatus
    # Status exactly as reported by the provider
    raw_status: str = ""
    progress: float = 0
    files: List[File] = []


class Download(BaseModel):
    """A direct download link"""
    url: str
    filename: str = ""
    size: int = 0


class AvailableFile(BaseModel):
    filename: Optional[str] = None
    size: Optional[int] = None
