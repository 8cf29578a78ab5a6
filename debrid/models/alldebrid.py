"""
AllDebrid response models (API v4).
Docs: https://docs.alldebrid.com/
"""
from enum import IntEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StatusCode(IntEnum):
    IN_QUEUE = 0
    DOWNLOADING = 1
    COMPRESSING_MOVING = 2
    UPLOADING = 3
    READY = 4
    UPLOAD_FAIL = 5
    INTERNAL_ERROR_ON_UNPACKING = 6
    NOT_DOWNLOADED_IN_20_MIN = 7
    FILE_TOO_BIG = 8
    INTERNAL_ERROR = 9
    DOWNLOAD_TOOK_MORE_THAN_72H = 10
    DELETED_ON_THE_HOSTER_WEBSITE = 11


class User(BaseModel):
    username: str = ""
    email: str = ""
    is_premium: bool = Field(False, alias="isPremium")
    is_subscribed: bool = Field(False, alias="isSubscribed")
    is_trial: bool = Field(False, alias="isTrial")
    # 0 if not premium, otherwise unix timestamp until which the user is premium
    premium_until: int = Field(0, alias="premiumUntil")
    lang: str = ""
    preferred_domain: str = Field("", alias="preferedDomain")
    fidelity_points: int = Field(0, alias="fidelityPoints")
    # Remaining quotas for the limited hosts (in MB)
    limited_hosters_quotas: Dict[str, int] = Field({}, alias="limitedHostersQuotas")
    # Remaining global traffic quota in trial mode (in MB)
    remaining_trial_quota: Optional[int] = Field(None, alias="remainingTrialQuota")

    model_config = ConfigDict(populate_by_name=True)


class Stream(BaseModel):
    """Alternative stream with a different resolution"""
    quality: int = 0
    ext: str = ""
    filesize: int = 0
    name: str = ""
    link: str = ""
    id: str = ""


class Download(BaseModel):
    """An unlocked link"""
    link: str = ""
    filename: str = ""
    host: str = ""
    streams: List[Stream] = []
    filesize: int = 0
    id: str = ""
    host_domain: str = Field("", alias="hostDomain")
    # Delayed ID if the link needs time to generate
    delayed: int = 0

    model_config = ConfigDict(populate_by_name=True)


class Magnet(BaseModel):
    """A magnet that was just uploaded"""
    magnet: str = ""
    # 'noname' if the magnet couldn't be parsed
    name: str = ""
    id: int = 0
    hash: str = ""
    size: int = 0
    ready: bool = False


class Link(BaseModel):
    """A file in a torrent"""
    link: str = ""
    filename: str = ""
    size: int = 0
    # Format depends on Status.version
    files: List[Any] = []


class Status(BaseModel):
    id: int = 0
    filename: str = ""
    size: int = 0
    # Status in plain English
    status: str = ""
    # A StatusCode, or an unknown code from a newer API version
    status_code: int = Field(0, alias="statusCode")
    downloaded: int = 0
    uploaded: int = 0
    seeders: int = 0
    download_speed: int = Field(0, alias="downloadSpeed")
    upload_speed: int = Field(0, alias="uploadSpeed")
    upload_date: int = Field(0, alias="uploadDate")
    completion_date: int = Field(0, alias="completionDate")
    links: List[Link] = []
    version: int = 0

    model_config = ConfigDict(populate_by_name=True)
