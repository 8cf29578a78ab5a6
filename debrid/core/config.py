from datetime import timedelta
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings

from debrid.core.errors import ConfigurationError

REALDEBRID_BASE_URL = "https://api.real-debrid.com/rest/1.0"
ALLDEBRID_BASE_URL = "https://api.alldebrid.com/v4"
PREMIUMIZE_BASE_URL = "https://www.premiumize.me/api"


class ClientOptions(BaseModel):
    """
    Options shared by all provider clients.
    base_url is also used for links read from a provider response (proxying).
    """
    base_url: str
    timeout: float = 5.0
    extra_headers: Dict[str, str] = {}
    # Forward the user's original IP (Auth.ip) to the provider.
    # Only needed when the machine running this library has a different
    # outgoing IP than the one that will fetch the stream URL.
    forward_origin_ip: bool = False


def parse_header_lines(lines: List[str]) -> Dict[str, str]:
    """
    Turns ["X-Foo: bar"] into {"X-Foo": "bar"}. Empty lines are skipped.
    """
    headers = {}
    for line in lines:
        if not line:
            continue
        colon = line.find(":")
        if colon <= 0 or colon == len(line) - 1:
            raise ConfigurationError(f'extra header must look like "X-Foo: bar", got {line!r}')
        name, value = line.split(":", 1)
        headers[name.strip()] = value.strip()
    return headers


class Settings(BaseSettings):
    # Base URL overrides (e.g. to go through a proxy)
    realdebrid_base_url: str = REALDEBRID_BASE_URL
    alldebrid_base_url: str = ALLDEBRID_BASE_URL
    premiumize_base_url: str = PREMIUMIZE_BASE_URL
    alldebrid_agent: str = "python-debrid"

    timeout: float = 5.0
    extra_headers: List[str] = []

    # Freshness window for token validity and instant availability
    cache_age: timedelta = timedelta(hours=24)

    # Resolution workflow
    wait_budget: float = 5.0
    poll_interval: float = 1.0

    forward_origin_ip: bool = False
    origin_ip: Optional[str] = None

    # Credentials (injected by the caller or env)
    realdebrid_token: Optional[str] = None
    alldebrid_api_key: Optional[str] = None
    premiumize_api_key: Optional[str] = None

    class Config:
        env_file = ".env"
        env_prefix = "DEBRID_"
        extra = "ignore"

    @field_validator("extra_headers")
    @classmethod
    def _check_extra_headers(cls, value: List[str]) -> List[str]:
        parse_header_lines(value)
        return value

    def client_options(self, provider: str) -> ClientOptions:
        base_urls = {
            "realdebrid": self.realdebrid_base_url,
            "alldebrid": self.alldebrid_base_url,
            "premiumize": self.premiumize_base_url,
        }
        if provider not in base_urls:
            raise ConfigurationError(f"unknown provider: {provider}")
        return ClientOptions(
            base_url=base_urls[provider],
            timeout=self.timeout,
            extra_headers=parse_header_lines(self.extra_headers),
            forward_origin_ip=self.forward_origin_ip,
        )


settings = Settings()
