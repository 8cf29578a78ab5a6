from datetime import datetime
from urllib.parse import parse_qs

import httpx


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def form(request: httpx.Request) -> dict:
    """Decoded form body of a request, single values unwrapped"""
    parsed = parse_qs(request.content.decode())
    return {k: v[0] if len(v) == 1 else v for k, v in parsed.items()}


def mock_client(handler) -> httpx.AsyncClient:
    """AsyncClient that answers every request with handler(request)"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def no_request(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")
