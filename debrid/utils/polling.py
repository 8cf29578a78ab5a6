import asyncio
import math
from typing import Awaitable, Callable, TypeVar

from loguru import logger

from debrid.core.errors import ConfigurationError, TorrentStatusError, WaitTimeoutError

T = TypeVar("T")


async def poll_until_ready(
    fetch: Callable[[], Awaitable[T]],
    status_of: Callable[[T], str],
    is_ready: Callable[[T], bool],
    is_failed: Callable[[T], bool],
    wait_budget: float = 5.0,
    poll_interval: float = 1.0,
) -> T:
    """
    Calls fetch until is_ready accepts the result, sleeping poll_interval
    seconds between calls. status_of names the status for logs and errors.
    - A result accepted by is_failed raises TorrentStatusError right away.
    - Once wait_budget seconds were spent sleeping, the next non-ready status
      raises WaitTimeoutError.
    Cancelling the calling task interrupts the sleep, so no further fetch happens.
    """
    if poll_interval <= 0:
        raise ConfigurationError("poll_interval must be greater than 0")
    if wait_budget < 0:
        raise ConfigurationError("wait_budget must not be negative")

    # Whole intervals covering the budget; the epsilon absorbs float noise like 0.05 / 0.01
    max_waits = math.ceil(wait_budget / poll_interval - 1e-9)
    waits = 0
    while True:
        item = await fetch()
        status = status_of(item)

        if is_failed(item):
            logger.warning(f"Torrent reached failure status: {status}")
            raise TorrentStatusError(status)
        if is_ready(item):
            return item

        if waits >= max_waits:
            waited = waits * poll_interval
            logger.warning(f"Torrent still {status} after waiting {waited:g}s")
            raise WaitTimeoutError(status, waited)

        remaining = (max_waits - waits) * poll_interval
        logger.debug(f"Waiting for torrent (status: {status}, remaining wait: {remaining:g}s)")
        await asyncio.sleep(poll_interval)
        waits += 1
