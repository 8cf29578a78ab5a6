import asyncio
import sys

from loguru import logger

from debrid.core.cache import InMemoryCache
from debrid.core.config import settings
from debrid.models.realdebrid import Auth
from debrid.services.legacy import RealDebridResolver

# Info hashes of "Night of the Living Dead" (1968), which is in the public domain
INFO_HASHES = [
    "50B7DAFB7137CBECF045F78E8EFBE4AC1A90D139",
    "11EA02584FA6351956F35671962AB46354D99060",
]


async def main():
    if not settings.realdebrid_token:
        logger.error("Set DEBRID_REALDEBRID_TOKEN to run this example")
        sys.exit(1)

    auth = Auth(key_or_token=settings.realdebrid_token, ip=settings.origin_ip or "")
    async with RealDebridResolver(
        InMemoryCache(),
        InMemoryCache(),
        opts=settings.client_options("realdebrid"),
        cache_age=settings.cache_age,
        wait_budget=settings.wait_budget,
        poll_interval=settings.poll_interval,
    ) as resolver:
        await resolver.test_token(auth)

        available = await resolver.check_instant_availability(auth, *INFO_HASHES)
        if not available:
            logger.info("None of the info hashes are available")
        for info_hash in available:
            logger.info(f"Available info_hash: {info_hash}")


if __name__ == "__main__":
    asyncio.run(main())
