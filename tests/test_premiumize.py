import unittest
from datetime import datetime, timezone

import httpx

from debrid.core.config import PREMIUMIZE_BASE_URL, ClientOptions
from debrid.core.errors import ConfigurationError, DebridError, HTTPStatusError, InvalidIDError, ProviderError
from debrid.models.common import TorrentStatus
from debrid.models.premiumize import Auth
from debrid.services.premiumize import PremiumizeAdapter, PremiumizeService, to_torrent_status
from helpers import form, mock_client, no_request

AUTH = Auth(key_or_token="secret", ip="203.0.113.7")
MAGNET = "magnet:?xt=urn:btih:abc"

TRANSFERS = {
    "status": "success",
    "transfers": [
        {"id": "other", "name": "Other", "status": "running", "progress": 0.1, "src": "magnet:?xt=urn:btih:other"},
        {"id": "T1", "name": "Movie", "status": "finished", "progress": 1, "src": MAGNET},
    ],
}


def service_for(handler, auth=AUTH, **opts) -> PremiumizeService:
    return PremiumizeService(auth, ClientOptions(base_url=PREMIUMIZE_BASE_URL, **opts), http_client=mock_client(handler))


def premiumize_handler(request):
    if request.url.path.endswith("/transfer/create"):
        return httpx.Response(200, json={"status": "success", "type": "torrent", "id": "T1", "name": "Movie"})
    if request.url.path.endswith("/transfer/directdl"):
        assert form(request)["src"] == MAGNET
        return httpx.Response(200, json={"status": "success", "content": [
            {"path": "Movie/sample.mkv", "size": "10", "link": "https://cdn.example/sample"},
            {"path": "Movie/movie.mkv", "size": "1000", "link": "https://cdn.example/movie"},
        ]})
    return httpx.Response(200, json=TRANSFERS)


class TestPremiumizeService(unittest.IsolatedAsyncioTestCase):
    async def test_auth_param(self):
        for oauth2, param in [(False, "apikey"), (True, "access_token")]:
            with self.subTest(oauth2=oauth2):
                seen = []

                def handler(request):
                    seen.append(request)
                    return httpx.Response(200, json={"status": "success", "customer_id": 123, "premium_until": 1700000000})

                service = service_for(handler, auth=Auth(key_or_token="secret", oauth2=oauth2))
                account = await service.get_account_info()

                self.assertEqual(account.customer_id, "123")
                self.assertEqual(seen[0].url.path, "/api/account/info")
                self.assertEqual(seen[0].url.params[param], "secret")

    async def test_error_in_body(self):
        service = service_for(lambda request: httpx.Response(200, json={"status": "error", "message": "Not logged in."}))
        with self.assertRaises(ProviderError) as ctx:
            await service.list_transfers()
        self.assertEqual(ctx.exception.message, "Not logged in.")

    async def test_non_200_status(self):
        service = service_for(lambda request: httpx.Response(500, text="oops"))
        with self.assertRaises(HTTPStatusError) as ctx:
            await service.list_transfers()
        self.assertEqual(ctx.exception.status_code, 500)

    async def test_malformed_bodies(self):
        service = service_for(lambda request: httpx.Response(200, json={"status": "success", "transfers": [{"id": "T1", "progress": "half"}]}))
        with self.assertRaises(DebridError):
            await service.list_transfers()

        service = service_for(lambda request: httpx.Response(200, json={"status": "success", "premium_until": "soon"}))
        with self.assertRaises(DebridError):
            await service.get_account_info()

        service = service_for(lambda request: httpx.Response(200, json=[]))
        with self.assertRaises(DebridError):
            await service.list_transfers()

    async def test_check_cache(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={
                "status": "success",
                "response": [True, False, True],
                "transcoded": [False, False, True],
                "filename": ["a.mkv", None, "c.mkv"],
                "filesize": ["100", None, 300],
            })

        cached = await service_for(handler).check_cache("aaaa", "bbbb", "cccc")

        self.assertEqual(seen[0].url.params.get_list("items[]"), ["aaaa", "bbbb", "cccc"])
        self.assertEqual(set(cached), {"aaaa", "cccc"})
        self.assertEqual(cached["aaaa"].filesize, "100")
        self.assertTrue(cached["cccc"].transcoded)
        self.assertEqual(cached["cccc"].filesize, "300")

    async def test_check_cache_without_items(self):
        self.assertEqual(await service_for(no_request).check_cache(), {})

    async def test_create_ddl_forwards_origin_ip(self):
        bodies = []

        def handler(request):
            bodies.append(form(request))
            return httpx.Response(200, json={"status": "success", "content": [{"path": "Movie/movie.mkv", "size": "1000", "link": "https://cdn.example/movie"}]})

        downloads = await service_for(handler, forward_origin_ip=True).create_ddl(MAGNET)

        self.assertEqual(bodies, [{"src": MAGNET, "download_ip": "203.0.113.7"}])
        self.assertEqual(downloads[0].size, 1000)

    async def test_create_ddl_needs_ip(self):
        service = service_for(no_request, auth=Auth(key_or_token="secret"), forward_origin_ip=True)
        with self.assertRaises(ConfigurationError):
            await service.create_ddl(MAGNET)


class TestPremiumizeAdapter(unittest.IsolatedAsyncioTestCase):
    async def test_instant_availability(self):
        adapter = PremiumizeAdapter(service_for(
            lambda request: httpx.Response(200, json={"status": "success", "response": [False, True]}),
        ))
        self.assertEqual(await adapter.get_instant_availability("aaaa", "bbbb"), {"bbbb": {}})

    async def test_add_magnet(self):
        adapter = PremiumizeAdapter(service_for(premiumize_handler))
        self.assertEqual(await adapter.add_magnet(MAGNET), "T1")

    async def test_get_info(self):
        info = await PremiumizeAdapter(service_for(premiumize_handler)).get_info("T1")

        self.assertEqual(info.name, "Movie")
        self.assertEqual(info.status, TorrentStatus.DOWNLOADED)
        self.assertEqual(info.raw_status, "finished")
        self.assertEqual(info.progress, 100)
        self.assertEqual(info.files, [])

    async def test_unknown_transfer(self):
        adapter = PremiumizeAdapter(service_for(premiumize_handler))
        with self.assertRaises(InvalidIDError):
            await adapter.get_info("nope")

    async def test_create_ddl(self):
        downloads = await PremiumizeAdapter(service_for(premiumize_handler)).create_ddl("T1")

        self.assertEqual(downloads[1].url, "https://cdn.example/movie")
        self.assertEqual(downloads[1].filename, "movie.mkv")
        self.assertEqual(downloads[1].size, 1000)
        self.assertEqual(downloads[0].filename, "sample.mkv")

    async def test_get_user(self):
        adapter = PremiumizeAdapter(service_for(
            lambda request: httpx.Response(200, json={"status": "success", "customer_id": "1", "premium_until": 1700000000}),
        ))
        self.assertEqual(await adapter.get_user(), datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc))


class TestStatusMapping(unittest.TestCase):
    def test_to_torrent_status(self):
        cases = {
            "waiting": TorrentStatus.QUEUED,
            "queued": TorrentStatus.QUEUED,
            "running": TorrentStatus.DOWNLOADING,
            "seeding": TorrentStatus.DOWNLOADED,
            "finished": TorrentStatus.DOWNLOADED,
            "error": TorrentStatus.FAILED,
            "banned": TorrentStatus.FAILED,
            "timeout": TorrentStatus.FAILED,
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(to_torrent_status(raw), expected)


if __name__ == '__main__':
    unittest.main()
