import threading
import unittest
from datetime import datetime, timedelta, timezone

from debrid.core.cache import InMemoryCache, is_fresh
from helpers import FakeClock

T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
WINDOW = timedelta(hours=24)


class TestInMemoryCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock(T0)
        self.cache = InMemoryCache(clock=self.clock)

    def test_get_unknown_key(self):
        self.assertEqual(self.cache.get("nope"), (None, False))
        self.assertFalse(is_fresh(self.cache, "nope", WINDOW))

    def test_get_returns_recorded_time(self):
        self.cache.set("token")
        self.assertEqual(self.cache.get("token"), (T0, True))

    def test_fresh_within_window(self):
        self.cache.set("token")

        self.assertTrue(is_fresh(self.cache, "token", WINDOW, now=T0))
        self.assertTrue(is_fresh(self.cache, "token", WINDOW, now=T0 + WINDOW - timedelta(microseconds=1)))

    def test_stale_from_window_end(self):
        self.cache.set("token")

        # Still found, but the caller must treat it as expired
        self.assertEqual(self.cache.get("token"), (T0, True))
        self.assertFalse(is_fresh(self.cache, "token", WINDOW, now=T0 + WINDOW))
        self.assertFalse(is_fresh(self.cache, "token", WINDOW, now=T0 + WINDOW + timedelta(hours=1)))

    def test_set_overwrites(self):
        self.cache.set("token")
        self.clock.now = T0 + timedelta(hours=30)
        self.cache.set("token")

        self.assertEqual(self.cache.get("token"), (self.clock.now, True))
        self.assertTrue(is_fresh(self.cache, "token", WINDOW, now=self.clock.now + timedelta(hours=1)))
        self.assertEqual(len(self.cache), 1)

    def test_concurrent_access(self):
        cache = InMemoryCache()
        errors = []

        def worker(n):
            try:
                for i in range(500):
                    cache.set(f"{n}-{i}")
                    cache.get(f"{n}-{i // 2}")
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(cache), 8 * 500)


if __name__ == '__main__':
    unittest.main()
