import os
import unittest
from datetime import timedelta
from unittest import mock

from pydantic import ValidationError

from debrid.core.config import REALDEBRID_BASE_URL, Settings, parse_header_lines
from debrid.core.errors import ConfigurationError


class TestParseHeaderLines(unittest.TestCase):
    def test_valid(self):
        self.assertEqual(
            parse_header_lines(["X-Foo: bar", "", "X-Proxy-Auth:  secret "]),
            {"X-Foo": "bar", "X-Proxy-Auth": "secret"},
        )

    def test_invalid(self):
        for line in ["X-Foo", ": bar", "X-Foo:"]:
            with self.subTest(line=line):
                with self.assertRaises(ConfigurationError):
                    parse_header_lines([line])


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            settings = Settings(_env_file=None)

        self.assertEqual(settings.realdebrid_base_url, REALDEBRID_BASE_URL)
        self.assertEqual(settings.cache_age, timedelta(hours=24))
        self.assertEqual(settings.wait_budget, 5.0)
        self.assertEqual(settings.poll_interval, 1.0)
        self.assertFalse(settings.forward_origin_ip)

    def test_fields(self):
        self.assertEqual(set(Settings.model_fields), {
            "realdebrid_base_url",
            "alldebrid_base_url",
            "premiumize_base_url",
            "alldebrid_agent",
            "timeout",
            "extra_headers",
            "cache_age",
            "wait_budget",
            "poll_interval",
            "forward_origin_ip",
            "origin_ip",
            "realdebrid_token",
            "alldebrid_api_key",
            "premiumize_api_key",
        })

    def test_from_env(self):
        env = {
            "DEBRID_REALDEBRID_BASE_URL": "https://rd-proxy.example/rest/1.0",
            "DEBRID_EXTRA_HEADERS": '["X-Foo: bar"]',
            "DEBRID_WAIT_BUDGET": "10",
            "DEBRID_FORWARD_ORIGIN_IP": "true",
        }
        with mock.patch.dict(os.environ, env, clear=True):
            settings = Settings(_env_file=None)

        opts = settings.client_options("realdebrid")
        self.assertEqual(opts.base_url, "https://rd-proxy.example/rest/1.0")
        self.assertEqual(opts.extra_headers, {"X-Foo": "bar"})
        self.assertTrue(opts.forward_origin_ip)
        self.assertEqual(settings.wait_budget, 10)

    def test_invalid_extra_header_in_env(self):
        with mock.patch.dict(os.environ, {"DEBRID_EXTRA_HEADERS": '["X-Foo"]'}, clear=True):
            with self.assertRaises(ValidationError):
                Settings(_env_file=None)

    def test_unknown_provider(self):
        with self.assertRaises(ConfigurationError):
            Settings(_env_file=None).client_options("torbox")


if __name__ == '__main__':
    unittest.main()
