import unittest
from unittest.mock import MagicMock, Mock, patch
import os
import sys

import requests
from requests.auth import HTTPBasicAuth

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from clientcheck.auth import build_auth, redact
from clientcheck.config import from_mapping
from clientcheck.http_client import HttpClient, ResponseWrapper
from clientcheck.runlog import RunLog
from clientcheck.runner import Runner


def make_config(**extra):
    data = {
        "client": "Acme",
        "api": {"base_url": "https://api.acme.test", "max_response_ms": 500},
        "authentication": {"type": "bearer", "token": "t0k"},
    }
    data.update(extra)
    return from_mapping(data)


def response(status=200, json_data=None, elapsed_ms=50.0, content_type="application/json"):
    return ResponseWrapper(
        status_code=status,
        headers={"Content-Type": content_type},
        text="",
        elapsed_ms=elapsed_ms,
        url="https://api.acme.test/",
        json_data=json_data,
    )


class TestAuth(unittest.TestCase):
    def test_api_key_default_header(self):
        headers, auth = build_auth({"type": "api_key", "key": "abc"})
        self.assertEqual(headers, {"X-API-Key": "abc"})
        self.assertIsNone(auth)

    def test_api_key_custom_header(self):
        headers, _ = build_auth({"type": "api_key", "key": "abc", "header": "X-Token"})
        self.assertEqual(headers, {"X-Token": "abc"})

    def test_bearer(self):
        headers, _ = build_auth({"type": "bearer", "token": "t0k"})
        self.assertEqual(headers, {"Authorization": "Bearer t0k"})

    def test_basic(self):
        headers, auth = build_auth({"type": "basic", "username": "u", "password": "p"})
        self.assertEqual(headers, {})
        self.assertIsInstance(auth, HTTPBasicAuth)
        self.assertEqual((auth.username, auth.password), ("u", "p"))

    def test_none(self):
        self.assertEqual(build_auth(None), ({}, None))

    def test_redact(self):
        safe = redact({"type": "basic", "username": "u", "password": "p"})
        self.assertEqual(safe, {"type": "basic", "username": "u", "password": "***"})


class TestHttpClient(unittest.TestCase):
    def fake_response(self, status):
        resp = Mock()
        resp.status_code = status
        resp.headers = {"Content-Type": "application/json"}
        resp.text = "{}"
        resp.reason = "OK"
        resp.url = "https://api.acme.test/x"
        resp.json.return_value = {}
        return resp

    def test_url_join(self):
        client = HttpClient("https://api.acme.test/v1/")
        self.assertEqual(client.url_for("/products/1"), "https://api.acme.test/v1/products/1")
        self.assertEqual(client.url_for("/"), "https://api.acme.test/v1")
        self.assertEqual(client.url_for("http://other/x"), "http://other/x")

    def test_auth_headers_dropped_when_unauthenticated(self):
        client = HttpClient("https://api.acme.test", auth_headers={"X-API-Key": "k"})
        client.session.request = MagicMock(return_value=self.fake_response(200))

        client.send("GET", "/")
        self.assertEqual(client.session.request.call_args.kwargs["headers"], {"X-API-Key": "k"})

        client.send("GET", "/", authenticated=False)
        self.assertEqual(client.session.request.call_args.kwargs["headers"], {})

    @patch('clientcheck.http_client.time.sleep')
    def test_retries_on_429(self, mock_sleep):
        client = HttpClient("https://api.acme.test", max_retries=2)
        client.session.request = MagicMock(side_effect=[self.fake_response(429), self.fake_response(200)])

        resp = client.send("GET", "/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(client.session.request.call_count, 2)
        mock_sleep.assert_called_once()

    @patch('clientcheck.http_client.time.sleep')
    def test_gives_up_after_max_retries(self, mock_sleep):
        client = HttpClient("https://api.acme.test", max_retries=1)
        client.session.request = MagicMock(return_value=self.fake_response(429))

        resp = client.send("GET", "/")
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(client.session.request.call_count, 2)


class TestRunner(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()

    def run_one(self, name, config=None):
        runner = Runner(config or make_config(), client=self.client)
        return runner.run_test(name)

    def test_connectivity(self):
        self.client.send.return_value = response(200)
        self.assertTrue(self.run_one("connectivity").passed)

        self.client.send.return_value = response(503)
        self.assertFalse(self.run_one("connectivity").passed)

        # Client errors still prove the server is reachable
        self.client.send.return_value = response(404)
        self.assertTrue(self.run_one("connectivity").passed)
        self.assertFalse(response(404).is_error)
        self.assertTrue(response(500).is_error)

    def test_authentication(self):
        self.client.send.return_value = response(200)
        self.assertTrue(self.run_one("authentication").passed)

        self.client.send.return_value = response(401)
        result = self.run_one("authentication")
        self.assertFalse(result.passed)
        self.assertIn("401", result.details[0])

    def test_authentication_without_auth_configured(self):
        cfg = make_config(authentication={"type": "none"})
        self.assertTrue(self.run_one("authentication", cfg).passed)
        self.client.send.assert_not_called()

    def test_unauthorized_access(self):
        self.client.send.return_value = response(403)
        self.assertTrue(self.run_one("unauthorized_access").passed)
        self.assertFalse(self.client.send.call_args.kwargs["authenticated"])

        self.client.send.return_value = response(200)
        self.assertFalse(self.run_one("unauthorized_access").passed)

    def test_response_time(self):
        self.client.send.return_value = response(200, elapsed_ms=120)
        self.assertTrue(self.run_one("response_time").passed)

        self.client.send.return_value = response(200, elapsed_ms=900)
        self.assertFalse(self.run_one("response_time").passed)

    def test_json_content_type(self):
        self.client.send.return_value = response(200, content_type="application/json; charset=utf-8")
        self.assertTrue(self.run_one("json_content_type").passed)

        self.client.send.return_value = response(200, content_type="text/html")
        self.assertFalse(self.run_one("json_content_type").passed)

    def test_test_data_all_match(self):
        cfg = make_config(test_data=[
            {"id": 1, "name": "Mouse", "price": 24.99},
            {"id": 2, "name": "Hub", "price": "39.50"},
        ])
        self.client.send.side_effect = [
            response(200, {"id": 1, "name": "Mouse", "price": 24.99}),
            response(200, {"id": 2, "name": "Hub", "price": 39.5}),
        ]
        result = self.run_one("test_data", cfg)
        self.assertTrue(result.passed, result.details)
        paths = [c.args[1] for c in self.client.send.call_args_list]
        self.assertEqual(paths, ["/products/1", "/products/2"])

    def test_test_data_mismatches(self):
        cfg = make_config(test_data=[
            {"id": 1, "name": "Mouse", "price": 24.99},
            {"id": 2, "name": "Hub", "price": 39.5},
        ])
        self.client.send.side_effect = [
            response(200, {"id": 1, "name": "Mouse Pro", "price": 30}),
            response(404),
        ]
        result = self.run_one("test_data", cfg)
        self.assertFalse(result.passed)
        self.assertEqual(len(result.details), 3)
        self.assertIn("id=2: HTTP 404", result.details)

    def test_test_data_without_records(self):
        self.assertFalse(self.run_one("test_data").passed)

    def test_unknown_test(self):
        result = self.run_one("load_test")
        self.assertFalse(result.passed)
        self.assertIn("Unknown test scenario", result.details[0])

    def test_network_error_is_recorded(self):
        self.client.send.side_effect = requests.ConnectionError("refused")
        result = self.run_one("connectivity")
        self.assertFalse(result.passed)
        self.assertIn("refused", result.details[0])

    def test_run_defaults_to_connectivity(self):
        self.client.send.return_value = response(200)
        report = Runner(make_config(), client=self.client).run()
        self.assertEqual([r.name for r in report.results], ["connectivity"])
        self.assertTrue(report.finished_at)

    def test_run_keeps_order_and_logs_events(self):
        self.client.send.return_value = response(200)
        cfg = make_config(tests=["connectivity", "nope", "response_time"])
        log = RunLog()
        report = Runner(cfg, client=self.client, run_log=log).run()

        self.assertEqual([r.name for r in report.results], ["connectivity", "nope", "response_time"])
        self.assertEqual((report.passed, report.failed, report.total), (2, 1, 3))
        self.assertEqual(report.failures(), ["nope: Unknown test scenario: nope"])
        self.assertEqual([e["type"] for e in log.events], ["RUN_START"] + ["TEST_RESULT"] * 3)

    def test_builds_client_from_config(self):
        cfg = make_config(api={"base_url": "https://api.acme.test/", "timeout": 3})
        runner = Runner(cfg)
        self.assertEqual(runner.client.base_url, "https://api.acme.test")
        self.assertEqual(runner.client.timeout, 3.0)
        self.assertEqual(runner.client.auth_headers, {"Authorization": "Bearer t0k"})


if __name__ == '__main__':
    unittest.main()
