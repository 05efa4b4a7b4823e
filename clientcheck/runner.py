import logging
import datetime
from typing import Callable, Dict, List, Optional

import requests
from colorama import Fore, Style

from .auth import build_auth
from .http_client import HttpClient
from .models import AuthType, ClientConfig, RunReport, TestResult
from .runlog import RunLog
from .settings import (
    DEFAULT_HEALTH_PATH,
    DEFAULT_MAX_RESPONSE_MS,
    DEFAULT_RESOURCE_PATH,
    get_settings,
)

logger = logging.getLogger("clientcheck.runner")

DEFAULT_TESTS = ["connectivity"]


def _now() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat(timespec="seconds")


def _prices_match(expected, actual) -> bool:
    try:
        return abs(float(expected) - float(actual)) < 0.005
    except (TypeError, ValueError):
        return expected == actual


class Runner:
    """Executes the named tests of one client configuration against its API."""

    def __init__(self, config: ClientConfig, client: Optional[HttpClient] = None,
                 run_log: Optional[RunLog] = None, verbose: bool = False):
        self.config = config
        self.verbose = verbose
        self.run_log = run_log or RunLog()
        self.api = config.api
        self.health_path = self.api.get("health_path", DEFAULT_HEALTH_PATH)
        self.resource_path = self.api.get("resource_path", DEFAULT_RESOURCE_PATH)
        self.max_response_ms = float(self.api.get("max_response_ms", DEFAULT_MAX_RESPONSE_MS))

        if client is None:
            settings = get_settings()
            auth_headers, auth = build_auth(config.authentication)
            client = HttpClient(
                config.base_url,
                timeout=float(self.api.get("timeout", settings["timeout"])),
                verbose=verbose,
                headers=self.api.get("headers"),
                auth=auth,
                auth_headers=auth_headers,
                max_retries=settings["max_retries"],
            )
        self.client = client

        self.checks: Dict[str, Callable[[], TestResult]] = {
            "connectivity": self.check_connectivity,
            "authentication": self.check_authentication,
            "unauthorized_access": self.check_unauthorized_access,
            "response_time": self.check_response_time,
            "json_content_type": self.check_json_content_type,
            "test_data": self.check_test_data,
        }

    def run(self) -> RunReport:
        report = RunReport(client=self.config.client, base_url=self.config.base_url, started_at=_now())
        tests = self.config.tests or DEFAULT_TESTS
        self.run_log.log_event("RUN_START", {"client": self.config.client, "base_url": self.config.base_url, "tests": tests})

        print(f"[*] CLIENT: {self.config.client}")
        print(f"[*] TARGET: {self.config.base_url}")
        print(f"[*] TESTS: {len(tests)}")

        for name in tests:
            result = self.run_test(name)
            report.results.append(result)
            self.run_log.log_event("TEST_RESULT", result.to_dict())

            color = Fore.GREEN if result.passed else Fore.RED
            label = "PASS" if result.passed else "FAIL"
            print(f"    -> {color}[{label}] {name}{Style.RESET_ALL}")

        report.finished_at = _now()
        return report

    def run_test(self, name: str) -> TestResult:
        check = self.checks.get(name)
        if check is None:
            return TestResult(name, False, [f"Unknown test scenario: {name}"])

        logger.debug("Running %s", name)
        try:
            return check()
        except requests.RequestException as e:
            logger.debug("%s raised %r", name, e)
            return TestResult(name, False, [f"Request failed: {e}"])

    # --- Built-in checks ---

    def check_connectivity(self) -> TestResult:
        resp = self.client.send("GET", self.health_path)
        passed = not resp.is_error
        return TestResult("connectivity", passed, [f"HTTP {resp.status_code} from {resp.url}"], resp.elapsed_ms)

    def check_authentication(self) -> TestResult:
        if self.config.auth_type == AuthType.NONE:
            return TestResult("authentication", True, ["No authentication configured"])

        resp = self.client.send("GET", self.health_path)
        if resp.status_code in (401, 403):
            return TestResult("authentication", False,
                              [f"Credentials rejected (HTTP {resp.status_code})"], resp.elapsed_ms)
        return TestResult("authentication", True,
                          [f"Credentials accepted (HTTP {resp.status_code})"], resp.elapsed_ms)

    def check_unauthorized_access(self) -> TestResult:
        if self.config.auth_type == AuthType.NONE:
            return TestResult("unauthorized_access", True, ["No authentication configured"])

        resp = self.client.send("GET", self.health_path, authenticated=False)
        if resp.status_code in (401, 403):
            return TestResult("unauthorized_access", True,
                              [f"Anonymous request rejected (HTTP {resp.status_code})"], resp.elapsed_ms)
        return TestResult("unauthorized_access", False,
                          [f"Anonymous request was not rejected (HTTP {resp.status_code})"], resp.elapsed_ms)

    def check_response_time(self) -> TestResult:
        resp = self.client.send("GET", self.health_path)
        passed = resp.elapsed_ms <= self.max_response_ms
        return TestResult("response_time", passed,
                          [f"{resp.elapsed_ms:.0f}ms (limit {self.max_response_ms:.0f}ms)"], resp.elapsed_ms)

    def check_json_content_type(self) -> TestResult:
        resp = self.client.send("GET", self.resource_path)
        ctype = resp.content_type
        passed = "json" in ctype.lower()
        return TestResult("json_content_type", passed,
                          [f"Content-Type: {ctype or '(none)'}"], resp.elapsed_ms)

    def check_test_data(self) -> TestResult:
        records = self.config.test_data
        if not records:
            return TestResult("test_data", False, ["No test_data records configured"])

        problems: List[str] = []
        elapsed = 0.0
        for rec in records:
            path = f"{self.resource_path.rstrip('/')}/{rec.id}"
            resp = self.client.send("GET", path)
            elapsed += resp.elapsed_ms

            if resp.status_code != 200:
                problems.append(f"id={rec.id}: HTTP {resp.status_code}")
                continue
            body = resp.json_data
            if not isinstance(body, dict):
                problems.append(f"id={rec.id}: response is not a JSON object")
                continue
            if body.get("name") != rec.name:
                problems.append(f"id={rec.id}: name {body.get('name')!r} != {rec.name!r}")
            if not _prices_match(rec.price, body.get("price")):
                problems.append(f"id={rec.id}: price {body.get('price')!r} != {rec.price!r}")

        if problems:
            return TestResult("test_data", False, problems, elapsed)
        return TestResult("test_data", True, [f"{len(records)} records matched"], elapsed)
