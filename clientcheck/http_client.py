import time
import logging
from typing import Optional, Dict, Any
from dataclasses import dataclass

import requests
from requests.auth import AuthBase
from colorama import Fore, Style

from .settings import DEFAULT_MAX_RETRIES, USER_AGENT

logger = logging.getLogger("clientcheck.http")


@dataclass
class ResponseWrapper:
    status_code: int
    headers: Dict[str, str]
    text: str
    elapsed_ms: float
    url: str
    json_data: Optional[Any] = None

    @property
    def is_error(self):
        return self.status_code >= 500

    @property
    def content_type(self) -> str:
        for k, v in self.headers.items():
            if k.lower() == "content-type":
                return v
        return ""


class HttpClient:
    def __init__(self, base_url: str, timeout: float = 10.0, verbose: bool = False,
                 headers: Optional[Dict[str, str]] = None, auth: Optional[AuthBase] = None,
                 auth_headers: Optional[Dict[str, str]] = None, max_retries: int = DEFAULT_MAX_RETRIES):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.verbose = verbose
        self.max_retries = max_retries
        self.auth = auth
        # Credential headers are kept apart so a request can be sent without them
        self.auth_headers = auth_headers or {}
        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        })
        if headers:
            self.session.headers.update(headers)

    def url_for(self, target: str) -> str:
        if target.startswith(("http://", "https://")):
            return target
        return f"{self.base_url}/{target.lstrip('/')}" if target.strip("/") else self.base_url

    def send(self, method: str, target: str, *,
             params: Optional[Dict[str, Any]] = None,
             json_body: Optional[Any] = None,
             authenticated: bool = True,
             timeout: Optional[float] = None) -> ResponseWrapper:
        url = self.url_for(target)
        headers = dict(self.auth_headers) if authenticated else {}
        auth = self.auth if authenticated else None

        backoff = 0.5
        for attempt in range(self.max_retries + 1):
            if self.verbose and attempt == 0:
                tag = "" if authenticated else " [NO AUTH]"
                print(f"{Fore.CYAN}[>] {method.upper()} {url}{tag}{Style.RESET_ALL}")

            start_time = time.time()
            resp = self.session.request(
                method=method.upper(),
                url=url,
                headers=headers,
                params=params,
                json=json_body,
                auth=auth,
                timeout=timeout or self.timeout,
            )
            elapsed = (time.time() - start_time) * 1000.0

            if resp.status_code == 429 and attempt < self.max_retries:
                logger.debug("429 from %s, retrying in %.1fs", url, backoff)
                time.sleep(backoff)
                backoff = min(backoff * 2, 4.0)
                continue

            # Best-effort JSON parsing
            json_data = None
            try:
                json_data = resp.json()
            except ValueError:
                pass

            if self.verbose:
                status_color = Fore.GREEN if resp.status_code < 400 else Fore.YELLOW if resp.status_code < 500 else Fore.RED
                print(f"{status_color}[<] {resp.status_code} {resp.reason} ({elapsed:.0f}ms) | {url}{Style.RESET_ALL}")

            return ResponseWrapper(
                status_code=resp.status_code,
                headers=dict(resp.headers),
                text=resp.text,
                elapsed_ms=elapsed,
                url=str(resp.url),
                json_data=json_data,
            )

    def close(self):
        self.session.close()
