"""
Explicit HTTP client configuration.

Built once at program start and passed to the downloader and the
connectivity check. ``requests`` reads HTTP_PROXY / HTTPS_PROXY / NO_PROXY
from the environment because ``trust_env`` stays enabled.
"""

from typing import Optional, Tuple

import requests

from voiceflow.config.constants import (
    VERSION,
    CONNECT_TIMEOUT,
    READ_TIMEOUT,
    CONNECTIVITY_URL,
    CONNECTIVITY_TIMEOUT,
)
from voiceflow.utils.logger import log


class HttpClient:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (CONNECT_TIMEOUT, READ_TIMEOUT),
    ):
        self.session = session or requests.Session()
        self.session.trust_env = True
        self.session.headers.setdefault("User-Agent", f"voiceflow-cli/{VERSION}")
        self.timeout = timeout

    def get(self, url: str, stream: bool = False, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return self.session.get(url, stream=stream, allow_redirects=True, **kwargs)

    def head(self, url: str, **kwargs):
        kwargs.setdefault("timeout", self.timeout)
        return self.session.head(url, allow_redirects=True, **kwargs)

    def check_connectivity(self, url: str = CONNECTIVITY_URL, timeout: float = CONNECTIVITY_TIMEOUT) -> bool:
        """Best-effort reachability probe; never raises."""
        try:
            response = self.head(url, timeout=timeout)
            return response.status_code < 500
        except requests.RequestException as e:
            log.debug(f"Connectivity check to {url} failed: {e}")
            return False

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
