"""HTTP transport for the OpenMart search API."""

import logging
import threading
from dataclasses import replace
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from openmart.core.config import ClientConfig
from openmart.core.errors import ConfigError, OpenMartError, classify

logger = logging.getLogger(__name__)

SEARCH_PATH = "/api/v1/search"
ONLY_IDS_PATH = "/api/v1/search/only_ids"


def build_session(max_retries: int = 0) -> requests.Session:
    """Create a session; transient 502/503/504 and connect failures are retried when asked."""
    session = requests.Session()
    if max_retries > 0:
        retries = Retry(
            total=max_retries,
            backoff_factor=1,
            status_forcelist=(502, 503, 504),
            allowed_methods=("POST",),
            raise_on_status=False,
        )
        session.mount("http://", HTTPAdapter(max_retries=retries))
        session.mount("https://", HTTPAdapter(max_retries=retries))
    return session


class Transport:
    """POSTs JSON bodies to the API and returns decoded JSON.

    Every failure leaves this class as an ``OpenMartError``. The config snapshot
    is read once per request, so ``update_api_key`` never affects a call that
    has already been dispatched.
    """

    def __init__(self, config: ClientConfig, session: Optional[requests.Session] = None, max_retries: int = 0):
        self._config = config
        self._lock = threading.Lock()
        self._session = session or build_session(max_retries)

    @property
    def config(self) -> ClientConfig:
        with self._lock:
            return self._config

    def update_api_key(self, api_key: str) -> None:
        if not api_key:
            raise ConfigError("API key must not be empty")
        with self._lock:
            self._config = replace(self._config, api_key=api_key)
        logger.info("API key updated")

    def _headers(self, config: ClientConfig) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "X-API-Key": config.api_key}
        headers.update(config.headers)
        return headers

    def post(self, path: str, body: Dict[str, Any]) -> Any:
        config = self.config
        url = f"{config.base_url}{path}"
        logger.debug("POST %s body=%s", path, body)
        try:
            response = self._session.post(url, json=body, headers=self._headers(config), timeout=config.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            error = classify(exc)
            logger.error("POST %s failed: code=%s status=%s message=%s", path, error.code, error.status_code, error)
            raise error from exc
        except (TypeError, ValueError) as exc:
            # body could not be encoded
            error = classify(exc)
            logger.error("POST %s could not be sent: %s", path, error)
            raise error from exc

        try:
            return response.json()
        except ValueError as exc:
            raise OpenMartError(
                "Response body is not valid JSON",
                code="INVALID_RESPONSE",
                status_code=response.status_code,
            ) from exc

    def close(self) -> None:
        self._session.close()
