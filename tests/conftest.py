import sys
from pathlib import Path

import pytest
import requests

# Ensure the `openmart` package is importable when running pytest from a checkout.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from openmart.core import config  # noqa: E402


class DummyResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error", response=self)

    def json(self):
        if self._text is not None:
            raise ValueError("not json")
        return self._payload


class DummySession:
    def __init__(self, responses=None):
        self.calls = []
        self.responses = list(responses or [])
        self.closed = False

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def make_match(index, cursor=None, **content):
    record = {
        "store_id": f"store-{index}",
        "store_name": f"Store {index}",
        "store_emails": [],
        "store_phones": [],
        "place_key": f"pk-{index}",
        "latitude": 37.77,
        "longitude": -122.41,
        "city": "San Francisco",
        "state": "CA",
        "country": "US",
        "from_sources": {},
        "tags": [],
    }
    record.update(content)
    return {
        "id": f"match-{index}",
        "content": record,
        "match_score": 1.0,
        "match_highlights": [],
        "cursor": cursor,
    }


class FakeBackend:
    """Serves ``total`` records page by page; only non-final records carry a cursor."""

    def __init__(self, total, ids_only=False):
        self.total = total
        self.ids_only = ids_only
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append(dict(json))
        start = int(json["cursor"].split(":")[1]) if json.get("cursor") else 0
        end = min(start + json["limit"], self.total)
        items = []
        for index in range(start, end):
            cursor = f"after:{index + 1}" if index + 1 < self.total else None
            if self.ids_only:
                items.append({"id": f"id-{index}", "place_id": None, "match_score": 0.5, "cursor": cursor})
            else:
                items.append(make_match(index, cursor=cursor))
        return DummyResponse(payload=items)

    def close(self):
        pass


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    for name in (
        "OPENMART_BASE_URL",
        "OPENMART_TIMEOUT",
        "OPENMART_MAX_RETRIES",
        "OPENMART_PAGE_SIZE",
        "OPENMART_MAX_RESULTS",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OPENMART_API_KEY", "test-key")
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()
