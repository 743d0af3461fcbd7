from datetime import datetime, timezone

import pytest

from openmart.core.errors import ValidationError
from openmart.etl.request import Endpoint, normalize
from openmart.models import Coordinates, Location, OwnershipType, SearchFilter


def test_normalize_keeps_caller_fields():
    path, body = normalize({"query": "coffee", "location": {"city": "SF"}, "limit": 10})

    assert path == "/api/v1/search"
    assert body == {"query": "coffee", "location": {"city": "SF"}, "limit": 10}


def test_normalize_adds_default_limit():
    _, body = normalize({"query": "coffee"})
    assert body["limit"] == 50

    _, body = normalize(None)
    assert body == {"limit": 50}


def test_normalize_does_not_mutate_the_filter():
    search_filter = {"query": "coffee", "include_keywords": ["latte", "espresso"]}

    _, body = normalize(search_filter)
    body["query"] = "tea"

    assert search_filter == {"query": "coffee", "include_keywords": ["latte", "espresso"]}
    assert body["include_keywords"] == ["latte", "espresso"]


def test_normalize_distinguishes_null_from_omitted():
    _, body = normalize(SearchFilter(query="bakery", has_website=None))

    assert body == {"query": "bakery", "has_website": None, "limit": 50}
    assert "store_name" not in body


def test_normalize_dataclass_filter_to_wire_format():
    search_filter = SearchFilter(
        query="pizza",
        location=[Location(city="New York", state="NY"), Location(coordinates=Coordinates(40.7, -74.0), geo_radius=3000)],
        ownership_type=OwnershipType.FRANCHISE,
        open_date_after=datetime(2024, 1, 1, tzinfo=timezone.utc),
        info_updated_after=1700000000,
        limit=20,
    )

    _, body = normalize(search_filter)

    assert body["location"] == [
        {"city": "New York", "state": "NY"},
        {"coordinates": {"latitude": 40.7, "longitude": -74.0}, "geo_radius": 3000},
    ]
    assert body["ownership_type"] == "FRANCHISE"
    assert body["open_date_after"] == "1704067200"
    assert body["info_updated_after"] == "1700000000"
    assert body["limit"] == 20


def test_normalize_only_ids_endpoint_allows_larger_limit():
    path, body = normalize({"limit": 1000}, Endpoint.ONLY_IDS)

    assert path == "/api/v1/search/only_ids"
    assert body["limit"] == 1000


@pytest.mark.parametrize("limit", [0, -1, 501, True, "50"])
def test_normalize_rejects_bad_search_limits(limit):
    with pytest.raises(ValidationError):
        normalize({"limit": limit})


def test_normalize_rejects_limit_above_ids_ceiling():
    with pytest.raises(ValidationError):
        normalize({"limit": 1001}, Endpoint.ONLY_IDS)


def test_normalize_null_limit_uses_default():
    _, body = normalize({"limit": None})
    assert body["limit"] == 50


def test_normalize_rejects_nested_pagination():
    with pytest.raises(ValidationError) as excinfo:
        normalize({"pagination": {"cursor": "abc", "limit": 10}})

    assert excinfo.value.details == {"field": "pagination"}

    _, body = normalize({"pagination": None})
    assert body["pagination"] is None


def test_normalize_enforces_list_bounds():
    with pytest.raises(ValidationError):
        normalize({"include_keywords": [f"k{i}" for i in range(65)]})
    with pytest.raises(ValidationError):
        normalize({"exclude_root_domains": ["example.com"] * 10001})

    _, body = normalize({"exclude_keywords": [f"k{i}" for i in range(64)]})
    assert len(body["exclude_keywords"]) == 64


def test_normalize_validates_ownership_type():
    with pytest.raises(ValidationError):
        normalize({"ownership_type": "COOPERATIVE"})

    _, body = normalize({"ownership_type": "CHAIN"})
    assert body["ownership_type"] == "CHAIN"


def test_normalize_passes_unknown_keys_through():
    _, body = normalize({"query": "florist", "future_flag": True})
    assert body["future_flag"] is True


@pytest.mark.parametrize(
    "search_filter",
    [
        {"include_keywords": 5},
        {"exclude_keywords": "coffee"},
        {"exclude_root_domains": {"example.com"}},
        {"ownership_type": ["CHAIN"]},
        {"ownership_type": 3},
        {"info_updated_before": True},
        {"open_date_before": object()},
    ],
)
def test_normalize_reports_malformed_fields_as_validation_errors(search_filter):
    with pytest.raises(ValidationError):
        normalize(search_filter)


def test_normalize_accepts_keyword_tuples():
    _, body = normalize(SearchFilter(include_keywords=("vegan", "organic")))

    assert body["include_keywords"] == ["vegan", "organic"]
