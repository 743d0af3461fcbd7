from datetime import datetime, timezone

import pytest

from conftest import make_match
from openmart.core.errors import ValidationError
from openmart.models import (
    UNSET,
    BizCategory,
    BusinessRecord,
    Location,
    PriceRange,
    SearchFilter,
    SearchMatch,
    to_unix_timestamp,
)


def test_business_record_keeps_unknown_fields_in_extra():
    raw = make_match(1, business_name="Acme", new_signal={"score": 3}, price_range={"min_": 10, "currency": "USD"})["content"]

    record = BusinessRecord.from_dict(raw)

    assert record.store_id == "store-1"
    assert record.business_name == "Acme"
    assert record.label == "Acme"
    assert record.extra == {"new_signal": {"score": 3}}
    assert record.price_range == PriceRange(min_=10, max_=None, currency="USD")
    assert record.raw_snapshot == raw
    assert record.raw_snapshot is not raw


def test_business_record_is_immutable():
    record = BusinessRecord.from_dict(make_match(1)["content"])

    with pytest.raises(AttributeError):
        record.store_name = "changed"


def test_business_record_label_falls_back_to_store_name():
    record = BusinessRecord.from_dict(make_match(7)["content"])

    assert record.label == "Store 7"


def test_search_match_keeps_cursor_verbatim():
    cursor = ["opaque", 42, {"k": "v"}]

    match = SearchMatch.from_dict(make_match(1, cursor=cursor))

    assert match.cursor is cursor


def test_search_filter_skips_unset_fields():
    search_filter = SearchFilter(query="gym", store_name=None)

    assert search_filter.to_dict() == {"query": "gym", "store_name": None}
    assert search_filter.location is UNSET
    assert not UNSET


def test_location_to_dict_skips_empty_parts():
    assert Location(city="Austin").to_dict() == {"city": "Austin"}


def test_to_unix_timestamp():
    assert to_unix_timestamp(datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)) == "1700000000"
    assert to_unix_timestamp(1700000000.7) == "1700000000"
    assert to_unix_timestamp(" 1700000000 ") == "1700000000"
    with pytest.raises(ValidationError):
        to_unix_timestamp(True)
    with pytest.raises(ValidationError):
        to_unix_timestamp(["1700000000"])


def test_to_unix_timestamp_treats_naive_datetimes_as_utc():
    naive = datetime(2023, 11, 14, 22, 13, 20)

    assert to_unix_timestamp(naive) == "1700000000"
    assert to_unix_timestamp(naive) == to_unix_timestamp(naive.replace(tzinfo=timezone.utc))


def test_business_categories_use_known_enum_values():
    raw = make_match(1, business_categories=["RESTAURANTS_DINING", "FLOATING_MARKETS"])["content"]

    record = BusinessRecord.from_dict(raw)

    assert record.business_categories == (BizCategory.RESTAURANTS_DINING, "FLOATING_MARKETS")
    assert isinstance(record.business_categories[0], BizCategory)
    assert not isinstance(record.business_categories[1], BizCategory)
    assert record.business_categories[0] == "RESTAURANTS_DINING"
