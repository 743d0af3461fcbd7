"""Core data models shared by the OpenMart search client."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from openmart.core.errors import ValidationError


class _Unset:
    """Marker for filter fields the caller never set (distinct from ``None``)."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Opaque pagination token. Stored and replayed verbatim, never inspected.
Cursor = Any


class OwnershipType(str, Enum):
    INDEPENDENT = "INDEPENDENT"
    FAMILY = "FAMILY"
    FRANCHISE = "FRANCHISE"
    CHAIN = "CHAIN"


class BizCategory(str, Enum):
    RESTAURANTS_DINING = "RESTAURANTS_DINING"
    BARS_NIGHTLIFE = "BARS_NIGHTLIFE"
    GROCERY_CONVENIENCE_STORES = "GROCERY_CONVENIENCE_STORES"
    PHARMACIES_DRUGSTORES = "PHARMACIES_DRUGSTORES"
    BEAUTY_PERSONAL_CARE = "BEAUTY_PERSONAL_CARE"
    FITNESS_RECREATION = "FITNESS_RECREATION"
    AUTO_SERVICES = "AUTO_SERVICES"
    HOTELS_ACCOMMODATIONS = "HOTELS_ACCOMMODATIONS"
    EVENT_PLANNING_SERVICES = "EVENT_PLANNING_SERVICES"
    FINANCIAL_SERVICES = "FINANCIAL_SERVICES"
    REAL_ESTATE_PROPERTY_MANAGEMENT = "REAL_ESTATE_PROPERTY_MANAGEMENT"
    LEGAL_PROFESSIONAL_SERVICES = "LEGAL_PROFESSIONAL_SERVICES"
    HEALTH_WELLNESS = "HEALTH_WELLNESS"
    HOME_SERVICES_CONTRACTORS = "HOME_SERVICES_CONTRACTORS"
    CHILD_CARE_EDUCATION = "CHILD_CARE_EDUCATION"
    ARTS_ENTERTAINMENT = "ARTS_ENTERTAINMENT"
    SHOPPING_RETAIL = "SHOPPING_RETAIL"
    TECHNOLOGY_ELECTRONICS = "TECHNOLOGY_ELECTRONICS"
    TRANSPORTATION_TRAVEL = "TRANSPORTATION_TRAVEL"
    PUBLIC_SERVICES_GOVERNMENT = "PUBLIC_SERVICES_GOVERNMENT"
    PET_SERVICES_SUPPLIES = "PET_SERVICES_SUPPLIES"
    OTHER = "OTHER"


@dataclass(frozen=True, slots=True)
class Coordinates:
    latitude: float
    longitude: float

    def to_dict(self) -> Dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True, slots=True)
class Location:
    """One place descriptor: city/state/country and/or coordinates with a radius in meters."""

    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    coordinates: Optional[Coordinates] = None
    geo_radius: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for name in ("city", "state", "country"):
            value = getattr(self, name)
            if value is not None:
                payload[name] = value
        if self.coordinates is not None:
            payload["coordinates"] = self.coordinates.to_dict()
        if self.geo_radius is not None:
            payload["geo_radius"] = self.geo_radius
        return payload


def to_unix_timestamp(value: Union[int, float, str, datetime]) -> str:
    """Render a date bound the way the search API expects it: stringified Unix seconds.

    Naive datetimes are taken as UTC.
    """
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return str(int(value.timestamp()))
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValidationError(
            f"timestamps must be int, float, str or datetime, got {type(value).__name__}",
            details={"type": type(value).__name__},
        )
    if isinstance(value, (int, float)):
        return str(int(value))
    return value.strip()


@dataclass(frozen=True)
class SearchFilter:
    """Declarative search filter.

    Every field defaults to ``UNSET`` and is left out of the request body. Setting a
    field to ``None`` sends an explicit JSON ``null``; the service treats both as
    "do not filter on this dimension".
    """

    query: Any = UNSET
    location: Any = UNSET
    min_locations: Any = UNSET
    max_locations: Any = UNSET
    has_contact_info: Any = UNSET
    min_total_reviews: Any = UNSET
    max_total_reviews: Any = UNSET
    ownership_type: Any = UNSET
    min_price_tier: Any = UNSET
    max_price_tier: Any = UNSET
    min_overall_rating: Any = UNSET
    max_overall_rating: Any = UNSET
    limit: Any = UNSET
    cursor: Any = UNSET
    has_website: Any = UNSET
    estimate_total: Any = UNSET
    exclude_root_domains: Any = UNSET
    exclude_keywords: Any = UNSET
    include_keywords: Any = UNSET
    has_valid_website: Any = UNSET
    open_date_before: Any = UNSET
    open_date_after: Any = UNSET
    store_name: Any = UNSET
    info_updated_before: Any = UNSET
    info_updated_after: Any = UNSET

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is UNSET:
                continue
            payload[f.name] = to_wire(f.name, value)
        return payload


_TIMESTAMP_FIELDS = {"open_date_before", "open_date_after", "info_updated_before", "info_updated_after"}


def to_wire(name: str, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Location):
        return value.to_dict()
    if isinstance(value, Enum):
        return value.value
    if name == "location" and isinstance(value, (list, tuple)):
        return [item.to_dict() if isinstance(item, Location) else item for item in value]
    if name in _TIMESTAMP_FIELDS:
        return to_unix_timestamp(value)
    if isinstance(value, tuple):
        return list(value)
    return value


@dataclass(frozen=True, slots=True)
class Staff:
    name: str
    role: str

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Staff":
        return cls(name=raw.get("name") or "", role=raw.get("role") or "")


@dataclass(frozen=True, slots=True)
class PriceRange:
    min_: Optional[float] = None
    max_: Optional[float] = None
    currency: Optional[str] = None


def _category(value: Any) -> Union[BizCategory, str]:
    # categories the client does not know yet stay plain strings
    try:
        return BizCategory(value)
    except ValueError:
        return value


def _as_tuple(value: Any) -> Optional[Tuple[Any, ...]]:
    if value is None:
        return None
    return tuple(value)


@dataclass(frozen=True, slots=True)
class BusinessRecord:
    """A business/store location as returned by the search API.

    Known keys are lifted into typed attributes, unrecognized keys land in ``extra``
    and the untouched payload is kept in ``raw_snapshot``.
    """

    store_id: str
    store_name: str
    store_emails: Tuple[str, ...] = ()
    store_phones: Tuple[str, ...] = ()
    place_key: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    brand_id: Optional[str] = None
    business_name: Optional[str] = None
    business_type: Optional[str] = None
    business_categories: Optional[Tuple[Union[BizCategory, str], ...]] = None
    business_specialty: Optional[str] = None
    business_keywords: Optional[Tuple[str, ...]] = None
    product_services_offered: Optional[Tuple[str, ...]] = None
    brand_description: Optional[str] = None
    website_url: Optional[str] = None
    business_emails: Optional[Tuple[str, ...]] = None
    business_phones: Optional[Tuple[str, ...]] = None
    social_media_links: Optional[Dict[str, List[str]]] = None
    ownership_type: Optional[str] = None
    staffs: Optional[Tuple[Staff, ...]] = None
    source_urls: Optional[Tuple[str, ...]] = None
    root_domain: Optional[str] = None
    num_stores: Optional[int] = None
    source_id: Optional[str] = None
    store_description: Optional[str] = None
    features: Optional[Dict[str, List[str]]] = None
    price_range: Optional[PriceRange] = None
    price_tier: Optional[int] = None
    google_reviews_count: Optional[int] = None
    google_rating: Optional[float] = None
    yelp_reviews_count: Optional[int] = None
    yelp_rating: Optional[float] = None
    from_sources: Dict[str, Any] = field(default_factory=dict)
    tags: Tuple[str, ...] = ()
    street_address: Optional[str] = None
    zipcode: Optional[str] = None
    open_date: Optional[str] = None
    info_refreshed_at: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)
    raw_snapshot: Dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def label(self) -> str:
        return self.business_name or self.store_name

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "BusinessRecord":
        known = _RECORD_FIELDS
        values: Dict[str, Any] = {}
        for name in known:
            if name in raw:
                values[name] = raw[name]

        for name in _TUPLE_FIELDS:
            if name in values:
                values[name] = _as_tuple(values[name])
        if values.get("business_categories") is not None:
            values["business_categories"] = tuple(_category(item) for item in values["business_categories"])
        for name in ("store_emails", "store_phones", "tags"):
            values[name] = tuple(raw.get(name) or ())
        if values.get("staffs") is not None:
            values["staffs"] = tuple(Staff.from_dict(item) for item in values["staffs"])
        price_range = values.get("price_range")
        if isinstance(price_range, Mapping):
            values["price_range"] = PriceRange(
                min_=price_range.get("min_"),
                max_=price_range.get("max_"),
                currency=price_range.get("currency"),
            )
        values["from_sources"] = dict(raw.get("from_sources") or {})
        values.setdefault("store_id", "")
        values["store_name"] = raw.get("store_name") or ""

        extra = {key: value for key, value in raw.items() if key not in known}
        return cls(**values, extra=extra, raw_snapshot=dict(raw))


_RECORD_FIELDS = frozenset(
    f.name for f in fields(BusinessRecord) if f.name not in {"extra", "raw_snapshot"}
)
_TUPLE_FIELDS = (
    "business_categories",
    "business_keywords",
    "product_services_offered",
    "business_emails",
    "business_phones",
    "source_urls",
)


@dataclass(frozen=True, slots=True)
class SearchMatch:
    """One search hit: the record plus relevance metadata and its resume cursor."""

    id: str
    content: BusinessRecord
    match_score: Optional[float] = None
    match_highlights: Tuple[str, ...] = ()
    cursor: Cursor = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SearchMatch":
        return cls(
            id=raw.get("id") or "",
            content=BusinessRecord.from_dict(raw.get("content") or {}),
            match_score=raw.get("match_score"),
            match_highlights=tuple(raw.get("match_highlights") or ()),
            cursor=raw.get("cursor"),
        )


@dataclass(frozen=True, slots=True)
class SearchIdResult:
    id: str
    place_id: Optional[str] = None
    match_score: Optional[float] = None
    cursor: Cursor = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SearchIdResult":
        return cls(
            id=raw.get("id") or "",
            place_id=raw.get("place_id"),
            match_score=raw.get("match_score"),
            cursor=raw.get("cursor"),
        )


@dataclass(frozen=True, slots=True)
class CountedResults:
    """Response envelope returned when the request asked for ``estimate_total``."""

    data: List[Any]
    total_count: Optional[int] = None

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self):
        return iter(self.data)
