"""Python client for the OpenMart business lead search API."""

from openmart.client import OpenMart, SearchNamespace
from openmart.core.config import ClientConfig, Settings, get_settings
from openmart.core.errors import ConfigError, OpenMartError, ValidationError, classify
from openmart.etl.request import Endpoint, normalize
from openmart.etl.transform import extract_records, extract_staff, filter_by_features, resolve
from openmart.models import (
    UNSET,
    BizCategory,
    BusinessRecord,
    Coordinates,
    CountedResults,
    Location,
    OwnershipType,
    PriceRange,
    SearchFilter,
    SearchIdResult,
    SearchMatch,
    Staff,
)

__all__ = [
    "UNSET",
    "BizCategory",
    "BusinessRecord",
    "ClientConfig",
    "ConfigError",
    "Coordinates",
    "CountedResults",
    "Endpoint",
    "Location",
    "OpenMart",
    "OpenMartError",
    "OwnershipType",
    "PriceRange",
    "SearchFilter",
    "SearchIdResult",
    "SearchMatch",
    "SearchNamespace",
    "Settings",
    "Staff",
    "ValidationError",
    "classify",
    "extract_records",
    "extract_staff",
    "filter_by_features",
    "get_settings",
    "normalize",
    "resolve",
]
