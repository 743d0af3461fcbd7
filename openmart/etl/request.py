"""Build request bodies for the search endpoints from caller filters."""

import logging
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from openmart.core.errors import ValidationError
from openmart.models import OwnershipType, SearchFilter, to_wire
from openmart.vendors.openmart_api import ONLY_IDS_PATH, SEARCH_PATH

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_KEYWORDS = 64
MAX_EXCLUDED_DOMAINS = 10000


class Endpoint(str, Enum):
    SEARCH = "search"
    ONLY_IDS = "only_ids"

    @property
    def path(self) -> str:
        return SEARCH_PATH if self is Endpoint.SEARCH else ONLY_IDS_PATH

    @property
    def max_limit(self) -> int:
        return 500 if self is Endpoint.SEARCH else 1000


FilterLike = Union[SearchFilter, Mapping[str, Any], None]


def filter_to_dict(search_filter: FilterLike) -> Dict[str, Any]:
    """Return a fresh dict copy of a filter; the caller's object is never touched."""
    if search_filter is None:
        return {}
    if isinstance(search_filter, SearchFilter):
        return search_filter.to_dict()
    if isinstance(search_filter, Mapping):
        return {key: to_wire(key, value) for key, value in search_filter.items()}
    raise ValidationError(f"filter must be a SearchFilter or a mapping, got {type(search_filter).__name__}")


def validate_body(body: Mapping[str, Any], endpoint: Endpoint) -> None:
    limit = body.get("limit")
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise ValidationError(f"limit must be an integer, got {limit!r}", details={"field": "limit"})
    if not 1 <= limit <= endpoint.max_limit:
        raise ValidationError(
            f"limit must be between 1 and {endpoint.max_limit} for the {endpoint.value} endpoint, got {limit}",
            details={"field": "limit", "max": endpoint.max_limit},
        )

    if body.get("pagination") is not None:
        raise ValidationError(
            "the nested 'pagination' field is deprecated; use top-level 'cursor' and 'limit'",
            details={"field": "pagination"},
        )

    for name, bound in (
        ("include_keywords", MAX_KEYWORDS),
        ("exclude_keywords", MAX_KEYWORDS),
        ("exclude_root_domains", MAX_EXCLUDED_DOMAINS),
    ):
        values = body.get(name)
        if values is None:
            continue
        if not isinstance(values, list):
            raise ValidationError(
                f"{name} must be a list of strings, got {type(values).__name__}",
                details={"field": name},
            )
        if len(values) > bound:
            raise ValidationError(
                f"{name} accepts at most {bound} entries, got {len(values)}",
                details={"field": name, "max": bound},
            )

    ownership = body.get("ownership_type")
    if ownership is not None and (not isinstance(ownership, str) or ownership not in OwnershipType.__members__):
        raise ValidationError(
            f"ownership_type must be one of {', '.join(OwnershipType.__members__)}, got {ownership!r}",
            details={"field": "ownership_type"},
        )


def normalize(
    search_filter: FilterLike,
    endpoint: Endpoint = Endpoint.SEARCH,
    overrides: Optional[Mapping[str, Any]] = None,
) -> Tuple[str, Dict[str, Any]]:
    """Return ``(path, body)`` for one request.

    ``limit`` defaults to 50 underneath whatever the caller supplied; every other
    field, including explicit ``None`` values, is passed through as given. A
    ``None`` limit means "use the default".
    """
    body: Dict[str, Any] = {"limit": DEFAULT_LIMIT}
    body.update(filter_to_dict(search_filter))
    if overrides:
        body.update(overrides)
    if body["limit"] is None:
        body["limit"] = DEFAULT_LIMIT
    validate_body(body, endpoint)
    logger.debug("Normalized %s request: %s", endpoint.value, sorted(body))
    return endpoint.path, body
