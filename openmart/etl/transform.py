"""Utilities for turning search API responses into typed results."""

import logging
from typing import Any, Iterable, List, Sequence, Tuple, Type, Union

from openmart.core.errors import OpenMartError
from openmart.models import BusinessRecord, CountedResults, SearchIdResult, SearchMatch, Staff

logger = logging.getLogger(__name__)

ItemType = Union[Type[SearchMatch], Type[SearchIdResult]]


def _parse_items(items: Any, item_type: ItemType) -> List[Any]:
    if not isinstance(items, list):
        raise OpenMartError(
            f"Expected a list of results, got {type(items).__name__}",
            code="INVALID_RESPONSE",
        )
    parsed = []
    for item in items:
        if not isinstance(item, dict):
            raise OpenMartError(
                f"Expected result objects, got {type(item).__name__}",
                code="INVALID_RESPONSE",
            )
        try:
            parsed.append(item_type.from_dict(item))
        except (AttributeError, TypeError, ValueError) as exc:
            raise OpenMartError(
                f"Malformed {item_type.__name__} in response: {exc}",
                code="INVALID_RESPONSE",
                details={"id": item.get("id")},
            ) from exc
    return parsed


def resolve(
    estimate_total: bool,
    raw: Any,
    item_type: ItemType = SearchMatch,
) -> Union[List[Any], CountedResults]:
    """Unwrap a response body according to the flag the request was sent with.

    ``estimate_total`` requests answer with ``{"data": [...], "total_count": n}``,
    everything else with a bare list. The flag decides; the body is only checked
    against it.
    """
    if estimate_total:
        # only the identifiers endpoint may leave total_count out
        required = ("data", "total_count") if item_type is SearchMatch else ("data",)
        if not isinstance(raw, dict) or any(key not in raw for key in required):
            raise OpenMartError(
                f"Expected a counted response with {' and '.join(repr(key) for key in required)}",
                code="INVALID_RESPONSE",
            )
        return CountedResults(data=_parse_items(raw["data"], item_type), total_count=raw.get("total_count"))
    return _parse_items(raw, item_type)


def extract_records(matches: Iterable[SearchMatch]) -> List[BusinessRecord]:
    return [match.content for match in matches]


def extract_staff(matches: Iterable[SearchMatch]) -> List[Tuple[str, Staff]]:
    """Flatten staff lists into ``(business label, staff)`` pairs."""
    pairs: List[Tuple[str, Staff]] = []
    for match in matches:
        record = match.content
        if not record.staffs:
            continue
        for staff in record.staffs:
            pairs.append((record.label, staff))
    return pairs


def filter_by_features(matches: Iterable[SearchMatch], features: Sequence[str]) -> List[SearchMatch]:
    """Keep matches whose record advertises at least one of ``features``."""
    wanted = set(features)
    selected = []
    for match in matches:
        record_features = match.content.features
        if not record_features:
            continue
        if wanted.intersection(record_features):
            selected.append(match)
    logger.debug("Feature filter kept %d matches for %s", len(selected), sorted(wanted))
    return selected
