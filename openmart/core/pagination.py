"""Cursor pagination over the search endpoints."""

import logging
from typing import Any, Dict, Iterator, List, Optional

from openmart.core.errors import ValidationError
from openmart.etl.request import Endpoint, FilterLike, filter_to_dict, normalize
from openmart.etl.transform import resolve
from openmart.models import SearchIdResult, SearchMatch
from openmart.vendors.openmart_api import Transport

logger = logging.getLogger(__name__)


class Paginator:
    """Walks one endpoint page by page, resuming from the cursor of each page's last item.

    A page ends the walk when it is shorter than the limit it was requested with
    or when its last item carries no cursor. Errors abort the walk immediately.
    """

    def __init__(self, transport: Transport, endpoint: Endpoint = Endpoint.SEARCH):
        self._transport = transport
        self._endpoint = endpoint
        self._item_type = SearchMatch if endpoint is Endpoint.SEARCH else SearchIdResult

    def _base_filter(self, search_filter: FilterLike) -> Dict[str, Any]:
        base = filter_to_dict(search_filter)
        if base.pop("estimate_total", None):
            logger.debug("estimate_total is ignored while paginating")
        return base

    def fetch_page(self, base: Dict[str, Any], limit: int, cursor: Any = None) -> List[Any]:
        overrides: Dict[str, Any] = {"limit": limit}
        if cursor is not None:
            overrides["cursor"] = cursor
        path, body = normalize(base, self._endpoint, overrides)
        page = resolve(False, self._transport.post(path, body), self._item_type)
        logger.info("Fetched %d results from %s (limit=%d)", len(page), path, limit)
        return page

    @staticmethod
    def _next_cursor(page: List[Any], limit: int) -> Optional[Any]:
        if len(page) < limit:
            return None
        return page[-1].cursor

    def paginate(self, search_filter: FilterLike = None, page_size: Optional[int] = None) -> Iterator[List[Any]]:
        """Lazily yield pages; nothing is requested until the consumer asks for the next one.

        Empty pages are not yielded. To resume later, start a new walk with the
        saved cursor in the filter.
        """
        base = self._base_filter(search_filter)
        if page_size is None:
            page_size = base.get("limit") or 50
        _check_positive("page_size", page_size)
        limit = min(page_size, self._endpoint.max_limit)
        cursor = base.pop("cursor", None)
        pages = 0

        while True:
            page = self.fetch_page(base, limit, cursor)
            if not page:
                break
            pages += 1
            yield page
            cursor = self._next_cursor(page, limit)
            if cursor is None:
                break
            logger.debug("Continuing from cursor after page %d", pages)

        logger.info("Pagination finished after %d pages", pages)

    def collect(self, search_filter: FilterLike = None, max_results: int = 1000) -> List[Any]:
        """Accumulate results across pages, returning at most ``max_results`` in arrival order.

        The per-request limit is clamped to the endpoint ceiling and to what is
        still missing. Results are not deduplicated.
        """
        _check_positive("max_results", max_results)
        base = self._base_filter(search_filter)
        cursor = base.pop("cursor", None)
        results: List[Any] = []

        while len(results) < max_results:
            limit = min(self._endpoint.max_limit, max_results - len(results))
            page = self.fetch_page(base, limit, cursor)
            results.extend(page[:limit])
            cursor = self._next_cursor(page, limit)
            if cursor is None:
                break

        logger.info("Collected %d results (max_results=%d)", len(results), max_results)
        return results[:max_results]


def _check_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}", details={"field": name})
