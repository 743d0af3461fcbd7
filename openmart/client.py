"""Public entry point of the OpenMart lead search client."""

import logging
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

import requests

from openmart.core.config import ClientConfig, Settings, build_client_config, get_settings
from openmart.core.errors import OpenMartError
from openmart.core.pagination import Paginator
from openmart.etl.request import Endpoint, FilterLike, filter_to_dict, normalize
from openmart.etl.transform import resolve
from openmart.models import (
    Coordinates,
    CountedResults,
    Location,
    OwnershipType,
    SearchIdResult,
    SearchMatch,
    to_unix_timestamp,
)
from openmart.vendors.openmart_api import Transport

logger = logging.getLogger(__name__)

SearchResult = Union[List[SearchMatch], CountedResults]
IdsResult = Union[List[SearchIdResult], CountedResults]
Timestamp = Union[int, float, str, datetime]


def _merge(search_filter: FilterLike, extra: Dict[str, Any]) -> Dict[str, Any]:
    body = filter_to_dict(search_filter)
    body.update(filter_to_dict(extra))
    return body


class SearchNamespace:
    """Search operations: single requests, pagination and convenience filters."""

    def __init__(self, transport: Transport, settings: Settings):
        self._transport = transport
        self._settings = settings

    def _run(self, search_filter: FilterLike, endpoint: Endpoint, error_message: str, error_code: str):
        try:
            path, body = normalize(search_filter, endpoint)
            raw = self._transport.post(path, body)
            item_type = SearchMatch if endpoint is Endpoint.SEARCH else SearchIdResult
            return resolve(bool(body.get("estimate_total")), raw, item_type)
        except OpenMartError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.exception("%s: %s", error_message, exc)
            raise OpenMartError(error_message, code=error_code) from exc

    def query(self, search_filter: FilterLike = None, **filters: Any) -> SearchResult:
        """Query for business leads.

        Returns a list of ``SearchMatch`` or, when ``estimate_total`` is set,
        ``CountedResults`` carrying the approximate total. ``limit`` defaults to
        50 (max 500).
        """
        return self._run(
            _merge(search_filter, filters),
            Endpoint.SEARCH,
            "An unexpected error occurred during search",
            "SEARCH_ERROR",
        )

    def only_ids(self, search_filter: FilterLike = None, **filters: Any) -> IdsResult:
        """Like ``query`` but returns identifiers, place ids, scores and cursors only (limit max 1000)."""
        return self._run(
            _merge(search_filter, filters),
            Endpoint.ONLY_IDS,
            "An unexpected error occurred during ID search",
            "SEARCH_IDS_ERROR",
        )

    def paginate(
        self,
        search_filter: FilterLike = None,
        page_size: Optional[int] = None,
        only_ids: bool = False,
    ) -> Iterator[List[Any]]:
        endpoint = Endpoint.ONLY_IDS if only_ids else Endpoint.SEARCH
        if page_size is None:
            page_size = filter_to_dict(search_filter).get("limit") or self._settings.page_size
        return Paginator(self._transport, endpoint).paginate(search_filter, page_size)

    def all(
        self,
        search_filter: FilterLike = None,
        max_results: Optional[int] = None,
        only_ids: bool = False,
    ) -> List[Any]:
        endpoint = Endpoint.ONLY_IDS if only_ids else Endpoint.SEARCH
        if max_results is None:
            max_results = self._settings.max_results
        return Paginator(self._transport, endpoint).collect(search_filter, max_results)

    # Convenience helpers. Each one pre-fills filter fields and delegates to ``query``.

    def near(self, latitude: float, longitude: float, radius_m: float = 5000, **filters: Any) -> SearchResult:
        location = Location(coordinates=Coordinates(latitude, longitude), geo_radius=radius_m)
        return self.query(location=location, **filters)

    def in_city(
        self,
        city: str,
        state: Optional[str] = None,
        country: Optional[str] = None,
        **filters: Any,
    ) -> SearchResult:
        return self.query(location=Location(city=city, state=state, country=country), **filters)

    def high_rated(self, min_rating: float = 4.0, **filters: Any) -> SearchResult:
        return self.query(min_overall_rating=min_rating, **filters)

    def with_website(self, valid: bool = False, **filters: Any) -> SearchResult:
        if valid:
            return self.query(has_valid_website=True, **filters)
        return self.query(has_website=True, **filters)

    def with_contact_info(self, **filters: Any) -> SearchResult:
        return self.query(has_contact_info=True, **filters)

    def by_store_name(self, store_name: str, **filters: Any) -> SearchResult:
        return self.query(store_name=store_name, **filters)

    def by_ownership(self, ownership_type: Union[OwnershipType, str], **filters: Any) -> SearchResult:
        return self.query(ownership_type=ownership_type, **filters)

    def opened_between(
        self,
        after: Optional[Timestamp] = None,
        before: Optional[Timestamp] = None,
        **filters: Any,
    ) -> SearchResult:
        if after is not None:
            filters["open_date_after"] = to_unix_timestamp(after)
        if before is not None:
            filters["open_date_before"] = to_unix_timestamp(before)
        return self.query(**filters)

    def updated_since(self, after: Timestamp, **filters: Any) -> SearchResult:
        return self.query(info_updated_after=to_unix_timestamp(after), **filters)

    def keywords(
        self,
        include: Sequence[str] = (),
        exclude: Sequence[str] = (),
        **filters: Any,
    ) -> SearchResult:
        if include:
            filters["include_keywords"] = list(include)
        if exclude:
            filters["exclude_keywords"] = list(exclude)
        return self.query(**filters)


class OpenMart:
    """Client for the OpenMart business lead search API.

    >>> client = OpenMart(api_key="...")
    >>> matches = client.search.query(query="coffee", location={"city": "SF"}, limit=10)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ):
        settings = get_settings()
        config = build_client_config(api_key, base_url, timeout, headers, settings=settings)
        self._transport = Transport(config, session=session, max_retries=settings.max_retries)
        self.search = SearchNamespace(self._transport, settings)
        logger.info("OpenMart client ready (base_url=%s)", config.base_url)

    def update_api_key(self, api_key: str) -> None:
        """Swap the API key for all requests dispatched from now on."""
        self._transport.update_api_key(api_key)

    def get_config(self) -> ClientConfig:
        config = self._transport.config
        return ClientConfig(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            headers=dict(config.headers),
        )

    def close(self) -> None:
        self._transport.close()

    def __enter__(self) -> "OpenMart":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
