"""CLI job to run OpenMart lead searches and print results as JSON lines."""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, Iterable, Optional, TextIO

from openmart.client import OpenMart
from openmart.core.config import get_settings
from openmart.core.errors import ConfigError, OpenMartError, ValidationError
from openmart.models import Coordinates, CountedResults, Location, SearchMatch

logger = logging.getLogger(__name__)


def build_filter(args: argparse.Namespace) -> Dict[str, Any]:
    search_filter: Dict[str, Any] = {"query": args.query}

    if args.lat is not None or args.lng is not None:
        if args.lat is None or args.lng is None:
            raise ValueError("--lat and --lng must be given together")
        search_filter["location"] = Location(
            city=args.city,
            state=args.state,
            country=args.country,
            coordinates=Coordinates(args.lat, args.lng),
            geo_radius=args.radius,
        )
    elif args.city or args.state or args.country:
        search_filter["location"] = Location(city=args.city, state=args.state, country=args.country)

    if args.min_rating is not None:
        search_filter["min_overall_rating"] = args.min_rating
    if args.has_website:
        search_filter["has_website"] = True
    if args.limit is not None:
        search_filter["limit"] = args.limit
    if args.estimate_total:
        search_filter["estimate_total"] = True
    return search_filter


def to_json_row(item: Any) -> Dict[str, Any]:
    if isinstance(item, SearchMatch):
        return {
            "id": item.id,
            "match_score": item.match_score,
            "match_highlights": list(item.match_highlights),
            "content": item.content.raw_snapshot,
            "cursor": item.cursor,
        }
    return asdict(item)


def write_rows(items: Iterable[Any], out: TextIO) -> int:
    count = 0
    for item in items:
        out.write(json.dumps(to_json_row(item), ensure_ascii=False, default=str))
        out.write("\n")
        count += 1
    return count


def run_search_job(args: argparse.Namespace, client: Optional[OpenMart] = None, out: TextIO = sys.stdout) -> int:
    """Run one search as described by the parsed CLI arguments; returns the number of rows written."""
    if args.pages is not None and args.pages < 1:
        raise ValidationError(f"--pages must be a positive integer, got {args.pages}", details={"field": "pages"})
    client = client or OpenMart(api_key=args.api_key)
    search_filter = build_filter(args)
    logger.info("Running OpenMart search for query=%s", args.query)

    if args.pages is not None:
        written = 0
        for number, page in enumerate(
            client.search.paginate(search_filter, page_size=args.limit, only_ids=args.ids_only), start=1
        ):
            logger.info("Fetched %d results on page %d", len(page), number)
            written += write_rows(page, out)
            if number >= args.pages:
                break
    elif args.max_results is not None:
        written = write_rows(client.search.all(search_filter, args.max_results, only_ids=args.ids_only), out)
    else:
        search = client.search.only_ids if args.ids_only else client.search.query
        result = search(search_filter)
        if isinstance(result, CountedResults):
            logger.info("Estimated total matches: %s", result.total_count)
            result = result.data
        written = write_rows(result, out)

    logger.info("Completed run: rows_written=%d", written)
    return written


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Search OpenMart business leads")
    parser.add_argument("query", help="Free-text search, e.g. 'coffee shops'")
    parser.add_argument("--api-key", dest="api_key", help="Overrides OPENMART_API_KEY")
    parser.add_argument("--city", dest="city", help="City filter")
    parser.add_argument("--state", dest="state", help="State filter")
    parser.add_argument("--country", dest="country", help="Country filter")
    parser.add_argument("--lat", dest="lat", type=float, help="Latitude of the search center")
    parser.add_argument("--lng", dest="lng", type=float, help="Longitude of the search center")
    parser.add_argument("--radius", dest="radius", type=float, help="Search radius in meters")
    parser.add_argument("--min-rating", dest="min_rating", type=float, help="Minimum overall rating")
    parser.add_argument("--has-website", dest="has_website", action="store_true", help="Only businesses with a website")
    parser.add_argument("--ids-only", dest="ids_only", action="store_true", help="Return identifiers only")
    parser.add_argument("--estimate-total", dest="estimate_total", action="store_true", help="Log the estimated total")
    parser.add_argument("--limit", dest="limit", type=int, help="Page size (default 50)")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--max-results", dest="max_results", type=int, help="Collect up to this many results")
    group.add_argument(
        "--pages",
        dest="pages",
        type=int,
        help=f"Walk at most this many pages (page size defaults to {get_settings().page_size})",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        run_search_job(args)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 2
    except (OpenMartError, ValueError) as exc:
        code = getattr(exc, "code", "VALIDATION_ERROR")
        logger.error("Search failed [%s]: %s", code, exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
