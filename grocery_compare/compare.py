from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Mapping

from .cart import aggregate_prices, build_store_carts, not_found_terms, rank_carts
from .catalog import CatalogClient
from .match import UnitParser, pick_ranked_matches
from .models import ShoppingPlanResult, StoreQueryResult, TermMatch
from .normalize import dedupe_terms
from .units import parse_unit

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _fetch_term(catalog: CatalogClient, term: str, region: str | None) -> list[StoreQueryResult]:
    try:
        return list(catalog.search_all_stores(term, region))
    except Exception as exc:
        # Same as every store failing for this term.
        logger.warning("catalog search failed for %r: %s", term, exc)
        return []


def fetch_all(
    terms: list[str],
    region: str | None,
    catalog: CatalogClient,
    *,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[str, list[StoreQueryResult]]:
    """Query every term concurrently; returns only once all terms are back."""
    if not terms:
        return {}
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(terms)))) as pool:
        results = list(pool.map(lambda t: _fetch_term(catalog, t, region), terms))
    return dict(zip(terms, results))


def match_all(
    terms: list[str],
    fetched: Mapping[str, list[StoreQueryResult]],
    *,
    unit_parser: UnitParser = parse_unit,
) -> Mapping[str, Mapping[str, TermMatch]]:
    """Score every (store, term) pair into store -> term -> match.

    Stores are keyed in first-seen order, walking terms in list order.
    """
    by_store: dict[str, dict[str, TermMatch]] = {}
    for term in terms:
        for res in fetched.get(term, []):
            if res.failed or not res.products:
                continue
            match = pick_ranked_matches(term, res.products, unit_parser=unit_parser)
            if match is None:
                logger.debug("no match store=%s term=%r", res.store_name, term)
                continue
            logger.debug(
                "match store=%s term=%r -> %r @ %s",
                res.store_name, term, match.product.name, match.product.price,
            )
            by_store.setdefault(res.store_name, {})[term] = match
    return MappingProxyType({k: MappingProxyType(v) for k, v in by_store.items()})


def compare_products(
    search_terms: list[str],
    region: str | None = None,
    *,
    catalog: CatalogClient,
    unit_parser: UnitParser = parse_unit,
    max_workers: int = DEFAULT_MAX_WORKERS,
    clock: Callable[[], datetime] | None = None,
) -> ShoppingPlanResult:
    """Search every store for each term and build ranked, comparable carts.

    Never raises for missing data: if every store fails, the result simply
    has no carts and every term in ``not_found``.
    """
    terms = dedupe_terms(search_terms)

    fetched = fetch_all(terms, region, catalog, max_workers=max_workers)
    store_results = match_all(terms, fetched, unit_parser=unit_parser)

    stats = aggregate_prices(terms, store_results)
    carts = rank_carts(build_store_carts(terms, store_results, stats))
    not_found = not_found_terms(terms, stats)
    searched_at = (clock or _utcnow)().isoformat()

    logger.info(
        "compared %d terms: %d carts, %d not found",
        len(terms), len(carts), len(not_found),
    )
    return ShoppingPlanResult(
        store_carts=tuple(carts),
        not_found=tuple(not_found),
        searched_at=searched_at,
    )
