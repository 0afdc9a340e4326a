from __future__ import annotations

import logging
from typing import Mapping

from .models import CartLineItem, PriceStats, StoreCart, TermMatch

logger = logging.getLogger(__name__)

# Prices are floats in store currency; anything closer than this is "the same price".
PRICE_TOLERANCE = 0.01

StoreResults = Mapping[str, Mapping[str, TermMatch]]


def aggregate_prices(terms: list[str], store_results: StoreResults) -> dict[str, PriceStats]:
    """Per term: cheapest price across stores, and the mean when 2+ stores have it."""
    stats: dict[str, PriceStats] = {}
    for term in terms:
        prices = [
            matches[term].product.price
            for matches in store_results.values()
            if term in matches
        ]
        if not prices:
            stats[term] = PriceStats(term=term)
            continue
        stats[term] = PriceStats(
            term=term,
            cheapest=min(prices),
            average=sum(prices) / len(prices) if len(prices) >= 2 else None,
            store_count=len(prices),
        )
    return stats


def not_found_terms(terms: list[str], stats: Mapping[str, PriceStats]) -> list[str]:
    return [t for t in terms if not stats[t].found]


def searchable_terms(terms: list[str], stats: Mapping[str, PriceStats]) -> list[str]:
    return [t for t in terms if stats[t].found]


def is_cheapest(price: float, cheapest: float | None) -> bool:
    if cheapest is None:
        return True
    return abs(price - cheapest) < PRICE_TOLERANCE


def build_line_item(term: str, match: TermMatch, stats: PriceStats) -> CartLineItem:
    p = match.product
    return CartLineItem(
        search_term=term,
        name=p.name,
        price=p.price,
        link=p.link,
        is_cheapest=is_cheapest(p.price, stats.cheapest),
        list_price=p.list_price,
        image_url=p.image_url,
        unit_info=match.unit_info,
        alternatives=match.alternatives,
        average_price=stats.average,
    )


def build_store_carts(
    terms: list[str],
    store_results: StoreResults,
    stats: Mapping[str, PriceStats],
) -> list[StoreCart]:
    """One cart per store, in store_results order. Stores with no matches get none."""
    searchable = searchable_terms(terms, stats)
    carts: list[StoreCart] = []

    for store_name, matches in store_results.items():
        items = [
            build_line_item(term, matches[term], stats[term])
            for term in terms
            if term in matches
        ]
        if not items:
            logger.debug("store %s matched nothing, dropped", store_name)
            continue

        found = {it.search_term for it in items}
        carts.append(
            StoreCart(
                store_name=store_name,
                items=tuple(items),
                total_price=sum(it.price for it in items),
                cheapest_count=sum(1 for it in items if it.is_cheapest),
                missing_terms=tuple(t for t in searchable if t not in found),
                total_searched=len(searchable),
            )
        )
    return carts


def rank_carts(carts: list[StoreCart]) -> list[StoreCart]:
    # Most complete first, then cheapest. sorted() is stable for full ties.
    return sorted(carts, key=lambda c: (-c.completeness, c.total_price))
