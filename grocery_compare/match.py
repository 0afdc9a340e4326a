from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

from .models import Alternative, ProductListing, ProductUnitInfo, TermMatch, UnitInfo
from .normalize import normalize_text, tokenize
from .units import parse_unit

logger = logging.getLogger(__name__)

UnitParser = Callable[[str], "UnitInfo | None"]

MIN_SCORE_THRESHOLD = 0.35
MAX_ALTERNATIVES = 3

TOKEN_WEIGHT = 0.7
LENGTH_WEIGHT = 0.3

# A listing carrying one of these, when the term does not, is most likely a
# different kind of product (the sauce instead of the vegetable, cat food
# instead of tuna...).
CATEGORY_MISMATCH_TOKENS: tuple[str, ...] = (
    # sauces / condiments
    "mayonesa", "ketchup", "mostaza", "aderezo",
    # pet food
    "whiskas", "pedigree", "purina", "friskies",
    "perro", "gato", "mascota", "gatito", "canino",
    # cleaning
    "limpiador", "desinfectante", "detergente", "lavandina",
    "suavizante", "quitamanchas",
    # personal care
    "shampoo", "acondicionador", "desodorante", "crema dental",
    # processed variants of the raw ingredient
    "mate cocido", "infusion", "saquito",
    # supplements
    "suplemento", "vitamina", "proteina",
)

MISMATCH_PENALTY = 0.5


@dataclass(frozen=True)
class ScoredCandidate:
    listing: ProductListing
    score: float
    unit_info: ProductUnitInfo | None


def raw_score(term_tokens: list[str], normalized_name: str) -> float:
    """Token overlap plus a length term, before any category penalty."""
    if not term_tokens:
        return 0.0
    matched = sum(1 for tok in term_tokens if tok in normalized_name)
    token_ratio = matched / len(term_tokens)

    name_tokens = max(1, len(tokenize(normalized_name)))
    length_ratio = min(1.0, len(term_tokens) / name_tokens)

    return TOKEN_WEIGHT * token_ratio + LENGTH_WEIGHT * length_ratio


def has_category_mismatch(normalized_term: str, normalized_name: str) -> bool:
    return any(
        tok in normalized_name and tok not in normalized_term
        for tok in CATEGORY_MISMATCH_TOKENS
    )


def score_candidate(normalized_term: str, term_tokens: list[str], listing: ProductListing) -> float:
    """Score one listing against an already-normalized search term.

    Not clamped: callers compare it against MIN_SCORE_THRESHOLD only.
    """
    name = normalize_text(listing.name)
    if not name:
        return 0.0
    score = raw_score(term_tokens, name)
    # Applied once no matter how many blocklist tokens hit.
    if has_category_mismatch(normalized_term, name):
        score *= MISMATCH_PENALTY
    return score


def safe_parse_unit(parser: UnitParser, text: str) -> UnitInfo | None:
    try:
        return parser(text)
    except Exception as exc:
        logger.warning("unit parser failed on %r: %s", text, exc)
        return None


def compute_unit_info(listing: ProductListing, parser: UnitParser = parse_unit) -> ProductUnitInfo | None:
    info = safe_parse_unit(parser, listing.name)
    if info is None or info.quantity <= 0:
        return None
    return ProductUnitInfo.from_unit(info, listing.price)


def _to_alternative(c: ScoredCandidate) -> Alternative:
    return Alternative(
        name=c.listing.name,
        price=c.listing.price,
        link=c.listing.link,
        list_price=c.listing.list_price,
        unit_info=c.unit_info,
    )


def pick_ranked_matches(
    term: str,
    listings: list[ProductListing],
    *,
    unit_parser: UnitParser = parse_unit,
) -> TermMatch | None:
    """Choose the best listing for one (store, term) pair, plus alternatives.

    Candidates under MIN_SCORE_THRESHOLD are discarded. When the term names a
    quantity ("queso cremoso 200g") the survivors are ranked by price per
    unit, cheapest absolute price breaking ties; otherwise by absolute price.
    Sorting is stable, so equal keys keep catalog order.
    """
    if not listings:
        return None

    normalized_term = normalize_text(term)
    term_tokens = tokenize(normalized_term)

    scored: list[ScoredCandidate] = []
    for listing in listings:
        # also catches NaN
        if not (listing.price > 0):
            logger.debug("dropping %r: non-positive price %r", listing.name, listing.price)
            continue
        score = score_candidate(normalized_term, term_tokens, listing)
        if score < MIN_SCORE_THRESHOLD:
            continue
        scored.append(ScoredCandidate(listing, score, compute_unit_info(listing, unit_parser)))

    if not scored:
        return None

    term_has_unit = safe_parse_unit(unit_parser, term) is not None
    if term_has_unit and any(c.unit_info is not None for c in scored):
        scored.sort(
            key=lambda c: (
                c.unit_info.price_per_unit if c.unit_info is not None else math.inf,
                c.listing.price,
            )
        )
    else:
        scored.sort(key=lambda c: c.listing.price)

    primary = scored[0]
    return TermMatch(
        product=primary.listing,
        unit_info=primary.unit_info,
        alternatives=tuple(_to_alternative(c) for c in scored[1 : 1 + MAX_ALTERNATIVES]),
    )
