import pytest

from grocery_compare.match import (
    MIN_SCORE_THRESHOLD,
    compute_unit_info,
    pick_ranked_matches,
    raw_score,
    score_candidate,
)
from grocery_compare.models import ProductListing
from grocery_compare.normalize import normalize_text, tokenize


def _listing(name="Tomate Perita", price=100.0, link=None):
    return ProductListing(name=name, price=price, link=link or f"https://store.test/{name}")


def _score(term, name):
    t = normalize_text(term)
    return score_candidate(t, tokenize(t), _listing(name))


def test_full_token_match_short_name():
    # 1 of 1 tokens, length 1/2
    assert _score("tomate", "Tomate Perita") == pytest.approx(0.7 + 0.3 * 0.5)


def test_exact_name_scores_one():
    assert _score("leche entera", "Leche Entera") == pytest.approx(1.0)


def test_accents_ignored():
    assert _score("azúcar", "AZUCAR Ledesma") == pytest.approx(0.85)


def test_token_matches_as_substring():
    # "tomate" is inside "tomates"
    assert _score("tomate", "Tomates") == pytest.approx(1.0)


def test_unrelated_listing_scores_low():
    assert _score("leche", "Galletitas Chocolate") < MIN_SCORE_THRESHOLD


def test_mismatch_penalty_halves_score():
    name = "Ketchup Tomate Hellmann's 500g"
    raw = raw_score(["tomate"], normalize_text(name))
    assert _score("tomate", name) == pytest.approx(raw * 0.5)


def test_mismatch_penalty_applied_once():
    # two blocklist tokens, still just one halving
    raw = raw_score(["tomate"], "mayonesa ketchup tomate")
    assert _score("tomate", "Mayonesa Ketchup Tomate") == pytest.approx(raw * 0.5)


def test_no_penalty_when_term_has_the_token():
    assert _score("mayonesa", "Mayonesa Hellmanns") == pytest.approx(0.85)


def test_multiword_blocklist_entry():
    raw = raw_score(["yerba"], "yerba mate cocido 25 saquitos")
    assert _score("yerba", "Yerba Mate Cocido 25 saquitos") == pytest.approx(raw * 0.5)


def test_empty_name_scores_zero():
    assert _score("leche", "") == 0.0


def test_empty_listing_list():
    assert pick_ranked_matches("tomate", []) is None


def test_nothing_over_threshold():
    assert pick_ranked_matches("leche", [_listing("Galletitas Chocolate")]) is None


def test_penalty_drops_partial_match():
    # 1/3 tokens + full length term = 0.533, halved to 0.267
    listings = [_listing("Ketchup Tomate 500g")]
    assert pick_ranked_matches("pure de tomate", listings) is None


def test_below_threshold_never_primary_or_alternative():
    listings = [
        _listing("Tomate Perita", 300.0),
        _listing("Galletitas Chocolate Tomate Extra Grande Familiar Oferta", 10.0),
        _listing("Shampoo Herbal", 1.0),
    ]
    m = pick_ranked_matches("tomate perita", listings)
    assert m is not None
    chosen = [m.product.name] + [a.name for a in m.alternatives]
    for name in chosen:
        assert _score("tomate perita", name) >= MIN_SCORE_THRESHOLD
    assert "Shampoo Herbal" not in chosen


def test_cheapest_absolute_price_without_unit_in_term():
    listings = [
        _listing("Aceite Girasol 1.5 L", 2250.0),
        _listing("Aceite Girasol 900 ml", 1500.0),
    ]
    m = pick_ranked_matches("aceite girasol", listings)
    assert m.product.name == "Aceite Girasol 900 ml"
    assert [a.name for a in m.alternatives] == ["Aceite Girasol 1.5 L"]


def test_price_per_unit_when_term_has_unit():
    listings = [
        _listing("Aceite Girasol 900 ml", 1500.0),
        _listing("Aceite Girasol 1.5 L", 2250.0),
    ]
    m = pick_ranked_matches("aceite 1.5l", listings)
    assert m.product.name == "Aceite Girasol 1.5 L"
    assert m.unit_info.price_per_unit == pytest.approx(1.5)
    assert m.alternatives[0].unit_info.price_per_unit == pytest.approx(1500 / 900)


def test_listings_without_unit_sort_last_per_unit():
    listings = [
        _listing("Aceite Girasol Botella", 100.0),
        _listing("Aceite Girasol 900 ml", 1500.0),
    ]
    m = pick_ranked_matches("aceite 1.5l", listings)
    assert m.product.name == "Aceite Girasol 900 ml"
    assert m.alternatives[0].name == "Aceite Girasol Botella"
    assert m.alternatives[0].unit_info is None


def test_per_unit_tie_broken_by_price():
    listings = [
        _listing("Yerba 1kg", 2000.0),
        _listing("Yerba 500g", 1000.0),
    ]
    m = pick_ranked_matches("yerba 500g", listings)
    assert m.product.name == "Yerba 500g"


def test_term_unit_but_no_candidate_unit_uses_price():
    listings = [
        _listing("Queso Cremoso Horma", 900.0),
        _listing("Queso Cremoso Trozado", 700.0),
    ]
    m = pick_ranked_matches("queso cremoso 200g", listings)
    assert m.product.name == "Queso Cremoso Trozado"


def test_at_most_three_alternatives_primary_excluded():
    listings = [_listing(f"Arroz Largo {i}", 100.0 + i) for i in range(6)]
    m = pick_ranked_matches("arroz", listings)
    assert m.product.name == "Arroz Largo 0"
    assert [a.name for a in m.alternatives] == ["Arroz Largo 1", "Arroz Largo 2", "Arroz Largo 3"]


def test_ties_keep_catalog_order():
    listings = [_listing(f"Arroz {c}", 100.0) for c in "ABCD"]
    m = pick_ranked_matches("arroz", listings)
    assert m.product.name == "Arroz A"
    assert [a.name for a in m.alternatives] == ["Arroz B", "Arroz C", "Arroz D"]


def test_non_positive_price_dropped():
    listings = [_listing("Leche Entera", 0.0), _listing("Leche Entera", -5.0), _listing("Leche Entera", 950.0)]
    m = pick_ranked_matches("leche entera", listings)
    assert m.product.price == 950.0
    assert m.alternatives == ()


def test_broken_unit_parser_is_not_fatal():
    def boom(text):
        raise ValueError("bad text")

    m = pick_ranked_matches("aceite 1.5l", [_listing("Aceite 1.5 L", 2000.0)], unit_parser=boom)
    assert m is not None
    assert m.unit_info is None


def test_compute_unit_info():
    info = compute_unit_info(_listing("Harina 1kg", 800.0))
    assert info.quantity == 1000.0
    assert info.unit == "g"
    assert info.price_per_unit == pytest.approx(0.8)
    assert compute_unit_info(_listing("Huevos x12", 800.0)) is None
