from grocery_compare.normalize import dedupe_terms, normalize_text, strip_accents, tokenize


def test_lowercase_and_accents():
    assert normalize_text("  Azúcar Ñandú  ") == "azucar nandu"


def test_punctuation_kept():
    assert normalize_text("Hellmann's 1,5 L") == "hellmann's 1,5 l"


def test_empty():
    assert normalize_text("") == ""
    assert tokenize("") == []


def test_tokenize_runs_of_whitespace():
    assert tokenize("aceite \t girasol\n 1.5l") == ["aceite", "girasol", "1.5l"]


def test_strip_accents_keeps_case():
    assert strip_accents("Café") == "Cafe"


def test_dedupe_terms_keeps_first_order():
    assert dedupe_terms(["leche", " pan ", "", "leche", "pan", "   "]) == ["leche", "pan"]
