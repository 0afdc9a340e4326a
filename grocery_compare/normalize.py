from __future__ import annotations

import re
import unicodedata


_WS_RE = re.compile(r"\s+")


def strip_accents(text: str) -> str:
    """'Azúcar' -> 'Azucar'. Also folds 'ñ' to 'n'."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(text: str) -> str:
    """Lowercase, drop diacritics and trim. Punctuation is left alone."""
    if not text:
        return ""
    return strip_accents(text.lower()).strip()


def tokenize(text: str) -> list[str]:
    # Split on runs of whitespace; never yields empty tokens
    return [tok for tok in _WS_RE.split(text) if tok]


def dedupe_terms(terms: list[str]) -> list[str]:
    """Drop blank and repeated terms, keeping first-seen order.

    Repeats are compared after trimming, so "leche" and " leche " collapse.
    """
    seen: dict[str, None] = {}
    for raw in terms:
        term = raw.strip()
        if term and term not in seen:
            seen[term] = None
    return list(seen)
