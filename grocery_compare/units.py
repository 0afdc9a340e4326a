from __future__ import annotations

import re
from dataclasses import dataclass

from .models import UnitInfo


@dataclass(frozen=True)
class _UnitPattern:
    regex: re.Pattern[str]
    factor: float      # multiplier to the base unit
    unit: str          # base unit: "g" or "ml"
    suffix: str        # label suffix, e.g. "kg"


# Ordered most to least specific; first match wins (kg before g, L before ml).
# Counts ("50u", "x6 unidades") are left out on purpose: no per-unit price.
_UNIT_PATTERNS: list[_UnitPattern] = [
    _UnitPattern(re.compile(r"(\d+(?:[.,]\d+)?)\s*kg\b", re.IGNORECASE), 1000.0, "g", "kg"),
    _UnitPattern(re.compile(r"(\d+(?:[.,]\d+)?)\s*g(?:rs?)?\.?\b", re.IGNORECASE), 1.0, "g", "g"),
    _UnitPattern(
        re.compile(r"(\d+(?:[.,]\d+)?)\s*l(?:t(?:s|r)?|itros?)?\.?\b", re.IGNORECASE),
        1000.0,
        "ml",
        "L",
    ),
    _UnitPattern(re.compile(r"(\d+(?:[.,]\d+)?)\s*(?:ml|cc)\.?\b", re.IGNORECASE), 1.0, "ml", "ml"),
]


def parse_quantity(tok: str) -> float | None:
    """Parse '1.5' or the comma-decimal form '1,5'."""
    try:
        return float(tok.replace(",", "."))
    except ValueError:
        return None


def parse_unit(text: str | None) -> UnitInfo | None:
    """Extract a weight or volume from free text, normalized to g / ml.

    >>> parse_unit("Aceite de Girasol 1,5 L")
    UnitInfo(quantity=1500.0, unit='ml', label='1.5L')

    Returns None when nothing recognizable is present.
    """
    if not text:
        return None
    for pattern in _UNIT_PATTERNS:
        m = pattern.regex.search(text)
        if not m:
            continue
        qty = parse_quantity(m.group(1))
        if qty is None or qty <= 0:
            continue
        return UnitInfo(
            quantity=round(qty * pattern.factor, 4),
            unit=pattern.unit,
            label=f"{qty:g}{pattern.suffix}",
        )
    return None
