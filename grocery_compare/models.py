from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProductListing:
    """A single product returned by a store's catalog for a search term."""

    name: str
    price: float
    link: str
    list_price: float | None = None   # pre-discount reference price
    image_url: str | None = None


@dataclass(frozen=True)
class StoreQueryResult:
    store_name: str
    products: list[ProductListing] = field(default_factory=list)
    failed: bool = False


@dataclass(frozen=True)
class UnitInfo:
    # Quantity in the base unit (grams or milliliters).
    quantity: float
    unit: str                         # "g" or "ml"
    label: str                        # as written, e.g. "1.5L", "500g"


@dataclass(frozen=True)
class ProductUnitInfo:
    quantity: float
    unit: str
    label: str
    price_per_unit: float

    @staticmethod
    def from_unit(info: UnitInfo, price: float) -> "ProductUnitInfo":
        return ProductUnitInfo(
            quantity=info.quantity,
            unit=info.unit,
            label=info.label,
            price_per_unit=price / info.quantity,
        )


@dataclass(frozen=True)
class Alternative:
    name: str
    price: float
    link: str
    list_price: float | None = None
    unit_info: ProductUnitInfo | None = None


@dataclass(frozen=True)
class TermMatch:
    product: ProductListing
    unit_info: ProductUnitInfo | None
    alternatives: tuple[Alternative, ...] = ()


@dataclass(frozen=True)
class PriceStats:
    """Cross-store view of one search term."""

    term: str
    cheapest: float | None = None
    # Only set when at least two stores matched the term.
    average: float | None = None
    store_count: int = 0

    @property
    def found(self) -> bool:
        return self.store_count > 0


@dataclass(frozen=True)
class CartLineItem:
    search_term: str
    name: str
    price: float
    link: str
    is_cheapest: bool
    list_price: float | None = None
    image_url: str | None = None
    unit_info: ProductUnitInfo | None = None
    alternatives: tuple[Alternative, ...] = ()
    average_price: float | None = None


@dataclass(frozen=True)
class StoreCart:
    store_name: str
    items: tuple[CartLineItem, ...]
    total_price: float
    cheapest_count: int
    # Searchable terms this store did not find (globally not-found terms excluded).
    missing_terms: tuple[str, ...]
    total_searched: int

    @property
    def completeness(self) -> float:
        if self.total_searched <= 0:
            return 0.0
        return len(self.items) / self.total_searched


@dataclass(frozen=True)
class ShoppingPlanResult:
    store_carts: tuple[StoreCart, ...]
    not_found: tuple[str, ...]
    searched_at: str                  # ISO-8601, UTC
