from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.parse import quote

from .http import HttpClient
from .models import ProductListing, StoreQueryResult
from .normalize import normalize_text

logger = logging.getLogger(__name__)

# A list price above this multiple of the selling price is a catalog glitch.
MAX_LIST_PRICE_MULTIPLIER = 3


class CatalogClient(Protocol):
    def search_all_stores(self, term: str, region: str | None = None) -> list[StoreQueryResult]:
        ...


@dataclass(frozen=True)
class StoreConfig:
    name: str
    # None = national store, always queried.
    regions: tuple[str, ...] | None = None


def stores_for_region(stores: list[StoreConfig], region: str | None) -> list[StoreConfig]:
    """National stores plus regional ones whose region token appears in `region`."""
    if not region:
        return list(stores)
    wanted = normalize_text(region)
    return [
        s for s in stores
        if not s.regions or any(r in wanted for r in s.regions)
    ]


def sanitize_list_price(price: float, list_price: float | None) -> float | None:
    if list_price is None or list_price <= price:
        return None
    if list_price > price * MAX_LIST_PRICE_MULTIPLIER:
        return None
    return list_price


def _as_float(val: Any) -> float | None:
    if isinstance(val, bool):
        return None
    if isinstance(val, (int, float)):
        return float(val)
    if isinstance(val, str):
        try:
            return float(val.replace(",", "."))
        except ValueError:
            return None
    return None


def listing_from_payload(row: dict[str, Any]) -> ProductListing | None:
    """Build a listing from a catalog row; None when name or price is unusable."""
    name = row.get("productName") or row.get("name") or ""
    price = _as_float(row.get("price"))
    if not name or price is None:
        return None
    return ProductListing(
        name=str(name),
        price=price,
        link=str(row.get("link") or row.get("url") or ""),
        list_price=sanitize_list_price(price, _as_float(row.get("listPrice"))),
        image_url=row.get("imageUrl") or row.get("image_url"),
    )


def listings_from_payload(rows: list[dict[str, Any]]) -> list[ProductListing]:
    out: list[ProductListing] = []
    for row in rows:
        listing = listing_from_payload(row) if isinstance(row, dict) else None
        if listing is not None:
            out.append(listing)
    return out


class HttpCatalogClient:
    """Queries a catalog gateway once per store, all stores in parallel.

    A store that errors out, answers non-2xx or sends garbage comes back as
    ``failed=True``; it never takes the other stores down with it.
    """

    def __init__(
        self,
        *,
        base_url: str,
        stores: list[StoreConfig],
        token: str | None = None,
        timeout_s: float = 10.0,
        max_workers: int = 8,
        session: Any = None,
    ):
        self.http = HttpClient(base_url=base_url, token=token, timeout_s=timeout_s, session=session)
        self.stores = list(stores)
        self.max_workers = max(1, max_workers)

    def search_all_stores(self, term: str, region: str | None = None) -> list[StoreQueryResult]:
        stores = stores_for_region(self.stores, region)
        if not stores:
            return []
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(stores))) as pool:
            # map() keeps store order regardless of completion order
            return list(pool.map(lambda s: self._query_store(s, term), stores))

    def search_store(self, store: StoreConfig, term: str) -> list[ProductListing]:
        data = self._get_json(f"/stores/{quote(store.name, safe='')}/search", params={"q": term})
        rows = data.get("products") if isinstance(data, dict) else data
        if not isinstance(rows, list):
            raise RuntimeError(f"Unexpected catalog payload for {store.name}: {type(rows).__name__}")
        return listings_from_payload(rows)

    def _query_store(self, store: StoreConfig, term: str) -> StoreQueryResult:
        try:
            products = self.search_store(store, term)
        except Exception as exc:
            logger.warning("catalog query failed store=%s term=%r: %s", store.name, term, exc)
            return StoreQueryResult(store_name=store.name, products=[], failed=True)
        return StoreQueryResult(store_name=store.name, products=products)

    def _get_json(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        resp = self.http.get(path, params=params)
        if resp.status_code >= 400:
            raise RuntimeError(f"Catalog API error {resp.status_code} for {path}: {resp.text[:200]}")
        try:
            return resp.json()
        except ValueError as e:
            raise RuntimeError(f"Failed to decode JSON from catalog for {path}: {e}")


class JsonFileCatalog:
    """Serves pre-fetched results from a ``{store: {term: [rows]}}`` JSON file.

    Region scoping is not applied; the file is assumed to hold only the
    stores the caller wants compared.
    """

    def __init__(self, data: dict[str, dict[str, list[dict[str, Any]]]]):
        self.data = data

    @staticmethod
    def load(path: str) -> "JsonFileCatalog":
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Could not read catalog file {path}: {e}")
        if not isinstance(data, dict):
            raise RuntimeError(f"Catalog file {path} must hold a JSON object keyed by store")
        return JsonFileCatalog(data)

    def search_all_stores(self, term: str, region: str | None = None) -> list[StoreQueryResult]:
        out: list[StoreQueryResult] = []
        for store_name, by_term in self.data.items():
            rows = by_term.get(term) if isinstance(by_term, dict) else None
            out.append(
                StoreQueryResult(
                    store_name=store_name,
                    products=listings_from_payload(rows or []),
                )
            )
        return out
