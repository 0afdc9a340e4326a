from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .models import Alternative, CartLineItem, ProductUnitInfo, ShoppingPlanResult, StoreCart


def _unit_dict(u: ProductUnitInfo | None) -> dict[str, Any] | None:
    if u is None:
        return None
    return {
        "quantity": u.quantity,
        "unit": u.unit,
        "unitLabel": u.label,
        "pricePerUnit": u.price_per_unit,
    }


def _alt_dict(a: Alternative) -> dict[str, Any]:
    return {
        "productName": a.name,
        "price": a.price,
        "listPrice": a.list_price,
        "link": a.link,
        "unitInfo": _unit_dict(a.unit_info),
    }


def _item_dict(it: CartLineItem) -> dict[str, Any]:
    return {
        "searchTerm": it.search_term,
        "productName": it.name,
        "price": it.price,
        "listPrice": it.list_price,
        "imageUrl": it.image_url,
        "link": it.link,
        "isCheapest": it.is_cheapest,
        "unitInfo": _unit_dict(it.unit_info),
        "alternatives": [_alt_dict(a) for a in it.alternatives],
        "averagePrice": it.average_price,
    }


def _cart_dict(c: StoreCart) -> dict[str, Any]:
    return {
        "storeName": c.store_name,
        "products": [_item_dict(it) for it in c.items],
        "totalPrice": c.total_price,
        "cheapestCount": c.cheapest_count,
        "missingTerms": list(c.missing_terms),
        "totalSearched": c.total_searched,
    }


def to_dict(result: ShoppingPlanResult) -> dict[str, Any]:
    """JSON-ready view using the camelCase keys callers of the web API expect."""
    return {
        "storeCarts": [_cart_dict(c) for c in result.store_carts],
        "notFound": list(result.not_found),
        "searchedAt": result.searched_at,
    }


def _money(v: float) -> str:
    return f"${v:,.2f}"


def summary_text(result: ShoppingPlanResult) -> str:
    lines = [f"Compared: {result.searched_at}  stores={len(result.store_carts)}", ""]
    for rank, cart in enumerate(result.store_carts, 1):
        lines.append(
            f"{rank}. {cart.store_name}  {len(cart.items)}/{cart.total_searched} items  "
            f"total {_money(cart.total_price)}  cheapest in {cart.cheapest_count}"
        )
        for it in cart.items:
            tag = "*" if it.is_cheapest else " "
            avg = f"  (avg {_money(it.average_price)})" if it.average_price is not None else ""
            unit = f"  [{it.unit_info.label}]" if it.unit_info is not None else ""
            lines.append(f"   {tag} {it.search_term}: {it.name}{unit}  {_money(it.price)}{avg}")
        if cart.missing_terms:
            lines.append(f"     missing: {', '.join(cart.missing_terms)}")
        lines.append("")
    if result.not_found:
        lines.append(f"Not found anywhere: {', '.join(result.not_found)}")
    elif not result.store_carts:
        lines.append("No results.")
    return "\n".join(lines).rstrip() + "\n"


def write_json(result: ShoppingPlanResult, path: str = "artifacts/comparison.json") -> str:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(to_dict(result), indent=2, ensure_ascii=False), encoding="utf-8")
    return str(out)
