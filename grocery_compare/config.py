from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .catalog import StoreConfig
from .normalize import normalize_text


REQUIRED_KEYS = [
    "GROCERY_CATALOG_URL",
    "GROCERY_STORES",
]

OPTIONAL_KEYS = [
    "GROCERY_CATALOG_TOKEN",
    "GROCERY_MAX_WORKERS",
    "GROCERY_HTTP_TIMEOUT",
]


@dataclass(frozen=True)
class Config:
    catalog_url: str
    stores: tuple[StoreConfig, ...]
    catalog_token: str | None = None
    max_workers: int = 8
    http_timeout_s: float = 10.0

    @staticmethod
    def load_from_env(env: Mapping[str, str] | None = None) -> "Config":
        env = os.environ if env is None else env

        values: dict[str, str] = {}
        for k in REQUIRED_KEYS:
            val = (env.get(k) or "").strip()
            if not val:
                raise RuntimeError(f"Missing environment variable: {k}")
            values[k] = val

        stores = parse_stores(values["GROCERY_STORES"])
        if not stores:
            raise RuntimeError("GROCERY_STORES does not name any store")

        token = (env.get("GROCERY_CATALOG_TOKEN") or "").strip() or None
        return Config(
            catalog_url=values["GROCERY_CATALOG_URL"].rstrip("/"),
            stores=tuple(stores),
            catalog_token=token,
            max_workers=_int_env(env, "GROCERY_MAX_WORKERS", 8),
            http_timeout_s=_float_env(env, "GROCERY_HTTP_TIMEOUT", 10.0),
        )


def parse_stores(raw: str) -> list[StoreConfig]:
    """'Carrefour, Coto, Cordiez:cordoba' -> national Carrefour/Coto, regional Cordiez.

    Several regions are separated with '|': 'Toledo:mar del plata|necochea'.
    """
    out: list[StoreConfig] = []
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        name, _, regions = entry.partition(":")
        name = name.strip()
        if not name:
            raise RuntimeError(f"Bad store entry in GROCERY_STORES: {entry!r}")
        tokens = tuple(normalize_text(r) for r in regions.split("|") if r.strip())
        out.append(StoreConfig(name=name, regions=tokens or None))
    return out


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        val = int(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be an integer, got {raw!r}")
    if val < 1:
        raise RuntimeError(f"{key} must be at least 1, got {val}")
    return val


def _float_env(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:
        raise RuntimeError(f"{key} must be a number, got {raw!r}")
    if val <= 0:
        raise RuntimeError(f"{key} must be positive, got {val}")
    return val
