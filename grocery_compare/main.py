from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .catalog import CatalogClient, HttpCatalogClient, JsonFileCatalog
from .compare import compare_products
from .config import OPTIONAL_KEYS, REQUIRED_KEYS, Config
from .report import summary_text, write_json
from .units import parse_unit


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="grocery-compare")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = p.add_subparsers(dest="cmd", required=False)

    p_config = sub.add_parser("config", help="Config commands")
    sub_config = p_config.add_subparsers(dest="config_cmd", required=True)
    sub_config.add_parser("keys", help="List environment keys")
    sub_config.add_parser("check", help="Validate environment config")

    p_compare = sub.add_parser("compare", help="Compare a shopping list across stores")
    p_compare.add_argument("terms", nargs="+", help="Search terms (e.g. 'aceite 1.5l')")
    p_compare.add_argument("--region", default=None, help="City/region used to pick regional stores")
    p_compare.add_argument("--catalog-file", default=None, help="Offline catalog JSON instead of the HTTP gateway")
    p_compare.add_argument("--json-out", default=None, help="Also write the result as JSON here")

    p_units = sub.add_parser("units", help="Show the quantity detected in a product name")
    p_units.add_argument("text")

    return p


def main(argv: list[str] | None = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd is None:
        p.print_help()
        return 0

    try:
        return _dispatch(args)
    except RuntimeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2


def _dispatch(args: argparse.Namespace) -> int:
    if args.cmd == "config":
        if args.config_cmd == "keys":
            for k in REQUIRED_KEYS:
                print(k)
            for k in OPTIONAL_KEYS:
                print(f"{k} (optional)")
            return 0

        if args.config_cmd == "check":
            cfg = Config.load_from_env()
            print(f"OK: {len(cfg.stores)} stores via {cfg.catalog_url}")
            return 0

    if args.cmd == "units":
        info = parse_unit(args.text)
        if info is None:
            print("No quantity found.")
            return 1
        print(f"{info.label}  ({info.quantity:g} {info.unit})")
        return 0

    if args.cmd == "compare":
        return _run_compare(args)

    raise RuntimeError("unreachable")


def _catalog_from_args(args: argparse.Namespace) -> tuple[CatalogClient, int]:
    if args.catalog_file:
        return JsonFileCatalog.load(args.catalog_file), 8
    cfg = Config.load_from_env()
    client = HttpCatalogClient(
        base_url=cfg.catalog_url,
        stores=list(cfg.stores),
        token=cfg.catalog_token,
        timeout_s=cfg.http_timeout_s,
        max_workers=cfg.max_workers,
    )
    return client, cfg.max_workers


def _run_compare(args: argparse.Namespace) -> int:
    catalog, max_workers = _catalog_from_args(args)
    result = compare_products(args.terms, args.region, catalog=catalog, max_workers=max_workers)

    print(summary_text(result), end="")
    if args.json_out:
        path = write_json(result, args.json_out)
        print(f"\nResult written to {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
