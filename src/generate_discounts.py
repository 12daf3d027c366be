#!/usr/bin/env python3
"""Create one Shopify discount code per backer in a CSV file.

Example:
    python src/generate_discounts.py backers.csv --name-column "Backer Name" \
        --price-column "Pledge Amount" --transform "name | first_word" -v
"""
import argparse
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from backer_discounts import shopify_client as sc
from backer_discounts.codes import CodeFactory, DEFAULT_PREFIX
from backer_discounts.errors import EmptyExportError, ParseError, TransformError
from backer_discounts.export import FILENAMES, export_filename, export_report
from backer_discounts.generator import DEFAULT_DELAY, MUTATION_FIELD, generate_discount_codes
from backer_discounts.io import read_rows, write_text
from backer_discounts.transform import compile_transform, is_configured


log = logging.getLogger(__name__)


def load_env(dotenv_path: Optional[str]) -> None:
    if dotenv_path is None:
        # try default .env in cwd if present
        default_env = Path.cwd() / ".env"
        if default_env.exists():
            load_dotenv(default_env)
        return
    p = Path(dotenv_path)
    if p.exists():
        load_dotenv(p)
    else:
        log.warning(f"dotenv file not found: {p}")


def fail(msg: str, code: int = 2) -> None:
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(code)


def get_config(args: argparse.Namespace) -> sc.ShopifyConfig:
    store = args.store or os.getenv("SHOPIFY_STORE")
    token = args.token or os.getenv("SHOPIFY_ACCESS_TOKEN")
    api_version = args.api_version or os.getenv("SHOPIFY_API_VERSION", sc.DEFAULT_API_VERSION)

    missing = []
    if not store:
        missing.append("--store or SHOPIFY_STORE")
    if not token:
        missing.append("--token or SHOPIFY_ACCESS_TOKEN")
    if missing:
        fail(f"Missing required config: {', '.join(missing)}")
    return sc.ShopifyConfig(store=store, token=token, api_version=api_version)


def dry_run_graphql(query: str, variables: Optional[Dict] = None) -> Dict:
    """Stand-in client for --dry-run: accepts every discount without calling Shopify."""
    code = ((variables or {}).get("basicCodeDiscount") or {}).get("code")
    log.info(f"[dry-run] would create discount code={code}")
    return {
        "data": {
            MUTATION_FIELD: {
                "codeDiscountNode": {"id": "gid://shopify/DiscountCodeNode/0"},
                "userErrors": [],
            }
        }
    }


def read_transform(args: argparse.Namespace) -> str:
    if args.transform_file:
        return Path(args.transform_file).read_text(encoding="utf-8")
    return args.transform or ""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Create single-use Shopify discount codes for a CSV of backers")
    p.add_argument("input", help="Backer CSV file (first line = headers)")
    p.add_argument("--name-column", required=True, help="Column holding the backer name")
    p.add_argument("--price-column", required=True, help="Column holding the pledge amount (currency symbols allowed)")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--transform", help="Name transform pipeline, e.g. \"name | first_word | upper\"")
    g.add_argument("--transform-file", help="Read the name transform pipeline from a file")
    p.add_argument("--prefix", default=DEFAULT_PREFIX, help=f"Discount code prefix (default: {DEFAULT_PREFIX})")
    p.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_DELAY,
        help=f"Delay in seconds after each Shopify call (default: {DEFAULT_DELAY})",
    )
    p.add_argument(
        "--export",
        choices=sorted(FILENAMES),
        default="full",
        help="Which CSV to write: full (original columns + results), summary, or successful codes only",
    )
    p.add_argument("--output", help="Output CSV path (default: dated file name in the current directory)")
    p.add_argument("--dry-run", action="store_true", help="Validate rows and build codes without calling Shopify")

    p.add_argument("--store", help="Shopify store domain, e.g. myshop.myshopify.com")
    p.add_argument("--token", help="Shopify Admin API access token")
    p.add_argument("--api-version", default=None, help=f"Shopify Admin API version (default: {sc.DEFAULT_API_VERSION})")
    p.add_argument("--dotenv", help="Path to .env file (optional)")
    p.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity (-v for INFO, -vv for DEBUG)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")
    load_env(args.dotenv)

    transform_source = read_transform(args)
    if is_configured(transform_source):
        try:
            compile_transform(transform_source.strip())
        except TransformError as e:
            fail(str(e))

    try:
        table = read_rows(Path(args.input))
    except (OSError, ParseError) as e:
        fail(str(e))
    for column in (args.name_column, args.price_column):
        if column not in table.headers:
            fail(f"Column {column!r} not found. Available: {', '.join(table.headers)}")
    log.info(f"Loaded {table.row_count} rows from {args.input}")

    if args.dry_run:
        graphql = dry_run_graphql
        delay = 0.0
    else:
        cfg = get_config(args)
        log.info(f"Using store={cfg.store} api_version={cfg.api_version}")
        graphql = sc.AdminGraphQL(sc.build_session(cfg), cfg)
        delay = args.delay

    report = generate_discount_codes(
        graphql,
        table.rows,
        args.name_column,
        args.price_column,
        transform_source,
        delay=delay,
        codes=CodeFactory(prefix=args.prefix),
    )

    for r in report.results:
        if not r.ok:
            print(f"row={r.row} customer={r.customer} -> error: {r.message}")
    summary = report.summary
    print(f"total={summary.total} successful={summary.successful} errors={summary.errors}")

    out_path = Path(args.output) if args.output else Path.cwd() / export_filename(args.export)
    try:
        content = export_report(args.export, table.rows, report, generated_at=datetime.now(timezone.utc))
    except EmptyExportError as e:
        print(f"Nothing exported: {e}", file=sys.stderr)
    else:
        write_text(out_path, content)
        print(f"Wrote {out_path}")
    return 0 if summary.errors == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
