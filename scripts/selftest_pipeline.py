#!/usr/bin/env python3
"""Self-test for the discount pipeline.

No network required. Runs a tiny backer list through parsing, generation
(against an in-memory client) and export.
"""
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'src'))

from backer_discounts.io import parse_csv  # type: ignore
from backer_discounts.generator import generate_discount_codes  # type: ignore
from backer_discounts.export import generate_csv_with_codes  # type: ignore


SAMPLE = "name,price,backing_tier\nAlice,£25.00,Gold\nBob,oops,Silver\n".encode("utf-8")


def fake_graphql(query, variables=None):
    return {"data": {"discountCodeBasicCreate": {"codeDiscountNode": {"id": "gid://selftest/1"}, "userErrors": []}}}


def main() -> int:
    table = parse_csv(SAMPLE)
    assert table.headers == ["name", "price", "backing_tier"]
    report = generate_discount_codes(fake_graphql, table.rows, "name", "price", "name | upper", delay=0)
    summary = report.summary
    assert (summary.total, summary.successful, summary.errors) == (2, 1, 1)
    assert report.results[0].discount_code.startswith("KICKSTARTER_ALICE_")
    assert report.results[1].message == "Invalid name or price"
    lines = generate_csv_with_codes(table.rows, report.results).splitlines()
    assert len(lines) == 3
    assert lines[0].count(",") == len(table.headers) + 4
    print('Self-test ok: parse, generate and export pass basic checks')
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
