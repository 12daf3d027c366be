from __future__ import annotations
import csv
import io
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import EmptyExportError
from .models import DiscountResult, GenerationReport


CODE_HEADERS = [
    "Discount_Code",
    "Discount_Amount",
    "Generation_Status",
    "Generation_Message",
    "Generated_At",
]

SUMMARY_HEADERS = [
    "Row",
    "Customer_Name",
    "Discount_Code",
    "Discount_Amount",
    "Status",
    "Message",
    "Generated_At",
]

SUCCESS_HEADERS = ["Discount_Code", "Discount_Amount"]

NOT_PROCESSED_STATUS = "not_processed"
NOT_PROCESSED_MESSAGE = "Not processed"

FILENAMES = {
    "full": "kickstarter_discounts_{date}.csv",
    "summary": "kickstarter_discounts_summary_{date}.csv",
    "successful": "kickstarter_discount_codes_{date}.csv",
}


def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """UTC timestamp with milliseconds, e.g. ``2024-05-01T09:30:00.125Z``."""
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def format_amount(amount) -> str:
    # zero and missing amounts are written as empty cells
    if not amount:
        return ""
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return str(value)


def _cell(value) -> str:
    return "" if value is None else str(value)


def _write_rows(header: Sequence[str], rows: Iterable[Sequence[str]]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(header)
    for r in rows:
        writer.writerow(r)
    return buf.getvalue()


def original_headers(original_rows: Sequence[Mapping]) -> List[str]:
    """Column names in first-seen order across all rows."""
    seen: Dict[str, None] = {}
    for row in original_rows:
        for key in row.keys():
            seen.setdefault(key, None)
    return list(seen)


def _results_by_index(results: Iterable[DiscountResult]) -> Dict[int, DiscountResult]:
    return {r.row - 1: r for r in results}


def generate_csv_with_codes(
    original_rows: Sequence[Mapping],
    results: Sequence[DiscountResult],
    headers: Optional[Sequence[str]] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    """Original rows with the five generation columns appended."""
    if not original_rows or not results:
        raise EmptyExportError("No data provided for CSV export")
    columns = list(headers) if headers else original_headers(original_rows)
    by_index = _results_by_index(results)
    stamp = iso_timestamp(generated_at)

    out_rows = []
    for index, row in enumerate(original_rows):
        result = by_index.get(index)
        values = [_cell(row.get(h)) for h in columns]
        if result is None:
            values += ["", "", NOT_PROCESSED_STATUS, NOT_PROCESSED_MESSAGE, stamp]
        else:
            values += [
                result.discount_code or "",
                format_amount(result.amount),
                result.status or NOT_PROCESSED_STATUS,
                result.message or NOT_PROCESSED_MESSAGE,
                stamp,
            ]
        out_rows.append(values)
    return _write_rows(columns + CODE_HEADERS, out_rows)


def generate_summary_csv(results: Sequence[DiscountResult], generated_at: Optional[datetime] = None) -> str:
    if not results:
        raise EmptyExportError("No results provided for CSV export")
    stamp = iso_timestamp(generated_at)
    out_rows = [
        [
            str(r.row),
            r.customer or "",
            r.discount_code or "",
            format_amount(r.amount),
            r.status,
            r.message or "",
            stamp,
        ]
        for r in results
    ]
    return _write_rows(SUMMARY_HEADERS, out_rows)


def generate_successful_codes_csv(
    original_rows: Sequence[Mapping],
    results: Sequence[DiscountResult],
    headers: Optional[Sequence[str]] = None,
) -> str:
    successful = [r for r in results if r.ok and r.discount_code]
    if not successful or not original_rows:
        raise EmptyExportError("No successful discount codes to export")
    columns = list(headers) if headers else original_headers(original_rows)
    by_index = _results_by_index(successful)

    out_rows = []
    for index, row in enumerate(original_rows):
        result = by_index.get(index)
        if result is None:
            continue
        values = [_cell(row.get(h)) for h in columns]
        values += [result.discount_code or "", format_amount(result.amount)]
        out_rows.append(values)
    return _write_rows(columns + SUCCESS_HEADERS, out_rows)


def export_report(
    kind: str,
    original_rows: Sequence[Mapping],
    report: GenerationReport,
    generated_at: Optional[datetime] = None,
) -> str:
    if kind == "full":
        return generate_csv_with_codes(original_rows, report.results, generated_at=generated_at)
    if kind == "summary":
        return generate_summary_csv(report.results, generated_at=generated_at)
    if kind == "successful":
        return generate_successful_codes_csv(original_rows, report.results)
    raise ValueError(f"Unknown export kind: {kind!r} (expected one of {', '.join(FILENAMES)})")


def export_filename(kind: str = "full", today: Optional[date] = None) -> str:
    if kind not in FILENAMES:
        raise ValueError(f"Unknown export kind: {kind!r}")
    today = today or datetime.now(timezone.utc).date()
    return FILENAMES[kind].format(date=today.isoformat())
