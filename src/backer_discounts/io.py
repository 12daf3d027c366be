from __future__ import annotations
import csv
import io
import logging
from pathlib import Path

from .errors import ParseError
from .models import ParsedTable


log = logging.getLogger(__name__)


def parse_csv(file_bytes: bytes) -> ParsedTable:
    """Parse an uploaded backer CSV into headers + row dicts.

    The first non-blank record is the header. Short records are padded with
    empty strings, extra trailing fields are dropped.
    """
    try:
        text = file_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(f"Error parsing CSV: file is not valid UTF-8 ({e})") from e

    try:
        records = list(csv.reader(io.StringIO(text, newline=""), strict=True))
    except csv.Error as e:
        raise ParseError(f"Error parsing CSV: {e}") from e

    header_idx = -1
    for i, record in enumerate(records):
        if any(c.strip() for c in record):
            header_idx = i
            break
    if header_idx == -1:
        return ParsedTable()

    raw_header = [c.strip() for c in records[header_idx]]
    headers = [name for name in raw_header if name]

    rows: list[dict] = []
    for raw in records[header_idx + 1 :]:
        if not raw or not any(c.strip() for c in raw):
            continue
        d: dict = {}
        for i, name in enumerate(raw_header):
            if not name:
                continue
            d[name] = raw[i].strip() if i < len(raw) else ""
        rows.append(d)
    log.debug(f"parse_csv: headers={headers} rows={len(rows)}")
    return ParsedTable(headers=headers, rows=rows)


def read_rows(input_path: Path) -> ParsedTable:
    """Read a backer CSV from disk."""
    return parse_csv(input_path.read_bytes())


def write_text(output_path: Path, text: str) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as f:
        f.write(text)
