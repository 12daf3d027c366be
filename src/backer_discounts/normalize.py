import math
import re
import unicodedata
from typing import Optional


# "Â£" is what a UTF-8 pound sign looks like after a latin-1 round trip
MOJIBAKE_PREFIX = "Â"

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def strip_currency(value: str) -> str:
    if not value:
        return ""
    kept = [
        ch for ch in value
        if ch != MOJIBAKE_PREFIX and unicodedata.category(ch) != "Sc" and not ch.isspace()
    ]
    return "".join(kept)


def parse_price(value) -> Optional[float]:
    """Parse a pledge amount such as ``£25.00`` or ``$ 40``.

    Currency glyphs and whitespace are dropped, then the leading decimal
    number is read (``"25.00 GBP"`` -> 25.0). Returns None when no finite
    number can be read.
    """
    if value is None:
        return None
    cleaned = strip_currency(str(value))
    m = _LEADING_NUMBER.match(cleaned)
    if not m:
        return None
    number = float(m.group(0))
    if not math.isfinite(number):
        return None
    return number


def code_fragment(name: str) -> str:
    if not name:
        return ""
    return re.sub(r"[^A-Z0-9]", "_", name.upper())


def fold_ascii(s: str) -> str:
    if not s:
        return ""
    s = unicodedata.normalize('NFKD', s)
    return s.encode('ascii', 'ignore').decode('ascii')
