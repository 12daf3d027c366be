from __future__ import annotations
import json
import logging
import time
from collections.abc import Mapping
from typing import Callable, Dict, Iterable, Optional, Tuple

from .codes import CodeFactory
from .errors import (
    RemoteProtocolError,
    RemoteValidationError,
    ResponseFormatError,
    RowError,
    TransformError,
    ValidationError,
)
from .models import DiscountResult, GenerationReport
from .normalize import parse_price
from .shopify_client import DISCOUNT_CODE_BASIC_CREATE, build_discount_input
from .transform import is_configured, transform_name


log = logging.getLogger(__name__)

DEFAULT_DELAY = 0.6
DEFAULT_TITLE_PREFIX = "Kickstarter Backer"
MUTATION_FIELD = "discountCodeBasicCreate"
INVALID_ROW_MESSAGE = "Invalid name or price"
UNKNOWN_CUSTOMER = "Unknown"


def _cell(row: Mapping, column: str) -> str:
    value = row.get(column)
    return "" if value is None else str(value)


def validate_row(row: Mapping, name_column: str, price_column: str) -> Tuple[str, float]:
    customer = _cell(row, name_column)
    price = parse_price(row.get(price_column))
    if not customer.strip() or price is None:
        raise ValidationError(INVALID_ROW_MESSAGE)
    return customer, price


def _body_text(response) -> Optional[str]:
    if isinstance(response, (bytes, bytearray)):
        return bytes(response).decode("utf-8", errors="replace")
    if isinstance(response, str):
        return response
    text = getattr(response, "text", None)
    if isinstance(text, str):
        return text
    content = getattr(response, "content", None)
    if isinstance(content, (bytes, bytearray)):
        return bytes(content).decode("utf-8", errors="replace")
    return None


def normalize_response(response) -> Dict:
    """Turn whatever the GraphQL callable returned into a decoded dict.

    Accepts an already-decoded mapping, a response object exposing
    ``json()``, or a raw text/bytes body.
    """
    if isinstance(response, Mapping):
        return dict(response)

    decode = getattr(response, "json", None)
    if callable(decode):
        # a broken json() accessor still leaves the raw body to try
        try:
            data = decode()
        except Exception as e:
            log.debug(f"normalize_response: json() failed: {e!r}")
            data = None
        if isinstance(data, Mapping):
            return dict(data)

    body = _body_text(response)
    if body is None:
        raise ResponseFormatError(f"Invalid response format: {repr(response)[:100]}")
    log.debug(f"normalize_response: text body={body[:500]!r}")
    try:
        data = json.loads(body)
    except ValueError as e:
        raise ResponseFormatError(f"Invalid response format: {body[:100]}") from e
    if not isinstance(data, Mapping):
        raise ResponseFormatError(f"Invalid response format: {body[:100]}")
    return dict(data)


def _error_message(err) -> str:
    if isinstance(err, Mapping):
        return str(err.get("message") or err)
    return str(err)


def _field_name(field) -> str:
    if not field:
        return "unknown"
    if isinstance(field, (list, tuple)):
        return ".".join(str(f) for f in field)
    return str(field)


def interpret_response(payload: Mapping) -> Dict:
    """Return the mutation payload, or raise the matching RowError."""
    errors = payload.get("errors")
    if errors:
        if isinstance(errors, (list, tuple)):
            joined = ", ".join(_error_message(e) for e in errors)
        else:
            joined = _error_message(errors)
        raise RemoteProtocolError(f"GraphQL errors: {joined}")

    data = payload.get("data") or {}
    if not isinstance(data, Mapping):
        raise ResponseFormatError(f"Invalid response format: data is {type(data).__name__}")
    created = data.get(MUTATION_FIELD)
    if not created:
        raise ResponseFormatError(f"No {MUTATION_FIELD} data in response")
    if not isinstance(created, Mapping):
        raise ResponseFormatError(f"Invalid response format: {MUTATION_FIELD} is {type(created).__name__}")

    user_errors = created.get("userErrors") or []
    if not isinstance(user_errors, (list, tuple)) or not all(isinstance(e, Mapping) for e in user_errors):
        raise ResponseFormatError(f"Invalid response format: userErrors {str(user_errors)[:100]}")
    if user_errors:
        raise RemoteValidationError(
            ", ".join(f"{_field_name(e.get('field'))}: {e.get('message')}" for e in user_errors)
        )
    return created


def create_discount(graphql: Callable, variables: Dict) -> Dict:
    # any exception raised by the client itself counts as a transport failure
    try:
        response = graphql(DISCOUNT_CODE_BASIC_CREATE, variables=variables)
    except Exception as e:
        raise RemoteProtocolError(f"API Error: {e}") from e
    log.debug(f"create_discount: raw response={response!r}")
    try:
        return interpret_response(normalize_response(response))
    except RowError:
        raise
    except Exception as e:
        raise ResponseFormatError(f"Invalid response format: {e}") from e


def generate_discount_codes(
    graphql: Callable,
    rows: Iterable[Mapping],
    name_column: str,
    price_column: str,
    transform_source: str = "",
    *,
    delay: float = DEFAULT_DELAY,
    codes: Optional[CodeFactory] = None,
    sleep: Callable[[float], None] = time.sleep,
    title_prefix: str = DEFAULT_TITLE_PREFIX,
) -> GenerationReport:
    """Create one Shopify discount code per row, strictly in order.

    Every row yields exactly one DiscountResult; row failures are recorded
    and never stop the batch. ``delay`` seconds are slept after each row that
    reached Shopify.
    """
    codes = codes or CodeFactory()
    use_transform = is_configured(transform_source)
    report = GenerationReport()
    results = report.results

    for number, row in enumerate(rows, start=1):
        try:
            customer, price = validate_row(row, name_column, price_column)
        except ValidationError as e:
            results.append(DiscountResult.failure(number, _cell(row, name_column) or UNKNOWN_CUSTOMER, str(e)))
            continue

        name = customer
        if use_transform:
            try:
                name = transform_name(customer, transform_source)
            except TransformError as e:
                results.append(DiscountResult.failure(number, customer, str(e)))
                continue

        code = codes.next_code(name)
        variables = build_discount_input(title=f"{title_prefix} - {name}", code=code, amount=price)
        log.debug(f"row {number}: creating code={code} amount={price}")
        try:
            create_discount(graphql, variables)
        except RowError as e:
            log.warning(f"row {number}: {e}")
            results.append(DiscountResult.failure(number, name, str(e)))
        else:
            results.append(DiscountResult.success(number, name, code, price))
        finally:
            if delay and delay > 0:
                sleep(delay)

    summary = report.summary
    log.info(f"Generated discounts: total={summary.total} successful={summary.successful} errors={summary.errors}")
    return report
