from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

import requests

from .errors import RemoteProtocolError


log = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2024-07"

DISCOUNT_CODE_BASIC_CREATE = (
    "mutation discountCodeBasicCreate($basicCodeDiscount: DiscountCodeBasicInput!){"
    " discountCodeBasicCreate(basicCodeDiscount: $basicCodeDiscount){"
    "  codeDiscountNode{"
    "   id"
    "   codeDiscount{ ... on DiscountCodeBasic{ codes(first:1){ nodes{ code } } } }"
    "  }"
    "  userErrors{ field message }"
    " }"
    "}"
)


@dataclass
class ShopifyConfig:
    store: str
    token: str
    api_version: str = DEFAULT_API_VERSION

    def __post_init__(self) -> None:
        store = (self.store or "").strip()
        if store.startswith("https://"):
            store = store[len("https://") :]
        self.store = store.rstrip("/")

    @property
    def base_url(self) -> str:
        return f"https://{self.store}/admin/api/{self.api_version}"

    @property
    def graphql_url(self) -> str:
        return f"{self.base_url}/graphql.json"


def build_session(cfg: ShopifyConfig) -> requests.Session:
    s = requests.Session()
    s.headers.update(
        {
            "X-Shopify-Access-Token": cfg.token,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": "backer-discounts/1.0",
        }
    )
    return s


def _error_detail(resp: requests.Response) -> str:
    try:
        return json.dumps(resp.json())
    except ValueError:
        return resp.text


class AdminGraphQL:
    """Callable GraphQL client: ``graphql(query, variables=...)``.

    Returns the raw ``requests.Response``; decoding and GraphQL-level error
    handling belong to the caller. Transport failures and non-2xx statuses
    raise RemoteProtocolError. Nothing is retried.
    """

    def __init__(self, session: requests.Session, cfg: ShopifyConfig, timeout: float = 30.0) -> None:
        self.session = session
        self.cfg = cfg
        self.timeout = timeout

    def __call__(self, query: str, variables: Optional[Dict] = None) -> requests.Response:
        payload = {"query": query, "variables": variables or {}}
        log.debug(f"graphql: POST {self.cfg.graphql_url}")
        try:
            resp = self.session.post(self.cfg.graphql_url, data=json.dumps(payload), timeout=self.timeout)
        except requests.RequestException as e:
            raise RemoteProtocolError(str(e)) from e
        if not resp.ok:
            raise RemoteProtocolError(f"{resp.status_code}: {_error_detail(resp)}")
        return resp


def build_discount_input(
    title: str,
    code: str,
    amount: float,
    starts_at: Optional[datetime] = None,
) -> Dict:
    """Variables for a single-use fixed-amount code open to every customer."""
    starts_at = starts_at or datetime.now(timezone.utc)
    return {
        "basicCodeDiscount": {
            "title": title,
            "code": code,
            "startsAt": starts_at.isoformat(),
            "customerSelection": {"all": True},
            "customerGets": {
                "value": {"discountAmount": {"amount": str(amount)}},
                "items": {"all": True},
            },
            "appliesOncePerCustomer": True,
            "usageLimit": 1,
        }
    }


def get_shop_info(session: requests.Session, cfg: ShopifyConfig) -> Dict:
    """Fetch basic shop info to verify credentials and store identity."""
    url = f"{cfg.base_url}/shop.json"
    try:
        resp = session.get(url, timeout=30)
    except requests.RequestException as e:
        raise RemoteProtocolError(str(e)) from e
    if not resp.ok:
        raise RemoteProtocolError(f"{resp.status_code}: {_error_detail(resp)}")
    data = resp.json() or {}
    return data.get("shop") or {}
