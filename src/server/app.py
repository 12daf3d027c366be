from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from backer_discounts import shopify_client as sc
from backer_discounts.codes import CodeFactory
from backer_discounts.errors import EmptyExportError, ParseError, RemoteProtocolError
from backer_discounts.export import export_filename, export_report
from backer_discounts.generator import generate_discount_codes
from backer_discounts.io import parse_csv
from backer_discounts.models import GenerationReport
from . import settings as app_settings


log = logging.getLogger(__name__)

ROOT = Path(__file__).resolve().parents[2]
DATA_DIR = Path(os.getenv("BACKER_DISCOUNTS_DATA_DIR") or (ROOT / "data"))

app = FastAPI(title="Backer Discounts API", version="0.1.0")
app_settings.init_settings(DATA_DIR / "settings.json")


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


def _get_shopify_cfg() -> sc.ShopifyConfig:
    # Prefer settings.json; fallback to env vars
    s = app_settings.get_settings()
    store = (s.get("shopify_store") or os.getenv("SHOPIFY_STORE", "")).strip()
    token = (s.get("shopify_access_token") or os.getenv("SHOPIFY_ACCESS_TOKEN", "")).strip()
    version = (s.get("shopify_api_version") or os.getenv("SHOPIFY_API_VERSION", "")).strip() or sc.DEFAULT_API_VERSION
    if not store or not token:
        raise HTTPException(500, "Shopify credentials missing. Set them in Settings or as environment variables.")
    return sc.ShopifyConfig(store=store, token=token, api_version=version)


def _build_graphql() -> sc.AdminGraphQL:
    cfg = _get_shopify_cfg()
    return sc.AdminGraphQL(sc.build_session(cfg), cfg)


@app.post("/csv/upload")
async def upload_csv(file: UploadFile = File(...)):
    content = await file.read()
    if not content:
        raise HTTPException(400, "No file provided")
    try:
        table = parse_csv(content)
    except ParseError as e:
        raise HTTPException(400, str(e))
    log.info(f"CSV parsed: {file.filename} rows={table.row_count}")
    return {"success": True, "csvData": table.to_dict()}


class GenerateRequest(BaseModel):
    data: List[Dict[str, Any]]
    nameColumn: str = ""
    priceColumn: str = ""
    transformFunction: str = ""


@app.post("/discounts/generate")
def generate(req: GenerateRequest):
    if not req.nameColumn or not req.priceColumn:
        raise HTTPException(400, "Please select both name and price columns")
    graphql = _build_graphql()
    s = app_settings.get_settings()
    log.info(f"Generating discounts for {len(req.data)} rows")
    report = generate_discount_codes(
        graphql,
        req.data,
        req.nameColumn,
        req.priceColumn,
        req.transformFunction,
        delay=float(s.get("request_delay") or 0),
        codes=CodeFactory(prefix=s.get("code_prefix") or "KICKSTARTER", max_length=int(s.get("code_max_length") or 50)),
        title_prefix=s.get("discount_title_prefix") or "Kickstarter Backer",
    )
    return {"success": True, "results": report.to_dict(), "originalData": req.data}


class ExportRequest(BaseModel):
    results: Dict[str, Any]
    originalData: List[Dict[str, Any]]
    kind: str = "full"


@app.post("/discounts/export")
def export(req: ExportRequest):
    try:
        report = GenerationReport.from_dict(req.results)
        content = export_report(req.kind, req.originalData, report)
        filename = export_filename(req.kind)
    except (KeyError, TypeError) as e:
        raise HTTPException(400, f"Invalid results: {e!r}")
    except (EmptyExportError, ValueError) as e:
        raise HTTPException(400, str(e))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@app.get("/settings")
def get_settings() -> Dict[str, Any]:
    s = app_settings.get_settings()
    token = s.pop("shopify_access_token", "")
    s["shopify_access_token_set"] = bool(token)
    return s


class SettingsUpdate(BaseModel):
    shopify_store: Optional[str] = None
    shopify_api_version: Optional[str] = None
    shopify_access_token: Optional[str] = None
    request_delay: Optional[float] = None
    code_prefix: Optional[str] = None
    code_max_length: Optional[int] = None
    discount_title_prefix: Optional[str] = None


@app.post("/settings")
def post_settings(update: SettingsUpdate) -> Dict[str, Any]:
    cur = app_settings.get_settings()
    changes = {k: (v.strip() if isinstance(v, str) else v) for k, v in update.model_dump().items() if v is not None}
    if "request_delay" in changes and changes["request_delay"] < 0:
        raise HTTPException(400, "request_delay must be >= 0")
    if "code_max_length" in changes and changes["code_max_length"] < 20:
        raise HTTPException(400, "code_max_length must be >= 20")
    cur.update(changes)
    app_settings.save_settings(cur)
    return get_settings()


@app.post("/settings/test")
def test_shopify():
    """Ping Shopify with current settings and return identity confirmation."""
    try:
        cfg = _get_shopify_cfg()
        session = sc.build_session(cfg)
        shop = sc.get_shop_info(session, cfg)
        return {"ok": True, "shop": {"name": shop.get("name"), "domain": shop.get("myshopify_domain") or shop.get("domain")}}
    except HTTPException as e:
        return {"ok": False, "error": str(e.detail)}
    except RemoteProtocolError as e:
        return {"ok": False, "error": str(e)}
