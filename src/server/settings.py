from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Dict


log = logging.getLogger(__name__)

SETTINGS_PATH: Path | None = None


def init_settings(path: Path) -> None:
    global SETTINGS_PATH
    SETTINGS_PATH = path
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        save_settings(default_settings())


def default_settings() -> Dict:
    return {
        "shopify_store": "",
        "shopify_api_version": "2024-07",
        "shopify_access_token": "",
        # Generation
        "request_delay": 0.6,
        "code_prefix": "KICKSTARTER",
        "code_max_length": 50,
        "discount_title_prefix": "Kickstarter Backer",
    }


def get_settings() -> Dict:
    assert SETTINGS_PATH is not None
    base = default_settings()
    try:
        data = json.loads(SETTINGS_PATH.read_text())
    except (OSError, ValueError) as e:
        log.warning(f"Could not read settings from {SETTINGS_PATH}: {e}; using defaults")
        return base
    base.update(data or {})
    return base


def save_settings(data: Dict) -> None:
    assert SETTINGS_PATH is not None
    SETTINGS_PATH.write_text(json.dumps(data, indent=2))
