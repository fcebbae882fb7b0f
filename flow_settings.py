"""Persistence helpers for money-flow settings (category tables and layout)."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

from analytics import DEFAULT_MAX_CATEGORIES
from categorization import DEFAULT_CATEGORY_CONFIG, CategoryConfig

DEFAULT_FLOW_SETTINGS_PATH = "data/flow_settings.json"
DEVICES = ("desktop", "mobile")


def _normalize_keyword_map(raw: Any) -> dict[str, list[str]]:
    if not isinstance(raw, dict):
        return {}
    out: dict[str, list[str]] = {}
    for key, values in raw.items():
        key_text = str(key).strip()
        if not key_text or not isinstance(values, list):
            continue
        keywords = [str(item).strip() for item in values if str(item).strip()]
        if keywords:
            out[key_text] = keywords
    return out


def _normalize_str_list(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    return [str(item).strip() for item in raw if str(item).strip()]


def _normalize_str_dict(raw: Any) -> dict[str, str]:
    if not isinstance(raw, dict):
        return {}
    out: dict[str, str] = {}
    for key, value in raw.items():
        key_text = str(key).strip()
        value_text = str(value).strip()
        if key_text and value_text:
            out[key_text] = value_text
    return out


def _normalize_cap(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_MAX_CATEGORIES
    return value if value >= 0 else DEFAULT_MAX_CATEGORIES


def normalize_flow_settings(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        payload = {}
    include = payload.get("include_categories")
    device = str(payload.get("device", "desktop")).strip().lower()
    return {
        "keyword_map": _normalize_keyword_map(payload.get("keyword_map", {})),
        "income_keywords": _normalize_str_list(payload.get("income_keywords", [])),
        "colors": _normalize_str_dict(payload.get("colors", {})),
        "max_income_categories": _normalize_cap(payload.get("max_income_categories", DEFAULT_MAX_CATEGORIES)),
        "max_expense_categories": _normalize_cap(payload.get("max_expense_categories", DEFAULT_MAX_CATEGORIES)),
        "include_categories": _normalize_str_list(include) if include is not None else None,
        "device": device if device in DEVICES else "desktop",
    }


def load_flow_settings(path: str) -> dict[str, Any]:
    """Load flow settings from disk; a missing file yields defaults."""
    target = Path(path).expanduser()
    if not target.exists():
        return normalize_flow_settings({})
    return normalize_flow_settings(json.loads(target.read_text(encoding="utf-8")))


def save_flow_settings(path: str, settings: dict[str, Any]) -> Path:
    """Save flow settings to disk and return saved path."""
    target = Path(path).expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = normalize_flow_settings(settings)
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=True), encoding="utf-8")
    return target


def category_config_from_settings(
    settings: dict[str, Any],
    base: CategoryConfig | None = None,
) -> CategoryConfig:
    """Overlay saved keyword tables and colors onto a category config."""
    config = base or DEFAULT_CATEGORY_CONFIG
    settings = normalize_flow_settings(settings)
    if settings["keyword_map"]:
        config = config.with_keyword_map(settings["keyword_map"])
    if settings["income_keywords"]:
        config = replace(config, income_keywords=tuple(settings["income_keywords"]))
    if settings["colors"]:
        palette = dict(config.colors)
        palette.update(settings["colors"])
        config = replace(config, colors=tuple(palette.items()))
    return config
