from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional

import streamlit as st

from core.utils import to_money

CONFIG_FILE_NAME = "settings.json"
ENV_DATA_DIR = "PHARMACY_DESK_DATA_DIR"
ENV_TAX_RATE = "PHARMACY_DESK_TAX_RATE"
ENV_EXPIRY_DAYS = "PHARMACY_DESK_EXPIRY_DAYS"
ENV_CURRENCY = "PHARMACY_DESK_CURRENCY"
ENV_SALES_SCOPE = "PHARMACY_DESK_SALES_SCOPE"
ENV_SEED = "PHARMACY_DESK_SEED"
ENV_LOG_LEVEL = "PHARMACY_DESK_LOG_LEVEL"

SESSION_KEY = "pharmacy_desk_settings"
SALES_SCOPES = {"day", "session"}


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    tax_rate: Decimal = Decimal("0.05")
    expiry_window_days: int = 30
    currency: str = "USD"
    sales_scope: str = "day"
    seed_demo_data: bool = True

    @property
    def config_path(self) -> Path:
        return self.data_dir / CONFIG_FILE_NAME


def _default_data_dir() -> Path:
    return Path.home() / ".pharmacy_desk"


def _load_persisted_settings(data_dir: Path) -> dict:
    cfg = data_dir / CONFIG_FILE_NAME
    if cfg.exists():
        try:
            return json.loads(cfg.read_text(encoding="utf-8"))
        except Exception:
            return {}
    return {}


def _parse_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Expected a true/false value, got {v!r}.")


def _coerce(raw: Mapping[str, Any], base: Settings) -> Settings:
    out = base
    if raw.get("tax_rate") is not None:
        rate = to_money(raw["tax_rate"])
        if rate < 0 or rate >= 1:
            raise ValueError("Tax rate must be between 0 and 1.")
        out = replace(out, tax_rate=rate)
    if raw.get("expiry_window_days") is not None:
        try:
            days = int(raw["expiry_window_days"])
        except Exception:
            raise ValueError("Expiry window must be a whole number of days.")
        if days < 0:
            raise ValueError("Expiry window must be >= 0 days.")
        out = replace(out, expiry_window_days=days)
    if raw.get("currency"):
        out = replace(out, currency=str(raw["currency"]).strip().upper())
    if raw.get("sales_scope"):
        scope = str(raw["sales_scope"]).strip().lower()
        if scope not in SALES_SCOPES:
            raise ValueError("Sales scope must be 'day' or 'session'.")
        out = replace(out, sales_scope=scope)
    if raw.get("seed_demo_data") is not None:
        out = replace(out, seed_demo_data=_parse_bool(raw["seed_demo_data"]))
    return out


def _env_overrides(environ: Mapping[str, str]) -> dict:
    keys = {
        "tax_rate": ENV_TAX_RATE,
        "expiry_window_days": ENV_EXPIRY_DAYS,
        "currency": ENV_CURRENCY,
        "sales_scope": ENV_SALES_SCOPE,
        "seed_demo_data": ENV_SEED,
    }
    return {k: environ[env] for k, env in keys.items() if environ.get(env)}


def load_settings(
    *,
    environ: Optional[Mapping[str, str]] = None,
    session_override: Optional[Mapping[str, Any]] = None,
) -> Settings:
    # Priority order:
    # 1) Session override (set via Settings page)
    # 2) Environment variables
    # 3) Persisted settings.json in the data directory
    # 4) Defaults
    environ = os.environ if environ is None else environ
    session_override = session_override or {}

    if session_override.get("data_dir"):
        data_dir = Path(session_override["data_dir"]).expanduser().resolve()
    elif environ.get(ENV_DATA_DIR):
        data_dir = Path(environ[ENV_DATA_DIR]).expanduser().resolve()
    else:
        default_dir = _default_data_dir()
        data_dir = Path(_load_persisted_settings(default_dir).get("data_dir", default_dir)).expanduser().resolve()

    persisted = _load_persisted_settings(data_dir)

    settings = Settings(data_dir=data_dir)
    settings = _coerce(persisted, settings)
    settings = _coerce(_env_overrides(environ), settings)
    settings = _coerce(session_override, settings)
    return settings


def persist_settings(settings: Settings) -> Path:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    payload = {
        "data_dir": str(settings.data_dir),
        "tax_rate": str(settings.tax_rate),
        "expiry_window_days": settings.expiry_window_days,
        "currency": settings.currency,
        "sales_scope": settings.sales_scope,
        "seed_demo_data": settings.seed_demo_data,
    }
    settings.config_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return settings.config_path


def save_session_settings(values: Mapping[str, Any]) -> Settings:
    # Validate before touching the session so a bad value never sticks.
    settings = load_settings(session_override=values)
    persist_settings(settings)
    st.session_state[SESSION_KEY] = dict(values)
    return settings


@st.cache_resource
def settings_for(key: str) -> Settings:
    """Cached per distinct session override, so sessions never share one."""
    return load_settings(session_override=json.loads(key))


def override_key(values: Optional[Mapping[str, Any]]) -> str:
    return json.dumps(dict(values or {}), sort_keys=True, default=str)


def get_settings() -> Settings:
    return settings_for(override_key(st.session_state.get(SESSION_KEY)))


def configure_logging(environ: Optional[Mapping[str, str]] = None) -> None:
    environ = os.environ if environ is None else environ
    level = str(environ.get(ENV_LOG_LEVEL, "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
