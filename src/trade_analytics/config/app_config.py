from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_PATH = Path("config/app.toml")


@dataclass(frozen=True)
class AppSettings:
    host: str
    port: int
    reload: bool
    log_level: str


@dataclass(frozen=True)
class AnalyticsSettings:
    batch_size: int
    daily_window_days: int
    trend_points: int
    contract_multiplier: int
    cache_size: int


@dataclass(frozen=True)
class AppConfig:
    app: AppSettings
    analytics: AnalyticsSettings


def load_app_config(path: Path | None = None, env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    config_path = Path(path or env.get("TRADE_ANALYTICS_CONFIG") or DEFAULT_CONFIG_PATH)
    raw: Mapping[str, Any] = {}
    if config_path.exists():
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))

    app_raw = _section(raw, "app")
    analytics_raw = _section(raw, "analytics")

    app = AppSettings(
        host=str(app_raw.get("host", "127.0.0.1")),
        port=int(app_raw.get("port", 8000)),
        reload=bool(app_raw.get("reload", False)),
        log_level=str(app_raw.get("log_level", "INFO")).strip().upper() or "INFO",
    )

    analytics = AnalyticsSettings(
        batch_size=_positive_int(analytics_raw.get("batch_size"), 10),
        daily_window_days=_positive_int(analytics_raw.get("daily_window_days"), 30),
        trend_points=_positive_int(analytics_raw.get("trend_points"), 10),
        contract_multiplier=_positive_int(analytics_raw.get("contract_multiplier"), 100),
        cache_size=_positive_int(analytics_raw.get("cache_size"), 64),
    )

    return AppConfig(app=app, analytics=analytics)


def _section(raw: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value
    return {}


def _positive_int(value: Any, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default
