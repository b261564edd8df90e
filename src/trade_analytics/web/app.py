from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from trade_analytics.config.app_config import load_app_config
from trade_analytics.dashboard import DashboardCache, build_batch_comparison, build_dashboard
from trade_analytics.dates import normalize_date
from trade_analytics.filters import DateFilterType, TagFilterMode, build_date_filter
from trade_analytics.ingest.backend_rows import IngestResult, load_trades_payload
from trade_analytics.logging_setup import configure_logging
from trade_analytics.metrics.equity import calculate_balance_at_date

logger = logging.getLogger(__name__)

_APP_CONFIG = load_app_config()

app = FastAPI(title="Trade Analytics")
app.state.dashboard_cache = DashboardCache(_APP_CONFIG.analytics.cache_size)


class TradesRequest(BaseModel):
    trades: list[dict[str, Any]] = Field(default_factory=list)
    starting_balance: float = 0.0


class DashboardRequest(TradesRequest):
    date_range: DateFilterType = DateFilterType.ALL_TIME
    start: str | None = None
    end: str | None = None
    today: date | None = None
    tag_ids: list[str] = Field(default_factory=list)
    tag_mode: TagFilterMode = TagFilterMode.OR


class BalanceAtRequest(TradesRequest):
    target_date: str | None = None


@app.get("/api/health")
def health_api() -> dict[str, Any]:
    return {"status": "ok", "cached_payloads": len(app.state.dashboard_cache)}


@app.post("/api/dashboard")
def dashboard_api(body: DashboardRequest) -> dict[str, Any]:
    date_filter = build_date_filter(body.date_range, start=body.start, end=body.end, today=body.today)
    key_payload = {
        "view": "dashboard",
        "trades": body.trades,
        "starting_balance": body.starting_balance,
        "filter": [date_filter.type.value, date_filter.start_date, date_filter.end_date],
        "tags": sorted(body.tag_ids),
        "tag_mode": body.tag_mode.value,
    }

    def compute() -> dict[str, Any]:
        result = _ingest(body.trades)
        payload = build_dashboard(
            result.trades,
            body.starting_balance,
            date_filter=date_filter,
            tag_ids=body.tag_ids,
            tag_mode=body.tag_mode,
            daily_window_days=_APP_CONFIG.analytics.daily_window_days,
            trend_points=_APP_CONFIG.analytics.trend_points,
        )
        payload["skipped"] = result.skipped
        payload["filter"] = {
            "type": date_filter.type.value,
            "start_date": _iso_or_none(date_filter.start_date),
            "end_date": _iso_or_none(date_filter.end_date),
        }
        return payload

    return app.state.dashboard_cache.get_or_compute(key_payload, compute)


@app.post("/api/batches")
def batches_api(body: TradesRequest) -> dict[str, Any]:
    key_payload = {"view": "batches", "trades": body.trades, "starting_balance": body.starting_balance}

    def compute() -> dict[str, Any]:
        result = _ingest(body.trades)
        payload = build_batch_comparison(
            result.trades,
            body.starting_balance,
            batch_size=_APP_CONFIG.analytics.batch_size,
        )
        payload["skipped"] = result.skipped
        return payload

    return app.state.dashboard_cache.get_or_compute(key_payload, compute)


@app.post("/api/balance-at")
def balance_at_api(body: BalanceAtRequest) -> dict[str, Any]:
    result = _ingest(body.trades)
    return {
        "target_date": normalize_date(body.target_date),
        "balance": calculate_balance_at_date(result.trades, body.starting_balance, body.target_date),
        "skipped": result.skipped,
    }


def _ingest(rows: list[dict[str, Any]]) -> IngestResult:
    try:
        result = load_trades_payload(rows, multiplier=_APP_CONFIG.analytics.contract_multiplier)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if result.skipped:
        logger.warning("Skipped %s trade rows during normalization.", result.skipped)
    return result


def _iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


def main() -> None:
    import uvicorn

    configure_logging(_APP_CONFIG.app.log_level)
    uvicorn.run(
        "trade_analytics.web.app:app",
        host=_APP_CONFIG.app.host,
        port=_APP_CONFIG.app.port,
        reload=_APP_CONFIG.app.reload,
    )


if __name__ == "__main__":
    main()
