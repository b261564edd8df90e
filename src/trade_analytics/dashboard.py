"""Compose engine outputs into the payloads the dashboard and comparison views read."""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from datetime import date
from typing import Any, Callable, Iterable

from trade_analytics.dates import parse_date_key
from trade_analytics.filters import (
    DateFilter,
    TagFilterMode,
    filter_trades_by_exit_date,
    filter_trades_by_tags,
)
from trade_analytics.metrics.batches import (
    BATCH_SIZE,
    BatchSummary,
    calculate_trade_batches,
    generate_batch_comparison_data,
    summarize_batches,
)
from trade_analytics.metrics.equity import calculate_balance_at_date
from trade_analytics.metrics.series import (
    DAILY_WINDOW_DAYS,
    TREND_POINTS,
    generate_account_balance_data,
    generate_balance_trend_data,
    generate_cumulative_profit_data,
    generate_last_30_days_net_pnl_data,
    generate_monthly_net_pnl_data,
)
from trade_analytics.metrics.summary import (
    calculate_metrics,
    generate_win_loss_chart_data,
    generate_win_loss_data,
)
from trade_analytics.models import Trade, Trades, position_type_text, result_text, trade_list

logger = logging.getLogger(__name__)


def build_dashboard(
    trades: Trades,
    starting_balance: float,
    *,
    date_filter: DateFilter | None = None,
    tag_ids: Iterable[str] = (),
    tag_mode: TagFilterMode | str = TagFilterMode.OR,
    daily_window_days: int = DAILY_WINDOW_DAYS,
    trend_points: int = TREND_POINTS,
) -> dict[str, Any]:
    all_trades = trade_list(trades)
    filtered = filter_trades_by_tags(all_trades, tag_ids, tag_mode)
    filtered = filter_trades_by_exit_date(filtered, date_filter)

    period_balance = starting_balance
    if date_filter is not None and date_filter.start_date is not None:
        period_balance = calculate_balance_at_date(all_trades, starting_balance, date_filter.start_date)

    metrics = calculate_metrics(filtered, period_balance)
    balance_points = generate_account_balance_data(filtered, period_balance)

    return {
        "trade_count": len(filtered),
        "starting_balance": starting_balance,
        "period_starting_balance": period_balance,
        "metrics": metrics.as_dict(),
        "win_loss": generate_win_loss_data(metrics.winning_trades, metrics.losing_trades),
        "cumulative_profit": [point.as_dict() for point in generate_cumulative_profit_data(filtered)],
        "account_balance": [point.as_dict() for point in balance_points],
        "balance_trend": generate_balance_trend_data(balance_points, trend_points),
        "monthly_net_pnl": [point.as_dict() for point in generate_monthly_net_pnl_data(filtered)],
        "last_30_days": [
            point.as_dict() for point in generate_last_30_days_net_pnl_data(filtered, daily_window_days)
        ],
    }


def build_batch_comparison(
    trades: Trades,
    starting_balance: float = 0.0,
    *,
    batch_size: int = BATCH_SIZE,
) -> dict[str, Any]:
    if batch_size < 1:
        batch_size = BATCH_SIZE
    ordered = newest_first(trades)
    batches = calculate_trade_batches(ordered, batch_size)
    current_summary, previous_summary = summarize_batches(batches, starting_balance)
    return {
        "total_trades": len(ordered),
        "is_baseline": 0 < len(ordered) <= batch_size,
        "current": _batch_payload(batches.current_batch, current_summary),
        "previous": _batch_payload(batches.previous_batch, previous_summary),
        "comparison": [
            point.as_dict()
            for point in generate_batch_comparison_data(batches.current_batch, batches.previous_batch)
        ],
    }


def newest_first(trades: Trades) -> list[Trade]:
    """Order trades by entry date, most recent first; undated trades go last."""
    return sorted(trade_list(trades), key=_recency_key, reverse=True)


class DashboardCache:
    """Bounded memo of computed payloads keyed by a hash of the request content."""

    def __init__(self, max_entries: int = 64) -> None:
        self._max_entries = max(1, max_entries)
        self._entries: OrderedDict[str, Any] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @staticmethod
    def key_for(payload: Any) -> str:
        encoded = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()

    def get_or_compute(self, payload: Any, compute: Callable[[], Any]) -> Any:
        key = self.key_for(payload)
        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
                return self._entries[key]
        # Computed outside the lock; concurrent misses on one key may both compute.
        value = compute()
        with self._lock:
            self._entries[key] = value
            self._entries.move_to_end(key)
            while len(self._entries) > self._max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted dashboard cache entry %s", evicted[:12])
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


def _batch_payload(batch: list[Trade], summary: BatchSummary) -> dict[str, Any]:
    return {
        "trade_ids": [trade.trade_id for trade in batch],
        "metrics": summary.metrics.as_dict(),
        "best_trade": _trade_brief(summary.best_trade),
        "worst_trade": _trade_brief(summary.worst_trade),
        "result_winners": summary.result_winners,
        "result_losers": summary.result_losers,
        "win_loss_gauge": generate_win_loss_chart_data(batch),
    }


def _trade_brief(trade: Trade | None) -> dict[str, Any] | None:
    if trade is None:
        return None
    return {
        "id": trade.trade_id,
        "symbol": trade.symbol,
        "position_type": position_type_text(trade.position_type),
        "result": result_text(trade.result),
        "profit": trade.profit,
    }


def _recency_key(trade: Trade) -> tuple[date, date]:
    entry = parse_date_key(trade.entry_date) or date.min
    exit_ = parse_date_key(trade.exit_date) or date.min
    return entry, exit_
