from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from typing import Any

from trade_analytics.dates import MAX_DATE, parse_date_key
from trade_analytics.metrics.summary import (
    Metrics,
    best_trade,
    calculate_metrics,
    result_flag_counts,
    worst_trade,
)
from trade_analytics.models import Trade, Trades, trade_list

BATCH_SIZE = 10


@dataclass(frozen=True)
class TradeBatches:
    current_batch: list[Trade]
    previous_batch: list[Trade]


@dataclass(frozen=True)
class ComparisonPoint:
    trade_number: int
    current_cumulative: float
    previous_cumulative: float
    current_value: float | None
    previous_value: float | None

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BatchSummary:
    metrics: Metrics
    best_trade: Trade | None
    worst_trade: Trade | None
    result_winners: int
    result_losers: int


def calculate_trade_batches(trades: Trades, batch_size: int = BATCH_SIZE) -> TradeBatches:
    """Split newest-first ``trades`` into the current and previous batch.

    The current batch is the incomplete leading group when the trade count is
    not a multiple of ``batch_size``, otherwise the latest full batch. With
    ``batch_size`` trades or fewer both batches hold the whole list.
    """
    if batch_size < 1:
        batch_size = BATCH_SIZE
    items = trade_list(trades)
    total = len(items)
    if total == 0:
        return TradeBatches(current_batch=[], previous_batch=[])
    if total <= batch_size:
        return TradeBatches(current_batch=list(items), previous_batch=list(items))

    current_size = total % batch_size or batch_size
    previous_end = min(current_size + batch_size, total)
    return TradeBatches(
        current_batch=items[:current_size],
        previous_batch=items[current_size:previous_end],
    )


def generate_batch_comparison_data(
    current_batch: Trades | None,
    previous_batch: Trades | None,
) -> list[ComparisonPoint]:
    ordered_current = _sort_by_exit(current_batch)
    ordered_previous = _sort_by_exit(previous_batch)
    length = max(len(ordered_current), len(ordered_previous))

    current_cumulative = 0.0
    previous_cumulative = 0.0
    points: list[ComparisonPoint] = []
    for idx in range(length):
        current_value = None
        previous_value = None
        if idx < len(ordered_current):
            current_cumulative += ordered_current[idx].profit or 0.0
            current_value = current_cumulative
        if idx < len(ordered_previous):
            previous_cumulative += ordered_previous[idx].profit or 0.0
            previous_value = previous_cumulative
        points.append(
            ComparisonPoint(
                trade_number=idx + 1,
                current_cumulative=current_cumulative,
                previous_cumulative=previous_cumulative,
                current_value=current_value,
                previous_value=previous_value,
            )
        )
    return points


def summarize_batch(batch: Trades, starting_balance: float = 0.0) -> BatchSummary:
    items = trade_list(batch)
    winners, losers = result_flag_counts(items)
    return BatchSummary(
        metrics=calculate_metrics(items, starting_balance),
        best_trade=best_trade(items),
        worst_trade=worst_trade(items),
        result_winners=winners,
        result_losers=losers,
    )


def summarize_batches(
    batches: TradeBatches, starting_balance: float = 0.0
) -> tuple[BatchSummary, BatchSummary]:
    return (
        summarize_batch(batches.current_batch, starting_balance),
        summarize_batch(batches.previous_batch, starting_balance),
    )


def _exit_sort_key(trade: Trade) -> date:
    return parse_date_key(trade.exit_date) or MAX_DATE


def _sort_by_exit(batch: Trades | None) -> list[Trade]:
    return sorted(trade_list(batch), key=_exit_sort_key)
