from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from trade_analytics.models import Trade, TradeResult, Trades, trade_list

CONTRACT_MULTIPLIER = 100

WIN_COLOR = "#10B981"
LOSS_COLOR = "#EF4444"
GAUGE_LOSS_COLOR = "#111827"


@dataclass(frozen=True)
class Metrics:
    total_trades: int
    winning_trades: int
    losing_trades: int
    total_profit: float
    win_rate: float
    avg_win: float
    avg_loss: float
    current_balance: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def calculate_metrics(trades: Trades, starting_balance: float) -> Metrics:
    """Reduce ``trades`` to dashboard totals.

    Wins and losses are decided by the sign of ``profit``; trades with zero
    profit count toward ``total_trades`` but toward neither bucket. The win
    rate is a percentage of all trades, so breakeven trades pull it down.
    """
    items = trade_list(trades)
    total_trades = len(items)
    profits = [trade.profit or 0.0 for trade in items]
    wins = [profit for profit in profits if profit > 0]
    losses = [profit for profit in profits if profit < 0]
    total_profit = sum(profits)

    win_rate = 0.0
    if total_trades:
        win_rate = len(wins) / total_trades * 100

    avg_win = 0.0
    if wins:
        avg_win = sum(wins) / len(wins)

    avg_loss = 0.0
    if losses:
        avg_loss = abs(sum(losses) / len(losses))

    return Metrics(
        total_trades=total_trades,
        winning_trades=len(wins),
        losing_trades=len(losses),
        total_profit=total_profit,
        win_rate=win_rate,
        avg_win=avg_win,
        avg_loss=avg_loss,
        current_balance=starting_balance + total_profit,
    )


def calculate_profit(
    entry_price: float,
    exit_price: float,
    quantity: int,
    multiplier: int = CONTRACT_MULTIPLIER,
) -> float:
    return (exit_price * multiplier - entry_price * multiplier) * quantity


def calculate_return_percentage(entry_price: float, exit_price: float) -> float:
    return (exit_price - entry_price) / entry_price * 100


def generate_win_loss_data(winning_trades: int, losing_trades: int) -> list[dict[str, Any]]:
    return [
        {"name": "Winning Trades", "value": winning_trades, "color": WIN_COLOR},
        {"name": "Losing Trades", "value": losing_trades, "color": LOSS_COLOR},
    ]


def generate_win_loss_chart_data(batch: Trades | None) -> list[dict[str, Any]]:
    items = trade_list(batch)
    if not items:
        return [
            {"name": "Wins", "value": 0.0, "color": WIN_COLOR},
            {"name": "Losses", "value": 100.0, "color": GAUGE_LOSS_COLOR},
        ]
    # The gauge honours a manual WIN flag even when profit says otherwise.
    wins = sum(1 for trade in items if (trade.profit or 0.0) > 0 or trade.result == TradeResult.WIN)
    win_rate = wins / len(items) * 100
    return [
        {"name": "Wins", "value": win_rate, "color": WIN_COLOR},
        {"name": "Losses", "value": 100 - win_rate, "color": GAUGE_LOSS_COLOR},
    ]


def result_flag_counts(trades: Trades) -> tuple[int, int]:
    items = trade_list(trades)
    winners = sum(1 for trade in items if trade.is_win)
    losers = sum(1 for trade in items if trade.is_loss)
    return winners, losers


def best_trade(trades: Trades) -> Trade | None:
    return max(trade_list(trades), key=lambda trade: trade.profit or 0.0, default=None)


def worst_trade(trades: Trades) -> Trade | None:
    return min(trade_list(trades), key=lambda trade: trade.profit or 0.0, default=None)
