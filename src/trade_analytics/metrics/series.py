from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Any, Iterable

from trade_analytics.dates import format_date, parse_date_key
from trade_analytics.models import Trade, Trades, trade_list

START_LABEL = "Start"
DAILY_WINDOW_DAYS = 30
TREND_POINTS = 10
MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class CumulativePoint:
    date: str
    cumulative: float
    profit: float

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BalancePoint:
    date: str
    balance: float
    trade_num: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MonthlyPoint:
    month_key: str
    month_label: str
    month_full: str
    net_pnl: float
    year: int
    month_index: int
    trade_count: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class DailyPoint:
    date: str
    date_label: str
    net_pnl: float
    is_positive: bool

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def generate_cumulative_profit_data(trades: Trades) -> list[CumulativePoint]:
    cumulative = 0.0
    points: list[CumulativePoint] = []
    for exit_date, trade in _sorted_by_exit(trades):
        profit = _profit(trade)
        cumulative += profit
        points.append(CumulativePoint(date=exit_date.isoformat(), cumulative=cumulative, profit=profit))
    return points


def generate_account_balance_data(trades: Trades, starting_balance: float) -> list[BalancePoint]:
    balance = starting_balance
    points = [BalancePoint(date=START_LABEL, balance=starting_balance, trade_num=0)]
    for idx, (exit_date, trade) in enumerate(_sorted_by_exit(trades), start=1):
        balance += _profit(trade)
        points.append(BalancePoint(date=exit_date.isoformat(), balance=balance, trade_num=idx))
    return points


def generate_monthly_net_pnl_data(trades: Trades) -> list[MonthlyPoint]:
    buckets: dict[tuple[int, int], list[float]] = {}
    for exit_date, trade in _dated_trades(trades):
        buckets.setdefault((exit_date.year, exit_date.month), []).append(_profit(trade))

    points: list[MonthlyPoint] = []
    for (year, month), values in sorted(buckets.items()):
        label = MONTH_LABELS[month - 1]
        points.append(
            MonthlyPoint(
                month_key=f"{year:04d}-{month:02d}",
                month_label=label,
                month_full=f"{label} {year}",
                net_pnl=sum(values),
                year=year,
                month_index=month - 1,
                trade_count=len(values),
            )
        )
    return points


def generate_last_30_days_net_pnl_data(
    trades: Trades,
    days: int = DAILY_WINDOW_DAYS,
) -> list[DailyPoint]:
    """Daily net P&L for the ``days + 1`` calendar days ending at the latest exit.

    The window is anchored on the most recent exit date in ``trades`` rather
    than on today, and every day in it gets a row even when nothing closed.
    """
    dated = _dated_trades(trades)
    if not dated:
        return []
    anchor = max(exit_date for exit_date, _ in dated)
    start = anchor - timedelta(days=days)

    daily: dict[date, float] = {}
    cursor = start
    while cursor <= anchor:
        daily[cursor] = 0.0
        cursor += timedelta(days=1)

    for exit_date, trade in dated:
        if exit_date in daily:
            daily[exit_date] += _profit(trade)

    return [
        DailyPoint(
            date=day.isoformat(),
            date_label=format_date(day),
            net_pnl=net_pnl,
            is_positive=net_pnl >= 0,
        )
        for day, net_pnl in sorted(daily.items())
    ]


def generate_balance_trend_data(
    balance_points: Iterable[BalancePoint],
    point_count: int = TREND_POINTS,
) -> list[float]:
    points = list(balance_points)
    if not points or point_count <= 0:
        return []
    return [point.balance for point in points[-point_count:]]


def _dated_trades(trades: Trades) -> list[tuple[date, Trade]]:
    output: list[tuple[date, Trade]] = []
    for trade in trade_list(trades):
        exit_date = parse_date_key(trade.exit_date)
        if exit_date is None:
            continue
        output.append((exit_date, trade))
    return output


def _sorted_by_exit(trades: Trades) -> list[tuple[date, Trade]]:
    # sorted() is stable: same-day trades keep their input order.
    return sorted(_dated_trades(trades), key=lambda item: item[0])


def _profit(trade: Trade) -> float:
    return trade.profit or 0.0
