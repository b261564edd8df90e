from __future__ import annotations

from typing import Any

from trade_analytics.dates import parse_date_key
from trade_analytics.models import Trades, trade_list


def calculate_balance_at_date(trades: Trades, starting_balance: float, target_date: Any) -> float:
    """Account balance at the start of ``target_date``.

    Only trades that exited strictly before the target day are replayed, so a
    trade closing on ``target_date`` itself is not yet reflected.
    """
    target = parse_date_key(target_date)
    if target is None:
        return starting_balance

    total = 0.0
    for trade in trade_list(trades):
        exit_date = parse_date_key(trade.exit_date)
        if exit_date is None or exit_date >= target:
            continue
        total += trade.profit or 0.0
    return starting_balance + total
