from __future__ import annotations

from datetime import date

import pytest

from trade_analytics.metrics.equity import calculate_balance_at_date


def build_trades(make_trade):
    return [
        make_trade(exit_date="2024-01-01", profit=100.0),
        make_trade(exit_date="2024-01-05T16:00:00Z", profit=-40.0),
        make_trade(exit_date="2024-01-10", profit=25.0),
        make_trade(exit_date=None, profit=1_000.0),
    ]


def test_trade_exiting_on_target_date_is_excluded(make_trade):
    trades = build_trades(make_trade)
    assert calculate_balance_at_date(trades, 1000.0, "2024-01-05") == 1100.0


def test_trade_exiting_day_before_target_is_included(make_trade):
    trades = build_trades(make_trade)
    assert calculate_balance_at_date(trades, 1000.0, "2024-01-06") == 1060.0


def test_target_after_all_trades_replays_every_dated_trade(make_trade):
    trades = build_trades(make_trade)
    assert calculate_balance_at_date(trades, 1000.0, date(2025, 1, 1)) == 1085.0


def test_target_accepts_timestamps(make_trade):
    trades = build_trades(make_trade)
    assert calculate_balance_at_date(trades, 0.0, "2024-01-10T00:00:00+02:00") == 60.0


@pytest.mark.parametrize("target", [None, "", "not-a-date"])
def test_missing_target_returns_starting_balance(make_trade, target):
    trades = build_trades(make_trade)
    assert calculate_balance_at_date(trades, 750.0, target) == 750.0


def test_no_trades_returns_starting_balance():
    assert calculate_balance_at_date([], 10.0, "2024-01-01") == 10.0
