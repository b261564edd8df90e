from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from trade_analytics.config.accounts import resolve_account_context
from trade_analytics.config.app_config import load_app_config
from trade_analytics.dashboard import build_batch_comparison, build_dashboard
from trade_analytics.filters import DateFilterType, TagFilterMode, build_date_filter
from trade_analytics.ingest.backend_rows import load_trades
from trade_analytics.logging_setup import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Summarize a trade journal export.")
    parser.add_argument(
        "trades_path",
        type=Path,
        nargs="?",
        default=None,
        help="Path to a JSON export of trade rows.",
    )
    parser.add_argument("--account", type=str, default=None, help="Account name from accounts config.")
    parser.add_argument("--config", type=Path, default=None, help="Path to app config (TOML).")
    parser.add_argument(
        "--starting-balance",
        type=float,
        default=None,
        help="Override the account starting balance.",
    )
    parser.add_argument(
        "--range",
        dest="date_range",
        choices=[item.value for item in DateFilterType],
        default=DateFilterType.ALL_TIME.value,
        help="Exit-date window to report on.",
    )
    parser.add_argument("--start", type=str, default=None, help="Start date for --range CUSTOM.")
    parser.add_argument("--end", type=str, default=None, help="End date for --range CUSTOM.")
    parser.add_argument("--tag", dest="tags", action="append", default=[], help="Tag id filter (repeatable).")
    parser.add_argument(
        "--tag-mode",
        choices=[item.value for item in TagFilterMode],
        default=TagFilterMode.OR.value,
        help="Require all (AND) or any (OR) of the selected tags.",
    )
    parser.add_argument("--batches", action="store_true", help="Report the current vs previous batch comparison.")
    parser.add_argument("--json", action="store_true", help="Print JSON output.")
    parser.add_argument("--out", type=Path, default=None, help="Write output to a file instead of stdout.")
    args = parser.parse_args(argv)

    app_config = load_app_config(args.config)
    configure_logging(app_config.app.log_level, stream=sys.stderr)

    try:
        context = resolve_account_context(args.account, env=os.environ)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    trades_path = args.trades_path or context.trades_path
    if not trades_path.exists():
        print(f"Trades file not found: {trades_path}", file=sys.stderr)
        return 1

    result = load_trades(trades_path, multiplier=app_config.analytics.contract_multiplier)
    if result.skipped:
        print(f"Skipped {result.skipped} trade rows during normalization.", file=sys.stderr)

    starting_balance = args.starting_balance
    if starting_balance is None:
        starting_balance = context.starting_balance

    if args.batches:
        payload = build_batch_comparison(
            result.trades,
            starting_balance,
            batch_size=app_config.analytics.batch_size,
        )
        text_lines = _format_batches(payload)
    else:
        date_filter = build_date_filter(args.date_range, start=args.start, end=args.end)
        payload = build_dashboard(
            result.trades,
            starting_balance,
            date_filter=date_filter,
            tag_ids=args.tags,
            tag_mode=args.tag_mode,
            daily_window_days=app_config.analytics.daily_window_days,
            trend_points=app_config.analytics.trend_points,
        )
        text_lines = _format_dashboard(payload)

    if args.json or (args.out is not None and args.out.suffix.lower() == ".json"):
        text = json.dumps(payload, indent=2, sort_keys=True)
    else:
        text = "\n".join(text_lines)

    if args.out is None:
        print(text)
    else:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text + "\n", encoding="utf-8")

    return 0


def _format_dashboard(payload: dict[str, Any]) -> list[str]:
    metrics = payload["metrics"]
    lines = [
        f"starting_balance {_format_float(payload['period_starting_balance'])}",
        f"total_trades {metrics['total_trades']}",
        f"winning_trades {metrics['winning_trades']}",
        f"losing_trades {metrics['losing_trades']}",
        f"win_rate {_format_float(metrics['win_rate'])}",
        f"avg_win {_format_float(metrics['avg_win'])}",
        f"avg_loss {_format_float(metrics['avg_loss'])}",
        f"total_profit {_format_float(metrics['total_profit'])}",
        f"current_balance {_format_float(metrics['current_balance'])}",
    ]
    for month in payload["monthly_net_pnl"]:
        lines.append(f"month {month['month_key']} {_format_float(month['net_pnl'])} {month['trade_count']}")
    return lines


def _format_batches(payload: dict[str, Any]) -> list[str]:
    lines = [f"total_trades {payload['total_trades']}"]
    for label in ("current", "previous"):
        metrics = payload[label]["metrics"]
        lines.append(
            f"{label} trades={metrics['total_trades']} "
            f"profit={_format_float(metrics['total_profit'])} "
            f"win_rate={_format_float(metrics['win_rate'])} "
            f"gauge={_format_float(payload[label]['win_loss_gauge'][0]['value'])}"
        )
    for point in payload["comparison"]:
        lines.append(
            f"#{point['trade_number']} "
            f"current={_format_float(point['current_value'])} "
            f"previous={_format_float(point['previous_value'])}"
        )
    return lines


def _format_float(value: float | None) -> str:
    return "na" if value is None else f"{value:.6g}"


if __name__ == "__main__":
    raise SystemExit(main())
