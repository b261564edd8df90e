from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping

from trade_analytics.metrics.summary import CONTRACT_MULTIPLIER, calculate_profit
from trade_analytics.models import (
    PositionType,
    Tag,
    Trade,
    TradeResult,
    position_type_from_text,
    result_from_text,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestResult:
    trades: dict[str, Trade]
    skipped: int = 0


def load_trades(path: str | Path, *, multiplier: int = CONTRACT_MULTIPLIER) -> IngestResult:
    source_path = Path(path)
    if source_path.suffix.lower() != ".json":
        raise ValueError(f"Unsupported file type: {source_path.suffix}")
    with source_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    return load_trades_payload(payload, multiplier=multiplier)


def load_trades_payload(payload: Any, *, multiplier: int = CONTRACT_MULTIPLIER) -> IngestResult:
    records = _extract_records(payload)
    trades: dict[str, Trade] = {}
    skipped = 0
    for raw in records:
        try:
            trade = _normalize_trade(raw, multiplier=multiplier)
        except ValueError as exc:
            logger.debug("Skipping trade row: %s", exc)
            skipped += 1
            continue
        trades[trade.trade_id] = trade
    return IngestResult(trades=trades, skipped=skipped)


def trade_to_row(trade: Trade) -> dict[str, Any]:
    return {
        "id": trade.trade_id,
        "symbol": trade.symbol,
        "position_type": int(trade.position_type) if trade.position_type is not None else None,
        "entry_price": trade.entry_price,
        "exit_price": trade.exit_price,
        "quantity": trade.quantity,
        "entry_date": _date_text(trade.entry_date),
        "exit_date": _date_text(trade.exit_date),
        "profit": trade.profit,
        "result": int(trade.result) if trade.result is not None else None,
        "notes": trade.notes,
        "reasoning": trade.reasoning,
        "source": trade.source,
        "tags": [{"id": tag.id, "name": tag.name, "color": tag.color} for tag in trade.tags],
    }


def _extract_records(payload: Any) -> Iterable[Mapping[str, Any]]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("data", "trades", "result"):
            if key in payload and isinstance(payload[key], list):
                return payload[key]
    raise ValueError("Unsupported JSON format for trades payload")


def _normalize_trade(raw: Any, *, multiplier: int) -> Trade:
    if not isinstance(raw, Mapping):
        raise ValueError("Trade row is not an object")
    trade_id = raw.get("id")
    symbol = raw.get("symbol")
    if trade_id in (None, "") or not symbol:
        raise ValueError("Missing required trade fields")

    entry_price = _to_float(raw.get("entry_price"))
    exit_price = _to_float(raw.get("exit_price"))
    quantity = _to_int(raw.get("quantity"))
    profit_raw = raw.get("profit")
    if profit_raw in (None, ""):
        profit = calculate_profit(entry_price, exit_price, quantity, multiplier)
    else:
        profit = _to_float(profit_raw)

    return Trade(
        trade_id=str(trade_id),
        symbol=str(symbol),
        position_type=_enum_or_none(PositionType, raw.get("position_type"), position_type_from_text),
        entry_price=entry_price,
        exit_price=exit_price,
        quantity=quantity,
        entry_date=raw.get("entry_date"),
        exit_date=raw.get("exit_date"),
        profit=profit,
        result=_enum_or_none(TradeResult, raw.get("result"), result_from_text),
        notes=_text_or_none(raw.get("notes")),
        reasoning=_text_or_none(raw.get("reasoning")),
        source=_text_or_none(raw.get("source")),
        tags=_parse_tags(raw.get("tags")),
    )


def _parse_tags(value: Any) -> list[Tag]:
    if not isinstance(value, list):
        return []
    tags: list[Tag] = []
    for item in value:
        if not isinstance(item, Mapping) or item.get("id") in (None, ""):
            continue
        color = item.get("color")
        tags.append(
            Tag(
                id=str(item["id"]),
                name=str(item.get("name") or ""),
                color=str(color) if color else None,
            )
        )
    return tags


def _to_float(value: Any) -> float:
    if value in (None, ""):
        raise ValueError("Missing numeric field")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid numeric field") from exc


def _to_int(value: Any) -> int:
    number = _to_float(value)
    if not number.is_integer():
        raise ValueError("Quantity must be a whole number")
    return int(number)


def _enum_or_none(enum_cls, value: Any, from_text):
    if value in (None, ""):
        return None
    # Form exports spell these as "CALL" / "WIN" instead of the stored integers.
    if isinstance(value, str) and not value.strip().isdigit():
        return from_text(value.strip().upper())
    try:
        return enum_cls(int(value))
    except (TypeError, ValueError):
        return None


def _text_or_none(value: Any) -> str | None:
    if value in (None, ""):
        return None
    return str(value)


def _date_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return value.isoformat()
