from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import IntEnum
from typing import Iterable, Mapping, Union

DateValue = Union[str, date, datetime, None]


class PositionType(IntEnum):
    CALL = 1
    PUT = 2


class TradeResult(IntEnum):
    LOSS = 0
    WIN = 1


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    color: str | None = None


@dataclass
class Trade:
    trade_id: str
    symbol: str
    position_type: PositionType | None
    entry_price: float
    exit_price: float
    quantity: int
    entry_date: DateValue
    exit_date: DateValue
    profit: float
    result: TradeResult | None = None
    notes: str | None = None
    reasoning: str | None = None
    source: str | None = None
    tags: list[Tag] = field(default_factory=list)

    @property
    def is_win(self) -> bool:
        return self.result == TradeResult.WIN

    @property
    def is_loss(self) -> bool:
        return self.result == TradeResult.LOSS

    @property
    def tag_ids(self) -> set[str]:
        return {tag.id for tag in self.tags}


Trades = Union[Mapping[str, Trade], Iterable[Trade]]


def trade_list(trades: Trades | None) -> list[Trade]:
    if trades is None:
        return []
    if isinstance(trades, Mapping):
        return list(trades.values())
    return list(trades)


def result_text(result: TradeResult | int | None) -> str:
    if result == TradeResult.WIN:
        return "WIN"
    if result == TradeResult.LOSS:
        return "LOSS"
    return ""


def result_from_text(text: str | None) -> TradeResult | None:
    if text == "WIN":
        return TradeResult.WIN
    if text == "LOSS":
        return TradeResult.LOSS
    return None


def position_type_text(value: PositionType | int | None) -> str:
    if value == PositionType.CALL:
        return "CALL"
    if value == PositionType.PUT:
        return "PUT"
    return ""


def position_type_from_text(text: str | None) -> PositionType | None:
    if text == "CALL":
        return PositionType.CALL
    if text == "PUT":
        return PositionType.PUT
    return None
