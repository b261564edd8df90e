from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum
from typing import Any, Iterable

from trade_analytics.dates import parse_date_key
from trade_analytics.models import Trade, Trades, trade_list


class DateFilterType(StrEnum):
    ALL_TIME = "ALL_TIME"
    LAST_7_DAYS = "LAST_7_DAYS"
    LAST_30_DAYS = "LAST_30_DAYS"
    THIS_MONTH = "THIS_MONTH"
    LAST_MONTH = "LAST_MONTH"
    YEAR_TO_DATE = "YEAR_TO_DATE"
    CUSTOM = "CUSTOM"


class TagFilterMode(StrEnum):
    AND = "AND"
    OR = "OR"


@dataclass(frozen=True)
class DateFilter:
    type: DateFilterType
    start_date: date | None = None
    end_date: date | None = None

    @property
    def is_all_time(self) -> bool:
        return self.type == DateFilterType.ALL_TIME or (self.start_date is None and self.end_date is None)


ALL_TIME = DateFilter(type=DateFilterType.ALL_TIME)


def build_date_filter(
    filter_type: DateFilterType | str | None,
    *,
    start: Any = None,
    end: Any = None,
    today: date | None = None,
) -> DateFilter:
    try:
        resolved = DateFilterType(filter_type) if filter_type else DateFilterType.ALL_TIME
    except ValueError:
        return ALL_TIME
    today = today or date.today()

    if resolved == DateFilterType.LAST_7_DAYS:
        return DateFilter(resolved, today - timedelta(days=6), today)
    if resolved == DateFilterType.LAST_30_DAYS:
        return DateFilter(resolved, today - timedelta(days=29), today)
    if resolved == DateFilterType.THIS_MONTH:
        return DateFilter(resolved, today.replace(day=1), today)
    if resolved == DateFilterType.LAST_MONTH:
        last_month_end = today.replace(day=1) - timedelta(days=1)
        return DateFilter(resolved, last_month_end.replace(day=1), last_month_end)
    if resolved == DateFilterType.YEAR_TO_DATE:
        return DateFilter(resolved, today.replace(month=1, day=1), today)
    if resolved == DateFilterType.CUSTOM:
        return DateFilter(resolved, parse_date_key(start), parse_date_key(end))
    return ALL_TIME


def filter_trades_by_exit_date(trades: Trades, date_filter: DateFilter | None) -> list[Trade]:
    items = trade_list(trades)
    if date_filter is None or date_filter.is_all_time:
        return items

    output: list[Trade] = []
    for trade in items:
        exit_date = parse_date_key(trade.exit_date)
        if exit_date is None:
            continue
        if date_filter.start_date is not None and exit_date < date_filter.start_date:
            continue
        if date_filter.end_date is not None and exit_date > date_filter.end_date:
            continue
        output.append(trade)
    return output


def filter_trades_by_tags(
    trades: Trades,
    tag_ids: Iterable[str] | None,
    mode: TagFilterMode | str = TagFilterMode.OR,
) -> list[Trade]:
    items = trade_list(trades)
    selected = [str(tag_id) for tag_id in tag_ids or ()]
    if not selected:
        return items
    if str(mode).upper() == TagFilterMode.AND:
        return [trade for trade in items if all(tag_id in trade.tag_ids for tag_id in selected)]
    return [trade for trade in items if any(tag_id in trade.tag_ids for tag_id in selected)]
