from __future__ import annotations

import itertools
from typing import Any, Callable

import pytest

from trade_analytics.models import PositionType, Trade


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    """Build a Trade with sensible defaults; override any field by keyword."""

    counter = itertools.count(1)

    def _make(**overrides: Any) -> Trade:
        idx = next(counter)
        fields: dict[str, Any] = {
            "trade_id": f"t{idx}",
            "symbol": "SPY",
            "position_type": PositionType.CALL,
            "entry_price": 1.0,
            "exit_price": 1.5,
            "quantity": 1,
            "entry_date": "2024-01-01",
            "exit_date": "2024-01-01",
            "profit": 50.0,
        }
        fields.update(overrides)
        return Trade(**fields)

    return _make
