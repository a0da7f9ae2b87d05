from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

# Two buys and one sell of BTC-USD: FIFO realizes 400, LIFO realizes 100.
SCENARIO_TRADES: list[dict[str, Any]] = [
    {
        "client_trade_id": "b1",
        "timestamp": "2024-01-01T00:00:00Z",
        "symbol": "BTC-USD",
        "side": "BUY",
        "qty": 10,
        "price": 100,
    },
    {
        "client_trade_id": "b2",
        "timestamp": "2024-01-02T00:00:00Z",
        "symbol": "BTC-USD",
        "side": "BUY",
        "qty": 5,
        "price": 200,
    },
    {
        "client_trade_id": "s1",
        "timestamp": "2024-01-03T00:00:00Z",
        "symbol": "BTC-USD",
        "side": "SELL",
        "qty": 12,
        "price": 150,
    },
]


def write_trades_file(path: Path, payload: Any) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path
