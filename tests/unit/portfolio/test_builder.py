"""Unit tests for the open-lot builder (FIFO inventory baseline)."""

from __future__ import annotations

import pytest

from taxlotiq.portfolio._builder import build_open_lots, sort_trades


class TestBuildOpenLots:
    """Tests for build_open_lots()."""

    def test_buys_open_lots_in_acquisition_order(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 10, 100, day=0),
            make_trade("b2", "BUY", 5, 200, day=1),
        ]

        lots = build_open_lots(trades)

        assert [(lot.lot_id, lot.qty_open, lot.unit_cost) for lot in lots] == [
            ("b1", 10, 100),
            ("b2", 5, 200),
        ]

    def test_sell_consumes_oldest_lot_first(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 10, 100, day=0),
            make_trade("b2", "BUY", 5, 200, day=1),
            make_trade("s1", "SELL", 12, 150, day=2),
        ]

        lots = build_open_lots(trades)

        assert len(lots) == 1
        assert lots[0].lot_id == "b2"
        assert lots[0].qty_open == pytest.approx(3)

    def test_partial_sell_reduces_only_oldest_lot(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 10, 100, day=0),
            make_trade("b2", "BUY", 5, 200, day=1),
            make_trade("s1", "SELL", 4, 150, day=2),
        ]

        lots = {lot.lot_id: lot.qty_open for lot in build_open_lots(trades)}

        assert lots == {"b1": pytest.approx(6), "b2": pytest.approx(5)}

    def test_fee_is_allocated_per_unit(self, make_trade) -> None:
        lots = build_open_lots([make_trade("b1", "BUY", 4, 10, fee=2)])

        assert lots[0].unit_cost == pytest.approx(10.5)

    def test_oversell_is_not_an_error(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 5, 100, day=0),
            make_trade("s1", "SELL", 8, 120, day=1),
        ]

        assert build_open_lots(trades) == []

    def test_sells_only_touch_same_symbol(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 2, 100, symbol="ETH-USD", day=0),
            make_trade("b2", "BUY", 3, 200, symbol="BTC-USD", day=1),
            make_trade("s1", "SELL", 3, 250, symbol="BTC-USD", day=2),
        ]

        lots = build_open_lots(trades)

        assert [(lot.lot_id, lot.qty_open) for lot in lots] == [("b1", 2)]

    def test_replays_in_timestamp_order(self, make_trade) -> None:
        """A sell timestamped before any buy has nothing to consume."""
        trades = [
            make_trade("b1", "BUY", 10, 100, day=1),
            make_trade("s1", "SELL", 4, 150, day=0),
        ]

        lots = build_open_lots(trades)

        assert [(lot.lot_id, lot.qty_open) for lot in lots] == [("b1", 10)]

    def test_fully_consumed_lots_are_dropped(self, make_trade) -> None:
        trades = [
            make_trade("b1", "BUY", 0.1, 100, day=0),
            make_trade("b2", "BUY", 0.2, 100, day=0),
            make_trade("s1", "SELL", 0.3, 150, day=1),
        ]

        assert build_open_lots(trades) == []


class TestSortTrades:
    """Tests for sort_trades()."""

    def test_ties_keep_ingestion_order(self, make_trade) -> None:
        trades = [
            make_trade("late", "BUY", 1, 100, day=2),
            make_trade("first", "BUY", 1, 100, day=1),
            make_trade("second", "BUY", 1, 100, day=1),
        ]

        assert [t.client_trade_id for t in sort_trades(trades)] == ["first", "second", "late"]
