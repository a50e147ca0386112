"""Tests for the per-asset lot inventory."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from cryptotax.engines.lot_inventory import LotInventory
from cryptotax.exceptions import InsufficientLotsError
from cryptotax.models.enums import MatchingMethod

T1 = datetime(2023, 1, 1, tzinfo=timezone.utc)
T2 = datetime(2023, 2, 1, tzinfo=timezone.utc)
T3 = datetime(2023, 3, 1, tzinfo=timezone.utc)


class TestConsumptionOrder:
    def setup_method(self):
        self.inventory = LotInventory()
        self.inventory.add_lot("ETH", Decimal("1"), Decimal("10"), T1, "tx-1")
        self.inventory.add_lot("ETH", Decimal("1"), Decimal("5"), T2, "tx-2")
        self.inventory.add_lot("ETH", Decimal("1"), Decimal("20"), T3, "tx-3")

    def test_fifo_partial_consumption(self):
        consumed = self.inventory.consume("ETH", Decimal("1.5"), MatchingMethod.FIFO)
        assert [(c.source_transaction_id, c.amount) for c in consumed] == [
            ("tx-1", Decimal("1")),
            ("tx-2", Decimal("0.5")),
        ]
        remaining = [(lot.source_transaction_id, lot.remaining_amount) for lot in self.inventory.lots("ETH")]
        assert remaining == [("tx-2", Decimal("0.5")), ("tx-3", Decimal("1"))]

    def test_lifo(self):
        consumed = self.inventory.consume("ETH", Decimal("1.5"), MatchingMethod.LIFO)
        assert [(c.source_transaction_id, c.amount) for c in consumed] == [
            ("tx-3", Decimal("1")),
            ("tx-2", Decimal("0.5")),
        ]

    def test_hifo_takes_highest_cost(self):
        consumed = self.inventory.consume("ETH", Decimal("1"), MatchingMethod.HIFO)
        assert len(consumed) == 1
        assert consumed[0].unit_cost_usd == Decimal("20")
        assert consumed[0].cost_basis == Decimal("20")

    def test_hifo_has_highest_basis_of_all_methods(self):
        bases = {}
        for method in MatchingMethod:
            inventory = LotInventory()
            inventory.add_lot("ETH", Decimal("1"), Decimal("10"), T1, "tx-1")
            inventory.add_lot("ETH", Decimal("1"), Decimal("5"), T2, "tx-2")
            inventory.add_lot("ETH", Decimal("1"), Decimal("20"), T3, "tx-3")
            bases[method] = sum(c.cost_basis for c in inventory.consume("ETH", Decimal("1"), method))
        assert bases[MatchingMethod.HIFO] == max(bases.values())

    def test_ordered_does_not_consume(self):
        ordered = self.inventory.ordered("ETH", MatchingMethod.HIFO)
        assert [lot.unit_cost_usd for lot in ordered] == [Decimal("20"), Decimal("10"), Decimal("5")]
        assert self.inventory.held("ETH") == Decimal("3")


class TestInsufficientLots:
    def setup_method(self):
        self.inventory = LotInventory()
        self.inventory.add_lot("BTC", Decimal("0.5"), Decimal("20000"), T1, "tx-1")

    def test_raises_without_mutation(self):
        with pytest.raises(InsufficientLotsError) as exc_info:
            self.inventory.consume("BTC", Decimal("2"))
        assert exc_info.value.requested == Decimal("2")
        assert exc_info.value.available == Decimal("0.5")
        assert self.inventory.held("BTC") == Decimal("0.5")
        assert self.inventory.consumed_total("BTC") == Decimal("0")

    def test_consume_available_returns_remainder(self):
        consumed, unmatched = self.inventory.consume_available("BTC", Decimal("2"))
        assert sum(c.amount for c in consumed) == Decimal("0.5")
        assert unmatched == Decimal("1.5")
        assert self.inventory.held("BTC") == Decimal("0")

    def test_assets_are_isolated(self):
        with pytest.raises(InsufficientLotsError):
            self.inventory.consume("ETH", Decimal("0.1"))


class TestBookkeeping:
    def test_conservation(self):
        inventory = LotInventory()
        inventory.add_lot("SOL", Decimal("10"), Decimal("20"), T1, "tx-1")
        inventory.add_lot("SOL", Decimal("5.5"), Decimal("25"), T2, "tx-2")
        inventory.consume("SOL", Decimal("3.25"), MatchingMethod.FIFO)
        inventory.consume("SOL", Decimal("8"), MatchingMethod.HIFO)
        inventory.add_lot("SOL", Decimal("1"), Decimal("30"), T3, "tx-3")
        inventory.consume_available("SOL", Decimal("10"), MatchingMethod.LIFO)

        assert inventory.held("SOL") + inventory.consumed_total("SOL") == inventory.acquired_total("SOL")
        assert inventory.acquired_total("SOL") == Decimal("16.5")

    def test_zero_amount_lot_ignored(self):
        inventory = LotInventory()
        assert inventory.add_lot("ETH", Decimal("0"), Decimal("10"), T1, "tx-1") is None
        assert inventory.assets() == []

    def test_symbol_normalization(self):
        inventory = LotInventory()
        inventory.add_lot(" eth ", Decimal("1"), Decimal("10"), T1, "tx-1")
        assert inventory.held("ETH") == Decimal("1")
        assert inventory.assets() == ["ETH"]

    def test_emptied_lots_removed(self):
        inventory = LotInventory()
        inventory.add_lot("ETH", Decimal("1"), Decimal("10"), T1, "tx-1")
        inventory.consume("ETH", Decimal("1"))
        assert inventory.lots("ETH") == []


class TestExactCost:
    def setup_method(self):
        self.inventory = LotInventory()
        self.inventory.add_lot(
            "ETH", Decimal("3"), Decimal("100") / Decimal("3"), T1, "tx-1", total_cost=Decimal("100")
        )

    def test_full_consumption_returns_total_cost(self):
        consumed = self.inventory.consume("ETH", Decimal("3"))
        assert consumed[0].cost_basis == Decimal("100")

    def test_piecewise_consumption_sums_to_total_cost(self):
        costs = [self.inventory.consume("ETH", Decimal("1"))[0].cost_basis for _ in range(3)]
        assert sum(costs, Decimal("0")) == Decimal("100")

    def test_remaining_cost_tracks_partial_takes(self):
        self.inventory.consume("ETH", Decimal("1"))
        lot = self.inventory.lots("ETH")[0]
        assert lot.cost_usd == Decimal("100")
        assert lot.remaining_cost_usd + Decimal("100") / Decimal("3") == Decimal("100")

    def test_unit_cost_default(self):
        lot = self.inventory.add_lot("BTC", Decimal("0.5"), Decimal("20000"), T2, "tx-2")
        assert lot.cost_usd == Decimal("10000")
