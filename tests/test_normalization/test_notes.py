"""Tests for notes marker parsing."""

from datetime import date
from decimal import Decimal

from cryptotax.models.enums import HoldingPeriod
from cryptotax.normalization.notes import parse_imported_basis, parse_swap


class TestImportedBasis:
    def test_full_markers(self):
        basis = parse_imported_basis(
            "Sold 0.5 BTC | Cost Basis: $12,345.67 | Purchased: 2021-03-04 | Long-term (820 days)"
        )
        assert basis.cost_basis == Decimal("12345.67")
        assert basis.purchased == date(2021, 3, 4)
        assert basis.holding_hint == HoldingPeriod.LONG

    def test_zero_basis(self):
        basis = parse_imported_basis("Cost Basis: 0.00")
        assert basis.cost_basis == Decimal("0.00")
        assert basis.purchased is None
        assert basis.holding_hint is None

    def test_short_term_hint(self):
        assert parse_imported_basis("cost basis: $10 short-term (30 days)").holding_hint == HoldingPeriod.SHORT

    def test_absent(self):
        assert parse_imported_basis("Bought on Coinbase") is None
        assert parse_imported_basis(None) is None

    def test_bad_purchase_date_ignored(self):
        assert parse_imported_basis("Cost Basis: $5 Purchased: 2021-13-45").purchased is None


class TestParseSwap:
    def test_swapped_for(self):
        legs = parse_swap("Swapped 1.5 ETH for 3000 USDC", "ETH")
        assert (legs.outgoing_asset, legs.incoming_asset) == ("ETH", "USDC")
        assert legs.outgoing_amount == Decimal("1.5")
        assert legs.incoming_amount == Decimal("3000")

    def test_arrow_with_amounts(self):
        legs = parse_swap("0.05 btc -> 0.75 eth", None)
        assert (legs.outgoing_asset, legs.incoming_asset) == ("BTC", "ETH")
        assert legs.incoming_amount == Decimal("0.75")

    def test_arrow_without_amounts(self):
        legs = parse_swap("SOL → USDC", None)
        assert (legs.outgoing_asset, legs.incoming_asset) == ("SOL", "USDC")
        assert legs.outgoing_amount is None

    def test_pair_symbol(self):
        legs = parse_swap(None, "avax/btc")
        assert (legs.outgoing_asset, legs.incoming_asset) == ("AVAX", "BTC")

    def test_no_swap(self):
        assert parse_swap("payment", "ETH") is None
