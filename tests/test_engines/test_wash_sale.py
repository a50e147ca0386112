"""Tests for wash-sale detection."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from cryptotax.engines.wash_sale import WashSaleDetector, apply_wash_sale_rule
from cryptotax.models.enums import HoldingPeriod
from cryptotax.models.reports import TaxableEvent
from cryptotax.models.transaction import Transaction

SALE_DATE = datetime(2023, 6, 15, 12, tzinfo=timezone.utc)


def _loss_event(gain_loss="-500", asset="ETH") -> TaxableEvent:
    proceeds = Decimal("1000")
    return TaxableEvent(
        transaction_id="sell-1",
        date=SALE_DATE,
        asset=asset,
        amount=Decimal("1"),
        proceeds=proceeds,
        cost_basis=proceeds - Decimal(gain_loss),
        gain_loss=Decimal(gain_loss),
        holding_period=HoldingPeriod.SHORT,
        matched_lot_sources=("buy-0",),
    )


def _buy(tx_id: str, days_from_sale: int, asset="ETH", type="Buy") -> Transaction:
    return Transaction(
        id=tx_id,
        type=type,
        asset_symbol=asset,
        amount_value=Decimal("1"),
        value_usd=Decimal("1100"),
        tx_timestamp=SALE_DATE + timedelta(days=days_from_sale),
    )


class TestWindow:
    def setup_method(self):
        self.detector = WashSaleDetector()

    def test_repurchase_before_sale_flagged(self):
        [event] = self.detector.apply([_loss_event()], [_buy("buy-a", -20)])
        assert event.wash_sale_disallowed is True
        assert event.wash_sale_adjustment == Decimal("500")

    def test_repurchase_after_sale_flagged(self):
        [event] = self.detector.apply([_loss_event()], [_buy("buy-a", 25)])
        assert event.wash_sale_disallowed is True

    def test_repurchase_outside_window_not_flagged(self):
        [event] = self.detector.apply([_loss_event()], [_buy("buy-a", 35)])
        assert event.wash_sale_disallowed is False
        assert event.wash_sale_adjustment == Decimal("0")

    def test_window_edges_inclusive(self):
        assert self.detector.apply([_loss_event()], [_buy("buy-a", 30)])[0].wash_sale_disallowed
        assert self.detector.apply([_loss_event()], [_buy("buy-a", -30)])[0].wash_sale_disallowed
        assert not self.detector.apply([_loss_event()], [_buy("buy-a", -31)])[0].wash_sale_disallowed

    def test_custom_window(self):
        detector = WashSaleDetector(window_days=10)
        [event] = detector.apply([_loss_event()], [_buy("buy-a", 20)])
        assert event.wash_sale_disallowed is False


class TestReplacementRules:
    def setup_method(self):
        self.detector = WashSaleDetector()

    def test_gains_never_flagged(self):
        [event] = self.detector.apply([_loss_event(gain_loss="200")], [_buy("buy-a", 5)])
        assert event.wash_sale_disallowed is False

    def test_other_asset_ignored(self):
        [event] = self.detector.apply([_loss_event()], [_buy("buy-a", 5, asset="BTC")])
        assert event.wash_sale_disallowed is False

    def test_sold_lot_is_not_its_own_replacement(self):
        [event] = self.detector.apply([_loss_event()], [_buy("buy-0", -10)])
        assert event.wash_sale_disallowed is False

    def test_dca_counts_as_repurchase(self):
        [event] = self.detector.apply([_loss_event()], [_buy("dca-1", 3, type="DCA")])
        assert event.wash_sale_disallowed is True

    def test_receive_is_not_a_repurchase(self):
        [event] = self.detector.apply([_loss_event()], [_buy("rx-1", 3, type="Receive")])
        assert event.wash_sale_disallowed is False

    def test_input_not_mutated(self):
        original = _loss_event()
        self.detector.apply([original], [_buy("buy-a", 1)])
        assert original.wash_sale_disallowed is False

    def test_module_function(self):
        [event] = apply_wash_sale_rule([_loss_event()], [_buy("buy-a", -1)])
        assert event.wash_sale_disallowed is True
