"""Tests for Form 8949 generation."""

from datetime import date, datetime, timezone
from decimal import Decimal

from cryptotax.models.enums import AdjustmentCode, HoldingPeriod
from cryptotax.models.reports import TaxableEvent
from cryptotax.reports.form8949 import Form8949Generator


def _event(**kwargs) -> TaxableEvent:
    data = {
        "transaction_id": "sell-1",
        "date": datetime(2023, 6, 1, tzinfo=timezone.utc),
        "date_acquired": datetime(2023, 1, 1, tzinfo=timezone.utc),
        "asset": "ETH",
        "amount": Decimal("1.50"),
        "proceeds": Decimal("3000"),
        "cost_basis": Decimal("2000"),
        "gain_loss": Decimal("1000"),
        "holding_period": HoldingPeriod.SHORT,
    }
    data.update(kwargs)
    return TaxableEvent(**data)


class TestForm8949Generator:
    def setup_method(self):
        self.generator = Form8949Generator()

    def test_line_fields(self):
        line = self.generator.line_for(_event(chain="ethereum"))
        assert line.description == "1.5 ETH (ethereum)"
        assert line.date_acquired == date(2023, 1, 1)
        assert line.date_sold == date(2023, 6, 1)
        assert line.adjustment_code == AdjustmentCode.NONE
        assert line.gain_loss == Decimal("1000")

    def test_various_dates(self):
        assert self.generator.line_for(_event(various_acquired=True)).date_acquired == "Various"
        assert self.generator.line_for(_event(date_acquired=None)).date_acquired == "Various"

    def test_wash_sale_line(self):
        event = _event(
            gain_loss=Decimal("-500"),
            wash_sale_disallowed=True,
            wash_sale_adjustment=Decimal("500"),
        )
        line = self.generator.line_for(event)
        assert line.adjustment_code == AdjustmentCode.W
        assert line.adjustment_amount == Decimal("500")
        assert line.gain_loss == Decimal("0")

    def test_generate_splits_parts(self):
        data = self.generator.generate(
            [_event(), _event(transaction_id="sell-2", holding_period=HoldingPeriod.LONG)]
        )
        assert len(data.short_term) == 1
        assert len(data.long_term) == 1
        assert data.long_term_totals["proceeds"] == Decimal("3000")

    def test_render(self):
        data = self.generator.generate([_event(holding_period=HoldingPeriod.LONG)])
        text = self.generator.render(data, year=2023)
        assert "(2023)" in text
        assert "PART I: SHORT-TERM" in text
        assert "(no transactions)" in text
        assert "PART II: LONG-TERM" in text
        assert "1.5 ETH" in text
        assert "3,000.00" in text
