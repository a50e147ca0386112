"""Form 8949 report generator."""

from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from cryptotax.models.enums import AdjustmentCode, HoldingPeriod
from cryptotax.models.reports import Form8949Data, Form8949Line, TaxableEvent

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _format_amount(amount: Decimal) -> str:
    return format(amount.normalize(), "f")


def _money(value) -> str:
    return f"{Decimal(value):,.2f}"


class Form8949Generator:
    """Generates Form 8949 rows from taxable events."""

    def __init__(self) -> None:
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), trim_blocks=True)
        self.env.filters["money"] = _money

    def line_for(self, event: TaxableEvent) -> Form8949Line:
        description = f"{_format_amount(event.amount)} {event.asset}"
        if event.chain:
            description += f" ({event.chain})"
        if event.various_acquired or event.date_acquired is None:
            date_acquired: object = "Various"
        else:
            date_acquired = event.date_acquired.date()

        if event.wash_sale_disallowed:
            code = AdjustmentCode.W
            adjustment = event.wash_sale_adjustment
        else:
            code = AdjustmentCode.NONE
            adjustment = Decimal("0")

        return Form8949Line(
            description=description,
            date_acquired=date_acquired,
            date_sold=event.date.date(),
            proceeds=event.proceeds,
            cost_basis=event.cost_basis,
            adjustment_code=code,
            adjustment_amount=adjustment,
            gain_loss=event.gain_loss + adjustment,
            holding_period=event.holding_period,
        )

    def generate(self, events: list[TaxableEvent]) -> Form8949Data:
        """Build Part I (short-term) and Part II (long-term) rows."""
        data = Form8949Data()
        for event in events:
            line = self.line_for(event)
            if line.holding_period == HoldingPeriod.LONG:
                data.long_term.append(line)
            else:
                data.short_term.append(line)
        return data

    def render(self, data: Form8949Data, year: int | None = None) -> str:
        """Render Form 8949 report using Jinja2 template."""
        template = self.env.get_template("form8949.txt")
        return template.render(data=data, year=year)
