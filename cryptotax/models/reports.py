"""Report output models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from cryptotax.models.diagnostics import Diagnostic
from cryptotax.models.enums import (
    AdjustmentCode,
    DisposalKind,
    HoldingPeriod,
    IncomeType,
    MatchingMethod,
)


class TaxableEvent(BaseModel):
    """A realized gain or loss from one disposal, within one holding-period bucket."""

    model_config = ConfigDict(frozen=True)

    transaction_id: str
    date: datetime
    date_acquired: datetime | None = None
    various_acquired: bool = False
    asset: str
    amount: Decimal
    proceeds: Decimal
    cost_basis: Decimal
    gain_loss: Decimal
    holding_period: HoldingPeriod
    disposal_kind: DisposalKind = DisposalKind.SELL
    chain: str | None = None
    tx_hash: str | None = None
    wash_sale_disallowed: bool = False
    wash_sale_adjustment: Decimal = Decimal("0")
    zero_basis_amount: Decimal = Decimal("0")
    matched_lot_sources: tuple[str, ...] = ()

    @property
    def is_loss(self) -> bool:
        return self.gain_loss < 0


class IncomeEvent(BaseModel):
    """Ordinary income recognized at fair-market value on receipt."""

    model_config = ConfigDict(frozen=True)

    transaction_id: str
    date: datetime
    asset: str
    amount: Decimal
    value_usd: Decimal
    type: IncomeType
    chain: str | None = None
    tx_hash: str | None = None


class Form8949Line(BaseModel):
    description: str
    date_acquired: date | str  # "Various" allowed
    date_sold: date
    proceeds: Decimal
    cost_basis: Decimal
    adjustment_code: AdjustmentCode
    adjustment_amount: Decimal
    gain_loss: Decimal
    holding_period: HoldingPeriod


class Form8949Data(BaseModel):
    """Form 8949 rows split into Part I (short-term) and Part II (long-term)."""

    short_term: list[Form8949Line] = Field(default_factory=list)
    long_term: list[Form8949Line] = Field(default_factory=list)

    @property
    def lines(self) -> list[Form8949Line]:
        return [*self.short_term, *self.long_term]

    @staticmethod
    def _totals(lines: list[Form8949Line]) -> dict[str, Decimal]:
        return {
            "proceeds": sum((line.proceeds for line in lines), Decimal("0")),
            "cost_basis": sum((line.cost_basis for line in lines), Decimal("0")),
            "adjustment_amount": sum((line.adjustment_amount for line in lines), Decimal("0")),
            "gain_loss": sum((line.gain_loss for line in lines), Decimal("0")),
        }

    @property
    def short_term_totals(self) -> dict[str, Decimal]:
        return self._totals(self.short_term)

    @property
    def long_term_totals(self) -> dict[str, Decimal]:
        return self._totals(self.long_term)


class TaxSummary(BaseModel):
    # Capital gains (wash-sale losses excluded from the loss buckets)
    short_term_gains: Decimal = Decimal("0")
    short_term_losses: Decimal = Decimal("0")
    long_term_gains: Decimal = Decimal("0")
    long_term_losses: Decimal = Decimal("0")
    net_short_term_gain: Decimal = Decimal("0")
    net_long_term_gain: Decimal = Decimal("0")
    net_capital_gain: Decimal = Decimal("0")
    total_proceeds: Decimal = Decimal("0")
    total_cost_basis: Decimal = Decimal("0")
    disallowed_wash_sale_losses: Decimal = Decimal("0")
    # Loss limitation
    deductible_losses: Decimal = Decimal("0")
    loss_carryover: Decimal = Decimal("0")
    # Income
    total_income: Decimal = Decimal("0")
    staking_income: Decimal = Decimal("0")
    other_income: Decimal = Decimal("0")
    # Liability
    taxable_base: Decimal = Decimal("0")
    estimated_tax_rate: Decimal = Decimal("0")
    estimated_liability: Decimal = Decimal("0")


class TaxReport(BaseModel):
    year: int
    matching_method: MatchingMethod
    taxable_events: list[TaxableEvent] = Field(default_factory=list)
    income_events: list[IncomeEvent] = Field(default_factory=list)
    form8949_data: Form8949Data = Field(default_factory=Form8949Data)
    summary: TaxSummary = Field(default_factory=TaxSummary)
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def wash_sales(self) -> list[TaxableEvent]:
        return [e for e in self.taxable_events if e.wash_sale_disallowed]
