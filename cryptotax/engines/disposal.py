"""Disposal processing: lot matching, cost basis, gain/loss and holding period.

Every disposal kind (sell, swap, bridge, NFT sale, margin sell, liquidation,
liquidity removal) goes through the same path. The only kind-specific input
is where the proceeds come from, which is settled when the Disposal is built.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from cryptotax.engines.lot_inventory import LotInventory
from cryptotax.models.diagnostics import Diagnostic, DiagnosticCategory, DiagnosticSeverity
from cryptotax.models.enums import (
    DisposalKind,
    HoldingPeriod,
    MatchingMethod,
    SourceType,
    TransactionCategory,
)
from cryptotax.models.lots import LotConsumption
from cryptotax.models.reports import TaxableEvent
from cryptotax.models.transaction import Classification, Transaction
from cryptotax.normalization.notes import ImportedBasis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Disposal:
    transaction_id: str
    kind: DisposalKind
    asset: str
    amount: Decimal
    proceeds: Decimal
    disposed_at: datetime
    chain: str | None = None
    tx_hash: str | None = None
    imported_basis: ImportedBasis | None = None


@dataclass
class DisposalOutcome:
    events: list[TaxableEvent] = field(default_factory=list)
    consumptions: list[LotConsumption] = field(default_factory=list)
    unmatched_amount: Decimal = Decimal("0")
    diagnostics: list[Diagnostic] = field(default_factory=list)


def disposal_kind(classification: Classification) -> DisposalKind | None:
    """Which kind of disposal a classified transaction is, if any."""
    match classification.category:
        case TransactionCategory.SELL:
            return DisposalKind.SELL
        case TransactionCategory.SWAP:
            return DisposalKind.SWAP
        case TransactionCategory.LIQUIDATION:
            return DisposalKind.LIQUIDATION
        case TransactionCategory.MARGIN if classification.final_type == "Margin Sell":
            return DisposalKind.MARGIN_SELL
        case TransactionCategory.NFT if classification.final_type == "NFT Sale":
            return DisposalKind.NFT_SALE
        case TransactionCategory.LIQUIDITY if classification.final_type == "Remove Liquidity":
            return DisposalKind.LIQUIDITY_REMOVAL
        case TransactionCategory.TRANSFER if (
            classification.subtype == "Bridge" and classification.final_type == "Send"
        ):
            return DisposalKind.BRIDGE
    return None


def net_proceeds(tx: Transaction) -> Decimal:
    """Absolute USD value given up, less fees.

    CSV tax-report imports already carry net proceeds, so their fee is not
    subtracted a second time.
    """
    gross = abs(tx.value_usd or Decimal("0"))
    if tx.fee_usd and tx.source_type != SourceType.CSV_IMPORT:
        return max(Decimal("0"), gross - abs(tx.fee_usd))
    return gross


def add_years(d: date, years: int) -> date:
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        # Feb 29 -> Feb 28
        return d.replace(year=d.year + years, day=28)


def holding_period(acquired: date, disposed: date) -> HoldingPeriod:
    """Long-term once the disposal reaches the first anniversary of acquisition."""
    if disposed >= add_years(acquired, 1):
        return HoldingPeriod.LONG
    return HoldingPeriod.SHORT


class DisposalProcessor:
    """Turns one disposal into taxable events by consuming lots."""

    def process_disposal(
        self,
        disposal: Disposal,
        inventory: LotInventory,
        method: MatchingMethod = MatchingMethod.FIFO,
        income_keys: frozenset[tuple[str, date]] = frozenset(),
    ) -> DisposalOutcome:
        """Match ``disposal`` against ``inventory`` and compute gain/loss.

        When the lots run out, the unmatched remainder is booked at zero
        basis and reported as a diagnostic. The diagnostic is INFO when an
        income receipt of the same asset on the same day explains the missing
        acquisition, and WARNING otherwise.
        """
        if disposal.imported_basis is not None:
            return self._process_imported(disposal, disposal.imported_basis)

        consumptions, unmatched = inventory.consume_available(
            disposal.asset, disposal.amount, method
        )
        outcome = DisposalOutcome(consumptions=consumptions, unmatched_amount=unmatched)
        outcome.events = self._split_by_holding_period(disposal, consumptions, unmatched)

        if unmatched > 0:
            outcome.diagnostics.append(
                self._zero_basis_diagnostic(disposal, unmatched, income_keys)
            )

        for event in outcome.events:
            logger.debug(
                "Disposal %s %s %s: proceeds=%s basis=%s gain=%s (%s)",
                disposal.transaction_id,
                event.amount,
                event.asset,
                event.proceeds,
                event.cost_basis,
                event.gain_loss,
                event.holding_period.value,
            )
        return outcome

    def _split_by_holding_period(
        self,
        disposal: Disposal,
        consumptions: list[LotConsumption],
        unmatched: Decimal,
    ) -> list[TaxableEvent]:
        disposed_on = disposal.disposed_at.date()
        buckets: dict[HoldingPeriod, list[LotConsumption]] = {}
        for consumption in consumptions:
            period = holding_period(consumption.acquired_at.date(), disposed_on)
            buckets.setdefault(period, []).append(consumption)
        # Unknown acquisition date: treated as short-term
        if unmatched > 0:
            buckets.setdefault(HoldingPeriod.SHORT, [])

        sources = tuple(dict.fromkeys(c.source_transaction_id for c in consumptions))
        periods = [p for p in (HoldingPeriod.SHORT, HoldingPeriod.LONG) if p in buckets]
        total_amount = disposal.amount
        allocated = Decimal("0")
        events: list[TaxableEvent] = []

        for index, period in enumerate(periods):
            bucket = buckets[period]
            bucket_unmatched = unmatched if period == HoldingPeriod.SHORT else Decimal("0")
            amount = sum((c.amount for c in bucket), Decimal("0")) + bucket_unmatched
            if index == len(periods) - 1:
                proceeds = disposal.proceeds - allocated
            else:
                proceeds = disposal.proceeds * amount / total_amount
                allocated += proceeds
            cost_basis = sum((c.cost_basis for c in bucket), Decimal("0"))
            acquired_dates = {c.acquired_at.date() for c in bucket}

            events.append(
                TaxableEvent(
                    transaction_id=disposal.transaction_id,
                    date=disposal.disposed_at,
                    date_acquired=min((c.acquired_at for c in bucket), default=None),
                    various_acquired=len(acquired_dates) > 1 or (bool(bucket) and bucket_unmatched > 0),
                    asset=disposal.asset,
                    amount=amount,
                    proceeds=proceeds,
                    cost_basis=cost_basis,
                    gain_loss=proceeds - cost_basis,
                    holding_period=period,
                    disposal_kind=disposal.kind,
                    chain=disposal.chain,
                    tx_hash=disposal.tx_hash,
                    zero_basis_amount=bucket_unmatched,
                    matched_lot_sources=sources,
                )
            )
        return events

    def _process_imported(self, disposal: Disposal, basis: ImportedBasis) -> DisposalOutcome:
        acquired_at = None
        if basis.purchased is not None:
            acquired_at = datetime.combine(basis.purchased, datetime.min.time(), disposal.disposed_at.tzinfo)
            period = holding_period(basis.purchased, disposal.disposed_at.date())
        elif basis.holding_hint is not None:
            period = basis.holding_hint
        else:
            period = HoldingPeriod.SHORT

        event = TaxableEvent(
            transaction_id=disposal.transaction_id,
            date=disposal.disposed_at,
            date_acquired=acquired_at,
            asset=disposal.asset,
            amount=disposal.amount,
            proceeds=disposal.proceeds,
            cost_basis=basis.cost_basis,
            gain_loss=disposal.proceeds - basis.cost_basis,
            holding_period=period,
            disposal_kind=disposal.kind,
            chain=disposal.chain,
            tx_hash=disposal.tx_hash,
        )
        diagnostic = Diagnostic(
            category=DiagnosticCategory.IMPORTED_COST_BASIS,
            severity=DiagnosticSeverity.INFO,
            transaction_id=disposal.transaction_id,
            asset=disposal.asset,
            amount=basis.cost_basis,
            summary=f"Used cost basis ${basis.cost_basis:,.2f} from imported notes",
        )
        return DisposalOutcome(events=[event], diagnostics=[diagnostic])

    @staticmethod
    def _zero_basis_diagnostic(
        disposal: Disposal,
        unmatched: Decimal,
        income_keys: frozenset[tuple[str, date]],
    ) -> Diagnostic:
        if (disposal.asset, disposal.disposed_at.date()) in income_keys:
            return Diagnostic(
                category=DiagnosticCategory.EXPECTED_ZERO_BASIS,
                severity=DiagnosticSeverity.INFO,
                transaction_id=disposal.transaction_id,
                asset=disposal.asset,
                amount=unmatched,
                summary=(
                    f"{unmatched} {disposal.asset} disposed with zero basis; "
                    f"received as income the same day"
                ),
            )
        logger.warning(
            "Disposal %s: no lots for %s %s, using zero cost basis",
            disposal.transaction_id,
            unmatched,
            disposal.asset,
        )
        return Diagnostic(
            category=DiagnosticCategory.UNEXPECTED_ZERO_BASIS,
            severity=DiagnosticSeverity.WARNING,
            transaction_id=disposal.transaction_id,
            asset=disposal.asset,
            amount=unmatched,
            summary=(
                f"{unmatched} {disposal.asset} disposed on {disposal.disposed_at.date()} "
                f"with no matching acquisition; zero cost basis used"
            ),
            suggested_action=f"Import the transactions that acquired this {disposal.asset}",
        )
