"""Tax report aggregation: the single entry point that ties the engines together.

One call builds a fresh lot inventory, walks every valid transaction up to the
end of the tax year in chronological order, and returns the year's taxable
events, income events, Form 8949 rows, summary and diagnostics.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal

from cryptotax.config import TaxSettings, get_settings
from cryptotax.engines.classifier import TransactionClassifier
from cryptotax.engines.disposal import Disposal, DisposalProcessor, disposal_kind, net_proceeds
from cryptotax.engines.income import IncomeRecognizer
from cryptotax.engines.lot_inventory import LotInventory
from cryptotax.engines.wash_sale import WashSaleDetector
from cryptotax.exceptions import InvalidTaxYearError
from cryptotax.models.diagnostics import Diagnostic, DiagnosticCategory, DiagnosticSeverity
from cryptotax.models.enums import (
    HoldingPeriod,
    IncomeType,
    MatchingMethod,
    SourceType,
    TransactionCategory,
)
from cryptotax.models.reports import IncomeEvent, TaxableEvent, TaxReport, TaxSummary
from cryptotax.models.transaction import Classification, Transaction
from cryptotax.normalization import TransactionNormalizer, missing_price_diagnostic, parse_imported_basis
from cryptotax.reports.form8949 import Form8949Generator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

CARRIED_GAPS = frozenset({DiagnosticCategory.MISSING_PRICE, DiagnosticCategory.INCOMPLETE_SWAP})

ACQUISITION_TYPES = {
    TransactionCategory.BUY: None,
    TransactionCategory.DCA: None,
    TransactionCategory.MARGIN: "Margin Buy",
    TransactionCategory.NFT: "NFT Purchase",
    TransactionCategory.LIQUIDITY: "Add Liquidity",
}


class TaxReportAggregator:
    """Computes a TaxReport for one tax year.

    The aggregator holds only configuration. All per-report state (the lot
    inventory, collected events and diagnostics) lives inside ``calculate``,
    so one instance can serve any number of reports.
    """

    def __init__(
        self,
        settings: TaxSettings | None = None,
        classifier: TransactionClassifier | None = None,
    ):
        self.settings = settings or get_settings()
        self.classifier = classifier or TransactionClassifier()
        self.normalizer = TransactionNormalizer()
        self.disposal_processor = DisposalProcessor()
        self.form8949 = Form8949Generator()

    def validate_year(self, year: int) -> int:
        if isinstance(year, bool) or not isinstance(year, int):
            raise InvalidTaxYearError(year, self.settings.min_tax_year, self.settings.max_tax_year)
        if not self.settings.min_tax_year <= year <= self.settings.max_tax_year:
            raise InvalidTaxYearError(year, self.settings.min_tax_year, self.settings.max_tax_year)
        return year

    def calculate(
        self,
        transactions: list[Transaction],
        year: int,
        method: MatchingMethod | str | None = None,
        wallet_addresses: list[str] | None = None,
        estimated_tax_rate: Decimal | None = None,
    ) -> TaxReport:
        """Compute the report for ``year``.

        Raises InvalidTaxYearError or InvalidMatchingMethodError before any
        work is done. Data-quality problems never raise; they are returned
        as diagnostics on the report.
        """
        year = self.validate_year(year)
        method = MatchingMethod.parse(method if method is not None else self.settings.matching_method)
        wallets = wallet_addresses if wallet_addresses is not None else self.settings.wallet_addresses
        rate = Decimal(str(estimated_tax_rate)) if estimated_tax_rate is not None else self.settings.estimated_tax_rate

        year_start = datetime(year, 1, 1, tzinfo=timezone.utc)
        year_end = datetime(year, 12, 31, 23, 59, 59, 999999, tzinfo=timezone.utc)

        normalized = self.normalizer.normalize(list(transactions))
        diagnostics: list[Diagnostic] = list(normalized.diagnostics)

        # Stable sort: same-timestamp transactions keep their input order
        timeline: list[tuple[Transaction, Classification]] = []
        for tx in sorted(normalized.transactions, key=lambda t: t.tx_timestamp):
            if tx.tx_timestamp > year_end:
                continue
            classification = self.classifier.classify_transaction(tx)
            if classification.category == TransactionCategory.SWAP:
                tx = self.normalizer.enrich_swap(tx)
            timeline.append((tx, classification))

        recognizer = IncomeRecognizer(wallets, self.classifier)
        income_by_tx: dict[str, IncomeEvent] = {}
        for tx, classification in timeline:
            if income := recognizer.recognize(tx, classification):
                income_by_tx[tx.id] = income
        income_keys = frozenset((e.asset, e.date.date()) for e in income_by_tx.values())

        inventory = LotInventory()
        taxable_events: list[TaxableEvent] = []
        for tx, classification in timeline:
            in_year = tx.tx_timestamp >= year_start
            events, tx_diagnostics = self._apply(
                tx, classification, inventory, method, recognizer, income_by_tx, income_keys
            )
            if in_year:
                taxable_events.extend(events)
                diagnostics.extend(tx_diagnostics)
            else:
                # Prior-year gaps that still feed this year's cost basis
                diagnostics.extend(d for d in tx_diagnostics if d.category in CARRIED_GAPS)

        classifications = {tx.id: c for tx, c in timeline}
        detector = WashSaleDetector(self.settings.wash_sale_window_days, self.classifier)
        taxable_events = detector.apply(taxable_events, normalized.transactions, classifications)

        income_events = [e for e in income_by_tx.values() if year_start <= e.date <= year_end]
        summary = self.summarize(taxable_events, income_events, rate)

        logger.info(
            "Tax year %s (%s): %d disposals, %d income events, net gain %s, income %s",
            year,
            method.value,
            len(taxable_events),
            len(income_events),
            summary.net_capital_gain,
            summary.total_income,
        )
        return TaxReport(
            year=year,
            matching_method=method,
            taxable_events=taxable_events,
            income_events=income_events,
            form8949_data=self.form8949.generate(taxable_events),
            summary=summary,
            diagnostics=diagnostics,
        )

    def _apply(
        self,
        tx: Transaction,
        classification: Classification,
        inventory: LotInventory,
        method: MatchingMethod,
        recognizer: IncomeRecognizer,
        income_by_tx: dict[str, IncomeEvent],
        income_keys: frozenset,
    ) -> tuple[list[TaxableEvent], list[Diagnostic]]:
        """Apply one transaction to the inventory and return what it produced."""
        category = classification.category
        if category in (TransactionCategory.ZERO, TransactionCategory.SPAM):
            return [], []
        if not classification.identified:
            logger.warning("Transaction %s has unrecognized type %r", tx.id, tx.type)
            return [], [
                Diagnostic(
                    category=DiagnosticCategory.UNIDENTIFIED_TRANSACTION,
                    severity=DiagnosticSeverity.WARNING,
                    transaction_id=tx.id,
                    asset=tx.asset_symbol,
                    amount=tx.amount_value,
                    summary=f"Could not classify type {tx.type!r}; excluded from lots and gains",
                    suggested_action="Label this transaction manually",
                )
            ]

        diagnostics: list[Diagnostic] = []
        amount = abs(tx.amount_value or ZERO)
        kind = disposal_kind(classification)

        if kind is not None:
            if not self.normalizer.has_price(tx):
                diagnostics.append(missing_price_diagnostic(tx))
            disposal = Disposal(
                transaction_id=tx.id,
                kind=kind,
                asset=tx.asset_symbol,
                amount=amount,
                proceeds=net_proceeds(tx),
                disposed_at=tx.tx_timestamp,
                chain=tx.chain,
                tx_hash=tx.tx_hash,
                imported_basis=parse_imported_basis(tx.notes),
            )
            outcome = self.disposal_processor.process_disposal(disposal, inventory, method, income_keys)
            diagnostics.extend(outcome.diagnostics)
            if category == TransactionCategory.SWAP:
                if gap := self._add_swap_lot(tx, inventory):
                    diagnostics.append(gap)
            return outcome.events, diagnostics

        if category in ACQUISITION_TYPES and ACQUISITION_TYPES[category] in (None, classification.final_type):
            if not self.normalizer.has_price(tx):
                diagnostics.append(missing_price_diagnostic(tx))
            cost = abs(tx.value_usd or ZERO)
            if tx.fee_usd:
                cost += abs(tx.fee_usd)
            self._add_lot(inventory, tx.asset_symbol, amount, cost, tx)
            return [], diagnostics

        if tx.id in income_by_tx:
            income = income_by_tx[tx.id]
            if not self.normalizer.has_price(tx):
                diagnostics.append(missing_price_diagnostic(tx))
            self._add_lot(inventory, income.asset, income.amount, income.value_usd, tx)
            return [], diagnostics

        if category == TransactionCategory.TRANSFER and classification.subtype == "Bridge":
            # Bridged-in asset re-enters the pool at its value on arrival
            self._add_lot(inventory, tx.asset_symbol, amount, abs(tx.value_usd or ZERO), tx)
            return [], diagnostics

        if (
            category == TransactionCategory.TRANSFER
            and classification.final_type == "Send"
            and not recognizer.is_self_transfer(tx)
        ):
            # Gifts and payments leave the pool without a taxable event
            inventory.consume_available(tx.asset_symbol, amount, method)
        return [], diagnostics

    def _add_swap_lot(self, tx: Transaction, inventory: LotInventory) -> Diagnostic | None:
        """Open a lot for the received side of a swap, or describe why it could not."""
        if not tx.incoming_asset_symbol or not tx.incoming_amount_value:
            logger.warning("Swap %s has no incoming amount; no lot opened", tx.id)
            received = tx.incoming_asset_symbol or "unknown asset"
            return Diagnostic(
                category=DiagnosticCategory.INCOMPLETE_SWAP,
                severity=DiagnosticSeverity.WARNING,
                transaction_id=tx.id,
                asset=tx.incoming_asset_symbol,
                summary=f"Swap of {tx.amount_value} {tx.asset_symbol} for {received} has no received amount; no lot opened",
                suggested_action="Add the received amount so later sales of it have a cost basis",
            )
        cost = abs(tx.incoming_value_usd if tx.incoming_value_usd is not None else tx.value_usd or ZERO)
        if tx.fee_usd and tx.source_type != SourceType.CSV_IMPORT:
            cost += abs(tx.fee_usd)
        self._add_lot(inventory, tx.incoming_asset_symbol, abs(tx.incoming_amount_value), cost, tx)
        return None

    @staticmethod
    def _add_lot(
        inventory: LotInventory,
        asset: str,
        amount: Decimal,
        total_cost: Decimal,
        tx: Transaction,
    ) -> None:
        if amount <= 0:
            return
        inventory.add_lot(asset, amount, total_cost / amount, tx.tx_timestamp, tx.id, total_cost=total_cost)

    def summarize(
        self,
        taxable_events: list[TaxableEvent],
        income_events: list[IncomeEvent],
        rate: Decimal,
    ) -> TaxSummary:
        s = TaxSummary(estimated_tax_rate=rate)
        for event in taxable_events:
            s.total_proceeds += event.proceeds
            s.total_cost_basis += event.cost_basis
            if event.wash_sale_disallowed:
                s.disallowed_wash_sale_losses += event.wash_sale_adjustment
                continue
            short = event.holding_period == HoldingPeriod.SHORT
            if event.gain_loss >= 0:
                if short:
                    s.short_term_gains += event.gain_loss
                else:
                    s.long_term_gains += event.gain_loss
            elif short:
                s.short_term_losses += -event.gain_loss
            else:
                s.long_term_losses += -event.gain_loss

        s.net_short_term_gain = s.short_term_gains - s.short_term_losses
        s.net_long_term_gain = s.long_term_gains - s.long_term_losses
        s.net_capital_gain = s.net_short_term_gain + s.net_long_term_gain

        net_loss = max(-s.net_capital_gain, ZERO)
        s.deductible_losses = min(net_loss, self.settings.capital_loss_limit)
        s.loss_carryover = net_loss - s.deductible_losses

        for income in income_events:
            if income.type == IncomeType.STAKING:
                s.staking_income += income.value_usd
            else:
                s.other_income += income.value_usd
        s.total_income = s.staking_income + s.other_income

        s.taxable_base = max(s.net_capital_gain, ZERO) + s.total_income - s.deductible_losses
        s.estimated_liability = max(s.taxable_base, ZERO) * rate
        return s


def calculate_tax_report(
    transactions: list[Transaction],
    year: int,
    method: MatchingMethod | str = MatchingMethod.FIFO,
    wallet_addresses: list[str] | None = None,
    estimated_tax_rate: Decimal | None = None,
    settings: TaxSettings | None = None,
) -> TaxReport:
    """Compute a TaxReport with a throwaway aggregator."""
    return TaxReportAggregator(settings).calculate(
        transactions,
        year,
        method,
        wallet_addresses=wallet_addresses,
        estimated_tax_rate=estimated_tax_rate,
    )
