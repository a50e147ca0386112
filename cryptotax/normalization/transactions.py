"""Transaction normalization: validation, symbol cleanup and price back-fill."""

import logging
from dataclasses import dataclass, field

from cryptotax.exceptions import DataValidationError
from cryptotax.models.diagnostics import Diagnostic, DiagnosticCategory, DiagnosticSeverity
from cryptotax.models.transaction import Transaction
from cryptotax.normalization.notes import parse_swap

logger = logging.getLogger(__name__)

FAILED_STATUSES = frozenset({"failed", "reverted", "dropped"})


@dataclass
class NormalizationResult:
    transactions: list[Transaction] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class TransactionNormalizer:
    """Prepares raw transactions for the tax engines.

    Structurally invalid records are dropped with an INVALID_TRANSACTION
    diagnostic; one bad record never blocks the rest of the batch. Input
    transactions are never mutated, normalized copies are returned.
    """

    def normalize(self, transactions: list[Transaction]) -> NormalizationResult:
        result = NormalizationResult()
        for tx in transactions:
            try:
                self.validate(tx)
            except DataValidationError as exc:
                logger.warning("Skipping transaction %s: %s", tx.id, exc)
                result.diagnostics.append(
                    Diagnostic(
                        category=DiagnosticCategory.INVALID_TRANSACTION,
                        severity=DiagnosticSeverity.WARNING,
                        transaction_id=tx.id,
                        asset=tx.asset_symbol,
                        summary=str(exc),
                        suggested_action=f"Fix or re-import the record ({exc.field})",
                    )
                )
                continue
            result.transactions.append(self.normalize_transaction(tx))
        return result

    def validate(self, tx: Transaction) -> None:
        """Raise DataValidationError if ``tx`` cannot be used at all."""
        if not tx.id.strip():
            raise DataValidationError("id", "transaction id is empty")
        if tx.tx_timestamp is None:
            raise DataValidationError("tx_timestamp", "timestamp is missing")
        if not (tx.asset_symbol or "").strip():
            raise DataValidationError("asset_symbol", "asset symbol is missing")
        if tx.amount_value is None:
            raise DataValidationError("amount_value", "amount is missing")
        if tx.status.strip().lower() in FAILED_STATUSES:
            raise DataValidationError("status", f"transaction status is {tx.status!r}")

    def normalize_transaction(self, tx: Transaction) -> Transaction:
        update: dict = {"asset_symbol": self.normalize_symbol(tx.asset_symbol)}
        if tx.incoming_asset_symbol is not None:
            update["incoming_asset_symbol"] = self.normalize_symbol(tx.incoming_asset_symbol) or None
        if tx.value_usd is None and tx.price_per_unit is not None and tx.amount_value is not None:
            update["value_usd"] = abs(tx.price_per_unit * tx.amount_value)
        return tx.model_copy(update=update)

    @staticmethod
    def normalize_symbol(symbol: str | None) -> str:
        return (symbol or "").strip().upper()

    @staticmethod
    def has_price(tx: Transaction) -> bool:
        return tx.value_usd is not None or tx.price_per_unit is not None

    def enrich_swap(self, tx: Transaction) -> Transaction:
        """Fill in the incoming leg of a swap described only by notes or a pair symbol."""
        if tx.incoming_asset_symbol:
            return tx
        legs = parse_swap(tx.notes, tx.asset_symbol)
        if legs is None:
            return tx
        incoming_value = tx.incoming_value_usd
        if incoming_value is None and tx.value_usd is not None:
            # Without a quote for the incoming side, assume an even trade
            incoming_value = abs(tx.value_usd)
        logger.debug(
            "Swap %s parsed as %s -> %s", tx.id, legs.outgoing_asset, legs.incoming_asset
        )
        return tx.model_copy(
            update={
                "asset_symbol": legs.outgoing_asset,
                "amount_value": legs.outgoing_amount or tx.amount_value,
                "incoming_asset_symbol": legs.incoming_asset,
                "incoming_amount_value": legs.incoming_amount or tx.incoming_amount_value,
                "incoming_value_usd": incoming_value,
            }
        )


def missing_price_diagnostic(tx: Transaction) -> Diagnostic:
    return Diagnostic(
        category=DiagnosticCategory.MISSING_PRICE,
        severity=DiagnosticSeverity.WARNING,
        transaction_id=tx.id,
        asset=tx.asset_symbol,
        amount=tx.amount_value,
        summary=f"No USD value or unit price for {tx.amount_value} {tx.asset_symbol}; valued at $0",
        suggested_action="Supply a historical price for this transaction",
    )

