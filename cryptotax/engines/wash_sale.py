"""Wash-sale detection.

A loss is disallowed when the same asset was bought within the window on
either side of the sale date. The window is symmetric: a repurchase 20 days
before a loss sale counts just like one 20 days after it.
"""

import logging
from datetime import date, timedelta
from decimal import Decimal

from cryptotax.engines.classifier import TransactionClassifier
from cryptotax.models.enums import TransactionCategory
from cryptotax.models.reports import TaxableEvent
from cryptotax.models.transaction import Classification, Transaction

logger = logging.getLogger(__name__)

REPLACEMENT_CATEGORIES = frozenset({TransactionCategory.BUY, TransactionCategory.DCA})


class WashSaleDetector:
    def __init__(
        self,
        window_days: int = 30,
        classifier: TransactionClassifier | None = None,
    ):
        self.window = timedelta(days=window_days)
        self.classifier = classifier or TransactionClassifier()

    def apply(
        self,
        taxable_events: list[TaxableEvent],
        transactions: list[Transaction],
        classifications: dict[str, Classification] | None = None,
    ) -> list[TaxableEvent]:
        """Return the events with every wash-sale loss flagged.

        Input events are not modified; flagged events are copies carrying
        ``wash_sale_disallowed`` and the disallowed amount. Gains pass
        through unchanged.
        """
        purchases = self._purchases_by_asset(transactions, classifications or {})
        result: list[TaxableEvent] = []
        for event in taxable_events:
            if not event.is_loss:
                result.append(event)
                continue
            replacement = self._find_replacement(event, purchases.get(event.asset.upper(), []))
            if replacement is None:
                result.append(event)
                continue
            logger.info(
                "Wash sale: %s loss of %s on %s disallowed (repurchase %s)",
                event.asset,
                event.gain_loss,
                event.date.date(),
                replacement,
            )
            result.append(
                event.model_copy(
                    update={
                        "wash_sale_disallowed": True,
                        "wash_sale_adjustment": abs(event.gain_loss),
                    }
                )
            )
        return result

    def _purchases_by_asset(
        self,
        transactions: list[Transaction],
        classifications: dict[str, Classification],
    ) -> dict[str, list[tuple[date, str]]]:
        purchases: dict[str, list[tuple[date, str]]] = {}
        for tx in transactions:
            if tx.tx_timestamp is None or not tx.asset_symbol:
                continue
            classification = classifications.get(tx.id) or self.classifier.classify_transaction(tx)
            if not classification.identified or classification.category not in REPLACEMENT_CATEGORIES:
                continue
            if tx.amount_value is not None and abs(tx.amount_value) == Decimal("0"):
                continue
            asset = tx.asset_symbol.strip().upper()
            purchases.setdefault(asset, []).append((tx.tx_timestamp.date(), tx.id))
        return purchases

    def _find_replacement(
        self,
        event: TaxableEvent,
        purchases: list[tuple[date, str]],
    ) -> str | None:
        sold_on = event.date.date()
        excluded = {event.transaction_id, *event.matched_lot_sources}
        for bought_on, tx_id in purchases:
            if tx_id in excluded:
                continue
            if sold_on - self.window <= bought_on <= sold_on + self.window:
                return tx_id
        return None


def apply_wash_sale_rule(
    taxable_events: list[TaxableEvent],
    transactions: list[Transaction],
    window_days: int = 30,
) -> list[TaxableEvent]:
    return WashSaleDetector(window_days).apply(taxable_events, transactions)
