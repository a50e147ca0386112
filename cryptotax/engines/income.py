"""Ordinary income recognition for staking rewards and incoming transfers."""

import logging
from decimal import Decimal

from cryptotax.engines.classifier import TransactionClassifier
from cryptotax.models.enums import IncomeType, TransactionCategory
from cryptotax.models.reports import IncomeEvent
from cryptotax.models.transaction import Classification, Transaction

logger = logging.getLogger(__name__)


class IncomeRecognizer:
    """Decides whether a transaction is taxable income at receipt.

    Staking rewards are always income. A "Receive" transfer is income unless
    it is a move between the user's own wallets, which is detected from the
    counterparty address or, failing that, from markers in the notes. The
    notes check is best-effort: free text cannot prove ownership.
    """

    def __init__(
        self,
        wallet_addresses: list[str] | None = None,
        classifier: TransactionClassifier | None = None,
    ):
        self.wallet_addresses = {a.strip().lower() for a in wallet_addresses or [] if a.strip()}
        self.classifier = classifier or TransactionClassifier()

    def is_self_transfer(self, tx: Transaction) -> bool:
        counterparty = (tx.counterparty_address or "").strip().lower()
        if counterparty and counterparty in self.wallet_addresses:
            return True
        return self.classifier.is_self_transfer_note(tx.notes)

    def recognize(
        self,
        tx: Transaction,
        classification: Classification | None = None,
    ) -> IncomeEvent | None:
        if classification is None:
            classification = self.classifier.classify_transaction(tx)
        if tx.tx_timestamp is None or not tx.asset_symbol:
            return None

        match classification:
            case Classification(category=TransactionCategory.STAKING, subtype="Reward"):
                income_type = IncomeType.STAKING
            case Classification(category=TransactionCategory.TRANSFER, final_type="Receive") if (
                classification.subtype != "Bridge"
            ):
                if self.is_self_transfer(tx):
                    logger.debug("Receive %s is a self-transfer, no income", tx.id)
                    return None
                income_type = IncomeType.OTHER
            case _:
                return None

        return IncomeEvent(
            transaction_id=tx.id,
            date=tx.tx_timestamp,
            asset=tx.asset_symbol.strip().upper(),
            amount=abs(tx.amount_value or Decimal("0")),
            value_usd=self.fair_market_value(tx),
            type=income_type,
            chain=tx.chain,
            tx_hash=tx.tx_hash,
        )

    @staticmethod
    def fair_market_value(tx: Transaction) -> Decimal:
        if tx.value_usd is not None:
            return abs(tx.value_usd)
        if tx.price_per_unit is not None and tx.amount_value is not None:
            return abs(tx.price_per_unit * tx.amount_value)
        return Decimal("0")


def recognize_income(
    tx: Transaction,
    wallet_addresses: list[str] | None = None,
) -> IncomeEvent | None:
    return IncomeRecognizer(wallet_addresses).recognize(tx)
