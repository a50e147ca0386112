"""Tax computation engines."""

from cryptotax.engines.aggregator import TaxReportAggregator, calculate_tax_report
from cryptotax.engines.classifier import DEFAULT_VOCABULARY, TransactionClassifier, Vocabulary, classify
from cryptotax.engines.disposal import Disposal, DisposalOutcome, DisposalProcessor, holding_period
from cryptotax.engines.income import IncomeRecognizer, recognize_income
from cryptotax.engines.lot_inventory import LotInventory
from cryptotax.engines.wash_sale import WashSaleDetector, apply_wash_sale_rule

__all__ = [
    "DEFAULT_VOCABULARY",
    "Disposal",
    "DisposalOutcome",
    "DisposalProcessor",
    "IncomeRecognizer",
    "LotInventory",
    "TaxReportAggregator",
    "TransactionClassifier",
    "Vocabulary",
    "WashSaleDetector",
    "apply_wash_sale_rule",
    "calculate_tax_report",
    "classify",
    "holding_period",
    "recognize_income",
]
