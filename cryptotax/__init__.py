"""Crypto tax-lot accounting: classification, cost basis, gains, income."""

from cryptotax.engines.aggregator import TaxReportAggregator, calculate_tax_report
from cryptotax.engines.classifier import classify

__version__ = "0.1.0"

__all__ = ["TaxReportAggregator", "__version__", "calculate_tax_report", "classify"]
