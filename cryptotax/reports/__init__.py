"""Text reports rendered from a TaxReport."""

from cryptotax.reports.form8949 import Form8949Generator
from cryptotax.reports.tax_summary import TaxSummaryGenerator

__all__ = ["Form8949Generator", "TaxSummaryGenerator"]
