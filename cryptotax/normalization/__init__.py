"""Transaction normalization and notes parsing."""

from cryptotax.normalization.notes import ImportedBasis, SwapLegs, parse_imported_basis, parse_swap
from cryptotax.normalization.transactions import (
    NormalizationResult,
    TransactionNormalizer,
    missing_price_diagnostic,
)

__all__ = [
    "ImportedBasis",
    "NormalizationResult",
    "SwapLegs",
    "TransactionNormalizer",
    "missing_price_diagnostic",
    "parse_imported_basis",
    "parse_swap",
]
