"""Data-quality diagnostics attached to a tax report.

The aggregator never aborts on bad or incomplete data. Instead each problem is
recorded as a Diagnostic so the caller can show what needs manual review
alongside the numbers that could still be computed.
"""

from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class DiagnosticSeverity(StrEnum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class DiagnosticCategory(StrEnum):
    UNIDENTIFIED_TRANSACTION = "UNIDENTIFIED_TRANSACTION"
    INVALID_TRANSACTION = "INVALID_TRANSACTION"
    MISSING_PRICE = "MISSING_PRICE"
    EXPECTED_ZERO_BASIS = "EXPECTED_ZERO_BASIS"
    UNEXPECTED_ZERO_BASIS = "UNEXPECTED_ZERO_BASIS"
    IMPORTED_COST_BASIS = "IMPORTED_COST_BASIS"
    INCOMPLETE_SWAP = "INCOMPLETE_SWAP"


class Diagnostic(BaseModel):
    """A single data-quality finding tied to one transaction."""

    model_config = ConfigDict(frozen=True)

    category: DiagnosticCategory
    severity: DiagnosticSeverity
    transaction_id: str
    summary: str
    asset: str | None = None
    amount: Decimal | None = None
    suggested_action: str = ""
