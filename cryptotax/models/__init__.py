"""Data models for the crypto tax engine."""

from cryptotax.models.diagnostics import Diagnostic, DiagnosticCategory, DiagnosticSeverity
from cryptotax.models.enums import (
    AdjustmentCode,
    DisposalKind,
    HoldingPeriod,
    IncomeType,
    MatchingMethod,
    SourceType,
    TransactionCategory,
)
from cryptotax.models.lots import Lot, LotConsumption
from cryptotax.models.reports import (
    Form8949Data,
    Form8949Line,
    IncomeEvent,
    TaxableEvent,
    TaxReport,
    TaxSummary,
)
from cryptotax.models.transaction import Classification, Transaction

__all__ = [
    "AdjustmentCode",
    "Classification",
    "Diagnostic",
    "DiagnosticCategory",
    "DiagnosticSeverity",
    "DisposalKind",
    "Form8949Data",
    "Form8949Line",
    "HoldingPeriod",
    "IncomeEvent",
    "IncomeType",
    "Lot",
    "LotConsumption",
    "MatchingMethod",
    "SourceType",
    "TaxableEvent",
    "TaxReport",
    "TaxSummary",
    "Transaction",
    "TransactionCategory",
]
