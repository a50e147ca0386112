"""Custom exceptions for the crypto tax engine."""

from decimal import Decimal


class TaxComputationError(Exception):
    """Base exception for tax computation errors."""


class InsufficientLotsError(TaxComputationError):
    """Raised when a disposal requires more of an asset than the open lots hold."""

    def __init__(self, asset: str, requested: Decimal, available: Decimal):
        self.asset = asset
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient lots for {asset}: "
            f"requested={requested}, available={available}"
        )


class InvalidMatchingMethodError(TaxComputationError):
    """Raised when a lot matching method other than FIFO/LIFO/HIFO is requested."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Unknown matching method: {method!r} (expected FIFO, LIFO or HIFO)")


class InvalidTaxYearError(TaxComputationError):
    """Raised when a report is requested for a year outside the supported range."""

    def __init__(self, year: int, min_year: int, max_year: int):
        self.year = year
        super().__init__(f"Invalid tax year {year}: must be between {min_year} and {max_year}")


class DataValidationError(TaxComputationError):
    """Raised when a transaction record fails structural validation."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error on '{field}': {message}")


class TransactionImportError(TaxComputationError):
    """Raised when a transaction file cannot be loaded."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Import error from {source}: {message}")
