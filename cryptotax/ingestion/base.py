"""Base adapter interface for transaction ingestion."""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from cryptotax.exceptions import DataValidationError
from cryptotax.models.transaction import Transaction

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def field_name(key: str) -> str:
    """Map a column or JSON key (``Asset Symbol``, ``assetSymbol``) to a field name."""
    key = key.strip()
    if " " in key or "_" in key:
        return key.lower().replace(" ", "_")
    return _CAMEL_BOUNDARY.sub("_", key).lower()


@dataclass
class ImportResult:
    """Bundles the output from an adapter's parse method."""

    source: str
    transactions: list[Transaction] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class BaseAdapter(ABC):
    """Abstract base class for all ingestion adapters."""

    @abstractmethod
    def parse(self, file_path: Path) -> ImportResult:
        """Parse a file and return an ImportResult with typed models."""
        ...

    def validate(self, data: ImportResult) -> list[str]:
        """Check the batch as a whole. Returns a list of validation messages."""
        messages: list[str] = []
        seen: set[str] = set()
        for tx in data.transactions:
            if tx.id in seen:
                messages.append(f"Duplicate transaction id: {tx.id}")
            seen.add(tx.id)
        if not data.transactions:
            messages.append(f"No transactions imported from {data.source}")
        return messages

    @staticmethod
    def to_transaction(record: dict, default_id: str) -> Transaction:
        """Build a Transaction from a loosely keyed record.

        Keys may be snake_case or camelCase (``txTimestamp``). Empty strings
        are treated as missing values.
        """
        data = {
            field_name(str(key)): (None if value == "" else value)
            for key, value in record.items()
        }
        if not data.get("id"):
            data["id"] = default_id
        data["id"] = str(data["id"])
        data = {k: v for k, v in data.items() if v is not None and k in Transaction.model_fields}
        try:
            return Transaction(**data)
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first["loc"]) or "record"
            raise DataValidationError(loc, first["msg"]) from exc
