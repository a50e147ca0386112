"""Ingestion adapters for loading transactions from files."""

from pathlib import Path

from cryptotax.ingestion.base import BaseAdapter, ImportResult
from cryptotax.ingestion.csv_file import CsvTransactionAdapter
from cryptotax.ingestion.json_file import JsonTransactionAdapter


def adapter_for(file_path: Path) -> BaseAdapter:
    """Pick an adapter by file extension."""
    if file_path.suffix.lower() == ".csv":
        return CsvTransactionAdapter()
    return JsonTransactionAdapter()


__all__ = [
    "BaseAdapter",
    "CsvTransactionAdapter",
    "ImportResult",
    "JsonTransactionAdapter",
    "adapter_for",
]
