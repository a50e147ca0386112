"""CSV adapter for exports whose header row names the transaction fields."""

import csv
import logging
from pathlib import Path

from cryptotax.exceptions import DataValidationError, TransactionImportError
from cryptotax.ingestion.base import BaseAdapter, ImportResult, field_name
from cryptotax.models.enums import SourceType

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"type", "asset_symbol", "amount_value", "tx_timestamp"}


class CsvTransactionAdapter(BaseAdapter):
    """Reads one transaction per row.

    Rows default to the ``csv_import`` source type, meaning their USD values
    are already net of fees.
    """

    def parse(self, file_path: Path) -> ImportResult:
        if not file_path.exists():
            raise TransactionImportError(str(file_path), "file not found")

        result = ImportResult(source=str(file_path))
        with open(file_path, newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            headers = {field_name(h) for h in reader.fieldnames or []}
            missing = REQUIRED_COLUMNS - headers
            if missing:
                raise TransactionImportError(
                    str(file_path), f"missing columns: {', '.join(sorted(missing))}"
                )
            for row_num, row in enumerate(reader, start=2):
                record = {field_name(k): v.strip() if isinstance(v, str) else v for k, v in row.items() if k}
                if not record.get("source_type"):
                    record["source_type"] = SourceType.CSV_IMPORT.value
                try:
                    result.transactions.append(
                        self.to_transaction(record, default_id=f"{file_path.stem}-{row_num}")
                    )
                except DataValidationError as exc:
                    result.errors.append(f"Row {row_num}: {exc}")

        logger.info(
            "Loaded %d transactions from %s (%d rejected)",
            len(result.transactions),
            file_path,
            len(result.errors),
        )
        return result
