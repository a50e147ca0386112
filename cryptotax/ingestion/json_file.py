"""JSON adapter: a list of transaction objects, or {"transactions": [...]}."""

import json
import logging
from pathlib import Path

from cryptotax.exceptions import DataValidationError, TransactionImportError
from cryptotax.ingestion.base import BaseAdapter, ImportResult

logger = logging.getLogger(__name__)


class JsonTransactionAdapter(BaseAdapter):
    def parse(self, file_path: Path) -> ImportResult:
        if not file_path.exists():
            raise TransactionImportError(str(file_path), "file not found")
        try:
            raw = json.loads(file_path.read_text())
        except json.JSONDecodeError as exc:
            raise TransactionImportError(str(file_path), f"invalid JSON: {exc}") from exc

        if isinstance(raw, dict):
            raw = raw.get("transactions")
        if not isinstance(raw, list):
            raise TransactionImportError(
                str(file_path), "expected a list of transactions or an object with 'transactions'"
            )

        result = ImportResult(source=str(file_path))
        for index, record in enumerate(raw, start=1):
            if not isinstance(record, dict):
                result.errors.append(f"Record {index}: not an object")
                continue
            try:
                result.transactions.append(
                    self.to_transaction(record, default_id=f"{file_path.stem}-{index}")
                )
            except DataValidationError as exc:
                result.errors.append(f"Record {index}: {exc}")

        logger.info(
            "Loaded %d transactions from %s (%d rejected)",
            len(result.transactions),
            file_path,
            len(result.errors),
        )
        return result
