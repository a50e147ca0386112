"""Raw transaction and classification models."""

from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator

from cryptotax.models.enums import SourceType, TransactionCategory


class Transaction(BaseModel):
    """A single blockchain or exchange transaction as supplied by ingestion."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = ""
    subtype: str | None = None
    notes: str | None = None
    asset_symbol: str | None = None
    amount_value: Decimal | None = None
    price_per_unit: Decimal | None = None
    value_usd: Decimal | None = None
    fee_usd: Decimal | None = None
    incoming_asset_symbol: str | None = None
    incoming_amount_value: Decimal | None = None
    incoming_value_usd: Decimal | None = None
    wallet_address: str | None = None
    counterparty_address: str | None = None
    chain: str | None = None
    tx_hash: str | None = None
    source_type: SourceType = SourceType.WALLET_API
    status: str = "confirmed"
    tx_timestamp: datetime | None = None

    @field_validator(
        "amount_value",
        "price_per_unit",
        "value_usd",
        "fee_usd",
        "incoming_amount_value",
        "incoming_value_usd",
        mode="before",
    )
    @classmethod
    def _coerce_decimal(cls, value):
        # Floats go through str() so 0.1 stays 0.1
        if value is None or value == "":
            return None
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    @field_validator("tx_timestamp", mode="after")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @property
    def tx_date(self) -> date | None:
        return self.tx_timestamp.date() if self.tx_timestamp else None


class Classification(BaseModel):
    """Result of running a transaction through the classifier rule cascade."""

    model_config = ConfigDict(frozen=True)

    category: TransactionCategory
    identified: bool
    final_type: str
    subtype: str | None = None
