"""Shared test fixtures for cryptotax."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from cryptotax.config import TaxSettings
from cryptotax.models.transaction import Transaction


@pytest.fixture
def make_tx():
    """Factory for transactions: make_tx("buy-1", "Buy", "BTC", 1, 20000, when)."""

    def _make(
        id: str,
        type: str,
        asset: str,
        amount,
        value,
        when: datetime,
        **kwargs,
    ) -> Transaction:
        return Transaction(
            id=id,
            type=type,
            asset_symbol=asset,
            amount_value=None if amount is None else Decimal(str(amount)),
            value_usd=None if value is None else Decimal(str(value)),
            tx_timestamp=when,
            **kwargs,
        )

    return _make


@pytest.fixture
def settings() -> TaxSettings:
    return TaxSettings(_env_file=None)


@pytest.fixture
def btc_round_trip(make_tx) -> list[Transaction]:
    return [
        make_tx("buy-1", "Buy", "BTC", 1, 20000, datetime(2023, 1, 1, tzinfo=timezone.utc)),
        make_tx("sell-1", "Sell", "BTC", 1, 25000, datetime(2023, 6, 1, tzinfo=timezone.utc)),
    ]
