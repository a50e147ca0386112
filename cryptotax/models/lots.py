"""Cost-basis lot models."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class Lot(BaseModel):
    """An open acquisition of an asset, reduced only by consumption.

    ``cost_usd`` is the lot's total cost as recorded. ``remaining_cost_usd``
    shrinks with every consumption, and the consumption that empties the lot
    takes whatever is left, so a lot always gives back exactly its cost.
    """

    id: str
    asset: str
    amount: Decimal = Field(ge=0)
    remaining_amount: Decimal = Field(ge=0)
    unit_cost_usd: Decimal
    cost_usd: Decimal
    remaining_cost_usd: Decimal
    acquired_at: datetime
    source_transaction_id: str
    sequence: int = 0

    @property
    def remaining_cost_basis(self) -> Decimal:
        return self.remaining_cost_usd


class LotConsumption(BaseModel):
    """The portion of a single lot used to satisfy a disposal."""

    model_config = ConfigDict(frozen=True)

    lot_id: str
    source_transaction_id: str
    acquired_at: datetime
    amount: Decimal
    unit_cost_usd: Decimal
    cost_basis: Decimal
