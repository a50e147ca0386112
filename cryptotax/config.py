"""Runtime configuration loaded from the environment.

Every setting can be overridden with a ``CRYPTOTAX_``-prefixed environment
variable or a ``.env`` file in the working directory, e.g.::

    CRYPTOTAX_MATCHING_METHOD=HIFO
    CRYPTOTAX_ESTIMATED_TAX_RATE=0.32
    CRYPTOTAX_WALLET_ADDRESSES='["0xabc...", "7xKX..."]'
"""

from decimal import Decimal
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cryptotax.exceptions import InvalidMatchingMethodError
from cryptotax.models.enums import MatchingMethod


class TaxSettings(BaseSettings):
    """Defaults applied when a report request does not specify a value."""

    model_config = SettingsConfigDict(
        env_prefix="CRYPTOTAX_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    matching_method: MatchingMethod = MatchingMethod.FIFO
    estimated_tax_rate: Decimal = Field(default=Decimal("0.24"), ge=0, le=1)
    capital_loss_limit: Decimal = Field(default=Decimal("3000"), ge=0)
    wash_sale_window_days: int = Field(default=30, ge=0)
    wallet_addresses: list[str] = Field(default_factory=list)
    min_tax_year: int = 2000
    max_tax_year: int = 2100
    log_level: str = "WARNING"

    @field_validator("matching_method", mode="before")
    @classmethod
    def _parse_method(cls, value):
        try:
            return MatchingMethod.parse(value)
        except InvalidMatchingMethodError as exc:
            raise ValueError(str(exc)) from exc


@lru_cache
def get_settings() -> TaxSettings:
    """Get cached settings instance."""
    return TaxSettings()
