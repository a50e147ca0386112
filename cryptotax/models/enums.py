"""Enumerations for the crypto tax engine."""

from enum import StrEnum

from cryptotax.exceptions import InvalidMatchingMethodError


class TransactionCategory(StrEnum):
    BUY = "buy"
    SELL = "sell"
    SWAP = "swap"
    TRANSFER = "transfer"
    STAKING = "staking"
    LIQUIDITY = "liquidity"
    NFT = "nft"
    DCA = "dca"
    ZERO = "zero"
    SPAM = "spam"
    MARGIN = "margin"
    LIQUIDATION = "liquidation"


class SourceType(StrEnum):
    WALLET_API = "wallet_api"
    CSV_IMPORT = "csv_import"
    EXCHANGE_API = "exchange_api"


class MatchingMethod(StrEnum):
    FIFO = "FIFO"
    LIFO = "LIFO"
    HIFO = "HIFO"

    @classmethod
    def parse(cls, value: "str | MatchingMethod") -> "MatchingMethod":
        """Accept any casing of FIFO/LIFO/HIFO; reject everything else."""
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise InvalidMatchingMethodError(str(value)) from None


class HoldingPeriod(StrEnum):
    SHORT = "short"
    LONG = "long"


class IncomeType(StrEnum):
    STAKING = "staking"
    OTHER = "other"


class DisposalKind(StrEnum):
    SELL = "sell"
    SWAP = "swap"
    BRIDGE = "bridge"
    NFT_SALE = "nft_sale"
    MARGIN_SELL = "margin_sell"
    LIQUIDATION = "liquidation"
    LIQUIDITY_REMOVAL = "liquidity_removal"


class AdjustmentCode(StrEnum):
    W = "W"
    NONE = ""
