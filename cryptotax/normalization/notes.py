"""Parsing of structured markers embedded in free-text transaction notes.

Tax-report CSV exports put their own cost basis and acquisition date in the
notes column, and some wallet feeds describe a swap only in the notes or in a
pair-style asset symbol such as ``ETH/USDC``.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation

from cryptotax.models.enums import HoldingPeriod

COST_BASIS_RE = re.compile(r"Cost Basis:\s*\$?([\d,]+(?:\.\d+)?)", re.IGNORECASE)
PURCHASED_RE = re.compile(r"Purchased:\s*(\d{4}-\d{2}-\d{2})", re.IGNORECASE)
HOLDING_RE = re.compile(r"(Long-term|Short-term)\s*\((\d+)\s*days?\)", re.IGNORECASE)

SWAP_NOTE_PATTERNS = (
    # "Swapped 1.5 ETH for 3000 USDC"
    re.compile(
        r"(?:swapped|swap|exchanged|exchange)\s+([\d.,]+)\s+(\w+)\s+(?:for|to|→|->)\s+([\d.,]+)\s+(\w+)",
        re.IGNORECASE,
    ),
    # "1.5 ETH → 3000 USDC"
    re.compile(r"([\d.,]+)\s*([A-Za-z]\w*)\s*(?:→|->)\s*([\d.,]+)\s*([A-Za-z]\w*)"),
    # "ETH → USDC"
    re.compile(r"\b([A-Za-z]\w*)\s*(?:→|->)\s*([A-Za-z]\w*)"),
)
PAIR_SYMBOL_RE = re.compile(r"^\s*(\w+)\s*(?:/|→|->)\s*(\w+)\s*$")


@dataclass(frozen=True)
class ImportedBasis:
    """Cost basis precomputed by an upstream tax-report export."""

    cost_basis: Decimal
    purchased: date | None = None
    holding_hint: HoldingPeriod | None = None


@dataclass(frozen=True)
class SwapLegs:
    outgoing_asset: str
    incoming_asset: str
    outgoing_amount: Decimal | None = None
    incoming_amount: Decimal | None = None


def _decimal_or_none(text: str | None) -> Decimal | None:
    if not text:
        return None
    try:
        return Decimal(text.replace(",", ""))
    except InvalidOperation:
        return None


def parse_imported_basis(notes: str | None) -> ImportedBasis | None:
    """Extract ``Cost Basis: $X`` and its companion markers, if present."""
    if not notes:
        return None
    match = COST_BASIS_RE.search(notes)
    if match is None:
        return None
    cost_basis = _decimal_or_none(match.group(1))
    if cost_basis is None:
        return None

    purchased = None
    if purchased_match := PURCHASED_RE.search(notes):
        try:
            purchased = date.fromisoformat(purchased_match.group(1))
        except ValueError:
            purchased = None

    holding_hint = None
    if holding_match := HOLDING_RE.search(notes):
        holding_hint = (
            HoldingPeriod.LONG
            if holding_match.group(1).lower().startswith("long")
            else HoldingPeriod.SHORT
        )
    return ImportedBasis(cost_basis=cost_basis, purchased=purchased, holding_hint=holding_hint)


def parse_swap(notes: str | None, asset_symbol: str | None) -> SwapLegs | None:
    """Recover both legs of a swap from notes or a pair-style asset symbol."""
    for pattern in SWAP_NOTE_PATTERNS:
        match = pattern.search(notes or "")
        if match is None:
            continue
        groups = match.groups()
        if len(groups) == 4:
            return SwapLegs(
                outgoing_asset=groups[1].upper(),
                incoming_asset=groups[3].upper(),
                outgoing_amount=_decimal_or_none(groups[0]),
                incoming_amount=_decimal_or_none(groups[2]),
            )
        return SwapLegs(outgoing_asset=groups[0].upper(), incoming_asset=groups[1].upper())

    if asset_symbol and (pair := PAIR_SYMBOL_RE.match(asset_symbol)):
        return SwapLegs(outgoing_asset=pair.group(1).upper(), incoming_asset=pair.group(2).upper())
    return None
