"""Per-asset lot inventory with FIFO, LIFO and HIFO consumption."""

import logging
from collections import defaultdict
from datetime import datetime
from decimal import Decimal

from cryptotax.exceptions import InsufficientLotsError
from cryptotax.models.enums import MatchingMethod
from cryptotax.models.lots import Lot, LotConsumption

logger = logging.getLogger(__name__)


class LotInventory:
    """Open acquisition lots for every asset in one report calculation.

    An inventory is scratch state: build a new one per report and throw it
    away afterwards. Lots of one asset are never visible to another asset.
    """

    def __init__(self) -> None:
        self._lots: dict[str, list[Lot]] = defaultdict(list)
        self._acquired: dict[str, Decimal] = defaultdict(Decimal)
        self._consumed: dict[str, Decimal] = defaultdict(Decimal)
        self._sequence = 0

    @staticmethod
    def normalize_asset(asset: str) -> str:
        return asset.strip().upper()

    def add_lot(
        self,
        asset: str,
        amount: Decimal,
        unit_cost: Decimal,
        acquired_at: datetime,
        tx_id: str,
        total_cost: Decimal | None = None,
    ) -> Lot | None:
        """Open a new lot. Zero or negative amounts are ignored.

        Pass ``total_cost`` when the lot was priced as a whole; it is kept
        exactly and ``unit_cost`` is only used for ordering and partial takes.
        """
        if amount <= 0:
            return None
        asset = self.normalize_asset(asset)
        if total_cost is None:
            total_cost = unit_cost * amount
        self._sequence += 1
        lot = Lot(
            id=f"{tx_id}:{asset}:{self._sequence}",
            asset=asset,
            amount=amount,
            remaining_amount=amount,
            unit_cost_usd=unit_cost,
            cost_usd=total_cost,
            remaining_cost_usd=total_cost,
            acquired_at=acquired_at,
            source_transaction_id=tx_id,
            sequence=self._sequence,
        )
        self._lots[asset].append(lot)
        self._acquired[asset] += amount
        logger.debug(
            "Opened lot %s: %s %s @ %s", lot.id, amount, asset, unit_cost
        )
        return lot

    def consume(
        self,
        asset: str,
        amount: Decimal,
        method: MatchingMethod = MatchingMethod.FIFO,
    ) -> list[LotConsumption]:
        """Remove ``amount`` of ``asset`` from the front of the policy order.

        Raises InsufficientLotsError, leaving the inventory untouched, when
        the open lots hold less than ``amount``.
        """
        asset = self.normalize_asset(asset)
        if amount <= 0:
            return []
        available = self.held(asset)
        if available < amount:
            raise InsufficientLotsError(asset, amount, available)

        remaining = amount
        consumed: list[LotConsumption] = []
        for lot in self.ordered(asset, method):
            if remaining <= 0:
                break
            take = min(lot.remaining_amount, remaining)
            if take == lot.remaining_amount:
                cost = lot.remaining_cost_usd
            else:
                cost = min(lot.unit_cost_usd * take, lot.remaining_cost_usd)
            lot.remaining_amount -= take
            lot.remaining_cost_usd -= cost
            remaining -= take
            consumed.append(
                LotConsumption(
                    lot_id=lot.id,
                    source_transaction_id=lot.source_transaction_id,
                    acquired_at=lot.acquired_at,
                    amount=take,
                    unit_cost_usd=lot.unit_cost_usd,
                    cost_basis=cost,
                )
            )

        self._lots[asset] = [lot for lot in self._lots[asset] if lot.remaining_amount > 0]
        self._consumed[asset] += amount
        return consumed

    def consume_available(
        self,
        asset: str,
        amount: Decimal,
        method: MatchingMethod = MatchingMethod.FIFO,
    ) -> tuple[list[LotConsumption], Decimal]:
        """Consume up to ``amount``; return the consumptions and the unmatched remainder."""
        try:
            return self.consume(asset, amount, method), Decimal("0")
        except InsufficientLotsError as exc:
            return self.consume(asset, exc.available, method), exc.requested - exc.available

    def ordered(self, asset: str, method: MatchingMethod) -> list[Lot]:
        """Open lots for ``asset`` in the order ``method`` would consume them."""
        lots = [lot for lot in self._lots.get(self.normalize_asset(asset), []) if lot.remaining_amount > 0]
        match method:
            case MatchingMethod.FIFO:
                return sorted(lots, key=lambda lot: (lot.acquired_at, lot.sequence))
            case MatchingMethod.LIFO:
                return sorted(lots, key=lambda lot: (lot.acquired_at, lot.sequence), reverse=True)
            case MatchingMethod.HIFO:
                # Highest unit cost first; oldest first among equal costs
                return sorted(lots, key=lambda lot: (-lot.unit_cost_usd, lot.acquired_at, lot.sequence))
            case _:
                raise ValueError(f"Unsupported matching method: {method}")

    def lots(self, asset: str) -> list[Lot]:
        return list(self._lots.get(self.normalize_asset(asset), []))

    def held(self, asset: str) -> Decimal:
        return sum(
            (lot.remaining_amount for lot in self._lots.get(self.normalize_asset(asset), [])),
            Decimal("0"),
        )

    def acquired_total(self, asset: str) -> Decimal:
        return self._acquired.get(self.normalize_asset(asset), Decimal("0"))

    def consumed_total(self, asset: str) -> Decimal:
        return self._consumed.get(self.normalize_asset(asset), Decimal("0"))

    def assets(self) -> list[str]:
        return sorted(asset for asset, lots in self._lots.items() if lots)
