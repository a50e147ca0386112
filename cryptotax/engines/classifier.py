"""Transaction classification engine.

Transaction type strings differ across blockchain APIs, exchange APIs and CSV
uploads, so there is no canonical taxonomy at ingestion. Classification runs
an ordered cascade of rules over the type, notes and asset symbol; the first
rule that matches decides the category. Rule order is part of the contract:
a "Sell" whose notes mention a staking reward is staking, not a sale.

All keyword lists live in a single Vocabulary table so that sources with a
different dialect can supply their own.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

from cryptotax.models.enums import TransactionCategory
from cryptotax.models.transaction import Classification, Transaction
from cryptotax.normalization.notes import COST_BASIS_RE


@dataclass(frozen=True)
class Keywords:
    """Substrings searched for in specific parts of a transaction.

    ``text`` is searched in the combined "type notes asset" string,
    ``exact_type`` must equal the whole type, and ``notes_words`` must appear
    as whole words in the notes (for short tokens like "lp").
    """

    type: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()
    asset: tuple[str, ...] = ()
    text: tuple[str, ...] = ()
    exact_type: tuple[str, ...] = ()
    notes_words: tuple[str, ...] = ()

    def found_in(self, ctx: "_Context") -> bool:
        return (
            ctx.type in self.exact_type
            or any(k in ctx.type for k in self.type)
            or any(k in ctx.notes for k in self.notes)
            or any(k in ctx.asset for k in self.asset)
            or any(k in ctx.text for k in self.text)
            or any(re.search(rf"\b{re.escape(w)}\b", ctx.notes) for w in self.notes_words)
        )


@dataclass(frozen=True)
class Vocabulary:
    zero: Keywords = Keywords(type=("zero",))
    spam: Keywords = Keywords(
        type=("spam",),
        notes=("spam",),
        asset=("unknown", "spam"),
        text=("airdrop spam", "dust"),
    )
    liquidation: Keywords = Keywords(
        type=("liquidation",),
        notes=("liquidation", "liquidated"),
        text=("margin call", "forced liquidation", "position liquidated"),
    )
    margin: Keywords = Keywords(
        type=("margin",),
        notes=("margin",),
        text=("leveraged trade", "margin buy", "margin sell", "short position", "long position"),
    )
    margin_sell: Keywords = Keywords(type=("sell",), notes=("margin sell", "short"))
    nft: Keywords = Keywords(type=("nft",), notes=("nft",), text=("non-fungible",))
    nft_sale: Keywords = Keywords(type=("sale",))
    staking: Keywords = Keywords(
        type=("stake", "staking", "reward"),
        notes=("staking", "stake reward", "validator"),
        text=("delegation reward",),
    )
    unstake: Keywords = Keywords(type=("unstake", "unstaking"))
    liquidity: Keywords = Keywords(
        type=("liquidity",),
        notes=("liquidity", "liquidity pool"),
        text=("add liquidity", "remove liquidity", "liquidity provision"),
        notes_words=("lp",),
    )
    liquidity_add: Keywords = Keywords(type=("add",), notes=("add",))
    dca: Keywords = Keywords(
        exact_type=("dca",),
        notes=("dca", "dollar cost average"),
        text=("recurring buy",),
    )
    swap: Keywords = Keywords(
        type=("swap", "trade"),
        notes=("swap", "jupiter swap", "uniswap", "exchange"),
        text=("swapped", "traded"),
    )
    transfer: Keywords = Keywords(
        type=("send", "receive", "transfer", "bridge"),
        notes=("transfer", "sent", "received"),
    )
    receive: Keywords = Keywords(type=("receive",), notes=("received",))
    send: Keywords = Keywords(type=("send",))
    bridge: Keywords = Keywords(type=("bridge",), notes=("bridge",))
    buy: Keywords = Keywords(
        type=("buy", "purchase", "acquire"),
        notes=("bought", "purchased"),
    )
    sell: Keywords = Keywords(
        type=("sell", "sale", "disposal"),
        notes=("sold", "proceeds", "cost basis"),
    )
    sell_type: Keywords = Keywords(type=("sell", "sale", "disposal"))
    # Notes markers meaning "moved between the user's own wallets"
    self_transfer: tuple[str, ...] = (
        "self transfer",
        "self-transfer",
        "internal transfer",
        "between wallets",
        "between my wallets",
        "own wallet",
        "to self",
        "from self",
    )


DEFAULT_VOCABULARY = Vocabulary()


@dataclass(frozen=True)
class _Context:
    raw_type: str
    type: str
    notes: str
    asset: str
    text: str
    value: Decimal | None
    has_incoming: bool

    @property
    def signed_value(self) -> Decimal:
        return self.value if self.value is not None else Decimal("0")


@dataclass(frozen=True)
class Rule:
    """One step of the cascade: a predicate and how to label a match."""

    name: str
    category: TransactionCategory
    matches: Callable[[_Context, Vocabulary], bool]
    resolve: Callable[[_Context, Vocabulary], tuple[str, str | None]]


def _is_zero(ctx: _Context, vocab: Vocabulary) -> bool:
    return (ctx.value is not None and ctx.value == 0) or vocab.zero.found_in(ctx)


def _margin_type(ctx: _Context, vocab: Vocabulary) -> tuple[str, str | None]:
    is_sell = vocab.margin_sell.found_in(ctx) or (
        ctx.signed_value > 0 and "buy" not in ctx.type
    )
    return ("Margin Sell" if is_sell else "Margin Buy"), None


def _staking_type(ctx: _Context, vocab: Vocabulary) -> tuple[str, str | None]:
    if vocab.unstake.found_in(ctx):
        return "Unstake", None
    return "Staking", "Reward"


def _transfer_type(ctx: _Context, vocab: Vocabulary) -> tuple[str, str | None]:
    is_receive = vocab.receive.found_in(ctx) or (
        ctx.signed_value > 0 and not vocab.send.found_in(ctx)
    )
    subtype = "Bridge" if vocab.bridge.found_in(ctx) else None
    return ("Receive" if is_receive else "Send"), subtype


def _is_buy(ctx: _Context, vocab: Vocabulary) -> bool:
    # Exported sale rows carry "Cost Basis: $X | Purchased: <date>" in the notes
    if vocab.sell_type.found_in(ctx) and COST_BASIS_RE.search(ctx.notes):
        return False
    return vocab.buy.found_in(ctx) or (ctx.signed_value < 0 and "sell" not in ctx.type)


def _fixed(final_type: str, subtype: str | None = None):
    return lambda ctx, vocab: (final_type, subtype)


RULES: tuple[Rule, ...] = (
    Rule("zero", TransactionCategory.ZERO, _is_zero, _fixed("Zero Transaction")),
    Rule("spam", TransactionCategory.SPAM, lambda c, v: v.spam.found_in(c), _fixed("Spam")),
    Rule(
        "liquidation",
        TransactionCategory.LIQUIDATION,
        lambda c, v: v.liquidation.found_in(c),
        _fixed("Liquidation"),
    ),
    Rule("margin", TransactionCategory.MARGIN, lambda c, v: v.margin.found_in(c), _margin_type),
    Rule(
        "nft",
        TransactionCategory.NFT,
        lambda c, v: v.nft.found_in(c),
        lambda c, v: ("NFT Sale" if v.nft_sale.found_in(c) else "NFT Purchase", None),
    ),
    Rule("staking", TransactionCategory.STAKING, lambda c, v: v.staking.found_in(c), _staking_type),
    Rule(
        "liquidity",
        TransactionCategory.LIQUIDITY,
        lambda c, v: v.liquidity.found_in(c),
        lambda c, v: (
            "Add Liquidity" if v.liquidity_add.found_in(c) else "Remove Liquidity",
            None,
        ),
    ),
    Rule("dca", TransactionCategory.DCA, lambda c, v: v.dca.found_in(c), _fixed("DCA")),
    Rule(
        "swap",
        TransactionCategory.SWAP,
        lambda c, v: c.has_incoming or v.swap.found_in(c),
        _fixed("Swap"),
    ),
    Rule(
        "transfer",
        TransactionCategory.TRANSFER,
        lambda c, v: v.transfer.found_in(c),
        _transfer_type,
    ),
    Rule("buy", TransactionCategory.BUY, _is_buy, _fixed("Buy")),
    Rule("sell", TransactionCategory.SELL, lambda c, v: v.sell.found_in(c), _fixed("Sell")),
)


@dataclass
class TransactionClassifier:
    """Runs the rule cascade. Pure: the same inputs always give the same label."""

    vocabulary: Vocabulary = field(default_factory=lambda: DEFAULT_VOCABULARY)
    rules: tuple[Rule, ...] = RULES

    def classify(
        self,
        type: str | None,
        notes: str | None = None,
        value_usd: Decimal | int | float | str | None = None,
        asset_symbol: str | None = None,
        incoming_asset_symbol: str | None = None,
    ) -> Classification:
        ctx = self._context(type, notes, value_usd, asset_symbol, incoming_asset_symbol)
        for rule in self.rules:
            if rule.matches(ctx, self.vocabulary):
                final_type, subtype = rule.resolve(ctx, self.vocabulary)
                return Classification(
                    category=rule.category,
                    identified=True,
                    final_type=final_type,
                    subtype=subtype,
                )

        # Never guess a disposal: leave the original type for manual review
        return Classification(
            category=TransactionCategory.BUY,
            identified=False,
            final_type=ctx.raw_type,
        )

    def classify_transaction(self, tx: Transaction) -> Classification:
        classification = self.classify(
            tx.type,
            tx.notes,
            tx.value_usd,
            tx.asset_symbol,
            tx.incoming_asset_symbol,
        )
        if classification.subtype is None and tx.subtype:
            return classification.model_copy(update={"subtype": tx.subtype})
        return classification

    def is_self_transfer_note(self, notes: str | None) -> bool:
        notes_lower = (notes or "").lower()
        return any(marker in notes_lower for marker in self.vocabulary.self_transfer)

    @staticmethod
    def _context(
        type: str | None,
        notes: str | None,
        value_usd: Decimal | int | float | str | None,
        asset_symbol: str | None,
        incoming_asset_symbol: str | None,
    ) -> _Context:
        type_lower = (type or "").lower()
        notes_lower = (notes or "").lower()
        asset_lower = (asset_symbol or "").lower()
        value = None if value_usd is None or value_usd == "" else Decimal(str(value_usd))
        return _Context(
            raw_type=type or "",
            type=type_lower,
            notes=notes_lower,
            asset=asset_lower,
            text=f"{type_lower} {notes_lower} {asset_lower}",
            value=value,
            has_incoming=bool(incoming_asset_symbol and incoming_asset_symbol.strip()),
        )


_default_classifier = TransactionClassifier()


def classify(
    type: str | None,
    notes: str | None = None,
    value_usd: Decimal | int | float | str | None = None,
    asset_symbol: str | None = None,
    incoming_asset_symbol: str | None = None,
) -> Classification:
    """Classify with the default vocabulary."""
    return _default_classifier.classify(type, notes, value_usd, asset_symbol, incoming_asset_symbol)
