"""
Portfolio replay: fold the append-only ledger into cash + per-asset lots.

Contract notes:
- Transactions are processed in list (insertion) order, not by `date`. Users can
  enter trades out of chronological sequence, so the two may diverge; pass
  `chronological=True` to fold in date order instead.
- Average cost of purchases: BUY adds to both quantity and total_cost, SELL only
  reduces quantity. The remaining position keeps its full historical cost, so
  unrealized P/L after a partial sell is measured against everything ever paid.
- Oversells (negative lot quantity) and overdrawn cash are tolerated.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from clubfolio.ledger.models import PortfolioId, Transaction, TransactionType


@dataclass
class AssetLot:
    quantity: float = 0.0
    total_cost: float = 0.0

    @property
    def average_cost(self) -> float:
        return self.total_cost / self.quantity if self.quantity > 0 else 0.0


@dataclass
class ReplayResult:
    portfolio: PortfolioId
    cash: float = 0.0
    lots: dict[str, AssetLot] = field(default_factory=dict)


def _ordered(transactions: Iterable[Transaction], chronological: bool) -> list[Transaction]:
    txs = list(transactions)
    if chronological:
        # Stable: same-date rows keep their insertion order.
        txs.sort(key=lambda t: t.date)
    return txs


def replay(
    transactions: Sequence[Transaction],
    portfolio_id: PortfolioId,
    *,
    chronological: bool = False,
) -> ReplayResult:
    """Fold every transaction booked to `portfolio_id` into cash and lots."""
    out = ReplayResult(portfolio=portfolio_id)
    for tx in _ordered(transactions, chronological):
        if tx.portfolio != portfolio_id:
            continue
        amount = float(tx.amount)
        if tx.type == TransactionType.DEPOSIT:
            out.cash += amount
        elif tx.type == TransactionType.WITHDRAWAL:
            out.cash -= amount
        elif tx.type == TransactionType.BUY:
            out.cash -= amount
            if tx.asset:
                lot = out.lots.setdefault(tx.asset, AssetLot())
                lot.quantity += float(tx.quantity or 0.0)
                lot.total_cost += amount
        elif tx.type == TransactionType.SELL:
            out.cash += amount
            lot = out.lots.get(tx.asset or "")
            if lot is not None:
                lot.quantity -= float(tx.quantity or 0.0)
        elif tx.type == TransactionType.DIVIDEND:
            out.cash += amount
    return out


def replay_all(
    transactions: Sequence[Transaction],
    *,
    chronological: bool = False,
) -> dict[PortfolioId, ReplayResult]:
    """One ReplayResult per sub-portfolio (empty ones included)."""
    return {pid: replay(transactions, pid, chronological=chronological) for pid in PortfolioId}
