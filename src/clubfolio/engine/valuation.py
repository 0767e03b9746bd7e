"""
Valuation & aggregation: price replayed lots and roll sub-portfolios into the club view.

Called by:
- ``nav.store.ClubStore`` after every ledger mutation (full recompute).
- Analytics (risk, stress, allocation) through ``ClubData.view``.

Contract notes:
- Lots at or below CLOSED_QTY are closed positions and are not reported.
- Missing prices fall back to average cost (total_cost / quantity); valuation
  never fails for an untracked asset.
- Combined holdings are concatenated, not merged: an asset held in both
  sub-portfolios appears twice.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from clubfolio.engine.replay import AssetLot, replay_all
from clubfolio.ledger.models import Member, PortfolioId, Transaction
from clubfolio.nav.history import PerformanceDataPoint

CLOSED_QTY = 0.001
COMBINED = "COMBINED"

PriceLookup = Callable[[str], "float | None"]

# Static demo marks; there is no live market data feed.
DEFAULT_PRICES: dict[str, float] = {"AAPL": 175.0, "GOOGL": 130.0, "MSFT": 330.0, "XAU/USD": 1980.0}


def price_lookup_from_mapping(prices: Mapping[str, float]) -> PriceLookup:
    table = {str(k).upper(): float(v) for k, v in prices.items()}

    def _lookup(asset: str) -> float | None:
        return table.get(str(asset).upper())

    return _lookup


@dataclass(frozen=True)
class Holding:
    asset: str
    quantity: float
    average_cost: float
    current_price: float
    market_value: float
    unrealized_gain_loss: float
    portfolio: PortfolioId
    # Cumulative cost spent on purchases; basis for unrealized_gain_loss.
    total_cost: float = 0.0

    @property
    def gain_loss_pct(self) -> float:
        """Unrealized P/L as percent of quantity * average cost (0 when no cost)."""
        cost = self.average_cost * self.quantity
        return (self.unrealized_gain_loss / cost) * 100 if cost > 0 else 0.0


@dataclass(frozen=True)
class PortfolioState:
    holdings: tuple[Holding, ...] = ()
    cash: float = 0.0

    @property
    def holdings_value(self) -> float:
        return sum(h.market_value for h in self.holdings)

    @property
    def total_value(self) -> float:
        return self.holdings_value + self.cash


def valuate(
    lots: Mapping[str, AssetLot],
    price_lookup: PriceLookup,
    portfolio: PortfolioId,
) -> list[Holding]:
    """Price each open lot; closed lots (quantity <= CLOSED_QTY) are dropped."""
    out: list[Holding] = []
    for asset, lot in lots.items():
        qty = float(lot.quantity)
        if qty <= CLOSED_QTY:
            continue
        avg_cost = lot.total_cost / qty
        px = price_lookup(asset)
        current_price = float(px) if px is not None and px > 0 else avg_cost
        market_value = qty * current_price
        out.append(
            Holding(
                asset=asset,
                quantity=qty,
                average_cost=avg_cost,
                current_price=current_price,
                market_value=market_value,
                unrealized_gain_loss=market_value - lot.total_cost,
                portfolio=portfolio,
                total_cost=lot.total_cost,
            )
        )
    return out


@dataclass(frozen=True)
class ClubData:
    """Aggregate root: ledger inputs plus every derived combined figure."""

    members: tuple[Member, ...]
    transactions: tuple[Transaction, ...]
    portfolios: dict[PortfolioId, PortfolioState]
    performance_history: tuple[PerformanceDataPoint, ...] = field(default_factory=tuple)

    @property
    def cash(self) -> float:
        return sum(p.cash for p in self.portfolios.values())

    @property
    def holdings(self) -> list[Holding]:
        out: list[Holding] = []
        for pid in PortfolioId:
            state = self.portfolios.get(pid)
            if state is not None:
                out.extend(state.holdings)
        return out

    @property
    def total_shares(self) -> float:
        return sum(m.shares for m in self.members)

    @property
    def total_value(self) -> float:
        return sum(p.total_value for p in self.portfolios.values())

    @property
    def share_value(self) -> float:
        shares = self.total_shares
        return self.total_value / shares if shares > 0 else 0.0

    def member(self, member_id: str) -> Member | None:
        return next((m for m in self.members if m.id == member_id), None)

    def view(self, view: str | PortfolioId = COMBINED) -> tuple[list[Holding], float, float]:
        """(holdings, cash, total_value) for the combined club or one sub-portfolio."""
        if view == COMBINED:
            return self.holdings, self.cash, self.total_value
        state = self.portfolios[PortfolioId(view)]
        return list(state.holdings), state.cash, state.total_value

    def to_dict(self) -> dict[str, Any]:
        return {
            "members": [m.to_dict() for m in self.members],
            "transactions": [t.to_dict() for t in self.transactions],
            "portfolios": {
                pid.value: {
                    "cash": st.cash,
                    "totalValue": st.total_value,
                    "holdings": [_holding_dict(h) for h in st.holdings],
                }
                for pid, st in self.portfolios.items()
            },
            "cash": self.cash,
            "totalShares": self.total_shares,
            "totalValue": self.total_value,
            "shareValue": self.share_value,
            "performanceHistory": [p.to_dict() for p in self.performance_history],
        }


def _holding_dict(h: Holding) -> dict[str, Any]:
    return {
        "asset": h.asset,
        "quantity": h.quantity,
        "averageCost": h.average_cost,
        "currentPrice": h.current_price,
        "marketValue": h.market_value,
        "unrealizedGainLoss": h.unrealized_gain_loss,
        "portfolio": h.portfolio.value,
    }


def build_club_data(
    members: Sequence[Member],
    transactions: Sequence[Transaction],
    performance_history: Sequence[PerformanceDataPoint] = (),
    *,
    price_lookup: PriceLookup | None = None,
    chronological: bool = False,
) -> ClubData:
    """Full re-derivation: replay every sub-portfolio, value it, aggregate."""
    lookup = price_lookup or price_lookup_from_mapping(DEFAULT_PRICES)
    portfolios: dict[PortfolioId, PortfolioState] = {}
    for pid, result in replay_all(transactions, chronological=chronological).items():
        portfolios[pid] = PortfolioState(
            holdings=tuple(valuate(result.lots, lookup, pid)),
            cash=result.cash,
        )
    return ClubData(
        members=tuple(members),
        transactions=tuple(transactions),
        portfolios=portfolios,
        performance_history=tuple(performance_history),
    )
