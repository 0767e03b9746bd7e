from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from clubfolio.engine.valuation import Holding

TECH_TICKERS = ("AAPL", "GOOGL", "MSFT", "AMZN", "NVDA", "META")
ENERGY_TICKERS = ("XOM", "CVX", "SHEL")


def sector_for(ticker: str) -> str:
    """Static sector bucket used by stress scenarios: Tech, Energy or Other."""
    t = str(ticker or "").strip().upper()
    if t in TECH_TICKERS:
        return "Tech"
    if t in ENERGY_TICKERS:
        return "Energy"
    return "Other"


@dataclass(frozen=True)
class Concentration:
    """Share of total value (percent) held in the largest 1 / 3 / 5 positions."""

    top1: float = 0.0
    top3: float = 0.0
    top5: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"top1": self.top1, "top3": self.top3, "top5": self.top5}


def top_k_share(holdings: Sequence[Holding], total_value: float, k: int) -> float:
    if not holdings or not total_value:
        return 0.0
    ranked = sorted(holdings, key=lambda h: h.market_value, reverse=True)
    return sum(h.market_value for h in ranked[: int(k)]) / float(total_value) * 100


def concentration(holdings: Sequence[Holding], total_value: float) -> Concentration:
    """
    Concentration of the selected view. `total_value` is the view's NAV (cash
    included), so a cash-heavy portfolio reads as less concentrated.
    """
    if not holdings or not total_value:
        return Concentration()
    return Concentration(
        top1=top_k_share(holdings, total_value, 1),
        top3=top_k_share(holdings, total_value, 3),
        top5=top_k_share(holdings, total_value, 5),
    )
