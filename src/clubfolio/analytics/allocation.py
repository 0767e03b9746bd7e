from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from clubfolio.engine.valuation import Holding
from clubfolio.llm.advisory import AssetDetails


@dataclass(frozen=True)
class AllocationSlice:
    name: str
    pct: float


@dataclass(frozen=True)
class AllocationBreakdown:
    sector: list[AllocationSlice] = field(default_factory=list)
    geography: list[AllocationSlice] = field(default_factory=list)
    asset_type: list[AllocationSlice] = field(default_factory=list)


def _aggregate(
    holdings: Sequence[Holding],
    details: dict[str, AssetDetails],
    attr: str,
    holdings_value: float,
) -> list[AllocationSlice]:
    if holdings_value == 0:
        return []
    buckets: dict[str, float] = {}
    for h in holdings:
        d = details.get(h.asset)
        category = (getattr(d, attr, None) if d is not None else None) or "Unknown"
        buckets[category] = buckets.get(category, 0.0) + h.market_value
    out = [AllocationSlice(name=k, pct=v / holdings_value * 100) for k, v in buckets.items()]
    return sorted(out, key=lambda s: s.pct, reverse=True)


def allocation_breakdown(
    holdings: Sequence[Holding],
    cash: float,
    details: Sequence[AssetDetails],
) -> AllocationBreakdown:
    """
    Percent of holdings market value by sector, geography and asset type.

    The asset-type view is rescaled to total value (holdings + cash) and gains a
    "Cash" slice when cash is positive.
    """
    holdings_value = sum(h.market_value for h in holdings)
    if holdings_value == 0 and cash == 0:
        return AllocationBreakdown()

    by_ticker = {d.ticker.upper(): d for d in details}
    by_asset = {h.asset: by_ticker.get(h.asset.upper()) for h in holdings}
    by_asset = {k: v for k, v in by_asset.items() if v is not None}

    sector = _aggregate(holdings, by_asset, "sector", holdings_value)
    geography = _aggregate(holdings, by_asset, "geography", holdings_value)
    asset_type = _aggregate(holdings, by_asset, "asset_type", holdings_value)

    total_with_cash = holdings_value + cash
    if total_with_cash > 0 and cash > 0:
        scale = holdings_value / total_with_cash
        asset_type = [AllocationSlice(name=s.name, pct=s.pct * scale) for s in asset_type]
        asset_type.append(AllocationSlice(name="Cash", pct=cash / total_with_cash * 100))

    return AllocationBreakdown(sector=sector, geography=geography, asset_type=asset_type)
