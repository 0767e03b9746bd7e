"""
Historical NAV / benchmark series.

The performance history is tracked independently of the live ledger: it is
seeded once (or migrated when stale) and never re-derived from current holdings.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date
from typing import Any, Sequence

from clubfolio.utils.dates import add_months, month_end

HISTORY_MONTHS = 60
START_NAV = 25000.0
START_BENCHMARK = 4000.0


@dataclass(frozen=True)
class PerformanceDataPoint:
    date: str
    nav: float
    share_value: float
    # Market benchmark level (e.g., S&P 500) on the same date, for comparison.
    benchmark: float

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "nav": self.nav, "shareValue": self.share_value, "benchmark": self.benchmark}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> "PerformanceDataPoint":
        return cls(
            date=str(d.get("date") or ""),
            nav=float(d.get("nav") or 0.0),
            share_value=float(d.get("shareValue") or 0.0),
            benchmark=float(d.get("benchmark") or 0.0),
        )


def generate_performance_history(
    *,
    months: int = HISTORY_MONTHS,
    start: date | None = None,
    rng: random.Random | None = None,
) -> list[PerformanceDataPoint]:
    """
    Random-walk monthly NAV/benchmark series, one point per month-end.

    - starts `months / 12` years before `start` (default: today), first of month
    - nav *= 1 + (u - 0.45) * 0.10 ; benchmark *= 1 + (u - 0.47) * 0.08
    - nav and benchmark are rounded to whole dollars / index points
    """
    rng = rng or random.Random()
    anchor = start or date.today()
    first = date(anchor.year - months // 12, anchor.month, 1)

    nav = START_NAV
    benchmark = START_BENCHMARK
    out: list[PerformanceDataPoint] = []
    for i in range(int(months)):
        y, m = add_months(first, i)
        nav *= 1 + (rng.random() - 0.45) * 0.10
        benchmark *= 1 + (rng.random() - 0.47) * 0.08
        out.append(
            PerformanceDataPoint(
                date=month_end(y, m).isoformat(),
                nav=float(round(nav)),
                share_value=100 * (nav / START_NAV),
                benchmark=float(round(benchmark)),
            )
        )
    return out


def needs_regeneration(history: Sequence[PerformanceDataPoint] | None, *, min_points: int) -> bool:
    """Stored histories shorter than `min_points` are stale data from an older schema."""
    return not history or len(history) < int(min_points)
