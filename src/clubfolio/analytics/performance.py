"""
Track-record analytics over the monthly NAV / benchmark history.

Called by:
- CLI ``track-record`` and ``status`` views.
- ``export.annual_returns_csv`` / ``export.track_record_csv``.

Contract notes:
- Operates on the independent performance history, never on live holdings.
- Volatility is the population standard deviation (ddof=0) of monthly returns
  scaled by sqrt(12).
- Every ratio has an explicit sentinel instead of NaN/inf:
  Sharpe = 0 when volatility is 0; annualized return = -1 when the cumulative
  return wipes out the NAV; drawdown = 0 while the running peak is <= 0;
  a year with a zero starting NAV returns 0.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from clubfolio.nav.history import PerformanceDataPoint

RISK_FREE_RATE = 0.02
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class PerformanceStats:
    cumulative_return: float = 0.0
    annualized_return: float = 0.0
    annualized_volatility: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0


@dataclass(frozen=True)
class AnnualReturn:
    year: int
    nav_return: float
    benchmark_return: float


@dataclass(frozen=True)
class BenchmarkComparison:
    """Dashboard headline figures, in percent units."""

    overall_return_pct: float
    benchmark_return_pct: float
    outperformance_pct: float


def history_frame(history: Sequence[PerformanceDataPoint]) -> pd.DataFrame:
    """History as a DataFrame (date, nav, benchmark) in the given order."""
    if not history:
        return pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"), "nav": [], "benchmark": []})
    return pd.DataFrame(
        {
            "date": pd.to_datetime([p.date for p in history]),
            "nav": [float(p.nav) for p in history],
            "benchmark": [float(p.benchmark) for p in history],
        }
    )


def _pct_change(s: pd.Series) -> pd.Series:
    prev = s.shift(1)
    out = (s - prev) / prev
    return out.replace([np.inf, -np.inf], 0.0)


def monthly_returns(history: Sequence[PerformanceDataPoint]) -> pd.DataFrame:
    """ret[i] = (x[i] - x[i-1]) / x[i-1] for i >= 1, for both nav and benchmark."""
    df = history_frame(history)
    if len(df) < 2:
        return pd.DataFrame({"date": pd.Series(dtype="datetime64[ns]"), "nav_return": [], "benchmark_return": []})
    out = pd.DataFrame(
        {
            "date": df["date"],
            "nav_return": _pct_change(df["nav"]),
            "benchmark_return": _pct_change(df["benchmark"]),
        }
    )
    return out.iloc[1:].fillna(0.0).reset_index(drop=True)


def cumulative_return(history: Sequence[PerformanceDataPoint]) -> float:
    if len(history) < 2:
        return 0.0
    first, last = float(history[0].nav), float(history[-1].nav)
    return (last - first) / first if first != 0 else 0.0


def annualized_return(history: Sequence[PerformanceDataPoint]) -> float:
    """(1 + cumulative) ** (12 / N) - 1 with N = number of monthly points."""
    n = len(history)
    if n < 2:
        return 0.0
    growth = 1.0 + cumulative_return(history)
    if growth <= 0:
        return -1.0
    return float(growth ** (MONTHS_PER_YEAR / n) - 1.0)


def annualized_volatility(returns: Sequence[float] | pd.Series) -> float:
    r = np.asarray(returns, dtype=float)
    if r.size == 0:
        return 0.0
    return float(np.std(r, ddof=0) * np.sqrt(MONTHS_PER_YEAR))


def sharpe_ratio(annual_return: float, annual_volatility: float, risk_free_rate: float = RISK_FREE_RATE) -> float:
    return (annual_return - risk_free_rate) / annual_volatility if annual_volatility > 0 else 0.0


def drawdown_series(history: Sequence[PerformanceDataPoint]) -> pd.Series:
    """(nav - running_peak) / running_peak for every history point (all <= 0)."""
    df = history_frame(history)
    if df.empty:
        return pd.Series(dtype=float)
    peak = df["nav"].cummax()
    dd = (df["nav"] - peak) / peak
    dd = dd.where(peak > 0, 0.0)
    # Clip float noise; a drawdown is never positive.
    return dd.clip(upper=0.0).rename("drawdown")


def max_drawdown(history: Sequence[PerformanceDataPoint]) -> float:
    dd = drawdown_series(history)
    return float(dd.min()) if not dd.empty else 0.0


def performance_stats(
    history: Sequence[PerformanceDataPoint],
    *,
    risk_free_rate: float = RISK_FREE_RATE,
) -> PerformanceStats:
    """Headline track-record metrics. Fewer than two points yields all zeros."""
    rets = monthly_returns(history)
    if len(history) < 2 or rets.empty:
        return PerformanceStats()

    ann_ret = annualized_return(history)
    ann_vol = annualized_volatility(rets["nav_return"])
    return PerformanceStats(
        cumulative_return=cumulative_return(history),
        annualized_return=ann_ret,
        annualized_volatility=ann_vol,
        sharpe_ratio=sharpe_ratio(ann_ret, ann_vol, risk_free_rate),
        max_drawdown=max_drawdown(history),
    )


def annual_returns(history: Sequence[PerformanceDataPoint]) -> list[AnnualReturn]:
    """
    Calendar-year returns from the first and last point observed in each year.

    Not compounded across year boundaries: December-to-January moves count in
    neither year. Newest year first.
    """
    df = history_frame(history)
    if df.empty:
        return []
    df["year"] = df["date"].dt.year
    grouped = df.groupby("year", sort=True).agg(
        start_nav=("nav", "first"),
        end_nav=("nav", "last"),
        start_benchmark=("benchmark", "first"),
        end_benchmark=("benchmark", "last"),
    )

    def _ret(start: float, end: float) -> float:
        return (end - start) / start if start != 0 else 0.0

    out = [
        AnnualReturn(
            year=int(year),
            nav_return=_ret(float(row.start_nav), float(row.end_nav)),
            benchmark_return=_ret(float(row.start_benchmark), float(row.end_benchmark)),
        )
        for year, row in grouped.iterrows()
    ]
    return sorted(out, key=lambda a: a.year, reverse=True)


def benchmark_comparison(total_value: float, history: Sequence[PerformanceDataPoint]) -> BenchmarkComparison:
    """Live club value vs the first recorded NAV, against the benchmark over the history."""
    overall = 0.0
    if history and history[0].nav:
        overall = (float(total_value) / float(history[0].nav) - 1) * 100
    bench = 0.0
    if len(history) > 1 and history[0].benchmark:
        bench = (float(history[-1].benchmark) / float(history[0].benchmark) - 1) * 100
    return BenchmarkComparison(
        overall_return_pct=overall,
        benchmark_return_pct=bench,
        outperformance_pct=overall - bench,
    )


def track_record_rows(history: Sequence[PerformanceDataPoint]) -> list[dict]:
    """Per point: date, nav, benchmark, monthly return % and drawdown %."""
    dd = drawdown_series(history)
    rows: list[dict] = []
    for i, p in enumerate(history):
        prev = history[i - 1].nav if i > 0 else None
        monthly = (p.nav - prev) / prev * 100 if prev else 0.0
        rows.append(
            {
                "date": p.date,
                "nav": p.nav,
                "benchmark": p.benchmark,
                "monthly_return_pct": float(monthly),
                "drawdown_pct": float(dd.iloc[i]) * 100 if not dd.empty else 0.0,
            }
        )
    return rows
