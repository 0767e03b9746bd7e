"""
CSV export of derived datasets (holdings, ledger, annual returns, track record).

Each ``*_csv`` function returns the CSV text and, when `path` is given, also
writes it to disk. Headers are fixed; rows are comma-joined.
"""
from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Sequence

from clubfolio.analytics.performance import annual_returns, track_record_rows
from clubfolio.engine.valuation import Holding
from clubfolio.ledger.models import Member, Transaction
from clubfolio.nav.history import PerformanceDataPoint

HOLDINGS_HEADERS = ["Portfolio", "Asset", "Quantity", "Avg. Cost", "Current Price", "Market Value", "Unrealized P/L", "P/L %"]
TRANSACTIONS_HEADERS = ["ID", "Date", "Type", "Portfolio", "Member", "Asset", "Quantity", "Price", "Amount"]
ANNUAL_RETURNS_HEADERS = ["Year", "Portfolio Return (%)", "Benchmark Return (%)", "Outperformance (%)"]
TRACK_RECORD_HEADERS = ["Date", "Portfolio NAV", "Benchmark", "Monthly Return (%)", "Drawdown (%)"]


def _num(x: float | None) -> str:
    """Plain number text; integral floats drop the trailing .0."""
    if x is None:
        return ""
    v = float(x)
    return str(int(v)) if v.is_integer() else repr(v)


def _opt_num(x: float | None) -> str:
    # Unset and zero optional fields both export blank.
    return _num(x) if x else ""


def _write_csv(headers: Sequence[str], rows: Iterable[Sequence[Any]], path: str | None = None) -> str:
    buf = io.StringIO()
    w = csv.writer(buf, lineterminator="\n")
    w.writerow(headers)
    for row in rows:
        w.writerow(row)
    text = buf.getvalue()
    if path:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", newline="", encoding="utf-8") as f:
            f.write(text)
    return text


def holdings_csv(holdings: Sequence[Holding], *, path: str | None = None) -> str:
    rows = [
        [
            h.portfolio.value,
            h.asset,
            _num(h.quantity),
            _num(h.average_cost),
            _num(h.current_price),
            _num(h.market_value),
            _num(h.unrealized_gain_loss),
            f"{h.gain_loss_pct:.2f}",
        ]
        for h in holdings
    ]
    return _write_csv(HOLDINGS_HEADERS, rows, path)


def transactions_csv(
    transactions: Sequence[Transaction],
    members: Sequence[Member],
    *,
    path: str | None = None,
) -> str:
    """Ledger newest date first; member ids are resolved to names when known."""
    names = {m.id: m.name for m in members}
    ordered = sorted(transactions, key=lambda t: t.date, reverse=True)
    rows = [
        [
            t.id,
            t.date,
            t.type.value,
            t.portfolio.value,
            (names.get(t.member_id) or t.member_id) if t.member_id else "",
            t.asset or "",
            _opt_num(t.quantity),
            _opt_num(t.price),
            _num(t.amount),
        ]
        for t in ordered
    ]
    return _write_csv(TRANSACTIONS_HEADERS, rows, path)


def annual_returns_csv(history: Sequence[PerformanceDataPoint], *, path: str | None = None) -> str:
    rows = [
        [
            a.year,
            f"{a.nav_return * 100:.2f}",
            f"{a.benchmark_return * 100:.2f}",
            f"{(a.nav_return - a.benchmark_return) * 100:.2f}",
        ]
        for a in annual_returns(history)
    ]
    return _write_csv(ANNUAL_RETURNS_HEADERS, rows, path)


def track_record_csv(history: Sequence[PerformanceDataPoint], *, path: str | None = None) -> str:
    rows = [
        [
            r["date"],
            _num(r["nav"]),
            _num(r["benchmark"]),
            f"{r['monthly_return_pct']:.2f}",
            f"{r['drawdown_pct']:.2f}",
        ]
        for r in track_record_rows(history)
    ]
    return _write_csv(TRACK_RECORD_HEADERS, rows, path)
