"""
Date helpers shared by the ledger, the NAV history and the reports.
"""
from __future__ import annotations

import calendar
from datetime import date


def today_iso() -> str:
    """Today's local date as YYYY-MM-DD."""
    return date.today().isoformat()


def parse_iso_date(s: str | None) -> date | None:
    """Parse ISO date string (YYYY-MM-DD, extra time part ignored) to date."""
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except (ValueError, TypeError):
        return None


def month_end(year: int, month: int) -> date:
    """Last calendar day of the given month."""
    return date(year, month, calendar.monthrange(year, month)[1])


def add_months(d: date, months: int) -> tuple[int, int]:
    """(year, month) reached by moving `months` calendar months from `d`."""
    idx = d.year * 12 + (d.month - 1) + months
    return idx // 12, idx % 12 + 1
