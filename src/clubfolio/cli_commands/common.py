from __future__ import annotations

import typer

from clubfolio.engine.valuation import COMBINED
from clubfolio.ledger.models import PortfolioId
from clubfolio.nav.store import ClubStore

VIEW_HELP = "Portfolio view: combined, phronesis or flagship"
DATA_HELP = "Override CLUB_DATA_PATH (JSON snapshot)."


def parse_view(view: str) -> str | PortfolioId:
    v = str(view or "").strip().lower()
    if v in ("", "combined", "all", COMBINED.lower()):
        return COMBINED
    for pid in PortfolioId:
        if v in (pid.label.lower(), pid.value.lower()):
            return pid
    raise typer.BadParameter(f"Unknown view '{view}'. Use combined, phronesis or flagship.")


def parse_portfolio(portfolio: str) -> PortfolioId:
    pid = parse_view(portfolio)
    if pid == COMBINED:
        raise typer.BadParameter("A transaction must be booked to phronesis or flagship.")
    return pid  # type: ignore[return-value]


def view_label(view: str | PortfolioId) -> str:
    return "Combined" if view == COMBINED else PortfolioId(view).label


def open_store(data_path: str = "") -> ClubStore:
    try:
        return ClubStore.open(data_path or None)
    except (ValueError, KeyError) as e:
        # Corrupt snapshot (bad JSON / schema); do not reseed over it.
        raise typer.BadParameter(f"Could not load club snapshot: {e}")
