from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from clubfolio.cli_commands.common import DATA_HELP, open_store, parse_portfolio
from clubfolio.ledger.models import TransactionDraft, TransactionType
from clubfolio.ledger.validation import validate_draft
from clubfolio.utils.dates import parse_iso_date, today_iso
from clubfolio.utils.formatting import fmt_float, fmt_usd
from clubfolio.utils.logging import log_event


def register(tx_app: typer.Typer) -> None:
    @tx_app.command("add")
    def tx_add(
        tx_type: TransactionType = typer.Argument(..., case_sensitive=False, help="DEPOSIT, WITHDRAWAL, BUY, SELL or DIVIDEND"),
        portfolio: str = typer.Option(..., "--portfolio", "-p", help="phronesis or flagship"),
        amount: float = typer.Option(None, "--amount", help="Cash amount (deposits, withdrawals, dividends)."),
        member_id: str = typer.Option("", "--member", "-m", help="Member id for deposits/withdrawals."),
        asset: str = typer.Option("", "--asset", "-a", help="Ticker for trades and dividends."),
        quantity: float = typer.Option(None, "--qty", help="Units for BUY/SELL."),
        price: float = typer.Option(None, "--price", help="Unit price for BUY/SELL."),
        date: str = typer.Option("", "--date", help="YYYY-MM-DD (defaults to today)."),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """
        Append a transaction to the ledger.

        Examples:
            clubfolio tx add DEPOSIT -p phronesis -m m1 --amount 1000
            clubfolio tx add BUY -p flagship -a MSFT --qty 5 --price 330
        """
        if date and parse_iso_date(date) is None:
            raise typer.BadParameter(f"Bad date '{date}'. Expected YYYY-MM-DD.")

        draft = TransactionDraft(
            date=date or today_iso(),
            type=tx_type,
            portfolio=parse_portfolio(portfolio),
            amount=amount,
            member_id=member_id or None,
            asset=asset or None,
            quantity=quantity,
            price=price,
        )
        missing = validate_draft(draft)
        if missing:
            raise typer.BadParameter(f"{tx_type.value} requires: {', '.join(missing)}")

        store = open_store(data_path)
        if draft.member_id and store.data.member(draft.member_id) is None:
            Console().print(f"[yellow]Warning:[/yellow] member '{draft.member_id}' is not on the roster; no shares will move.")
        tx = store.add_transaction(draft)
        if tx is None:
            raise typer.BadParameter("Transaction rejected (amount must equal quantity * price for trades).")

        log_event("TRANSACTION", {"transaction": tx, "share_value": store.data.share_value})

        data = store.data
        Console().print(
            Panel(
                f"Recorded {tx.type.value} {tx.id} on {tx.date} ({tx.portfolio.label}) {fmt_usd(tx.amount)}\n"
                f"Club value {fmt_usd(data.total_value)}  |  share value {fmt_usd(data.share_value)}",
                title="Ledger",
                expand=False,
            )
        )

    @tx_app.command("list")
    def tx_list(
        limit: int = typer.Option(20, "--limit", "-n", help="Most recent N by date (0 = all)."),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Ledger, newest date first."""
        data = open_store(data_path).data
        names = {m.id: m.name for m in data.members}
        ordered = sorted(data.transactions, key=lambda t: t.date, reverse=True)
        if limit > 0:
            ordered = ordered[:limit]

        tbl = Table(title=f"Transactions ({len(data.transactions)} total)")
        tbl.add_column("date")
        tbl.add_column("type", style="bold")
        tbl.add_column("portfolio")
        tbl.add_column("details")
        tbl.add_column("amount", justify="right")
        for t in ordered:
            if t.member_id:
                details = names.get(t.member_id, t.member_id)
            elif t.quantity is not None:
                details = f"{fmt_float(t.quantity, 4)} {t.asset} @ {fmt_usd(t.price)}"
            else:
                details = t.asset or ""
            tbl.add_row(t.date, t.type.value, t.portfolio.label, details, fmt_usd(t.amount))
        Console().print(tbl)
