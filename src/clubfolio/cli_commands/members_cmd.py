from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from clubfolio.cli_commands.common import DATA_HELP, open_store
from clubfolio.ledger.models import ProfileType
from clubfolio.utils.formatting import fmt_float, fmt_pct, fmt_usd


def register(members_app: typer.Typer) -> None:
    @members_app.command("list")
    def members_list(data_path: str = typer.Option("", "--data", help=DATA_HELP)):
        """Roster with shares, equity value and ownership."""
        from clubfolio.nav.reports import member_rows

        data = open_store(data_path).data
        tbl = Table(title=f"Members (share value {fmt_usd(data.share_value)})")
        tbl.add_column("id", style="bold")
        tbl.add_column("name")
        tbl.add_column("status")
        tbl.add_column("profile")
        tbl.add_column("joined")
        tbl.add_column("invested", justify="right")
        tbl.add_column("shares", justify="right")
        tbl.add_column("equity", justify="right")
        tbl.add_column("ownership", justify="right")
        for r in member_rows(data):
            m = r.member
            tbl.add_row(
                m.id,
                m.name,
                m.status.value if m.exit_date is None else f"{m.status.value} ({m.exit_date})",
                m.profile_type,
                m.join_date,
                fmt_usd(m.invested_capital),
                fmt_float(m.shares, 4),
                fmt_usd(r.equity_value),
                fmt_pct(r.ownership_pct, multiply=False),
            )
        Console().print(tbl)

    @members_app.command("add")
    def members_add(
        name: str = typer.Argument(..., help="Full name"),
        email: str = typer.Argument(..., help="Email (used for the personal report lookup)"),
        phone: str = typer.Option("", "--phone"),
        join_date: str = typer.Option("", "--joined", help="YYYY-MM-DD (defaults to today)."),
        profile: ProfileType = typer.Option(ProfileType.PRUDENT, "--profile", help="Investor profile tag."),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Add a member with zero shares; record a deposit to give them equity."""
        store = open_store(data_path)
        try:
            m = store.add_member(name, email, phone=phone, join_date=join_date or None, profile_type=profile.value)
        except ValueError as e:
            raise typer.BadParameter(str(e))
        Console().print(Panel(f"Added {m.name} as {m.id}", title="Members", expand=False))

    @members_app.command("report")
    def members_report(
        member_id: str = typer.Argument(..., help="Member id (e.g., m1)"),
        email: str = typer.Argument(..., help="Member email (case-insensitive)"),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Personal statement: equity at today's share value and capital flows."""
        from clubfolio.nav.reports import MemberNotFoundError, member_report

        data = open_store(data_path).data
        try:
            rep = member_report(data, member_id, email)
        except MemberNotFoundError as e:
            Console().print(f"[red]{e}[/red]")
            raise typer.Exit(code=1)

        c = Console()
        m = rep.member
        c.print(
            Panel(
                f"{m.name} ({m.id})  {m.email}\n"
                f"Status: {m.status.value}  Profile: {m.profile_type}  Joined: {m.join_date}\n"
                f"Shares: {fmt_float(m.shares, 4)} @ {fmt_usd(rep.share_value)}\n"
                f"Equity value: [bold]{fmt_usd(rep.equity_value)}[/bold]\n"
                f"Invested capital: {fmt_usd(m.invested_capital)}  "
                f"(deposited {fmt_usd(rep.total_deposited)}, withdrawn {fmt_usd(rep.total_withdrawn)})",
                title="Member report",
                expand=False,
            )
        )
        if not rep.transactions:
            return
        tbl = Table(title="Capital flows")
        tbl.add_column("date")
        tbl.add_column("type")
        tbl.add_column("portfolio")
        tbl.add_column("amount", justify="right")
        for t in rep.transactions:
            tbl.add_row(t.date, t.type.value, t.portfolio.label, fmt_usd(t.amount))
        c.print(tbl)
