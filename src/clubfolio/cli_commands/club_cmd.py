from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from clubfolio.cli_commands.common import DATA_HELP, VIEW_HELP, open_store, parse_view, view_label
from clubfolio.ledger.models import MemberStatus, PortfolioId
from clubfolio.utils.formatting import fmt_float, fmt_pct, fmt_signed_pct, fmt_signed_usd, fmt_usd, pnl_style


def register(app: typer.Typer) -> None:
    @app.command("status")
    def status(data_path: str = typer.Option("", "--data", help=DATA_HELP)):
        """Club dashboard: total value, share value, sub-portfolio split, vs benchmark."""
        from clubfolio.analytics.performance import benchmark_comparison

        data = open_store(data_path).data
        cmp = benchmark_comparison(data.total_value, data.performance_history)
        active = sum(1 for m in data.members if m.status == MemberStatus.ACTIVE)

        c = Console()
        c.print(
            Panel(
                f"Total value:   [bold]{fmt_usd(data.total_value)}[/bold]\n"
                f"Cash:          {fmt_usd(data.cash)}\n"
                f"Total shares:  {fmt_float(data.total_shares, 4)}\n"
                f"Share value:   [bold]{fmt_usd(data.share_value)}[/bold]\n"
                f"Members:       {active} active / {len(data.members)} total\n"
                f"Overall return [{pnl_style(cmp.overall_return_pct)}]{fmt_signed_pct(cmp.overall_return_pct, multiply=False)}[/]"
                f"  vs benchmark {fmt_signed_pct(cmp.benchmark_return_pct, multiply=False)}"
                f"  (outperformance [{pnl_style(cmp.outperformance_pct)}]{fmt_signed_pct(cmp.outperformance_pct, multiply=False)}[/])",
                title="Club status",
                expand=False,
            )
        )

        tbl = Table(title="Portfolios")
        tbl.add_column("portfolio", style="bold")
        tbl.add_column("holdings", justify="right")
        tbl.add_column("cash", justify="right")
        tbl.add_column("total", justify="right")
        tbl.add_column("share of club", justify="right")
        for pid in PortfolioId:
            st = data.portfolios[pid]
            share = st.total_value / data.total_value if data.total_value else 0.0
            tbl.add_row(pid.label, fmt_usd(st.holdings_value), fmt_usd(st.cash), fmt_usd(st.total_value), fmt_pct(share))
        c.print(tbl)

    @app.command("holdings")
    def holdings(
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Open positions with average cost, mark and unrealized P/L."""
        v = parse_view(view)
        rows, cash, total = open_store(data_path).data.view(v)

        c = Console()
        if not rows:
            c.print(Panel(f"No open positions. Cash: {fmt_usd(cash)}", title=f"Holdings ({view_label(v)})", expand=False))
            raise typer.Exit(code=0)

        tbl = Table(title=f"Holdings ({view_label(v)})")
        tbl.add_column("portfolio")
        tbl.add_column("asset", style="bold")
        tbl.add_column("qty", justify="right")
        tbl.add_column("avg cost", justify="right")
        tbl.add_column("price", justify="right")
        tbl.add_column("value", justify="right")
        tbl.add_column("unrealized", justify="right")
        tbl.add_column("P/L %", justify="right")
        for h in rows:
            style = pnl_style(h.unrealized_gain_loss)
            tbl.add_row(
                h.portfolio.label,
                h.asset,
                fmt_float(h.quantity, 4),
                fmt_usd(h.average_cost),
                fmt_usd(h.current_price),
                fmt_usd(h.market_value),
                f"[{style}]{fmt_signed_usd(h.unrealized_gain_loss)}[/{style}]",
                f"[{style}]{fmt_signed_pct(h.gain_loss_pct, multiply=False)}[/{style}]",
            )
        c.print(tbl)
        c.print(f"Cash: {fmt_usd(cash)}  |  Total value: {fmt_usd(total)}")

    @app.command("track-record")
    def track_record(data_path: str = typer.Option("", "--data", help=DATA_HELP)):
        """Key performance indicators and calendar-year returns vs the benchmark."""
        from clubfolio.analytics.performance import annual_returns, performance_stats

        store = open_store(data_path)
        history = store.data.performance_history
        stats = performance_stats(history, risk_free_rate=store.settings.risk_free_rate)

        c = Console()
        c.print(
            Panel(
                f"Cumulative return:     {fmt_pct(stats.cumulative_return)}\n"
                f"Annualized return:     {fmt_pct(stats.annualized_return)}\n"
                f"Annualized volatility: {fmt_pct(stats.annualized_volatility)}\n"
                f"Sharpe ratio:          {fmt_float(stats.sharpe_ratio)}\n"
                f"Max drawdown:          {fmt_pct(stats.max_drawdown)}\n"
                f"History:               {len(history)} monthly points"
                + (f" ({history[0].date} .. {history[-1].date})" if history else ""),
                title="Key performance indicators",
                expand=False,
            )
        )

        tbl = Table(title="Annual returns")
        tbl.add_column("year", style="bold")
        tbl.add_column("portfolio", justify="right")
        tbl.add_column("benchmark", justify="right")
        tbl.add_column("outperformance", justify="right")
        for a in annual_returns(history):
            diff = a.nav_return - a.benchmark_return
            tbl.add_row(
                str(a.year),
                f"[{pnl_style(a.nav_return)}]{fmt_signed_pct(a.nav_return)}[/]",
                f"[{pnl_style(a.benchmark_return)}]{fmt_signed_pct(a.benchmark_return)}[/]",
                f"[{pnl_style(diff)}]{fmt_signed_pct(diff)}[/]",
            )
        c.print(tbl)
