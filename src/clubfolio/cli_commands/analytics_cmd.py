"""
Risk, stress-test and allocation views over one portfolio view.
"""
from __future__ import annotations

import json

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from clubfolio.cli_commands.common import DATA_HELP, VIEW_HELP, open_store, parse_view, view_label
from clubfolio.utils.formatting import fmt_pct, fmt_signed_usd, fmt_usd, pnl_style


def register(app: typer.Typer) -> None:
    @app.command("risk")
    def risk(
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Concentration of the largest 1 / 3 / 5 positions (percent of total value, cash included)."""
        from clubfolio.analytics.risk import concentration, sector_for

        v = parse_view(view)
        holdings, cash, total = open_store(data_path).data.view(v)
        conc = concentration(holdings, total)

        c = Console()
        c.print(
            Panel(
                f"Total value: {fmt_usd(total)}  (cash {fmt_usd(cash)})\n"
                f"Top 1: [bold]{fmt_pct(conc.top1, multiply=False)}[/bold]\n"
                f"Top 3: {fmt_pct(conc.top3, multiply=False)}\n"
                f"Top 5: {fmt_pct(conc.top5, multiply=False)}",
                title=f"Concentration ({view_label(v)})",
                expand=False,
            )
        )
        if not holdings or not total:
            return
        tbl = Table(title="Largest positions")
        tbl.add_column("asset", style="bold")
        tbl.add_column("sector")
        tbl.add_column("value", justify="right")
        tbl.add_column("% total", justify="right")
        for h in sorted(holdings, key=lambda h: h.market_value, reverse=True)[:5]:
            tbl.add_row(h.asset, sector_for(h.asset), fmt_usd(h.market_value), fmt_pct(h.market_value / total))
        c.print(tbl)

    @app.command("stress")
    def stress(
        scenario: str = typer.Option(
            "all",
            "--scenario",
            "-s",
            help="all, market_downturn, stock_crash, interest_rate_hike, inflation_spike, tech_sector_boom, energy_sector_crash",
        ),
        pct: float = typer.Option(None, "--pct", help="Shock in percent (e.g., -20). Defaults per scenario."),
        asset: str = typer.Option("", "--asset", "-a", help="Target for stock_crash (defaults to the first holding)."),
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP),
        json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """
        Deterministic percentage shocks on the live holdings.

        Examples:
            clubfolio stress                              # every scenario at its default shock
            clubfolio stress -s stock_crash -a AAPL --pct -50
        """
        from clubfolio.analytics.stress_test import StressScenario, default_pct, run_all_stress_tests, run_stress_test

        v = parse_view(view)
        holdings, _cash, total = open_store(data_path).data.view(v)
        c = Console()

        if scenario.lower() == "all":
            results = run_all_stress_tests(holdings, total)
        else:
            try:
                scen = StressScenario(scenario.lower())
            except ValueError:
                c.print(f"[red]Unknown scenario: {scenario}[/red]")
                c.print("Available: " + ", ".join(s.value for s in StressScenario))
                raise typer.Exit(code=1)
            shock = default_pct(scen) if pct is None else pct
            result = run_stress_test(holdings, total, scen, shock, selected_asset=asset.upper() or None)
            results = {scen.value: result}

        if json_output:
            c.print(json.dumps({k: r.to_dict() for k, r in results.items()}, indent=2))
            return

        tbl = Table(title=f"Stress test ({view_label(v)}, current value {fmt_usd(total)})")
        tbl.add_column("scenario", style="cyan")
        tbl.add_column("shock", justify="right")
        tbl.add_column("impact", justify="right")
        tbl.add_column("new value", justify="right")
        for r in results.values():
            label = r.scenario.label + (f" ({r.selected_asset})" if r.selected_asset else "")
            impact = r.headline_amount
            color = "green" if r.is_gain else pnl_style(impact)
            kind = "gain" if r.is_gain else "loss"
            tbl.add_row(
                label,
                f"{r.pct:+.1f}%",
                f"[{color}]{fmt_signed_usd(impact)} {kind}[/{color}]",
                fmt_usd(r.new_total_value),
            )
        c.print(tbl)

    @app.command("allocation")
    def allocation(
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP),
        offline: bool = typer.Option(False, "--offline", help="Skip the advisory service; use the static classification."),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Allocation by sector, geography and asset type."""
        from clubfolio.analytics.allocation import allocation_breakdown
        from clubfolio.llm.advisory import classify_assets, fallback_asset_details

        v = parse_view(view)
        holdings, cash, _total = open_store(data_path).data.view(v)
        tickers = sorted({h.asset for h in holdings})
        details = fallback_asset_details(tickers) if offline else classify_assets(tickers)
        breakdown = allocation_breakdown(holdings, cash, details)

        c = Console()
        for title, slices in (
            ("Sector", breakdown.sector),
            ("Geography", breakdown.geography),
            ("Asset type", breakdown.asset_type),
        ):
            tbl = Table(title=f"{title} ({view_label(v)})")
            tbl.add_column("category", style="bold")
            tbl.add_column("weight", justify="right")
            for s in slices:
                tbl.add_row(s.name, fmt_pct(s.pct, multiply=False))
            c.print(tbl)
