from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from clubfolio.cli_commands.common import DATA_HELP, VIEW_HELP, open_store, parse_view, view_label

DATASETS = ("holdings", "transactions", "annual-returns", "track-record")


def register(app: typer.Typer) -> None:
    @app.command("export")
    def export(
        dataset: str = typer.Argument(..., help="holdings, transactions, annual-returns, track-record or all"),
        out_dir: str = typer.Option("exports", "--out", "-o", help="Directory for the CSV files."),
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP + " (holdings only)"),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Write derived datasets as CSV."""
        from clubfolio import export as ex

        wanted = DATASETS if dataset == "all" else (dataset,)
        unknown = [d for d in wanted if d not in DATASETS]
        if unknown:
            raise typer.BadParameter(f"Unknown dataset '{unknown[0]}'. Use one of: {', '.join(DATASETS)}, all")

        v = parse_view(view)
        data = open_store(data_path).data
        out = Path(out_dir)
        written: list[str] = []
        for d in wanted:
            if d == "holdings":
                holdings, _cash, _total = data.view(v)
                path = out / f"portfolio-{view_label(v).lower()}.csv"
                ex.holdings_csv(holdings, path=str(path))
            elif d == "transactions":
                path = out / "transactions.csv"
                ex.transactions_csv(data.transactions, data.members, path=str(path))
            elif d == "annual-returns":
                path = out / "annual_returns.csv"
                ex.annual_returns_csv(data.performance_history, path=str(path))
            else:
                path = out / "track_record.csv"
                ex.track_record_csv(data.performance_history, path=str(path))
            written.append(str(path))

        Console().print(Panel("\n".join(written), title="CSV export", expand=False))
