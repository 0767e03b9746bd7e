from __future__ import annotations

from typing import Any, Callable

import typer
from rich.console import Console
from rich.panel import Panel

from clubfolio.cli_commands.common import DATA_HELP, VIEW_HELP, open_store, parse_view, view_label


def _run(title: str, fn: Callable[..., Any], *args: Any) -> None:
    """Run one advisory call through a slot and render whichever state it lands in."""
    from clubfolio.llm.advisory import AdvisorySlot

    c = Console()
    slot = AdvisorySlot(title)
    fut = slot.submit(fn, *args)
    with c.status("[cyan]Requesting analysis...[/cyan]"):
        fut.exception()  # wait; the slot records its own state
    snap = slot.snapshot()
    if snap["status"] == AdvisorySlot.SUCCESS:
        c.print(Panel(str(snap["result"]), title=f"[bold magenta]{title}[/bold magenta]", expand=False))
        return
    c.print(Panel(f"[red]{snap['error']}[/red]", title=title, expand=False))
    raise typer.Exit(code=1)


def register(advise_app: typer.Typer) -> None:
    @advise_app.command("market")
    def advise_market(ticker: str = typer.Argument(..., help="Ticker, e.g. AAPL")):
        """Balanced news / bull / bear summary for one ticker."""
        from clubfolio.llm.advisory import market_analysis_prompt, request_text

        _run(f"Market analysis: {ticker.upper()}", request_text, market_analysis_prompt(ticker.upper()))

    @advise_app.command("risk")
    def advise_risk(
        view: str = typer.Option("combined", "--view", "-v", help=VIEW_HELP),
        data_path: str = typer.Option("", "--data", help=DATA_HELP),
    ):
        """Qualitative risk commentary on the current holdings."""
        from clubfolio.llm.advisory import portfolio_risk_prompt, request_text

        v = parse_view(view)
        holdings, _cash, _total = open_store(data_path).data.view(v)
        if not holdings:
            Console().print(Panel("No open positions to analyze.", title="Portfolio risk", expand=False))
            raise typer.Exit(code=0)
        _run(f"Portfolio risk ({view_label(v)})", request_text, portfolio_risk_prompt(holdings))

    @advise_app.command("yield-curve")
    def advise_yield_curve():
        """Shape of the US Treasury curve and what it implies."""
        from clubfolio.llm.advisory import YIELD_CURVE_PROMPT, request_text

        _run("Yield curve", request_text, YIELD_CURVE_PROMPT)

    @advise_app.command("model")
    def advise_model(
        ticker: str = typer.Argument("AAPL", help="Stock, bond issuer or ETF ticker"),
        model: str = typer.Option("dcf", "--model", help="dcf | graham | safety_margin | bond | etf"),
        growth: float = typer.Option(10.0, "--growth", help="Growth rate (%) for dcf / graham / safety_margin"),
        discount: float = typer.Option(8.0, "--discount", help="Discount rate (%) for dcf"),
        eps: float = typer.Option(6.0, "--eps", help="Current EPS ($) for graham / safety_margin"),
        price: float = typer.Option(175.0, "--price", help="Current market price ($) for safety_margin"),
        face_value: float = typer.Option(1000.0, "--face-value", help="Bond face value ($)"),
        coupon: float = typer.Option(5.0, "--coupon", help="Bond coupon rate (%)"),
        maturity: float = typer.Option(10.0, "--maturity", help="Bond years to maturity"),
        market_rate: float = typer.Option(6.0, "--market-rate", help="Market interest rate (%) for bond"),
        question: str = typer.Option("", "--question", "-q", help="Free-form model question (ignores the inputs above)"),
    ):
        """Valuation-model walkthrough (DCF, Graham, margin of safety, bond, ETF)."""
        from clubfolio.llm.advisory import StockModel, request_text, stock_model_prompt

        if question.strip():
            _run("Stock model", request_text, question.strip())
            return
        if not ticker.strip():
            raise typer.BadParameter("Please enter a stock, bond issuer, or ETF ticker.")
        try:
            m = StockModel(model.strip().lower())
        except ValueError as e:
            raise typer.BadParameter(f"Unknown model '{model}'. Use one of: {', '.join(s.value for s in StockModel)}") from e
        prompt = stock_model_prompt(
            m,
            ticker.strip().upper(),
            growth_rate=growth,
            discount_rate=discount,
            eps=eps,
            current_price=price,
            face_value=face_value,
            coupon_rate=coupon,
            maturity_years=maturity,
            market_rate=market_rate,
        )
        _run(f"Stock model: {m.value} ({ticker.strip().upper()})", request_text, prompt)

    @advise_app.command("reit")
    def advise_reit(
        ticker: str = typer.Argument("O", help="REIT ticker"),
        ffo: float = typer.Option(3.80, "--ffo", help="Sample FFO per share ($) for Price/FFO"),
    ):
        """REIT metrics and Price/FFO valuation discussion."""
        from clubfolio.llm.advisory import reit_prompt, request_text

        _run(f"REIT analysis: {ticker.upper()}", request_text, reit_prompt(ticker.upper(), ffo))
