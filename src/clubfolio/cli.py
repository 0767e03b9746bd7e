from __future__ import annotations

import logging

import typer

app = typer.Typer(add_completion=False, help="Investment club ledger, NAV and analytics CLI")
members_app = typer.Typer(add_completion=False, help="Member roster and personal reports")
app.add_typer(members_app, name="members")
tx_app = typer.Typer(add_completion=False, help="Append to and browse the transaction ledger")
app.add_typer(tx_app, name="tx")
advise_app = typer.Typer(add_completion=False, help="Advisory commentary (OpenAI-compatible endpoint)")
app.add_typer(advise_app, name="advise")

_COMMANDS_REGISTERED = False


@app.callback()
def _main(verbose: bool = typer.Option(False, "--verbose", help="Show diagnostic log messages.")):
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _register_commands() -> None:
    global _COMMANDS_REGISTERED
    if _COMMANDS_REGISTERED:
        return
    # Import here to keep `clubfolio.cli` lightweight at import time.
    from clubfolio.cli_commands.club_cmd import register as register_club
    from clubfolio.cli_commands.members_cmd import register as register_members
    from clubfolio.cli_commands.tx_cmd import register as register_tx
    from clubfolio.cli_commands.analytics_cmd import register as register_analytics
    from clubfolio.cli_commands.export_cmd import register as register_export
    from clubfolio.cli_commands.advise_cmd import register as register_advise

    register_club(app)
    register_members(members_app)
    register_tx(tx_app)
    register_analytics(app)
    register_export(app)
    register_advise(advise_app)
    _COMMANDS_REGISTERED = True


def main():
    _register_commands()
    app()

# Register commands when imported as a console-script entrypoint (`pyproject.toml` uses `clubfolio.cli:app`).
_register_commands()


if __name__ == "__main__":
    main()
