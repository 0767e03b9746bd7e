"""Command registrations for the Typer CLI.

`clubfolio/cli.py` stays the entrypoint module (the console script points at
`clubfolio.cli:app`); commands live in this package and are registered from it.
"""
