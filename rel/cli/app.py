from __future__ import annotations

import typer

from rel import __version__
from rel.cli.commands.config_cmd import config
from rel.cli.commands.published import published
from rel.output.logs import configure_logging


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(config)
app.command()(published)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution and index traffic."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    configure_logging(verbose)


def main() -> None:
    app()
