import logging

import typer

from cmpgen.common import L, bus, catalog
from .rendering import CliRenderer

from .commands.check import check_command
from .commands.generate import generate_command

app = typer.Typer(
    name="cmpgen",
    help=catalog.get(L.cli.app.description),
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help=catalog.get(L.cli.option.verbose.help)
    ),
):
    # The CLI is the composition root. It decides *which* renderer to use.
    bus.set_renderer(CliRenderer(verbose=verbose))
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s"
        )


app.command(name="generate", help=catalog.get(L.cli.command.generate.help))(
    generate_command
)
app.command(name="check", help=catalog.get(L.cli.command.check.help))(check_command)


if __name__ == "__main__":
    app()
