from pathlib import Path
from typing import Optional

import typer

from cmpgen.common import L, catalog
from cmpgen.cli.factories import make_app


def check_command(
    directory: Path = typer.Argument(
        ...,
        file_okay=False,
        dir_okay=True,
        help=catalog.get(L.cli.argument.directory.help),
    ),
    target_module: Optional[str] = typer.Option(
        None,
        "--target-module",
        help=catalog.get(L.cli.option.target_module.help),
    ),
    target_function: Optional[str] = typer.Option(
        None,
        "--target-function",
        help=catalog.get(L.cli.option.target_function.help),
    ),
):
    app_instance = make_app(
        directory, target_module=target_module, target_function=target_function
    )
    if app_instance is None:
        raise typer.Exit(code=1)

    if not app_instance.run_check(directory):
        raise typer.Exit(code=1)
