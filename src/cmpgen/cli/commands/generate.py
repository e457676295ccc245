from pathlib import Path
from typing import Optional

import typer

from cmpgen.common import L, catalog
from cmpgen.cli.factories import make_app


def generate_command(
    directory: Path = typer.Argument(
        ...,
        file_okay=False,
        dir_okay=True,
        help=catalog.get(L.cli.argument.directory.help),
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help=catalog.get(L.cli.option.dry_run.help),
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
    suffix: Optional[str] = typer.Option(
        None,
        "--suffix",
        help=catalog.get(L.cli.option.suffix.help),
    ),
    prune: Optional[bool] = typer.Option(
        None,
        "--prune/--no-prune",
        help=catalog.get(L.cli.option.prune.help),
    ),
):
    app_instance = make_app(
        directory,
        target_module=target_module,
        target_function=target_function,
        suffix=suffix,
        prune_imports=prune,
    )
    if app_instance is None:
        raise typer.Exit(code=1)

    success = app_instance.run_generate(directory, dry_run=dry_run)
    if not success:
        raise typer.Exit(code=1)
