"""Root Typer application, mounts sub-commands."""

from __future__ import annotations

import typer

from helm_outdated.config.log import configure_logging

app = typer.Typer(
    name="helm-outdated",
    help="Helm plugin to manage outdated dependencies of a Helm chart.",
    no_args_is_help=True,
)


@app.callback()
def root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show warnings and errors"),
) -> None:
    """Check a chart's dependencies against their repositories and update them."""
    configure_logging(verbose=verbose, quiet=quiet)


def _register_commands() -> None:
    from helm_outdated.cli.commands.list_cmd import list_dependencies
    from helm_outdated.cli.commands.update_cmd import update_dependencies

    app.command(name="list", help="List outdated dependencies of a chart")(list_dependencies)
    app.command(name="update", help="Update outdated dependencies to their latest version")(update_dependencies)


_register_commands()


def main() -> None:
    app()
