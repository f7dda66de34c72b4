"""helm-outdated list - List outdated chart dependencies."""

from __future__ import annotations

from typing import Optional

import typer

from helm_outdated.cli.options import (
    ChartPathArgument,
    MaxColumnWidthOption,
    OutputOption,
    RepositoriesOption,
    resolve_chart_path,
    split_repositories,
)
from helm_outdated.config.settings import Settings
from helm_outdated.core.errors import HelmOutdatedError
from helm_outdated.core.resolver import list_outdated_dependencies
from helm_outdated.output.formatters import console, output_results, print_error


def list_dependencies(
    chart_path: str = ChartPathArgument,
    repositories: Optional[list[str]] = RepositoriesOption,
    max_column_width: int = MaxColumnWidthOption,
    fail_on_outdated: bool = typer.Option(
        False, "--fail-on-outdated-dependencies", help="Fail if any dependency is outdated (exit code 1)",
    ),
    output: str = OutputOption,
) -> None:
    """List the dependencies of a chart that have a newer version available."""
    settings = Settings.from_env()
    path = resolve_chart_path(chart_path)

    try:
        with console.status("[bold cyan]Checking dependencies…"):
            results = list_outdated_dependencies(path, settings, split_repositories(repositories))
    except (HelmOutdatedError, OSError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    output_results(results, output, max_width=max_column_width)

    if fail_on_outdated and results:
        print_error("dependencies are outdated")
        raise typer.Exit(code=1)
