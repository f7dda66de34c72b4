"""helm-outdated update - Pin outdated chart dependencies to their latest version."""

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
from helm_outdated.core.rewriter import increment_chart_version, update_dependencies as write_updates
from helm_outdated.models import IncrementType
from helm_outdated.output.formatters import console, output_results, print_error


def update_dependencies(
    chart_path: str = ChartPathArgument,
    repositories: Optional[list[str]] = RepositoriesOption,
    max_column_width: int = MaxColumnWidthOption,
    increment_version: bool = typer.Option(
        False, "--increment-chart-version", help="Increment the version of the chart if requirements are updated",
    ),
    increment_type: IncrementType = typer.Option(
        IncrementType.PATCH, "--increment-type", help="Which part of the chart version to increment",
    ),
    indent: int = typer.Option(4, "--indent", help="Indent to use when writing the requirements"),
    output: str = OutputOption,
) -> None:
    """Update all outdated dependencies to the latest version found in their repository."""
    settings = Settings.from_env()
    path = resolve_chart_path(chart_path)

    try:
        with console.status("[bold cyan]Checking dependencies…"):
            results = list_outdated_dependencies(path, settings, split_repositories(repositories))

        if not results:
            output_results(results, output)
            return

        output_results(
            results,
            output,
            title="Updating the following dependencies to their latest version",
            max_width=max_column_width,
        )

        if increment_version:
            new_version = increment_chart_version(path, increment_type)
            if output == "table":
                console.print(f"Chart version incremented to [bold]{new_version}[/bold]")

        write_updates(path, results, indent=indent)
    except (HelmOutdatedError, OSError) as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)
