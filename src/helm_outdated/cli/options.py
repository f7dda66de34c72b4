"""Shared CLI options."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

import typer

ChartPathArgument = typer.Argument(".", help="Path to the chart directory (default: current directory)")
OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
RepositoriesOption = typer.Option(
    None,
    "--repositories",
    "-r",
    help="Limit search to the given repositories (comma-separated, repeatable)",
)
MaxColumnWidthOption = typer.Option(60, "--max-column-width", "-w", help="Max column width to use for tables")


def split_repositories(values: Iterable[str] | None) -> list[str]:
    """Flatten ``-r a,b -r c`` into ``["a", "b", "c"]``."""
    repos: list[str] = []
    for value in values or []:
        repos.extend(part.strip() for part in value.split(",") if part.strip())
    return repos


def resolve_chart_path(chart_path: str) -> Path:
    return Path(chart_path).expanduser().resolve()
