"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from helm_outdated.models.repo import OutdatedDependency

console = Console()
err_console = Console(stderr=True)

UP_TO_DATE_MESSAGE = "All charts up to date."


def _result_to_dict(r: OutdatedDependency) -> dict[str, Any]:
    return {
        "name": str(r.name),
        "version": str(r.version),
        "latest_version": str(r.latest_version_str),
        "update_type": r.update_type.value,
        "repository": str(r.repository),
    }


def print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)


def output_results(
    results: list[OutdatedDependency],
    fmt: str,
    title: str = "The following dependencies are outdated",
    max_width: int = 60,
) -> None:
    if fmt == "json":
        data = [_result_to_dict(r) for r in results]
        console.print_json(json.dumps(data, indent=2))
    elif fmt == "yaml":
        data = [_result_to_dict(r) for r in results]
        console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), end="", markup=False, highlight=False)
    elif not results:
        console.print(f"[green]{UP_TO_DATE_MESSAGE}[/green]")
    else:
        from helm_outdated.output.tables import outdated_table
        console.print(outdated_table(results, title=title, max_width=max_width))
