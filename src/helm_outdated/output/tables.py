"""Rich table builders."""

from __future__ import annotations

from rich.table import Table

from helm_outdated.models.repo import OutdatedDependency
from helm_outdated.output.themes import styled_update


def outdated_table(results: list[OutdatedDependency], title: str, max_width: int = 60) -> Table:
    max_width = max_width if max_width > 0 else None
    table = Table(title=title, expand=False, show_lines=False)
    table.add_column("Name", style="magenta", no_wrap=True, max_width=max_width)
    table.add_column("Version", style="dim", max_width=max_width)
    table.add_column("Latest Version", style="bold", max_width=max_width)
    table.add_column("Update", no_wrap=True)
    table.add_column("Repository", style="cyan", max_width=max_width)

    for r in results:
        table.add_row(
            r.name,
            r.version,
            r.latest_version_str,
            styled_update(r.update_type),
            r.repository,
        )
    return table
