"""Compare declared chart dependency versions against their repositories."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from helm_outdated.config.settings import Settings
from helm_outdated.core.chart_loader import load_requirements
from helm_outdated.core.errors import IndexLookupError, NoRequirementsError, VersionParseError
from helm_outdated.core.repo_index import IndexCache, normalize_repo_name
from helm_outdated.models.chart import ChartDependency
from helm_outdated.models.repo import OutdatedDependency, RefreshOutcome
from helm_outdated.utils.version_compare import parse_version

logger = logging.getLogger(__name__)


def list_outdated_dependencies(
    chart_path: Path | str,
    settings: Settings,
    repository_filter: Iterable[str] | None = None,
    index_cache: IndexCache | None = None,
) -> list[OutdatedDependency]:
    """Return the dependencies of a chart that have a newer version available.

    Local (file://) dependencies are never considered. Problems with a
    single dependency or repository are logged and skipped; only a chart
    that cannot be loaded raises.
    """
    try:
        requirements = load_requirements(chart_path)
    except NoRequirementsError:
        logger.info("Chart %s has no requirements.", chart_path)
        return []

    deps = drop_local_dependencies(requirements.dependencies)
    deps = filter_dependencies_by_repository(deps, repository_filter)
    if not deps:
        return []

    if index_cache is None:
        index_cache = IndexCache(settings)

    outcomes = index_cache.refresh_all(d.repository for d in deps)
    _log_refresh_outcomes(outcomes)
    failed = {o.repo_name for o in outcomes if not o.ok}

    results: list[OutdatedDependency] = []
    for dep in deps:
        if normalize_repo_name(dep.repository) in failed:
            logger.warning("Skipping %s: repository %s could not be updated", dep.name, dep.repository)
            continue

        try:
            current = parse_version(dep.version)
        except VersionParseError as exc:
            logger.warning("Skipping %s: %s", dep.name, exc)
            continue

        try:
            latest, latest_raw = index_cache.latest_version(dep.name, dep.repository)
        except (IndexLookupError, VersionParseError) as exc:
            logger.warning("Error getting latest version of %s: %s", dep.name, exc)
            continue

        logger.debug("%s: declared %s, latest %s", dep.name, current, latest)
        if current < latest:
            results.append(OutdatedDependency(
                dependency=dep,
                latest_version=latest,
                latest_version_str=latest_raw,
            ))

    results.sort(key=lambda r: r.name)
    return results


def drop_local_dependencies(deps: list[ChartDependency]) -> list[ChartDependency]:
    """Drop file:// dependencies; there is only ever one version of those."""
    return [d for d in deps if not d.is_local]


def repository_matches(repository: str, filters: Iterable[str]) -> bool:
    """True if repository and a filter entry contain one another."""
    return any(f in repository or repository in f for f in filters)


def filter_dependencies_by_repository(
    deps: list[ChartDependency],
    repository_filter: Iterable[str] | None,
) -> list[ChartDependency]:
    filters = [f.strip() for f in repository_filter or [] if f and f.strip()]
    if not filters:
        return list(deps)
    return [d for d in deps if repository_matches(d.repository, filters)]


def _log_refresh_outcomes(outcomes: list[RefreshOutcome]) -> None:
    for outcome in outcomes:
        if outcome.ok:
            logger.info("Successfully got an update from the %r chart repository", outcome.repository)
        else:
            logger.warning(
                "Unable to get an update from the %r chart repository (%s): %s",
                outcome.repo_name,
                outcome.repository,
                outcome.error,
            )
