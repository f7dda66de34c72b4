"""Write updated dependency versions, lock files and chart versions to disk."""

from __future__ import annotations

import hashlib
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from helm_outdated.core.chart_loader import CHART_LOCK_NAME, CHART_METADATA_NAME, load_lock, load_metadata, load_requirements
from helm_outdated.core.errors import MissingVersionError
from helm_outdated.models import IncrementType
from helm_outdated.models.chart import ChartDependency, LockedDependency, Requirements, RequirementsLock
from helm_outdated.models.repo import OutdatedDependency
from helm_outdated.utils.version_compare import format_version, increment, parse_version
from helm_outdated.utils.yaml_io import dump_yaml, write_atomic

logger = logging.getLogger(__name__)

DEFAULT_INDENT = 4
METADATA_INDENT = 2


def update_dependencies(
    chart_path: Path | str,
    results: list[OutdatedDependency],
    indent: int = DEFAULT_INDENT,
) -> Requirements:
    """Pin each outdated dependency of a chart to its latest version.

    Requirements are re-read from disk rather than taken from the resolver,
    so a chart edited in between is not clobbered with stale data.
    """
    requirements = load_requirements(chart_path)

    for result in results:
        for dep in requirements.dependencies:
            if dep.name == result.name and dep.repository == result.repository:
                logger.debug("Updating %s from %s to %s", dep.name, dep.version, result.latest_version_str)
                dep.version = result.latest_version_str

    requirements.sort_dependencies()
    write_requirements(requirements, indent)
    write_requirements_lock(chart_path, indent)
    return requirements


def write_requirements(requirements: Requirements, indent: int = DEFAULT_INDENT) -> None:
    write_atomic(requirements.source, dump_yaml(requirements.to_dict(), indent=indent))
    logger.info("Wrote %s", requirements.source)


# Characters Go's encoding/json escapes in strings.
_GO_JSON_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


def _go_json(value: Any) -> str:
    """Compact JSON as Go's json.Marshal writes it."""
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _GO_JSON_ESCAPES:
        text = text.replace(char, escaped)
    return text


def _sorted_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _sorted_keys(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, list):
        return [_sorted_keys(v) for v in value]
    return value


def _dependency_json(dep: ChartDependency) -> dict[str, Any]:
    """A dependency in helm's field order, empty optional fields omitted."""
    data: dict[str, Any] = {"name": str(dep.name)}
    if dep.version:
        data["version"] = str(dep.version)
    data["repository"] = str(dep.repository)
    if dep.condition:
        data["condition"] = str(dep.condition)
    tags = dep.raw.get("tags")
    if isinstance(tags, list) and tags:
        data["tags"] = [str(t) for t in tags]
    if dep.raw.get("enabled") is True:
        data["enabled"] = True
    import_values = dep.raw.get("import-values")
    if isinstance(import_values, list) and import_values:
        data["import-values"] = _sorted_keys(import_values)
    if dep.alias:
        data["alias"] = str(dep.alias)
    return data


def _locked_json(dep: LockedDependency) -> dict[str, str]:
    data = {"name": str(dep.name)}
    if dep.version:
        data["version"] = str(dep.version)
    data["repository"] = str(dep.repository)
    return data


def _locked_dependencies(requirements: Requirements) -> list[LockedDependency]:
    return [
        LockedDependency(name=d.name, version=d.version, repository=d.repository)
        for d in requirements.dependencies
    ]


def requirements_digest(requirements: Requirements, locked: list[LockedDependency] | None = None) -> str:
    """Digest of a dependency list, the way ``helm dependency build`` checks it.

    Chart.lock (helm 3) hashes ``[dependencies, locked dependencies]``;
    requirements.lock (helm 2) hashes ``{"dependencies": dependencies}``.
    """
    deps = [_dependency_json(d) for d in requirements.dependencies]
    if requirements.lock_path.name == CHART_LOCK_NAME:
        if locked is None:
            locked = _locked_dependencies(requirements)
        payload: Any = [deps, [_locked_json(d) for d in locked]]
    else:
        payload = {"dependencies": deps}
    return "sha256:" + hashlib.sha256(_go_json(payload).encode("utf-8")).hexdigest()


def build_lock(requirements: Requirements, previous: RequirementsLock | None = None) -> RequirementsLock:
    """Derive the lock for a requirements document.

    The ``generated`` timestamp of ``previous`` is kept when nothing it
    records has changed.
    """
    locked = _locked_dependencies(requirements)
    lock = RequirementsLock(dependencies=locked, digest=requirements_digest(requirements, locked))
    if (
        previous is not None
        and previous.generated
        and previous.digest == lock.digest
        and previous.dependencies == lock.dependencies
    ):
        lock.generated = previous.generated
    else:
        lock.generated = datetime.now(timezone.utc).isoformat()
    return lock


def write_requirements_lock(chart_path: Path | str, indent: int = DEFAULT_INDENT) -> RequirementsLock:
    requirements = load_requirements(chart_path)
    lock = build_lock(requirements, load_lock(requirements.lock_path))
    write_atomic(requirements.lock_path, dump_yaml(lock.to_dict(), indent=indent))
    logger.info("Wrote %s", requirements.lock_path)
    return lock


def increment_chart_version(chart_path: Path | str, inc_type: IncrementType = IncrementType.PATCH) -> str:
    """Bump the version in Chart.yaml and return the new version."""
    chart_dir = Path(chart_path)
    metadata = load_metadata(chart_dir)
    if not metadata.version:
        raise MissingVersionError(f"chart {chart_dir} has no version")

    current = parse_version(metadata.version)
    new_version = format_version(increment(current, inc_type))
    logger.info("Incrementing chart version (%s): %s -> %s", inc_type.value, metadata.version, new_version)

    metadata.version = new_version
    write_atomic(chart_dir / CHART_METADATA_NAME, dump_yaml(metadata.to_dict(), indent=METADATA_INDENT))
    return new_version
