"""Load chart metadata, requirements and lock files from a chart directory."""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from helm_outdated.core.errors import ChartLoadError, NoRequirementsError
from helm_outdated.models.chart import ChartMetadata, Requirements, RequirementsLock
from helm_outdated.utils.yaml_io import load_yaml_file

logger = logging.getLogger(__name__)

CHART_METADATA_NAME = "Chart.yaml"
CHART_LOCK_NAME = "Chart.lock"
REQUIREMENTS_NAME = "requirements.yaml"
REQUIREMENTS_LOCK_NAME = "requirements.lock"


def _read_mapping(path: Path) -> dict:
    try:
        data = load_yaml_file(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ChartLoadError(f"cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ChartLoadError(f"cannot parse {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ChartLoadError(f"{path} is not a YAML mapping")
    return data


def load_metadata(chart_path: Path | str) -> ChartMetadata:
    chart_dir = Path(chart_path)
    if not chart_dir.is_dir():
        raise ChartLoadError(f"chart directory {chart_dir} does not exist")
    metadata_file = chart_dir / CHART_METADATA_NAME
    if not metadata_file.is_file():
        raise ChartLoadError(f"{chart_dir} is not a chart: {CHART_METADATA_NAME} not found")
    return ChartMetadata.from_dict(_read_mapping(metadata_file))


def load_requirements(chart_path: Path | str, metadata: ChartMetadata | None = None) -> Requirements:
    """Load the editable dependency list of a chart.

    apiVersion v2 charts keep their dependencies in Chart.yaml and lock them
    in Chart.lock; older charts use requirements.yaml / requirements.lock.
    Raises NoRequirementsError if the chart declares none.
    """
    chart_dir = Path(chart_path)
    if metadata is None:
        metadata = load_metadata(chart_dir)

    if metadata.is_v2:
        source = chart_dir / CHART_METADATA_NAME
        if "dependencies" not in metadata.raw:
            raise NoRequirementsError(f"chart {chart_dir} has no requirements")
        data = metadata.raw
        lock_path = chart_dir / CHART_LOCK_NAME
    else:
        source = chart_dir / REQUIREMENTS_NAME
        if not source.is_file():
            raise NoRequirementsError(f"chart {chart_dir} has no requirements")
        data = _read_mapping(source)
        lock_path = chart_dir / REQUIREMENTS_LOCK_NAME

    deps = data.get("dependencies")
    if deps is not None and not isinstance(deps, list):
        raise ChartLoadError(f"{source}: 'dependencies' must be a list")

    requirements = Requirements.from_dict(data, source=source, lock_path=lock_path)
    logger.debug("Loaded %d dependencies from %s", len(requirements.dependencies), source)
    return requirements


def load_lock(path: Path) -> RequirementsLock | None:
    """Load an existing lock file, or None if there is none or it is unreadable."""
    if not path.is_file():
        return None
    try:
        return RequirementsLock.from_dict(_read_mapping(path))
    except ChartLoadError:
        logger.debug("Ignoring unreadable lock file %s", path, exc_info=True)
        return None
