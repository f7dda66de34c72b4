"""Repository refresh and outdated-dependency models."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from packaging.version import Version

from helm_outdated.models import UpdateType
from helm_outdated.models.chart import ChartDependency
from helm_outdated.utils.version_compare import classify_update


@dataclass
class RefreshOutcome:
    repository: str
    repo_name: str
    index_path: Path
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error


@dataclass
class OutdatedDependency:
    dependency: ChartDependency
    latest_version: Version
    latest_version_str: str

    @property
    def name(self) -> str:
        return self.dependency.name

    @property
    def version(self) -> str:
        return self.dependency.version

    @property
    def repository(self) -> str:
        return self.dependency.repository

    @property
    def update_type(self) -> UpdateType:
        return UpdateType.from_str(classify_update(self.version, self.latest_version_str))
