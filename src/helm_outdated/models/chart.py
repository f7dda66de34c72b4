"""Chart metadata, requirements and lock models.

Every model keeps the raw mapping it was parsed from so that writing it back
only changes the fields we touch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

LOCAL_REPOSITORY_PREFIX = "file://"


def _text(value: Any) -> str:
    """Scalar as text. str subclasses from the loader are kept as they are."""
    if isinstance(value, str):
        return value
    return "" if value is None or value is False else str(value)


@dataclass
class ChartDependency:
    name: str = ""
    version: str = ""
    repository: str = ""
    condition: str = ""
    alias: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_local(self) -> bool:
        return self.repository.startswith(LOCAL_REPOSITORY_PREFIX)

    @classmethod
    def from_dict(cls, d: dict) -> ChartDependency:
        return cls(
            name=_text(d.get("name")),
            version=_text(d.get("version")),
            repository=_text(d.get("repository")),
            condition=_text(d.get("condition")),
            alias=_text(d.get("alias")),
            raw=dict(d),
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        if self.name or "name" in data:
            data["name"] = self.name
        if self.version or "version" in data:
            data["version"] = self.version
        if self.repository or "repository" in data:
            data["repository"] = self.repository
        return data


@dataclass
class Requirements:
    """The editable dependency list of one chart.

    ``source`` is the file the list lives in (requirements.yaml, or
    Chart.yaml for apiVersion v2 charts) and ``lock_path`` the lock file
    derived from it. ``raw`` is the whole source document.
    """

    source: Path
    lock_path: Path
    dependencies: list[ChartDependency] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, d: dict, source: Path, lock_path: Path) -> Requirements:
        deps = d.get("dependencies") or []
        return cls(
            source=source,
            lock_path=lock_path,
            dependencies=[ChartDependency.from_dict(dep) for dep in deps if isinstance(dep, dict)],
            raw=dict(d),
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        data["dependencies"] = [dep.to_dict() for dep in self.dependencies]
        return data

    def sort_dependencies(self) -> None:
        self.dependencies.sort(key=lambda d: d.name)

    @property
    def triples(self) -> list[tuple[str, str, str]]:
        return [(d.name, d.version, d.repository) for d in self.dependencies]


@dataclass
class LockedDependency:
    name: str = ""
    version: str = ""
    repository: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> LockedDependency:
        return cls(
            name=_text(d.get("name")),
            version=_text(d.get("version")),
            repository=_text(d.get("repository")),
        )

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "repository": self.repository, "version": self.version}


@dataclass
class RequirementsLock:
    dependencies: list[LockedDependency] = field(default_factory=list)
    digest: str = ""
    generated: Any = ""

    @classmethod
    def from_dict(cls, d: dict) -> RequirementsLock:
        if not d:
            return cls()
        return cls(
            dependencies=[
                LockedDependency.from_dict(dep) for dep in d.get("dependencies") or [] if isinstance(dep, dict)
            ],
            digest=_text(d.get("digest")),
            generated=d.get("generated", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "digest": self.digest,
            "generated": self.generated,
        }


@dataclass
class ChartMetadata:
    name: str = ""
    version: str = ""
    app_version: str = ""
    description: str = ""
    api_version: str = ""
    chart_type: str = ""
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_v2(self) -> bool:
        return self.api_version == "v2"

    @classmethod
    def from_dict(cls, d: dict) -> ChartMetadata:
        if not d:
            return cls()
        return cls(
            name=_text(d.get("name")),
            version=_text(d.get("version")),
            app_version=_text(d.get("appVersion")),
            description=_text(d.get("description")),
            api_version=_text(d.get("apiVersion")),
            chart_type=_text(d.get("type")),
            raw=dict(d),
        )

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.raw)
        data["version"] = self.version
        return data
