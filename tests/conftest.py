"""Pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest
import requests
import yaml

from helm_outdated.config.settings import Settings
from helm_outdated.core.repo_index import IndexCache

R1 = "https://charts.r1.example/stable"
R2 = "https://charts.r2.example"


def index_yaml(entries: dict[str, list[str]]) -> bytes:
    """Render a minimal chart repository index.yaml."""
    data = {
        "apiVersion": "v1",
        "entries": {
            name: [{"name": name, "version": v, "appVersion": "1.0"} for v in versions]
            for name, versions in entries.items()
        },
    }
    return yaml.safe_dump(data).encode("utf-8")


class FakeResponse:
    def __init__(self, status_code: int = 200, content: bytes = b""):
        self.status_code = status_code
        self.content = content


class FakeSession:
    """Stands in for requests.Session; routes map index URLs to responses.

    A route value may be bytes (HTTP 200), a FakeResponse, or an exception
    instance to raise.
    """

    def __init__(self, routes: dict):
        self.routes = routes
        self.requested: list[str] = []

    def __enter__(self) -> FakeSession:
        return self

    def __exit__(self, *exc) -> None:
        return None

    def get(self, url: str, timeout=None):
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"connection refused: {url}")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(200, route)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(helm_cache_dir=tmp_path / "cache", request_timeout=None)


@pytest.fixture
def routes() -> dict:
    return {}


@pytest.fixture
def index_cache(settings: Settings, routes: dict) -> IndexCache:
    return IndexCache(settings, session_factory=lambda: FakeSession(routes))


@pytest.fixture
def make_chart(tmp_path: Path) -> Callable[..., Path]:
    """Write a chart directory and return its path."""

    def _make(
        dependencies: list[dict] | None = None,
        version: str = "1.2.3",
        api_version: str = "v1",
        name: str = "mychart",
        extra_requirements: dict | None = None,
    ) -> Path:
        chart_dir = tmp_path / name
        chart_dir.mkdir(parents=True, exist_ok=True)
        metadata = {"apiVersion": api_version, "name": name, "description": "A test chart"}
        if version:
            metadata["version"] = version
        if api_version == "v2":
            if dependencies is not None:
                metadata["dependencies"] = dependencies
        elif dependencies is not None:
            reqs = {"dependencies": dependencies}
            reqs.update(extra_requirements or {})
            (chart_dir / "requirements.yaml").write_text(yaml.safe_dump(reqs, sort_keys=False))
        (chart_dir / "Chart.yaml").write_text(yaml.safe_dump(metadata, sort_keys=False))
        return chart_dir

    return _make


@pytest.fixture
def ab_chart(make_chart, routes) -> Path:
    """A at 0.1.0 (latest 0.2.0) from R1, B at 1.0.0 (latest 1.0.0) from R2."""
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0", "0.2.0", "0.3.0-rc.1"]})
    routes[R2 + "/index.yaml"] = index_yaml({"B": ["0.9.0", "1.0.0"]})
    return make_chart([
        {"name": "B", "version": "1.0.0", "repository": R2},
        {"name": "A", "version": "0.1.0", "repository": R1},
    ])
