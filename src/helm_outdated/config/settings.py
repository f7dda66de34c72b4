"""Application configuration and defaults."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path


def _default_helm_cache_dir() -> Path:
    """Return the Helm repository cache directory for the current platform.

    Checks HELM_REPOSITORY_CACHE, HELM_HOME (helm 2) and HELM_CACHE_HOME
    env vars first, matching helm's own resolution order.
    """
    repo_cache = os.environ.get("HELM_REPOSITORY_CACHE", "")
    if repo_cache:
        return Path(repo_cache)
    helm_home = os.environ.get("HELM_HOME", "")
    if helm_home:
        return Path(helm_home) / "repository" / "cache"
    cache_home = os.environ.get("HELM_CACHE_HOME", "")
    if cache_home:
        return Path(cache_home) / "repository"
    system = platform.system()
    if system == "Windows":
        # Helm on Windows uses %TEMP%\helm as default cache home
        temp = os.environ.get("TEMP", "")
        if temp:
            candidate = Path(temp) / "helm" / "repository"
            if candidate.exists():
                return candidate
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "helm" / "repository"
        return Path.home() / "AppData" / "Roaming" / "helm" / "repository"
    # Linux / macOS
    xdg = os.environ.get("XDG_CACHE_HOME", "")
    if xdg:
        return Path(xdg) / "helm" / "repository"
    return Path.home() / ".cache" / "helm" / "repository"


def _default_request_timeout() -> float | None:
    raw = os.environ.get("HELM_OUTDATED_TIMEOUT", "")
    if not raw:
        return None
    try:
        timeout = float(raw)
    except ValueError:
        return None
    return timeout if timeout > 0 else None


@dataclass
class Settings:
    helm_cache_dir: Path = field(default_factory=_default_helm_cache_dir)
    request_timeout: float | None = field(default_factory=_default_request_timeout)

    @property
    def index_cache_dir(self) -> Path:
        return self.helm_cache_dir

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings once at process start from the environment."""
        return cls()
