"""Chart repository index download and lookup against the local Helm cache."""

from __future__ import annotations

import json
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable

import requests
import yaml
from packaging.version import Version

from helm_outdated.config.settings import Settings
from helm_outdated.core.errors import IndexLookupError, RepositoryError
from helm_outdated.models.repo import RefreshOutcome
from helm_outdated.utils.version_compare import try_parse_version
from helm_outdated.utils.yaml_io import load_yaml, write_atomic

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_SUPPORTED_SCHEMES = ("http", "https")


def normalize_repo_name(repo_url: str) -> str:
    """Derive the cache name of a repository from its URL.

    ``https://charts.example.com/stable/`` -> ``charts-example-com-stable``.
    Distinct URLs that collide here share one cache entry.
    """
    name = _SCHEME_RE.sub("", repo_url.strip())
    if name.endswith("/"):
        name = name[:-1]
    return name.replace("/", "-").replace(".", "-")


class RepositoryClient:
    """Downloads the index of one chart repository."""

    def __init__(self, url: str, session: requests.Session, timeout: float | None = None):
        scheme = url.split("://", 1)[0].lower() if "://" in url else ""
        if scheme not in _SUPPORTED_SCHEMES:
            raise RepositoryError(f"could not find protocol handler for: {url!r}")
        self.url = url
        self.name = normalize_repo_name(url)
        self.session = session
        self.timeout = timeout

    @property
    def index_url(self) -> str:
        return self.url.rstrip("/") + "/index.yaml"

    def download_index(self, dest: Path) -> None:
        """Fetch index.yaml and store it at ``dest``.

        The body is validated before the previous cache file is replaced.
        """
        logger.debug("Fetching %s", self.index_url)
        resp = self.session.get(self.index_url, timeout=self.timeout)
        if resp.status_code != 200:
            raise RepositoryError(f"{self.index_url} returned HTTP {resp.status_code}")
        data = load_yaml(resp.content)
        if not isinstance(data, dict) or "entries" not in data:
            raise RepositoryError(f"{self.index_url} is not a valid chart repository index")
        write_atomic(dest, resp.content)


class IndexCache:
    """Refreshes and reads the cached index files of chart repositories."""

    def __init__(self, settings: Settings, session_factory: SessionFactory | None = None):
        self.settings = settings
        self.session_factory = session_factory
        self._index_cache: dict[Path, dict | None] = {}

    def index_path(self, repo_url: str) -> Path:
        return self.settings.index_cache_dir / f"{normalize_repo_name(repo_url)}-index.yaml"

    def refresh_all(self, repositories: Iterable[str]) -> list[RefreshOutcome]:
        """Download the index of every repository concurrently.

        One worker per distinct cache file, so URLs that normalize to the
        same name (``https://x/charts`` and ``https://x/charts/``) share a
        worker. Returns once all have finished, with outcomes in first-seen
        repository order. Failures are reported in the outcome and never
        raised.
        """
        by_name: dict[str, str] = {}
        for repo in repositories:
            if repo:
                by_name.setdefault(normalize_repo_name(repo), repo)
        repos = list(by_name.values())
        if not repos:
            return []

        outcomes: list[RefreshOutcome | None] = [None] * len(repos)
        with ThreadPoolExecutor(max_workers=len(repos)) as executor:
            future_to_slot = {
                executor.submit(self._refresh_one, repo): slot
                for slot, repo in enumerate(repos)
            }
            for future in as_completed(future_to_slot):
                outcomes[future_to_slot[future]] = future.result()

        results = [o for o in outcomes if o is not None]
        for outcome in results:
            if outcome.ok:
                self._index_cache.pop(outcome.index_path, None)
        return results

    def _refresh_one(self, repo_url: str) -> RefreshOutcome:
        dest = self.index_path(repo_url)
        outcome = RefreshOutcome(repository=repo_url, repo_name=normalize_repo_name(repo_url), index_path=dest)
        factory = self.session_factory or requests.Session
        try:
            with factory() as session:
                client = RepositoryClient(repo_url, session, timeout=self.settings.request_timeout)
                client.download_index(dest)
            self._sidecar_path(dest).unlink(missing_ok=True)
        except (RepositoryError, requests.RequestException, OSError, yaml.YAMLError) as exc:
            outcome.error = str(exc) or exc.__class__.__name__
        return outcome

    def latest_version(self, chart_name: str, repo_url: str) -> tuple[Version, str]:
        """Return the highest stable version of a chart in a cached index.

        Returns (parsed version, version string as published).
        """
        index_path = self.index_path(repo_url)
        if not index_path.exists():
            raise IndexLookupError(f"no cached index for repository {repo_url}")
        data = self._load_index(index_path)
        if data is None:
            raise IndexLookupError(f"cached index for repository {repo_url} is unreadable")

        entries = data.get(chart_name)
        if not entries:
            raise IndexLookupError(f"chart {chart_name!r} not found in repository {repo_url}")

        best: tuple[Version, str] | None = None
        for entry in entries:
            raw = entry.get("version", "")
            parsed = try_parse_version(raw)
            if parsed is None:
                logger.debug("Ignoring invalid version %r of %s in %s", raw, chart_name, repo_url)
                continue
            if parsed.is_prerelease:
                continue
            if best is None or parsed > best[0]:
                best = (parsed, raw)

        if best is None:
            raise IndexLookupError(f"no stable version of {chart_name!r} in repository {repo_url}")
        return best

    # -----------------------------------------------------------------------
    # Lightweight JSON sidecar cache for index.yaml files
    #
    # Helm repo index files can be 25+ MB of YAML.  We extract only
    # {chart_name: [{version, appVersion}]} into a small JSON file that loads
    # in milliseconds.  The sidecar is regenerated whenever the source
    # index.yaml is newer.
    # -----------------------------------------------------------------------

    @staticmethod
    def _sidecar_path(index_path: Path) -> Path:
        return index_path.with_suffix(".json")

    @staticmethod
    def _sidecar_is_fresh(index_path: Path, sidecar: Path) -> bool:
        if not sidecar.exists():
            return False
        try:
            return sidecar.stat().st_mtime >= index_path.stat().st_mtime
        except OSError:
            return False

    def _build_sidecar(self, index_path: Path) -> dict | None:
        try:
            data = load_yaml(index_path.read_bytes())
            if not isinstance(data, dict) or not isinstance(data.get("entries"), dict):
                return None
        except (OSError, yaml.YAMLError):
            logger.debug("Failed to parse index at %s", index_path, exc_info=True)
            return None

        lightweight: dict[str, list[dict[str, str]]] = {}
        for chart_name, chart_entries in data["entries"].items():
            lightweight[str(chart_name)] = [
                {"version": str(e.get("version", "")), "appVersion": str(e.get("appVersion", "") or "")}
                for e in chart_entries or []
                if isinstance(e, dict) and "version" in e
            ]

        sidecar = self._sidecar_path(index_path)
        try:
            write_atomic(sidecar, json.dumps(lightweight))
        except OSError:
            logger.debug("Could not write sidecar cache %s", sidecar, exc_info=True)

        return lightweight

    def _load_index(self, index_path: Path) -> dict | None:
        """Load a repo index, using the JSON sidecar when it is fresh.

        Returns {chart_name: [{version, appVersion}, ...]} or None.
        """
        if index_path in self._index_cache:
            return self._index_cache[index_path]

        sidecar = self._sidecar_path(index_path)
        if self._sidecar_is_fresh(index_path, sidecar):
            try:
                lightweight = json.loads(sidecar.read_text(encoding="utf-8"))
                self._index_cache[index_path] = lightweight
                return lightweight
            except (OSError, ValueError):
                logger.debug("Corrupt sidecar %s, rebuilding", sidecar, exc_info=True)

        lightweight = self._build_sidecar(index_path)
        self._index_cache[index_path] = lightweight
        return lightweight
