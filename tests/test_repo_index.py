import threading

import pytest
import requests
from packaging.version import Version

from conftest import R1, R2, FakeResponse, FakeSession, index_yaml
from helm_outdated.core.errors import IndexLookupError, RepositoryError
from helm_outdated.core.repo_index import IndexCache, RepositoryClient, normalize_repo_name


@pytest.mark.parametrize("url,expected", [
    ("https://repo.evil.corp", "repo-evil-corp"),
    ("https://repo.evil.corp/", "repo-evil-corp"),
    ("http://charts.example.com/stable/", "charts-example-com-stable"),
    ("https://kubernetes-charts.storage.googleapis.com", "kubernetes-charts-storage-googleapis-com"),
])
def test_normalize_repo_name(url, expected):
    assert normalize_repo_name(url) == expected


def test_normalize_repo_name_collisions_share_an_entry():
    assert normalize_repo_name("https://a.b/c") == normalize_repo_name("http://a/b.c/")


def test_client_rejects_unsupported_scheme():
    with pytest.raises(RepositoryError):
        RepositoryClient("oci://registry.example/charts", FakeSession({}))


def test_client_rejects_non_index_body(tmp_path):
    session = FakeSession({R1 + "/index.yaml": b"just a string"})
    client = RepositoryClient(R1, session)
    with pytest.raises(RepositoryError):
        client.download_index(tmp_path / "index.yaml")
    assert not (tmp_path / "index.yaml").exists()


def test_refresh_all_writes_cache_files(index_cache, routes, settings):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0"]})
    routes[R2 + "/index.yaml"] = index_yaml({"B": ["1.0.0"]})

    outcomes = index_cache.refresh_all([R2, R1, R2])

    assert [o.repository for o in outcomes] == [R2, R1]
    assert all(o.ok for o in outcomes)
    assert (settings.index_cache_dir / "charts-r1-example-stable-index.yaml").is_file()
    assert (settings.index_cache_dir / "charts-r2-example-index.yaml").is_file()


def test_refresh_all_tolerates_individual_failures(index_cache, routes):
    routes[R2 + "/index.yaml"] = index_yaml({"B": ["1.0.0"]})

    outcomes = {o.repository: o for o in index_cache.refresh_all([R1, R2])}

    assert not outcomes[R1].ok
    assert "connection refused" in outcomes[R1].error
    assert outcomes[R2].ok


def test_refresh_all_reports_http_errors(index_cache, routes):
    routes[R1 + "/index.yaml"] = FakeResponse(404, b"not found")
    [outcome] = index_cache.refresh_all([R1])
    assert not outcome.ok
    assert "404" in outcome.error


def test_failed_refresh_keeps_previous_cache_file(index_cache, routes, settings):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0"]})
    index_cache.refresh_all([R1])
    path = index_cache.index_path(R1)
    before = path.read_bytes()

    routes[R1 + "/index.yaml"] = requests.Timeout("timed out")
    [outcome] = index_cache.refresh_all([R1])

    assert not outcome.ok
    assert path.read_bytes() == before


def test_refresh_all_runs_repositories_concurrently(settings):
    repos = [f"https://charts{i}.example" for i in range(4)]
    barrier = threading.Barrier(len(repos), timeout=5)

    class BarrierSession(FakeSession):
        def get(self, url, timeout=None):
            # Every worker must be in flight at once to pass the barrier.
            barrier.wait()
            return super().get(url, timeout)

    routes = {r + "/index.yaml": index_yaml({"x": ["1.0.0"]}) for r in repos}
    cache = IndexCache(settings, session_factory=lambda: BarrierSession(routes))

    outcomes = cache.refresh_all(repos)

    assert [o.repository for o in outcomes] == repos
    assert all(o.ok for o in outcomes)


def test_refresh_all_with_no_repositories(index_cache):
    assert index_cache.refresh_all([]) == []


def test_latest_version_ignores_prereleases_and_garbage(index_cache, routes):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0", "v0.2.0", "0.3.0-beta.1", "not-a-version"]})
    index_cache.refresh_all([R1])

    version, raw = index_cache.latest_version("A", R1)

    assert version == Version("0.2.0")
    assert raw == "v0.2.0"


def test_latest_version_missing_chart(index_cache, routes):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0"]})
    index_cache.refresh_all([R1])
    with pytest.raises(IndexLookupError):
        index_cache.latest_version("B", R1)


def test_latest_version_only_prereleases(index_cache, routes):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["1.0.0-rc.1"]})
    index_cache.refresh_all([R1])
    with pytest.raises(IndexLookupError):
        index_cache.latest_version("A", R1)


def test_latest_version_without_cache_file(index_cache):
    with pytest.raises(IndexLookupError):
        index_cache.latest_version("A", R1)


def test_sidecar_is_written_and_refreshed(index_cache, routes, settings):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0"]})
    index_cache.refresh_all([R1])
    index_cache.latest_version("A", R1)
    sidecar = index_cache.index_path(R1).with_suffix(".json")
    assert sidecar.is_file()

    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0", "0.5.0"]})
    index_cache.refresh_all([R1])

    assert index_cache.latest_version("A", R1)[0] == Version("0.5.0")


def test_refresh_all_shares_a_worker_between_urls_with_one_cache_file(settings, routes):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["0.1.0"]})
    session = FakeSession(routes)
    cache = IndexCache(settings, session_factory=lambda: session)

    outcomes = cache.refresh_all([R1, R1 + "/"])

    assert [o.repository for o in outcomes] == [R1]
    assert session.requested == [R1 + "/index.yaml"]


def test_latest_version_uses_semver_precedence(index_cache, routes):
    routes[R1 + "/index.yaml"] = index_yaml({"A": ["1.0.0", "1.0.1-1", "1.0.0+build.5"]})
    index_cache.refresh_all([R1])

    assert index_cache.latest_version("A", R1) == (Version("1.0.0"), "1.0.0")


def test_latest_version_keeps_unquoted_version_text(index_cache, routes):
    routes[R1 + "/index.yaml"] = (
        b"apiVersion: v1\n"
        b"entries:\n"
        b"  A:\n"
        b"  - name: A\n"
        b"    version: 1.9\n"
        b"  - name: A\n"
        b"    version: 1.10\n"
    )
    index_cache.refresh_all([R1])

    assert index_cache.latest_version("A", R1) == (Version("1.10"), "1.10")
