"""Semver comparison utilities."""

from __future__ import annotations

from packaging.version import InvalidVersion, Version

from helm_outdated.core.errors import VersionParseError
from helm_outdated.models import IncrementType


def parse_version(v: str) -> Version:
    """Parse a semantic version, tolerating a leading 'v'.

    Build metadata (``+build.5``) is dropped, it carries no precedence.
    A ``-suffix`` always makes a pre-release: ``-rc.1``, ``-alpha`` and
    ``-beta.2`` map onto PEP 440 pre-releases, any other suffix sorts as a
    dev release of its core version (``1.0.1-1`` -> ``1.0.1.dev1``).

    Raises VersionParseError for anything that is not a plain version,
    including range constraints such as ``~1.2.0``.
    """
    raw = str(v or "").strip()
    core, _, _build = raw.partition("+")
    release, sep, pre = core.partition("-")
    try:
        base = Version(release)
    except InvalidVersion:
        raise VersionParseError(f"invalid semantic version: {v!r}") from None

    if not sep:
        return base
    if not pre or base.is_prerelease or base.is_postrelease:
        raise VersionParseError(f"invalid semantic version: {v!r}")

    try:
        mapped = Version(core)
    except InvalidVersion:
        mapped = None
    if mapped is not None and mapped.is_prerelease and not mapped.is_postrelease and mapped.release == base.release:
        return mapped
    dev = int(pre) if pre.isdigit() else 0
    return Version(f"{base.public}.dev{dev}")


def try_parse_version(v: str) -> Version | None:
    try:
        return parse_version(v)
    except VersionParseError:
        return None


def compare(a: Version, b: Version) -> int:
    """Return -1, 0 or 1 as a is lower than, equal to or greater than b."""
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def increment(v: Version, kind: IncrementType) -> Version:
    if kind == IncrementType.MAJOR:
        return Version(f"{v.major + 1}.0.0")
    if kind == IncrementType.MINOR:
        return Version(f"{v.major}.{v.minor + 1}.0")
    # A patch bump of a pre-release releases it.
    if v.is_prerelease:
        return Version(f"{v.major}.{v.minor}.{v.micro}")
    return Version(f"{v.major}.{v.minor}.{v.micro + 1}")


def format_version(v: Version) -> str:
    """Render a release as major.minor.patch; anything else as packaging does."""
    if v.is_prerelease or v.is_postrelease or v.local or v.epoch:
        return str(v)
    return f"{v.major}.{v.minor}.{v.micro}"


def classify_update(current: str, latest: str) -> str:
    """Classify the update type between two version strings.

    Returns: "major", "minor", "patch", "up-to-date", or "unknown".
    """
    cur = try_parse_version(current)
    lat = try_parse_version(latest)

    if cur is None or lat is None:
        return "unknown"
    if lat <= cur:
        return "up-to-date"
    if lat.major > cur.major:
        return "major"
    if lat.minor > cur.minor:
        return "minor"
    return "patch"
