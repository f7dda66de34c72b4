"""Exception types raised by the resolver and rewriter."""

from __future__ import annotations


class HelmOutdatedError(Exception):
    """Base class for all errors surfaced to the command line."""


class ChartLoadError(HelmOutdatedError):
    """The chart directory, Chart.yaml or requirements file cannot be read."""


class NoRequirementsError(HelmOutdatedError):
    """The chart declares no requirements at all.

    Not a ChartLoadError: an empty chart is not a broken one.
    """


class VersionParseError(HelmOutdatedError, ValueError):
    """A string is not a valid semantic version."""


class MissingVersionError(HelmOutdatedError):
    """Chart.yaml has no version field."""


class RepositoryError(HelmOutdatedError):
    """A chart repository cannot be contacted or returned a bad index."""


class IndexLookupError(HelmOutdatedError):
    """A chart or a usable version of it is not in a cached repository index."""
