"""helm-outdated-dependencies - find and update outdated Helm chart dependencies."""

__version__ = "0.1.0"
