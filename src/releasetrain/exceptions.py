"""Error taxonomy of the release engine."""

from __future__ import annotations

from typing import Sequence


class VersionFormatError(ValueError):
    """Raised when a version, iteration or calendar version string is malformed."""


class ConfigurationError(RuntimeError):
    """Raised for invalid train, graph or build setup detected before any work runs."""


class CyclicDependencyError(ConfigurationError):
    """Raised when the project dependency graph contains a cycle."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle = list(cycle)
        super().__init__("Cyclic project dependencies: " + " -> ".join(self.cycle))


class VerificationError(ValueError):
    """Raised when a persisted dependency upgrade descriptor does not match the train iteration."""


class BuildFailed(RuntimeError):
    """Aggregate failure of a build run, carrying the outcome of every module."""

    def __init__(self, summary):
        self.summary = summary
        super().__init__(str(summary))
