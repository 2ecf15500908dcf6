"""Externally published version strings of a module.

Two grammars are accepted and preserved on rendering:

* suffix form: ``1.2.0.RELEASE``, ``1.2.0.M1``, ``1.2.0.RC1``, ``1.2.0.SR1``,
  ``1.2.0.BUILD-SNAPSHOT``
* modifier form: ``1.2.0``, ``1.2.0-M1``, ``1.2.0-RC1``, ``1.2.0-SNAPSHOT``

The form a value was parsed in decides which downstream tool consumes it, so a
value never changes form through any of the transitions below.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import Tuple

from releasetrain.exceptions import VersionFormatError
from releasetrain.model.iteration import Iteration
from releasetrain.model.version import Version

RELEASE_SUFFIX = "RELEASE"
SNAPSHOT_SUFFIX = "BUILD-SNAPSHOT"
SNAPSHOT_MODIFIER = "SNAPSHOT"

_SUFFIX_PATTERN = re.compile(r"(\d+\.\d+(?:\.\d+)?)\.(SR\d+|RC\d+|M\d+|BUILD-SNAPSHOT|RELEASE)")
_MODIFIER_PATTERN = re.compile(r"(\d+\.\d+(?:\.\d+)?)(?:-(RC\d+|M\d+|SNAPSHOT))?")
_SUFFIX_TOKEN = re.compile(r"SR\d+|RC\d+|M\d+|BUILD-SNAPSHOT|RELEASE")
_MODIFIER_TOKEN = re.compile(r"RC\d+|M\d+|SNAPSHOT|")

# Rank of a suffix class within the same numeric version.
_SNAPSHOT, _MILESTONE, _RELEASE_CANDIDATE, _RELEASE, _SERVICE_RELEASE = range(5)


class VersionFormat(Enum):
    """Rendering grammar of an ArtifactVersion."""

    SUFFIX = "suffix"
    MODIFIER = "modifier"

    @property
    def release_token(self) -> str:
        return RELEASE_SUFFIX if self is VersionFormat.SUFFIX else ""

    @property
    def snapshot_token(self) -> str:
        return SNAPSHOT_SUFFIX if self is VersionFormat.SUFFIX else SNAPSHOT_MODIFIER


@total_ordering
@dataclass(frozen=True)
class ArtifactVersion:
    """A Version plus a suffix drawn from the fixed set of its format."""

    version: Version
    suffix: str
    format: VersionFormat = VersionFormat.SUFFIX

    def __post_init__(self) -> None:
        token = _SUFFIX_TOKEN if self.format is VersionFormat.SUFFIX else _MODIFIER_TOKEN
        if not isinstance(self.suffix, str) or not token.fullmatch(self.suffix):
            raise VersionFormatError(f"Invalid version suffix {self.suffix!r} for {self.format.value} format!")

    @classmethod
    def parse(cls, source: str) -> "ArtifactVersion":
        """Parse either accepted grammar.

        Raises:
            VersionFormatError: if the string matches neither grammar.
        """
        if not source or not source.strip():
            raise VersionFormatError("Version source must not be null or empty!")

        source = source.strip()

        match = _SUFFIX_PATTERN.fullmatch(source)
        if match:
            return cls(Version.parse(match.group(1)), match.group(2), VersionFormat.SUFFIX)

        match = _MODIFIER_PATTERN.fullmatch(source)
        if match:
            return cls(Version.parse(match.group(1)), match.group(2) or "", VersionFormat.MODIFIER)

        raise VersionFormatError(f"Invalid version: {source}!")

    @classmethod
    def of(cls, version: Version, version_format: VersionFormat = VersionFormat.SUFFIX) -> "ArtifactVersion":
        """Create the release version of the given Version."""
        return cls(version, version_format.release_token, version_format)

    @classmethod
    def from_iteration(
        cls,
        version: Version,
        iteration: Iteration,
        version_format: VersionFormat = VersionFormat.SUFFIX,
    ) -> "ArtifactVersion":
        """Derive the version a module publishes at the given iteration.

        GA yields the release, SR<n> the release of bugfix n, SNAPSHOT the
        snapshot; milestones and release candidates use their name.
        """
        if iteration.is_ga:
            return cls.of(version, version_format)

        if iteration.is_service_release:
            return cls.of(version.with_bugfix(iteration.bugfix_value), version_format)

        if iteration.is_snapshot:
            return cls(version, version_format.snapshot_token, version_format)

        return cls(version, iteration.name, version_format)

    @property
    def _rank(self) -> Tuple[int, int]:
        suffix = self.suffix
        if suffix in (RELEASE_SUFFIX, ""):
            return _RELEASE, 0
        if suffix in (SNAPSHOT_SUFFIX, SNAPSHOT_MODIFIER):
            return _SNAPSHOT, 0
        if suffix.startswith("SR"):
            return _SERVICE_RELEASE, int(suffix[2:])
        if suffix.startswith("RC"):
            return _RELEASE_CANDIDATE, int(suffix[2:])
        return _MILESTONE, int(suffix[1:])

    def __lt__(self, other: "ArtifactVersion") -> bool:
        if not isinstance(other, ArtifactVersion):
            return NotImplemented
        return (self.version, self._rank) < (other.version, other._rank)

    def is_release_version(self) -> bool:
        return self._rank[0] in (_RELEASE, _SERVICE_RELEASE)

    def is_milestone_version(self) -> bool:
        """Milestones and release candidates."""
        return self._rank[0] in (_MILESTONE, _RELEASE_CANDIDATE)

    def is_release_candidate_version(self) -> bool:
        return self._rank[0] == _RELEASE_CANDIDATE

    def is_snapshot_version(self) -> bool:
        return self._rank[0] == _SNAPSHOT

    def is_bugfix_version(self) -> bool:
        if self._rank[0] == _SERVICE_RELEASE:
            return True
        return self._rank[0] == _RELEASE and self.version.bugfix != 0

    def release_version(self) -> "ArtifactVersion":
        return ArtifactVersion.of(self.version, self.format)

    def snapshot_version(self) -> "ArtifactVersion":
        return ArtifactVersion(self.version, self.format.snapshot_token, self.format)

    def next_development_version(self) -> "ArtifactVersion":
        """Next minor snapshot for GA releases, next bugfix snapshot for bugfix releases.

        Snapshots are returned as is; milestones and release candidates turn
        into the snapshot of the same version.
        """
        if self.is_release_version():
            if self.is_bugfix_version():
                next_version = self.version.next_bugfix()
            else:
                next_version = self.version.next_minor()
            return ArtifactVersion(next_version, self.format.snapshot_token, self.format)

        return self if self.is_snapshot_version() else self.snapshot_version()

    def next_bugfix_version(self) -> "ArtifactVersion":
        """Next bugfix snapshot for releases, the snapshot of the current version otherwise."""
        if self.is_release_version():
            return ArtifactVersion(self.version.next_bugfix(), self.format.snapshot_token, self.format)

        return self if self.is_snapshot_version() else self.snapshot_version()

    def to_short_string(self) -> str:
        """The plain version, omitting trailing zero bugfix."""
        return str(self.version)

    def __str__(self) -> str:
        if self.format is VersionFormat.SUFFIX:
            return f"{self.version.to_major_minor_bugfix()}.{self.suffix}"

        if self.suffix:
            return f"{self.version.to_major_minor_bugfix()}-{self.suffix}"

        return self.version.to_major_minor_bugfix()
