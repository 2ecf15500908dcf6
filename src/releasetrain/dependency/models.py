"""Third-party dependencies and their version identifiers."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field, replace
from functools import total_ordering
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from releasetrain.exceptions import VersionFormatError
from releasetrain.model.version import Version

# Release-train style identifiers, e.g. Aluminium-SR1, Bismuth-RELEASE
TRAIN_VERSION = re.compile(r"([A-Za-z]+)-(RELEASE|SR(\d+)|SNAPSHOT|BUILD-SNAPSHOT)")

# Numeric identifiers with optional modifier and counter, e.g. 1.0.0-m1, 2.3.0.RC2
NUMERIC_VERSION = re.compile(r"(\d+(?:\.\d+)*)\.?(-?[A-Za-z]+)?(\d+)?")

RELEASE_MODIFIERS = frozenset({"", "RELEASE", "FINAL", "GA"})

# Maven groupId or artifactId
COORDINATE_PART = r"[A-Za-z0-9_\-.]+"
COORDINATES = re.compile(rf"({COORDINATE_PART}):({COORDINATE_PART})")


@total_ordering
@dataclass(frozen=True)
class Dependency:
    """A Maven artifact tracked for upgrades, identified by its coordinates.

    ``exclusions`` holds version prefixes that are never proposed.
    """

    name: str = field(compare=False)
    group_id: str
    artifact_id: str
    exclusions: Tuple[str, ...] = field(default=(), compare=False)

    @classmethod
    def of(cls, name: str, coordinates: str) -> "Dependency":
        """Create a dependency from ``org.group:artifact-id`` coordinates.

        Raises:
            ValueError: for an empty name or malformed coordinates.
        """
        if not name:
            raise ValueError("Name must not be empty")
        if not coordinates:
            raise ValueError("GroupId/ArtifactId must not be empty")

        match = COORDINATES.fullmatch(coordinates)
        if match is None:
            raise ValueError("GroupId/ArtifactId must be in the format of org.group:artifact-id")

        return cls(name, match.group(1), match.group(2))

    def exclude_versions_starting_with(self, prefix: str) -> "Dependency":
        return replace(self, exclusions=self.exclusions + (prefix,))

    def should_include(self, identifier: str) -> bool:
        return not any(identifier.startswith(prefix) for prefix in self.exclusions)

    @property
    def coordinates(self) -> str:
        return f"{self.group_id}:{self.artifact_id}"

    def __lt__(self, other: "Dependency") -> bool:
        if not isinstance(other, Dependency):
            return NotImplemented
        return (self.name, self.coordinates) < (other.name, other.coordinates)

    def __str__(self) -> str:
        return self.coordinates


@total_ordering
@dataclass(frozen=True)
class DependencyVersion:
    """A published version of a dependency.

    Either a release-train identifier (``train_name`` set, the service
    release number as major version) or a numeric version with an optional
    modifier (``M``, ``RC``, ``SNAPSHOT``, ...) and counter. Train versions
    sort before numeric versions. Numeric versions sort by version, releases
    above pre-releases, then modifier and counter.
    """

    identifier: str
    train_name: Optional[str] = field(default=None, compare=False)
    version: Optional[Version] = field(default=None, compare=False)
    modifier: str = field(default="", compare=False)
    counter: int = field(default=0, compare=False)
    created_at: Optional[datetime.datetime] = field(default=None, compare=False)

    @classmethod
    def parse(cls, identifier: str) -> "DependencyVersion":
        """Parse a version identifier as published in a Maven repository.

        Raises:
            VersionFormatError: if the identifier is neither a release-train
                nor a numeric version.
        """
        if not identifier or not identifier.strip():
            raise VersionFormatError("Version identifier must not be empty")
        identifier = identifier.strip()

        match = TRAIN_VERSION.fullmatch(identifier)
        if match:
            version = Version(int(match.group(3))) if match.group(3) else Version(0)
            modifier = "SNAPSHOT" if identifier.endswith("SNAPSHOT") else ""
            return cls(identifier, train_name=match.group(1), version=version, modifier=modifier)

        match = NUMERIC_VERSION.match(identifier)
        if match is None:
            raise VersionFormatError(f"Cannot parse version identifier {identifier}")

        try:
            version = Version.parse(match.group(1))
        except VersionFormatError as exc:
            raise VersionFormatError(f"Cannot parse version number {match.group(1)}") from exc

        modifier = (match.group(2) or "").lstrip("-").upper()
        if identifier.upper().endswith("SNAPSHOT"):
            modifier = "SNAPSHOT"
        counter = int(match.group(3)) if match.group(3) else 0

        return cls(identifier, version=version, modifier=modifier, counter=counter)

    @property
    def is_pre_release(self) -> bool:
        return self.modifier not in RELEASE_MODIFIERS

    def with_created_at(self, created_at: Optional[datetime.datetime]) -> "DependencyVersion":
        return replace(self, created_at=created_at)

    def is_newer(self, other: "DependencyVersion") -> bool:
        return self > other

    def is_same_minor(self, other: "DependencyVersion") -> bool:
        """Same release train, or same major and minor numeric version."""
        if self.train_name is not None or other.train_name is not None:
            return self.train_name == other.train_name
        return (self.version.major, self.version.minor) == (other.version.major, other.version.minor)

    def _sort_key(self) -> tuple:
        release_rank = 0 if self.is_pre_release else 1
        if self.train_name is not None:
            return (0, self.train_name, self.version, release_rank, "", 0, self.identifier)
        return (1, "", self.version, release_rank, self.modifier, self.counter, self.identifier)

    def __lt__(self, other: "DependencyVersion") -> bool:
        if not isinstance(other, DependencyVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        return self.identifier


class DependencyVersions:
    """Insertion-ordered mapping of dependency to version."""

    def __init__(self, versions: Optional[Mapping[Dependency, DependencyVersion]] = None):
        self._versions: Dict[Dependency, DependencyVersion] = dict(versions or {})

    @classmethod
    def empty(cls) -> "DependencyVersions":
        return cls()

    def has_dependency(self, dependency: Dependency) -> bool:
        return dependency in self._versions

    def get(self, dependency: Dependency) -> DependencyVersion:
        if not self.has_dependency(dependency):
            raise ValueError(f"No such dependency: {dependency}")
        return self._versions[dependency]

    @property
    def dependencies(self) -> List[Dependency]:
        return list(self._versions)

    def items(self):
        return self._versions.items()

    def as_dict(self) -> Dict[Dependency, DependencyVersion]:
        return dict(self._versions)

    def is_empty(self) -> bool:
        return not self._versions

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._versions)

    def __len__(self) -> int:
        return len(self._versions)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DependencyVersions):
            return NotImplemented
        return self._versions == other._versions

    def to_string(self, indentation: int = 0) -> str:
        lines = [
            "\t" * indentation + str(dependency).ljust(40) + " = " + str(version)
            for dependency, version in self._versions.items()
        ]
        return "".join(line + "\n" for line in lines)

    def __str__(self) -> str:
        return self.to_string()
