"""Calendar versions of release trains (``2020.0.1``, ``2021.1.0-M2``)."""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Optional

from releasetrain.exceptions import VersionFormatError
from releasetrain.model.iteration import GA, Iteration

_PATTERN = re.compile(r"(\d{4})\.(\d+)\.(\d+)(?:-(SR\d+|RC\d+|M\d+|SNAPSHOT))?")


@total_ordering
@dataclass(frozen=True)
class Calver:
    """``year.minor.micro[-modifier]``; a missing modifier means GA."""

    year: int
    minor: int = 0
    micro: int = 0
    modifier: Iteration = field(default=GA)

    @classmethod
    def parse(cls, version: str) -> "Calver":
        if not version or not version.strip():
            raise VersionFormatError("Version must not be null or empty!")

        match = _PATTERN.fullmatch(version.strip())
        if not match:
            raise VersionFormatError(f"Version {version!r} does not match CalVer")

        modifier = Iteration(match.group(4)) if match.group(4) else GA
        return cls(int(match.group(1)), int(match.group(2)), int(match.group(3)), modifier)

    @classmethod
    def of(cls, year: int, minor: int = 0, micro: int = 0, modifier: Iteration = GA) -> "Calver":
        return cls(year, minor, micro, modifier)

    @classmethod
    def current(cls, today: Optional[datetime.date] = None) -> "Calver":
        """Seed a calendar version from the current year: ``<year>.0.0``."""
        today = today or datetime.date.today()
        return cls(today.year)

    def __lt__(self, other: "Calver") -> bool:
        if not isinstance(other, Calver):
            return NotImplemented
        return (self.year, self.minor, self.micro, self.modifier) < (
            other.year, other.minor, other.micro, other.modifier)

    def next_minor(self) -> "Calver":
        return Calver(self.year, self.minor + 1, 0, self.modifier)

    def next_bugfix(self) -> "Calver":
        return Calver(self.year, self.minor, self.micro + 1, self.modifier)

    def with_bugfix(self, bugfix: int) -> "Calver":
        return Calver(self.year, self.minor, bugfix, self.modifier)

    def with_modifier(self, modifier: Iteration) -> "Calver":
        return Calver(self.year, self.minor, self.micro, modifier)

    def __str__(self) -> str:
        raw = f"{self.year}.{self.minor}.{self.micro}"

        if self.modifier != GA:
            return f"{raw}-{self.modifier.name}"

        return raw
