"""Numeric four-component version."""

from __future__ import annotations

from dataclasses import dataclass

from releasetrain.exceptions import VersionFormatError


@dataclass(frozen=True, order=True)
class Version:
    """Immutable ``major.minor.bugfix.build`` version.

    Ordering follows component precedence. The ``next_*`` operations reset
    all lower components to zero.
    """

    major: int
    minor: int = 0
    bugfix: int = 0
    build: int = 0

    def __post_init__(self) -> None:
        for name in ("major", "minor", "bugfix", "build"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise VersionFormatError(f"{name.capitalize()} version must be an integer, got {value!r}")
            if value < 0:
                raise VersionFormatError(f"{name.capitalize()} version must be greater or equal zero!")

    @classmethod
    def of(cls, *parts: int) -> "Version":
        """Create a version from one to four integer components."""
        if not 0 < len(parts) < 5:
            raise VersionFormatError("We need at least 1 at most 4 parts!")
        return cls(*parts)

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse ``1``, ``1.2``, ``1.2.3`` or ``1.2.3.4``.

        Raises:
            VersionFormatError: if the text is empty, has more than four
                components or a component is not a non-negative integer.
        """
        if not text or not text.strip():
            raise VersionFormatError("Version must not be null or empty!")

        parts = text.strip().split(".")
        if len(parts) > 4 or not all(part.isdigit() and part.isascii() for part in parts):
            raise VersionFormatError(f"Invalid version: {text!r}")

        return cls.of(*(int(part) for part in parts))

    def next_major(self) -> "Version":
        return Version(self.major + 1)

    def next_minor(self) -> "Version":
        return Version(self.major, self.minor + 1)

    def next_bugfix(self) -> "Version":
        return Version(self.major, self.minor, self.bugfix + 1)

    def with_bugfix(self, bugfix: int) -> "Version":
        return Version(self.major, self.minor, bugfix)

    def to_major_minor_bugfix(self) -> str:
        return f"{self.major}.{self.minor}.{self.bugfix}"

    def __str__(self) -> str:
        digits = [self.major, self.minor]

        if self.build or self.bugfix:
            digits.append(self.bugfix)

        if self.build:
            digits.append(self.build)

        return ".".join(str(digit) for digit in digits)
