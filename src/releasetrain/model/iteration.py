"""Release iterations (M1..Mn, RC1..RCn, GA, SR1..SRn) and per-train iteration sequences."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from functools import total_ordering
from typing import Iterable, Iterator, Optional, Tuple

from releasetrain.exceptions import VersionFormatError

_PATTERN = re.compile(r"(M|RC|SR)(\d+)|(GA)|(SNAPSHOT)")


class IterationKind(IntEnum):
    """Classification of an iteration; the integer value is its precedence."""

    MILESTONE = 1
    RELEASE_CANDIDATE = 2
    SNAPSHOT = 3
    GA = 4
    SERVICE_RELEASE = 5


_PREFIXES = {
    "M": IterationKind.MILESTONE,
    "RC": IterationKind.RELEASE_CANDIDATE,
    "SR": IterationKind.SERVICE_RELEASE,
}


@total_ordering
@dataclass(frozen=True)
class Iteration:
    """A named lifecycle stage of a release train.

    Ordering: milestone < release candidate < snapshot < GA < service
    release, then by the numeric suffix within a class.
    """

    name: str
    kind: IterationKind = field(init=False, compare=False, repr=False)
    number: int = field(init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise VersionFormatError("Name must not be null or empty!")

        name = self.name.strip().upper()
        match = _PATTERN.fullmatch(name)
        if not match:
            raise VersionFormatError(f"Invalid iteration name: {self.name!r}")

        if match.group(3):
            kind, number = IterationKind.GA, 0
        elif match.group(4):
            kind, number = IterationKind.SNAPSHOT, 0
        else:
            kind, number = _PREFIXES[match.group(1)], int(match.group(2))
            if number < 1:
                raise VersionFormatError(f"Invalid iteration name: {self.name!r}")

        object.__setattr__(self, "name", name)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "number", number)

    @property
    def sort_key(self) -> Tuple[int, int]:
        return int(self.kind), self.number

    def __lt__(self, other: "Iteration") -> bool:
        if not isinstance(other, Iteration):
            return NotImplemented
        return self.sort_key < other.sort_key

    @property
    def is_milestone(self) -> bool:
        return self.kind is IterationKind.MILESTONE

    @property
    def is_release_candidate(self) -> bool:
        return self.kind is IterationKind.RELEASE_CANDIDATE

    @property
    def is_ga(self) -> bool:
        return self.kind is IterationKind.GA

    @property
    def is_service_release(self) -> bool:
        return self.kind is IterationKind.SERVICE_RELEASE

    @property
    def is_snapshot(self) -> bool:
        return self.kind is IterationKind.SNAPSHOT

    @property
    def is_public(self) -> bool:
        """Whether artifacts of this iteration are published to Maven Central."""
        return self.is_ga or self.is_service_release

    @property
    def is_preview(self) -> bool:
        """Whether the iteration produces a preview (milestone or release candidate)."""
        return not self.is_public

    @property
    def is_initial(self) -> bool:
        return self.kind is IterationKind.MILESTONE and self.number == 1

    @property
    def bugfix_value(self) -> int:
        return self.number if self.is_service_release else 0

    def __str__(self) -> str:
        return self.name


M1, M2, M3, M4 = (Iteration(f"M{i}") for i in range(1, 5))
RC1, RC2, RC3 = (Iteration(f"RC{i}") for i in range(1, 4))
GA = Iteration("GA")
SNAPSHOT = Iteration("SNAPSHOT")
(SR1, SR2, SR3, SR4, SR5, SR6, SR7, SR8, SR9, SR10, SR11, SR12,
 SR13, SR14, SR15, SR16, SR17, SR18) = (Iteration(f"SR{i}") for i in range(1, 19))


class Iterations:
    """Finite ordered sequence of iterations a train goes through.

    The successor of an iteration is the next element of the sequence; the
    last element has none.
    """

    DEFAULT: "Iterations"

    def __init__(self, *iterations: Iteration):
        if not iterations:
            raise ValueError("Iterations must not be empty!")
        if len(set(iterations)) != len(iterations):
            raise ValueError(f"Duplicate iterations in {[it.name for it in iterations]}")
        self._iterations: Tuple[Iteration, ...] = tuple(iterations)

    @classmethod
    def of_names(cls, names: Iterable[str]) -> "Iterations":
        return cls(*(Iteration(name) for name in names))

    def __iter__(self) -> Iterator[Iteration]:
        return iter(self._iterations)

    def __len__(self) -> int:
        return len(self._iterations)

    def __contains__(self, iteration: object) -> bool:
        return iteration in self._iterations

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Iterations):
            return NotImplemented
        return self._iterations == other._iterations

    def __hash__(self) -> int:
        return hash(self._iterations)

    def __repr__(self) -> str:
        return f"Iterations({', '.join(it.name for it in self._iterations)})"

    @property
    def first(self) -> Iteration:
        return self._iterations[0]

    def by_name(self, name: str) -> Iteration:
        """Look up an iteration by name, ignoring case."""
        if not name or not name.strip():
            raise ValueError("Name must not be null or empty!")

        for iteration in self._iterations:
            if iteration.name == name.strip().upper():
                return iteration

        raise ValueError(f"No iteration found with name {name}!")

    def _index(self, iteration: Iteration) -> int:
        try:
            return self._iterations.index(iteration)
        except ValueError:
            raise ValueError(f"Iteration {iteration} is not part of {self!r}") from None

    def next(self, iteration: Iteration) -> Optional[Iteration]:
        """Return the successor of the given iteration or None for the last one."""
        index = self._index(iteration)
        return self._iterations[index + 1] if index + 1 < len(self._iterations) else None

    def previous(self, iteration: Iteration) -> Iteration:
        """Return the predecessor of the given iteration."""
        index = self._index(iteration)
        if index == 0:
            raise ValueError(f"Could not find previous iteration for {iteration}!")
        return self._iterations[index - 1]

    def is_next(self, iteration: Iteration, candidate: Iteration) -> bool:
        return self.next(iteration) == candidate


Iterations.DEFAULT = Iterations(M1, RC1, GA, SR1, SR2, SR3, SR4, SR5, SR6, SR7, SR8, SR9, SR10, SR11, SR12)
