"""Collections of upgrade proposals and their properties-file form.

The properties file is what a release manager reviews and edits between
checking for upgrades and applying them::

    dependency.train=Pascal
    dependency.iteration=M1
    dependency.upgrade.count=1

    # AssertJ - Available versions: 3.18.1 (2020-11-08), 3.19.0
    dependency[org.assertj\\:assertj-core]=3.19.0

Reading accepts both the escaped ``\\:`` written here and a plain ``:``.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from releasetrain.dependency.models import COORDINATE_PART, Dependency, DependencyVersion, DependencyVersions
from releasetrain.dependency.policy import DependencyUpgradeProposal
from releasetrain.exceptions import VerificationError
from releasetrain.model.train import TrainIteration

logger = logging.getLogger(__name__)

TRAIN_KEY = "dependency.train"
ITERATION_KEY = "dependency.iteration"
COUNT_KEY = "dependency.upgrade.count"

DEPENDENCY_KEY = re.compile(rf"dependency\[({COORDINATE_PART}):({COORDINATE_PART})\]")

ROW_HEADER = ("Dependency", "Current", "Available", "Proposed")


class DependencyUpgradeProposals:
    """Upgrade proposals keyed by dependency."""

    def __init__(self, proposals: Optional[Mapping[Dependency, DependencyUpgradeProposal]] = None):
        self._proposals: Dict[Dependency, DependencyUpgradeProposal] = dict(proposals or {})

    @classmethod
    def empty(cls) -> "DependencyUpgradeProposals":
        return cls()

    def merge_with(self, other: "DependencyUpgradeProposals") -> "DependencyUpgradeProposals":
        """Combine both sets, ``other`` winning on conflicts, sorted by dependency name."""
        merged = dict(self._proposals)
        merged.update(other._proposals)
        return DependencyUpgradeProposals(dict(sorted(merged.items())))

    def get(self, dependency: Dependency) -> DependencyUpgradeProposal:
        if dependency not in self._proposals:
            raise ValueError(f"No proposal for dependency: {dependency}")
        return self._proposals[dependency]

    def items(self):
        return self._proposals.items()

    def upgrades(self) -> Dict[Dependency, DependencyUpgradeProposal]:
        """Proposals that actually change a version."""
        return {dependency: proposal for dependency, proposal in self._proposals.items()
                if proposal.is_upgrade_available()}

    def to_rows(self, include_all: bool = False) -> List[Tuple[str, str, str, str]]:
        """Rows of ``ROW_HEADER`` for tabular reporting.

        Args:
            include_all: Report every dependency and all newer versions instead
                of upgradable dependencies with their latest candidates only.
        """
        rows = []
        for dependency, proposal in self._proposals.items():
            if include_all or proposal.is_upgrade_available():
                rows.append((
                    dependency.name,
                    str(proposal.current),
                    proposal.new_versions(include_all, False),
                    str(proposal.proposal),
                ))
        return rows

    def as_properties(self, iteration: TrainIteration) -> str:
        """Render the proposals as properties text for the given train iteration."""
        upgrades = self.upgrades()

        lines = [
            f"{TRAIN_KEY}={iteration.train.name}",
            f"{ITERATION_KEY}={iteration.iteration.name}",
            f"{COUNT_KEY}={len(upgrades)}",
        ]

        for dependency, proposal in upgrades.items():
            lines.append("")
            lines.append(f"# {dependency.name} - Available versions: {proposal.new_versions(True, True)}")
            lines.append(f"dependency[{dependency.group_id}\\:{dependency.artifact_id}]={proposal}")

        return "\n".join(lines) + "\n"

    @classmethod
    def from_properties(
        cls,
        iteration: TrainIteration,
        text: str,
        known: Iterable[Dependency] = (),
    ) -> DependencyVersions:
        """Parse properties text written by ``as_properties`` (possibly edited).

        Args:
            iteration: Train iteration the file must have been written for.
            text: Properties text.
            known: Dependencies to resolve coordinates against; unknown
                coordinates yield a dependency named after its artifact id.

        Returns:
            DependencyVersions: The selected version per dependency, in file order.

        Raises:
            VerificationError: if the train or iteration markers do not match.
            ValueError: for unexpected keys.
        """
        properties = parse_properties(text)

        train = properties.get(TRAIN_KEY, "")
        iteration_name = properties.get(ITERATION_KEY, "")
        if train != iteration.train.name or iteration_name != iteration.iteration.name:
            raise VerificationError(
                f"Verification failed: Dependency upgrade descriptor reports {train} {iteration_name}")

        by_coordinates = {dependency.coordinates: dependency for dependency in known}
        versions: Dict[Dependency, DependencyVersion] = {}

        for key, value in properties.items():
            if key in (TRAIN_KEY, ITERATION_KEY, COUNT_KEY):
                continue

            match = DEPENDENCY_KEY.fullmatch(key)
            if match is None:
                raise ValueError(f"Unexpected key: {key}")

            group_id, artifact_id = match.groups()
            dependency = by_coordinates.get(f"{group_id}:{artifact_id}") or Dependency(artifact_id, group_id, artifact_id)
            versions[dependency] = DependencyVersion.parse(value)

        return DependencyVersions(versions)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._proposals)

    def __len__(self) -> int:
        return len(self._proposals)

    def __contains__(self, dependency: object) -> bool:
        return dependency in self._proposals


def parse_properties(text: str) -> Dict[str, str]:
    """Parse the line-oriented properties format into an ordered dict.

    Supports ``#``/``!`` comments, ``=`` or ``:`` separators and backslash
    escapes in keys and values. Separators inside square brackets belong to
    the key. Line continuations are not supported.
    """
    properties: Dict[str, str] = {}

    for raw in text.splitlines():
        line = raw.strip()
        if not line or line[0] in "#!":
            continue

        key_chars: List[str] = []
        index = 0
        escaped = False
        bracketed = False
        while index < len(line):
            char = line[index]
            if escaped:
                key_chars.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            elif char in "=:" and not bracketed:
                break
            else:
                # coordinates inside dependency[...] may use a plain colon
                if char in "[]":
                    bracketed = char == "["
                key_chars.append(char)
            index += 1

        value = _unescape(line[index + 1:].strip()) if index < len(line) else ""
        properties["".join(key_chars).strip()] = value

    return properties


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def write_properties(
    path: Union[str, os.PathLike],
    iteration: TrainIteration,
    proposals: DependencyUpgradeProposals,
) -> str:
    """Write the proposals for the iteration to ``path`` and return the text written."""
    text = proposals.as_properties(iteration)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)

    logger.info("Wrote %s dependency upgrade proposals to %s", len(proposals.upgrades()), path)
    return text


def read_properties(
    path: Union[str, os.PathLike],
    iteration: TrainIteration,
    known: Iterable[Dependency] = (),
) -> DependencyVersions:
    """Read dependency versions for the iteration back from ``path``."""
    with open(path, "r", encoding="utf-8") as handle:
        text = handle.read()

    versions = DependencyUpgradeProposals.from_properties(iteration, text, known)
    logger.info("Read %s dependency versions from %s", len(versions), path)
    return versions
