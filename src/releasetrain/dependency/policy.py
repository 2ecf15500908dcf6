"""Upgrade policies and per-dependency upgrade proposals."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Iterable, List

from releasetrain.dependency.models import DependencyVersion
from releasetrain.model.iteration import Iteration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyUpgradePolicy:
    """Which versions may be proposed as upgrades.

    Attributes:
        milestone_allowed: Whether pre-release versions qualify.
        restrict_to_minor_version: Whether the proposal stays on the current
            minor line.
    """

    milestone_allowed: bool = False
    restrict_to_minor_version: bool = False

    LATEST_STABLE: ClassVar["DependencyUpgradePolicy"]

    @classmethod
    def from_iteration(cls, iteration: Iteration) -> "DependencyUpgradePolicy":
        """Policy for the iteration the upgrade is consumed by.

        Milestone and release candidate iterations may pick up pre-releases;
        public iterations (GA, service releases) only move within the minor line.
        """
        return cls(
            milestone_allowed=iteration.is_milestone or iteration.is_release_candidate,
            restrict_to_minor_version=iteration.is_public,
        )

    def accepts(self, version: DependencyVersion) -> bool:
        return self.milestone_allowed or not version.is_pre_release


DependencyUpgradePolicy.LATEST_STABLE = DependencyUpgradePolicy()


@dataclass(frozen=True)
class DependencyUpgradeProposal:
    """Current version of a dependency with the candidates found for it."""

    current: DependencyVersion
    latest: DependencyVersion
    latest_minor: DependencyVersion
    proposal: DependencyVersion
    newer_versions: List[DependencyVersion] = field(default_factory=list, compare=False)

    @classmethod
    def compute(
        cls,
        policy: DependencyUpgradePolicy,
        current: DependencyVersion,
        available: Iterable[DependencyVersion],
    ) -> "DependencyUpgradeProposal":
        """Compute the proposal for a dependency from the versions available.

        Both the latest version and the latest version on the current minor
        line fall back to ``current`` when nothing newer qualifies, so a
        proposal never downgrades.

        Args:
            policy: Upgrade policy to apply.
            current: Version currently in use.
            available: Versions published for the dependency, in any order.

        Returns:
            DependencyUpgradeProposal: The computed proposal.
        """
        versions = sorted(set(available))
        candidates = [version for version in versions if policy.accepts(version) and version.is_newer(current)]

        latest = max(candidates, default=current)
        latest_minor = max((version for version in candidates if version.is_same_minor(current)), default=current)
        newer_versions = [version for version in versions if version.is_newer(current)]

        proposal = latest_minor if policy.restrict_to_minor_version else latest

        logger.debug("Proposal for %s: %s (latest %s, latest minor %s)", current, proposal, latest, latest_minor)
        return cls(current, latest, latest_minor, proposal, newer_versions)

    def is_upgrade_available(self) -> bool:
        return self.current.identifier != self.proposal.identifier

    def new_versions(self, include_all: bool = False, include_date: bool = False) -> str:
        """Render the newer versions, or just the latest minor and latest version."""
        if include_all:
            rendered: List[str] = []
            for version in self.newer_versions:
                if include_date and version.created_at is not None:
                    rendered.append(f"{version.identifier} ({version.created_at.date().isoformat()})")
                else:
                    rendered.append(version.identifier)
            return ", ".join(rendered)

        if str(self.latest_minor) == str(self.latest):
            return str(self.latest)

        return f"{self.latest_minor}, {self.latest}"

    def __str__(self) -> str:
        return self.proposal.identifier

