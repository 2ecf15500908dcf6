"""Dependency upgrade checks for a train iteration."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Union

from releasetrain.common.logging_utils import extra_context, Timer
from releasetrain.constants import Constants
from releasetrain.dependency.catalog import MavenCentralCatalog, VersionCatalog
from releasetrain.dependency.models import Dependency, DependencyVersion, DependencyVersions
from releasetrain.dependency.policy import DependencyUpgradePolicy, DependencyUpgradeProposal
from releasetrain.dependency.proposals import DependencyUpgradeProposals, read_properties, write_properties
from releasetrain.model.train import TrainIteration

logger = logging.getLogger(__name__)


class DependencyOperations:
    """Computes upgrade proposals for the dependencies of a train iteration."""

    def __init__(self, catalog: Optional[VersionCatalog] = None, max_workers: Optional[int] = None):
        self.catalog = catalog or MavenCentralCatalog()
        self.max_workers = max_workers or Constants.DEPENDENCY_CHECK_CONCURRENCY

    def check(
        self,
        iteration: TrainIteration,
        current: Mapping[Dependency, DependencyVersion],
        policy: Optional[DependencyUpgradePolicy] = None,
    ) -> DependencyUpgradeProposals:
        """Compute one upgrade proposal per dependency.

        Catalogs are queried concurrently on a bounded pool. The policy
        defaults to the one derived from the iteration.

        Args:
            iteration: Train iteration the upgrades are meant for.
            current: Version currently in use per dependency.
            policy: Upgrade policy overriding the iteration's.

        Returns:
            DependencyUpgradeProposals: Proposals in the order of ``current``.
        """
        policy = policy or DependencyUpgradePolicy.from_iteration(iteration.iteration)
        dependencies: List[Dependency] = list(current)

        if not dependencies:
            return DependencyUpgradeProposals.empty()

        with Timer() as timer:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(dependencies))) as pool:
                available = list(pool.map(self.catalog.fetch, dependencies))

        proposals: Dict[Dependency, DependencyUpgradeProposal] = {}
        for dependency, versions in zip(dependencies, available):
            proposals[dependency] = DependencyUpgradeProposal.compute(policy, current[dependency], versions)

        result = DependencyUpgradeProposals(proposals)
        logger.info(
            "Checked %s dependencies for %s, %s upgrades available",
            len(dependencies),
            iteration,
            len(result.upgrades()),
            extra=extra_context(
                event="dependency_check",
                component="dependency_operations",
                outcome="success",
                count=len(dependencies),
                duration_ms=timer.duration_ms(),
            )
        )
        return result

    def write_proposals(
        self,
        iteration: TrainIteration,
        proposals: DependencyUpgradeProposals,
        path: Union[str, os.PathLike, None] = None,
    ) -> str:
        """Write proposals to the properties file, ``Constants.PROPOSAL_FILE`` by default."""
        return write_properties(path or Constants.PROPOSAL_FILE, iteration, proposals)

    def load_proposals(
        self,
        iteration: TrainIteration,
        known: Iterable[Dependency] = (),
        path: Union[str, os.PathLike, None] = None,
    ) -> DependencyVersions:
        """Read the (reviewed) properties file back for the iteration."""
        return read_properties(path or Constants.PROPOSAL_FILE, iteration, known)
