"""Dependency version parsing, upgrade policies and proposals."""

from releasetrain.dependency.catalog import MavenCentralCatalog, StaticCatalog, VersionCatalog
from releasetrain.dependency.models import Dependency, DependencyVersion, DependencyVersions
from releasetrain.dependency.operations import DependencyOperations
from releasetrain.dependency.policy import DependencyUpgradePolicy, DependencyUpgradeProposal
from releasetrain.dependency.proposals import DependencyUpgradeProposals

__all__ = [
    "Dependency",
    "DependencyOperations",
    "DependencyUpgradePolicy",
    "DependencyUpgradeProposal",
    "DependencyUpgradeProposals",
    "DependencyVersion",
    "DependencyVersions",
    "MavenCentralCatalog",
    "StaticCatalog",
    "VersionCatalog",
]
