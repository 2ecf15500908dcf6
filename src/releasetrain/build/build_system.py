"""Build-system capability boundary and first-match selection per project."""

from __future__ import annotations

import datetime
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Tuple

from releasetrain.constants import Constants
from releasetrain.exceptions import ConfigurationError
from releasetrain.model.project import Project
from releasetrain.model.train import ModuleIteration

logger = logging.getLogger(__name__)


def _build_number() -> str:
    return str(int(datetime.datetime.now(datetime.timezone.utc).timestamp()))


@dataclass(frozen=True)
class DeploymentInformation:
    """Where and under which build name a module release was deployed."""

    module: ModuleIteration
    build_number: str = field(default_factory=_build_number)
    repository_prefix: str = field(default_factory=lambda: Constants.DEPLOYMENT_REPOSITORY_PREFIX)

    @property
    def build_name(self) -> str:
        return f"{self.module.project.name} - Release"

    @property
    def target_repository(self) -> str:
        suffix = "libs-release-local" if self.module.iteration.is_public else "libs-milestone-local"
        return self.repository_prefix + suffix

    def build_info_parameters(self) -> Dict[str, Any]:
        return {"buildNumber": self.build_number, "buildName": self.build_name}


class BuildSystem(ABC):
    """A build tool adapter (Maven, Gradle, ...) driving one project's descriptors and builds.

    Implementations shell out to the external tool; every call is
    synchronous and is run by the BuildExecutor on a pooled worker.
    """

    @abstractmethod
    def supports(self, project: Project) -> bool:
        """Whether this adapter is responsible for the given project."""

    @abstractmethod
    def update_project_descriptors(self, module: ModuleIteration, update_information) -> ModuleIteration:
        """Rewrite the module's descriptors with the versions resolved by ``update_information``."""

    @abstractmethod
    def prepare_version(self, module: ModuleIteration, phase) -> ModuleIteration:
        """Set the module's own version for the given phase."""

    @abstractmethod
    def deploy(self, module: ModuleIteration) -> DeploymentInformation:
        """Build and deploy the module's release artifacts."""

    @abstractmethod
    def trigger_build(self, module: ModuleIteration) -> ModuleIteration:
        """Run a plain build of the module."""


class BuildSystems:
    """Explicit ordered list of build-system adapters; the first supporting one wins."""

    def __init__(self, systems: Iterable[BuildSystem]):
        self._systems: Tuple[BuildSystem, ...] = tuple(systems)
        if not self._systems:
            raise ConfigurationError("At least one build system is required")

    def __iter__(self):
        return iter(self._systems)

    def for_project(self, project: Project) -> BuildSystem:
        """Select the build system for a project.

        Raises:
            ConfigurationError: if no adapter supports the project.
        """
        for system in self._systems:
            if system.supports(project):
                return system

        raise ConfigurationError(f"No build system plugin found for project {project.name}!")
