"""Phase-aware resolution of the versions written into project descriptors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from releasetrain.build.repository import Repository
from releasetrain.exceptions import ConfigurationError
from releasetrain.model.artifact_version import ArtifactVersion
from releasetrain.model.iteration import SNAPSHOT
from releasetrain.model.project import Project
from releasetrain.model.train import TrainIteration

logger = logging.getLogger(__name__)


class Phase(Enum):
    """Lifecycle context selecting the version transform."""

    PREPARE = "prepare"
    CLEANUP = "cleanup"
    MAINTENANCE = "maintenance"

    @classmethod
    def of(cls, value: Union["Phase", str]) -> "Phase":
        """Coerce a Phase or its (case-insensitive) name or value.

        Raises:
            ConfigurationError: for anything that is not a known phase.
        """
        if isinstance(value, Phase):
            return value
        if isinstance(value, str):
            for phase in cls:
                if value.strip().lower() in (phase.value, phase.name.lower()):
                    return phase
        raise ConfigurationError(f"Unexpected phase {value!r} detected!")


@dataclass(frozen=True)
class UpdateInformation:
    """Decides which concrete version to write for a dependency in a given phase.

    * PREPARE keeps the iteration's version (``1.2.0.M1``).
    * CLEANUP moves to the next development snapshot (``1.3.0.BUILD-SNAPSHOT``
      after ``1.2.0.RELEASE``).
    * MAINTENANCE moves to the next bugfix snapshot (``1.2.4.BUILD-SNAPSHOT``
      after ``1.2.3.RELEASE``).
    """

    train_iteration: TrainIteration
    phase: Phase

    def __post_init__(self) -> None:
        if self.train_iteration is None:
            raise ValueError("Train iteration must not be null!")
        if self.phase is None:
            raise ValueError("Phase must not be null!")
        object.__setattr__(self, "phase", Phase.of(self.phase))

    def resolve(self, version: ArtifactVersion) -> ArtifactVersion:
        """Apply the phase transform to a version."""
        if self.phase is Phase.PREPARE:
            return version
        if self.phase is Phase.CLEANUP:
            return version.next_development_version()
        if self.phase is Phase.MAINTENANCE:
            return version.next_bugfix_version()

        raise ConfigurationError(f"Unexpected phase {self.phase} detected!")

    def project_version_to_set(self, project: Project) -> ArtifactVersion:
        if project is None:
            raise ValueError("Project must not be null!")

        version = self.resolve(self.train_iteration.module_version(project))
        logger.debug("Resolved %s to %s for %s", project.name, version, self.phase.name)
        return version

    def parent_version_to_set(self) -> ArtifactVersion:
        """Version of the train's parent/tooling project for this phase."""
        parent = self.train_iteration.train.parent
        if parent is None:
            raise ConfigurationError(
                f"Release train {self.train_iteration.train.name} does not define a parent project")

        return self.project_version_to_set(parent)

    @property
    def repository(self) -> Repository:
        return Repository.for_iteration(self.train_iteration.iteration)

    def release_train_version(self) -> str:
        """Version of the release train descriptor (BOM) for this phase."""
        if self.phase is Phase.PREPARE:
            return self.train_iteration.to_version_string()

        calver = self.train_iteration.calver_version()
        if calver is None:
            return f"{self.train_iteration.train.name}-BUILD-SNAPSHOT"

        # calendar trains only ever move on by micro version after a public release
        if self.train_iteration.iteration.is_public:
            calver = calver.next_bugfix()

        return str(calver.with_modifier(SNAPSHOT))
