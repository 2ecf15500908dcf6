"""Artifact repositories releases are staged to."""

from __future__ import annotations

from dataclasses import dataclass

from releasetrain.constants import Constants
from releasetrain.model.artifact_version import ArtifactVersion
from releasetrain.model.iteration import Iteration


@dataclass(frozen=True)
class Repository:
    """Repository id and URL, e.g. ``spring-libs-release``."""

    id: str
    url: str

    @classmethod
    def for_iteration(cls, iteration: Iteration) -> "Repository":
        """Release repository for public iterations, milestone repository otherwise."""
        return cls._of("release" if iteration.is_public else "milestone")

    @classmethod
    def for_version(cls, version: ArtifactVersion) -> "Repository":
        if version.is_snapshot_version():
            return cls._of("snapshot")
        if version.is_milestone_version():
            return cls._of("milestone")
        if version.is_release_version():
            return cls._of("release")
        raise ValueError(f"Unsupported ArtifactVersion {version}!")

    @classmethod
    def _of(cls, suffix: str) -> "Repository":
        return cls(Constants.REPOSITORY_ID_PREFIX + suffix, Constants.REPOSITORY_BASE_URL + suffix)

    @property
    def snapshot_id(self) -> str:
        return Constants.REPOSITORY_ID_PREFIX + "snapshot"

    @property
    def snapshot_url(self) -> str:
        return Constants.REPOSITORY_BASE_URL + "snapshot"
