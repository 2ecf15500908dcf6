"""Version arithmetic and release train domain model."""

from releasetrain.model.version import Version
from releasetrain.model.iteration import Iteration, IterationKind, Iterations
from releasetrain.model.artifact_version import ArtifactVersion, VersionFormat
from releasetrain.model.calver import Calver
from releasetrain.model.project import Project, ProjectGraph
from releasetrain.model.train import Module, ModuleIteration, Train, TrainIteration, Transition

__all__ = [
    "Version",
    "Iteration",
    "IterationKind",
    "Iterations",
    "ArtifactVersion",
    "VersionFormat",
    "Calver",
    "Project",
    "ProjectGraph",
    "Module",
    "ModuleIteration",
    "Train",
    "TrainIteration",
    "Transition",
]
