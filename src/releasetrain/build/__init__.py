"""Build orchestration: version resolution, build-system selection and execution."""

from releasetrain.build.build_system import BuildSystem, BuildSystems, DeploymentInformation
from releasetrain.build.executor import BuildExecutor, ExecutionResult, Summary
from releasetrain.build.operations import BuildOperations
from releasetrain.build.repository import Repository
from releasetrain.build.update_information import Phase, UpdateInformation

__all__ = [
    "BuildExecutor",
    "BuildOperations",
    "BuildSystem",
    "BuildSystems",
    "DeploymentInformation",
    "ExecutionResult",
    "Phase",
    "Repository",
    "Summary",
    "UpdateInformation",
]
