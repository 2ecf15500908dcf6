"""Train-wide build operations on top of the BuildExecutor."""

from __future__ import annotations

import logging
from typing import Callable, List, TypeVar, Union

from releasetrain.build.build_system import BuildSystem, BuildSystems, DeploymentInformation
from releasetrain.build.executor import BuildExecutor
from releasetrain.build.update_information import Phase, UpdateInformation
from releasetrain.model.train import ModuleIteration, TrainIteration

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BuildOperations:
    """Runs build-system operations for all modules of a train iteration.

    Operations touching inter-project versions run in dependency order;
    plain builds run in any order.
    """

    def __init__(self, build_systems: BuildSystems, executor: BuildExecutor):
        self.build_systems = build_systems
        self.executor = executor

    def update_project_descriptors(self, iteration: TrainIteration, phase: Union[Phase, str]) -> List[ModuleIteration]:
        """Update all inter-project dependency versions for the given phase.

        Args:
            iteration: Train iteration to update.
            phase: Release phase selecting the version transform.

        Returns:
            List[ModuleIteration]: Results of the build systems, in module order.
        """
        if iteration is None:
            raise ValueError("Train iteration must not be null!")

        update_information = UpdateInformation(iteration, phase)
        logger.info("Updating project descriptors of %s (%s)", iteration, update_information.phase.name)

        summary = self.executor.run_ordered(
            iteration,
            lambda system, module: system.update_project_descriptors(module, update_information))
        return summary.results()

    def prepare_versions(self, iteration: TrainIteration, phase: Union[Phase, str]) -> List[ModuleIteration]:
        """Set every module's own version for the given phase, dependencies first."""
        if iteration is None:
            raise ValueError("Train iteration must not be null!")
        phase = Phase.of(phase)

        summary = self.executor.run_ordered(iteration, lambda system, module: system.prepare_version(module, phase))
        return summary.results()

    def prepare_version(self, module: ModuleIteration, phase: Union[Phase, str]) -> ModuleIteration:
        phase = Phase.of(phase)
        return self._with_build_system(module, lambda system, it: system.prepare_version(it, phase))

    def perform_release(self, iteration: TrainIteration) -> List[DeploymentInformation]:
        """Build and deploy all modules of the iteration in dependency order."""
        summary = self.executor.run_ordered(iteration, lambda system, module: self.build_and_deploy_release(module))
        return summary.results()

    def build_and_deploy_release(self, module: ModuleIteration) -> DeploymentInformation:
        return self._with_build_system(module, lambda system, it: system.deploy(it))

    def trigger_builds(self, iteration: TrainIteration) -> List[ModuleIteration]:
        """Trigger a plain build of all modules, in no particular order."""
        summary = self.executor.run_any_order(iteration, lambda system, module: system.trigger_build(module))
        return summary.results()

    def trigger_build(self, module: ModuleIteration) -> ModuleIteration:
        return self._with_build_system(module, lambda system, it: system.trigger_build(it))

    def _with_build_system(self, module: ModuleIteration, function: Callable[[BuildSystem, ModuleIteration], T]) -> T:
        if module is None:
            raise ValueError("ModuleIteration must not be null!")

        return function(self.build_systems.for_project(module.project), module)
