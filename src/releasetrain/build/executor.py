"""Concurrent, dependency-aware execution of build operations across modules.

Every module of a run is scheduled exactly once onto a bounded worker pool and
its outcome is captured in a per-project Future. In ordered mode the
submitting thread waits for a module's dependencies to finish (successfully or
not) before submitting it; the waits never happen on a pool worker, so a deep
dependency chain cannot starve the pool. Once every Future is done the
outcomes are folded into a Summary, and any failure turns into a BuildFailed
listing all modules.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Optional, Sequence, TypeVar

from releasetrain.build.build_system import BuildSystem, BuildSystems
from releasetrain.common.logging_utils import Timer, extra_context, is_debug_enabled
from releasetrain.constants import Constants
from releasetrain.exceptions import BuildFailed, ConfigurationError
from releasetrain.model.project import Project

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M")

Operation = Callable[[BuildSystem, M], T]


@dataclass(frozen=True)
class ExecutionResult(Generic[T]):
    """Outcome of one module's operation: a result or the error it raised."""

    project: Project
    result: Optional[T] = None
    failure: Optional[BaseException] = None

    @property
    def is_successful(self) -> bool:
        return self.failure is None

    def __str__(self) -> str:
        if self.is_successful:
            status = "Successful"
        else:
            status = "Error: " + (str(self.failure) or type(self.failure).__name__)
        return f"{self.project.name:>20} - {status}"


class Summary(Generic[T]):
    """Outcomes of a run, one per module, in scheduling order."""

    def __init__(self, executions: Sequence[ExecutionResult[T]]):
        self.executions: List[ExecutionResult[T]] = list(executions)

    @classmethod
    def collect(cls, executions: Iterable[ExecutionResult[T]]) -> "Summary[T]":
        """Build the summary of a run.

        Raises:
            BuildFailed: if any execution failed; the error lists every module.
        """
        summary = cls(list(executions))
        if not summary.is_successful:
            raise BuildFailed(summary)
        return summary

    @property
    def is_successful(self) -> bool:
        return all(execution.is_successful for execution in self.executions)

    @property
    def failures(self) -> List[ExecutionResult[T]]:
        return [execution for execution in self.executions if not execution.is_successful]

    def results(self) -> List[T]:
        return [execution.result for execution in self.executions]

    def __iter__(self) -> Iterator[ExecutionResult[T]]:
        return iter(self.executions)

    def __len__(self) -> int:
        return len(self.executions)

    def __str__(self) -> str:
        return "Execution summary\n" + "\n".join(str(execution) for execution in self.executions)


class _InlineExecutor(Executor):
    """Executor running each task on the submitting thread."""

    def submit(self, fn, /, *args, **kwargs):  # pylint: disable=arguments-differ
        future: Future = Future()
        try:
            result = fn(*args, **kwargs)
        except BaseException as exc:  # pylint: disable=broad-exception-caught
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


def _default_workers() -> int:
    return max(2, (os.cpu_count() or 2) // 2)


class BuildExecutor:
    """Runs a build operation once per module, honoring the project dependency graph on request.

    Modules are anything exposing a ``project`` attribute, typically the
    ModuleIterations of a TrainIteration.
    """

    def __init__(
        self,
        build_systems: BuildSystems,
        *,
        max_workers: Optional[int] = None,
        parallelize: Optional[bool] = None,
    ):
        self._build_systems = build_systems

        parallelize = Constants.PARALLELIZE if parallelize is None else parallelize
        if parallelize:
            workers = max_workers or Constants.MAX_WORKERS or _default_workers()
            self._executor: Executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="build")
            logger.debug("Build executor using %s workers", workers)
        else:
            self._executor = _InlineExecutor()

    def __enter__(self) -> "BuildExecutor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)

    def run_ordered(self, modules: Iterable[M], function: Operation) -> Summary:
        """Run ``function`` per module, starting each only after its dependencies completed."""
        return self._run(modules, function, consider_dependency_order=True)

    def run_any_order(self, modules: Iterable[M], function: Operation) -> Summary:
        """Run ``function`` for all modules concurrently, without ordering constraints."""
        return self._run(modules, function, consider_dependency_order=False)

    def _run(self, modules: Iterable[M], function: Operation, consider_dependency_order: bool) -> Summary:
        modules = list(modules)
        mode = "ordered" if consider_dependency_order else "any-order"

        self._verify_unique(modules)
        if consider_dependency_order:
            self._verify_order(modules)

        systems = {module.project.name: self._build_systems.for_project(module.project) for module in modules}

        logger.info("Running %s modules (%s)", len(modules), mode)

        # one Future per project, written once while submitting
        results: Dict[str, Future] = {}

        for module in modules:
            project = module.project

            if consider_dependency_order:
                dependencies = [results[name] for name in project.dependencies]
                if dependencies:
                    if is_debug_enabled(logger):
                        logger.debug(
                            "Waiting for dependencies",
                            extra=extra_context(
                                event="dependency_wait",
                                component="build_executor",
                                project=project.name,
                                dependencies=list(project.dependencies),
                            )
                        )
                    wait(dependencies)

            results[project.name] = self._executor.submit(
                self._execute, systems[project.name], module, function)

        executions: List[ExecutionResult] = []
        for module in modules:
            future = results[module.project.name]
            failure = future.exception()
            if failure is not None:
                executions.append(ExecutionResult(module.project, failure=failure))
            else:
                executions.append(ExecutionResult(module.project, result=future.result()))

        summary = Summary.collect(executions)
        logger.info("All %s modules completed successfully (%s)", len(modules), mode)
        return summary

    @staticmethod
    def _execute(system: BuildSystem, module: M, function: Operation) -> Any:
        project = module.project
        with Timer() as timer:
            try:
                result = function(system, module)
            except BaseException as exc:
                logger.error(
                    "Operation failed for %s: %s",
                    project.name,
                    exc,
                    extra=extra_context(
                        event="operation",
                        component="build_executor",
                        outcome="failure",
                        project=project.name,
                        duration_ms=timer.duration_ms(),
                    )
                )
                raise

        logger.info(
            "Finished %s in %s ms",
            project.name,
            timer.duration_ms(),
            extra=extra_context(
                event="operation",
                component="build_executor",
                outcome="success",
                project=project.name,
                duration_ms=timer.duration_ms(),
            )
        )
        return result

    @staticmethod
    def _verify_unique(modules: Sequence[M]) -> None:
        seen = set()
        for module in modules:
            if module.project.name in seen:
                raise ConfigurationError(f"Project {module.project.name} is scheduled more than once")
            seen.add(module.project.name)

    @staticmethod
    def _verify_order(modules: Sequence[M]) -> None:
        """Every dependency must be part of the run and come before its dependent."""
        position = {module.project.name: index for index, module in enumerate(modules)}

        for index, module in enumerate(modules):
            project = module.project
            for dependency in project.dependencies:
                if dependency not in position:
                    raise ConfigurationError(
                        f"No module for {dependency}, required by {project.name}")
                if position[dependency] > index:
                    raise ConfigurationError(
                        f"Module {dependency} must be scheduled before {project.name}, which depends on it")
