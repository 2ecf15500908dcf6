"""Tests for dependency-aware build execution."""

import threading
import time

import pytest

from releasetrain.build import (
    BuildExecutor,
    BuildOperations,
    BuildSystem,
    BuildSystems,
    DeploymentInformation,
    ExecutionResult,
    Summary,
)
from releasetrain.exceptions import BuildFailed, ConfigurationError
from releasetrain.model import Module, Project, ProjectGraph, Train
from releasetrain.model.iteration import GA, M1


class RecordingBuildSystem(BuildSystem):
    """Build system recording start and end of every call."""

    def __init__(self, failing=(), delay=0.0, supported=None):
        self.failing = set(failing)
        self.delay = delay
        self.supported = supported
        self.events = []
        self._lock = threading.Lock()

    def _record(self, event, module):
        with self._lock:
            self.events.append((event, module.project.name))

    def _run(self, module, result):
        self._record("start", module)
        time.sleep(self.delay)
        self._record("end", module)
        if module.project.name in self.failing:
            raise RuntimeError(f"{module.project.name} failed")
        return result

    def supports(self, project):
        return self.supported is None or project.name in self.supported

    def update_project_descriptors(self, module, update_information):
        return self._run(module, module)

    def prepare_version(self, module, phase):
        return self._run(module, module)

    def deploy(self, module):
        return self._run(module, DeploymentInformation(module, build_number="42"))

    def trigger_build(self, module):
        return self._run(module, module)

    def started(self):
        return [name for event, name in self.events if event == "start"]

    def position(self, event, name):
        return self.events.index((event, name))


@pytest.fixture
def system():
    return RecordingBuildSystem(delay=0.01)


@pytest.fixture
def executor(system):
    with BuildExecutor(BuildSystems([system]), max_workers=4) as executor:
        yield executor


class TestRunOrdered:
    """Ordered execution."""

    def test_dependencies_complete_before_dependents_start(self, executor, system, train, graph):
        summary = executor.run_ordered(train.get_iteration(M1), lambda s, m: s.trigger_build(m))

        assert summary.is_successful
        assert len(summary) == 4
        for project in graph:
            for dependency in project.dependencies:
                if ("start", project.name) in system.events:
                    assert system.position("end", dependency) < system.position("start", project.name)

    def test_graph_edges_apply_to_plain_projects(self):
        graph = ProjectGraph.from_edges({"build": [], "commons": ["build"]})
        train = Train("Hopper", (Module(Project("commons"), "1.2"), Module(Project("build"), "1.8")), graph=graph)
        system = RecordingBuildSystem(delay=0.05)

        with BuildExecutor(BuildSystems([system]), max_workers=2) as executor:
            executor.run_ordered(train.get_iteration(GA), lambda s, m: s.trigger_build(m))

        assert system.position("end", "build") < system.position("start", "commons")

    def test_results_follow_module_order(self, executor, train):
        summary = executor.run_ordered(train.get_iteration(M1), lambda s, m: m.project.name)
        assert summary.results() == ["build", "commons", "jpa", "mongodb"]

    def test_missing_dependency_fails_before_anything_runs(self, executor, system, train, graph):
        modules = train.get_iteration(GA).modules_except(graph.by_name("commons"))

        with pytest.raises(ConfigurationError):
            executor.run_ordered(modules, lambda s, m: s.trigger_build(m))

        assert system.events == []

    def test_dependency_after_dependent_is_rejected(self, executor, system, train):
        modules = list(reversed(list(train.get_iteration(GA))))

        with pytest.raises(ConfigurationError):
            executor.run_ordered(modules, lambda s, m: s.trigger_build(m))

        assert system.events == []

    def test_duplicate_module_is_rejected(self, executor, train):
        modules = list(train.get_iteration(GA))

        with pytest.raises(ConfigurationError):
            executor.run_any_order(modules + modules[:1], lambda s, m: m)

    def test_failures_are_aggregated(self, train):
        system = RecordingBuildSystem(failing={"jpa"})

        with BuildExecutor(BuildSystems([system]), max_workers=2) as executor:
            with pytest.raises(BuildFailed) as exc_info:
                executor.run_ordered(train.get_iteration(GA), lambda s, m: s.trigger_build(m))

        summary = exc_info.value.summary
        assert len(summary) == 4
        assert [execution.project.name for execution in summary.failures] == ["jpa"]
        assert sorted(system.started()) == ["build", "commons", "jpa", "mongodb"]

        message = str(exc_info.value)
        assert message.startswith("Execution summary")
        assert "Error: jpa failed" in message
        assert message.count("Successful") == 3

    def test_dependents_of_failed_modules_still_run(self, train):
        system = RecordingBuildSystem(failing={"commons"})

        with BuildExecutor(BuildSystems([system]), parallelize=False) as executor:
            with pytest.raises(BuildFailed) as exc_info:
                executor.run_ordered(train.get_iteration(GA), lambda s, m: s.trigger_build(m))

        assert system.started() == ["build", "commons", "jpa", "mongodb"]
        assert not exc_info.value.summary.is_successful

    def test_no_build_system_for_project(self, train):
        executor = BuildExecutor(BuildSystems([RecordingBuildSystem(supported={"build"})]), parallelize=False)

        with pytest.raises(ConfigurationError, match="No build system plugin found"):
            executor.run_ordered(train.get_iteration(GA), lambda s, m: m)


class TestRunAnyOrder:
    """Unordered execution."""

    def test_runs_every_module_once(self, executor, system, train):
        summary = executor.run_any_order(train.get_iteration(GA), lambda s, m: s.trigger_build(m))

        assert summary.is_successful
        assert sorted(system.started()) == ["build", "commons", "jpa", "mongodb"]

    def test_accepts_subsets_without_dependencies(self, executor, system, train, graph):
        modules = train.get_iteration(GA).modules_except(graph.by_name("commons"))
        summary = executor.run_any_order(modules, lambda s, m: s.trigger_build(m))
        assert len(summary) == 3

    def test_failures_are_aggregated(self, train):
        system = RecordingBuildSystem(failing={"commons"})

        with BuildExecutor(BuildSystems([system]), max_workers=4) as executor:
            with pytest.raises(BuildFailed) as exc_info:
                executor.run_any_order(train.get_iteration(GA), lambda s, m: s.trigger_build(m))

        summary = exc_info.value.summary
        assert len(summary) == 4
        assert [execution.project.name for execution in summary.failures] == ["commons"]

        message = str(exc_info.value)
        assert "Error: commons failed" in message
        assert message.count("Successful") == 3

    @pytest.mark.parametrize("parallelize", [True, False])
    def test_exiting_adapter_is_reported_with_siblings(self, train, parallelize):
        def trigger(system, module):
            if module.project.name == "jpa":
                raise SystemExit(2)
            return system.trigger_build(module)

        system = RecordingBuildSystem()
        with BuildExecutor(BuildSystems([system]), max_workers=2, parallelize=parallelize) as executor:
            with pytest.raises(BuildFailed) as exc_info:
                executor.run_any_order(train.get_iteration(GA), trigger)

        summary = exc_info.value.summary
        assert len(summary) == 4
        assert [execution.project.name for execution in summary.failures] == ["jpa"]
        assert isinstance(summary.failures[0].failure, SystemExit)


class TestSummary:
    """Rendering of execution outcomes."""

    def test_lines(self):
        summary = Summary([
            ExecutionResult(Project("commons"), result="ok"),
            ExecutionResult(Project("jpa"), failure=RuntimeError("boom")),
        ])

        assert not summary.is_successful
        assert str(summary).splitlines() == [
            "Execution summary",
            "             commons - Successful",
            "                 jpa - Error: boom",
        ]

    def test_collect_raises_on_failure(self):
        with pytest.raises(BuildFailed):
            Summary.collect([ExecutionResult(Project("jpa"), failure=ValueError("x"))])

    def test_collect_returns_successful_summary(self):
        summary = Summary.collect([ExecutionResult(Project("jpa"), result=1)])
        assert summary.results() == [1]


class TestBuildOperations:
    """Train-wide operations on top of the executor."""

    @pytest.fixture
    def operations(self, system, executor):
        return BuildOperations(BuildSystems([system]), executor)

    def test_perform_release(self, operations, train):
        deployments = operations.perform_release(train.get_iteration(GA))

        assert [d.module.project.name for d in deployments] == ["build", "commons", "jpa", "mongodb"]
        assert deployments[1].build_name == "commons - Release"
        assert deployments[1].target_repository == "libs-release-local"
        assert deployments[1].build_info_parameters() == {"buildNumber": "42", "buildName": "commons - Release"}

    def test_milestone_deployments_target_milestone_repository(self, operations, train):
        deployment = operations.build_and_deploy_release(train.get_iteration(M1).module("jpa"))
        assert deployment.target_repository == "libs-milestone-local"

    def test_update_project_descriptors(self, operations, system, train):
        results = operations.update_project_descriptors(train.get_iteration(GA), "prepare")
        assert len(results) == 4
        assert sorted(system.started()) == ["build", "commons", "jpa", "mongodb"]

    def test_prepare_versions_rejects_unknown_phase(self, operations, system, train):
        with pytest.raises(ConfigurationError):
            operations.prepare_versions(train.get_iteration(GA), "release")
        assert system.events == []

    def test_trigger_builds(self, operations, system, train):
        operations.trigger_builds(train.get_iteration(GA))
        assert len(system.started()) == 4

    def test_single_module_operations(self, operations, system, train):
        module = train.get_iteration(GA).module("jpa")
        assert operations.trigger_build(module) is module
        assert operations.prepare_version(module, "cleanup") is module
        assert system.started() == ["jpa", "jpa"]
