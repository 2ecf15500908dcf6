"""Release trains: modules bound to a train, and trains bound to an iteration."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterator, List, Optional, Tuple, Union

from releasetrain.model.artifact_version import ArtifactVersion, VersionFormat
from releasetrain.model.calver import Calver
from releasetrain.model.iteration import GA, Iteration, Iterations
from releasetrain.model.project import Project, ProjectGraph
from releasetrain.model.version import Version
from releasetrain.exceptions import ConfigurationError


class Transition(Enum):
    """Version increment applied when deriving the next train."""

    MAJOR = "major"
    MINOR = "minor"


@dataclass(frozen=True)
class Module:
    """A project at a version, optionally starting at a custom first iteration."""

    project: Project
    version: Version
    custom_first_iteration: Optional[Iteration] = None

    def __post_init__(self) -> None:
        if isinstance(self.version, str):
            object.__setattr__(self, "version", Version.parse(self.version))
        if isinstance(self.custom_first_iteration, str):
            object.__setattr__(self, "custom_first_iteration", Iteration(self.custom_first_iteration))

    def has_name(self, name: str) -> bool:
        return self.project.has_name(name)

    def has_same_project_as(self, other: "Module") -> bool:
        return self.project == other.project

    def next(self, transition: Transition) -> "Module":
        version = self.version.next_major() if transition is Transition.MAJOR else self.version.next_minor()
        return Module(self.project, version)

    def __str__(self) -> str:
        return f"{self.project.name} {self.version}"


@dataclass(frozen=True)
class Train:
    """A named release line with one module per participating project.

    When a ProjectGraph is given, modules are kept in its canonical order
    (dependencies first), which is also the default execution order.
    """

    name: str
    modules: Tuple[Module, ...]
    iterations: Iterations = field(default=Iterations.DEFAULT, compare=False)
    calver: Optional[Calver] = field(default=None, compare=False)
    graph: Optional[ProjectGraph] = field(default=None, compare=False, repr=False)
    parent: Optional[Project] = field(default=None, compare=False)
    version_format: Optional[VersionFormat] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Train name must not be null or empty!")

        modules = tuple(self.modules)
        projects = [module.project for module in modules]
        if len(set(projects)) != len(projects):
            raise ConfigurationError(f"Train {self.name} contains a project more than once")

        if self.graph is not None:
            # the graph's projects carry the dependency edges used for scheduling
            modules = tuple(replace(module, project=self.graph.by_name(module.project.name))
                            if module.project in self.graph else module
                            for module in modules)
            modules = tuple(self.graph.sort(modules, key=lambda module: module.project))

        object.__setattr__(self, "modules", modules)

        if self.version_format is None:
            version_format = VersionFormat.MODIFIER if self.calver is not None else VersionFormat.SUFFIX
            object.__setattr__(self, "version_format", version_format)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)

    def contains(self, project: Project) -> bool:
        return any(module.project == project for module in self.modules)

    def module_if_available(self, project: Union[Project, str]) -> Optional[Module]:
        for module in self.modules:
            if isinstance(project, Project) and module.project == project:
                return module
            if isinstance(project, str) and module.has_name(project):
                return module
        return None

    def module(self, project: Union[Project, str]) -> Module:
        module = self.module_if_available(project)
        if module is None:
            raise ValueError(f"No module found for project {project} in release train {self.name}!")
        return module

    def iteration(self, name: str) -> Iteration:
        return self.iterations.by_name(name)

    def get_iteration(self, iteration: Union[Iteration, str]) -> "TrainIteration":
        if isinstance(iteration, str):
            iteration = self.iteration(iteration)
        return TrainIteration(self, iteration)

    def module_iterations(self, iteration: Iteration, *exclusions: Project) -> List["ModuleIteration"]:
        train_iteration = TrainIteration(self, iteration)
        return [ModuleIteration(module, train_iteration)
                for module in self.modules if module.project not in exclusions]

    def module_version(self, project: Project, iteration: Iteration) -> ArtifactVersion:
        return ModuleIteration(self.module(project), TrainIteration(self, iteration)).artifact_version

    def with_iterations(self, iterations: Iterations) -> "Train":
        return replace(self, iterations=iterations)

    def next(self, name: str, transition: Transition, *additional_modules: Module) -> "Train":
        """Derive the follow-up train.

        Every module is bumped according to the transition unless an
        additional module for the same project is given, which replaces it.
        Additional modules for new projects are added.
        """
        overrides = {module.project: module for module in additional_modules}
        modules = [overrides.pop(module.project, module.next(transition)) for module in self.modules]
        modules.extend(module for module in additional_modules if module.project in overrides)

        calver = self.calver
        if calver is not None:
            calver = Calver(calver.year + 1) if transition is Transition.MAJOR else calver.next_minor()

        return replace(self, name=name, modules=tuple(modules), calver=calver)

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class TrainIteration:
    """A train at one of its iterations; iterating yields its module iterations."""

    train: Train
    iteration: Iteration

    def __post_init__(self) -> None:
        if self.iteration not in self.train.iterations:
            raise ValueError(f"Iteration {self.iteration} is not part of release train {self.train.name}!")

    def __iter__(self) -> Iterator["ModuleIteration"]:
        return iter(self.train.module_iterations(self.iteration))

    def __len__(self) -> int:
        return len(self.train)

    def module_version(self, project: Project) -> ArtifactVersion:
        return self.train.module_version(project, self.iteration)

    def module(self, project: Union[Project, str]) -> "ModuleIteration":
        return ModuleIteration(self.train.module(project), self)

    def modules_except(self, *exclusions: Project) -> List["ModuleIteration"]:
        return self.train.module_iterations(self.iteration, *exclusions)

    def contains(self, project: Project) -> bool:
        return self.train.contains(project)

    def previous_iteration(self, module: "ModuleIteration") -> "ModuleIteration":
        previous = self.train.iterations.previous(self.iteration)
        return TrainIteration(self.train, previous).module(module.project)

    def next_iteration(self) -> Optional["TrainIteration"]:
        following = self.train.iterations.next(self.iteration)
        return TrainIteration(self.train, following) if following is not None else None

    def calver_version(self) -> Optional[Calver]:
        """The calendar version of this iteration for calver trains, None otherwise."""
        calver = self.train.calver
        if calver is None:
            return None

        if self.iteration.is_service_release:
            return calver.with_bugfix(self.iteration.bugfix_value).with_modifier(GA)

        return calver.with_modifier(self.iteration)

    def to_version_string(self) -> str:
        calver = self.calver_version()
        if calver is not None:
            return str(calver)

        suffix = "RELEASE" if self.iteration.is_ga else self.iteration.name
        return f"{self.train.name}-{suffix}"

    def __str__(self) -> str:
        return f"{self.train.name} {self.iteration.name}"


@dataclass(frozen=True)
class ModuleIteration:
    """A module bound to a train iteration; the unit of scheduling."""

    module: Module
    train_iteration: TrainIteration

    @property
    def train(self) -> Train:
        return self.train_iteration.train

    @property
    def project(self) -> Project:
        return self.module.project

    @property
    def version(self) -> Version:
        return self.module.version

    @property
    def iteration(self) -> Iteration:
        """The train's iteration, or the module's custom first iteration at the train's initial milestone."""
        iteration = self.train_iteration.iteration
        if iteration.is_initial and self.module.custom_first_iteration is not None:
            return self.module.custom_first_iteration
        return iteration

    @property
    def artifact_version(self) -> ArtifactVersion:
        return ArtifactVersion.from_iteration(self.version, self.iteration, self.train.version_format)

    def short_version_string(self) -> str:
        short = self.artifact_version.to_short_string()
        if self.iteration.is_service_release:
            return short
        return f"{short} {self.iteration.name}"

    def medium_version_string(self) -> str:
        short = self.artifact_version.to_short_string()
        if self.iteration.is_service_release:
            return f"{short} ({self.train_iteration})"
        return f"{short} {self.iteration.name} ({self.train.name})"

    def full_version_string(self) -> str:
        return f"{self.artifact_version} ({self.train_iteration})"

    def __str__(self) -> str:
        return f"{self.project.name} {self.short_version_string()}"
