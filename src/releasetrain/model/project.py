"""Projects and the static dependency graph between them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from releasetrain.exceptions import ConfigurationError, CyclicDependencyError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Project:
    """A participating repository, identified by its name.

    Dependencies are referenced by project name and resolved by ProjectGraph.
    """

    name: str
    key: Optional[str] = field(default=None, compare=False)
    dependencies: Tuple[str, ...] = field(default=(), compare=False)
    build_tool: str = field(default="maven", compare=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Project name must not be null or empty!")
        object.__setattr__(self, "dependencies", tuple(self.dependencies))

    def has_name(self, name: str) -> bool:
        return self.name.lower() == name.lower()

    def __str__(self) -> str:
        return self.name


class ProjectGraph:
    """Directed, acyclic depends-on relation over projects.

    ``order`` lists every project after all of its dependencies. Among
    projects whose dependencies are satisfied at the same time, declaration
    order wins, which keeps the order stable across runs.
    """

    def __init__(self, projects: Iterable[Project]):
        self._projects: Dict[str, Project] = {}
        for project in projects:
            if project.name in self._projects:
                raise ConfigurationError(f"Duplicate project {project.name}")
            self._projects[project.name] = project

        for project in self._projects.values():
            for dependency in project.dependencies:
                if dependency not in self._projects:
                    raise ConfigurationError(
                        f"Project {project.name} depends on unknown project {dependency}")

        self._order: Tuple[Project, ...] = self._sort()
        self._index: Dict[str, int] = {project.name: i for i, project in enumerate(self._order)}
        self._transitive: Dict[str, FrozenSet[str]] = {}

    @classmethod
    def from_edges(cls, edges: Dict[str, Sequence[str]]) -> "ProjectGraph":
        """Build a graph from a ``{project: [dependency, ...]}`` mapping.

        Dependencies that are not keys of the mapping become projects without
        dependencies of their own.
        """
        names: List[str] = list(edges)
        for dependencies in edges.values():
            names.extend(name for name in dependencies if name not in names)
        return cls(Project(name, dependencies=tuple(edges.get(name, ()))) for name in names)

    def _sort(self) -> Tuple[Project, ...]:
        sorter: TopologicalSorter = TopologicalSorter()
        for project in self._projects.values():
            sorter.add(project.name, *project.dependencies)

        try:
            sorter.prepare()
        except CycleError as exc:
            cycle = exc.args[1] if len(exc.args) > 1 else []
            logger.error("Cyclic project dependencies detected: %s", " -> ".join(cycle))
            raise CyclicDependencyError(cycle) from exc

        declared = {name: i for i, name in enumerate(self._projects)}
        ordered: List[Project] = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=declared.__getitem__)
            for name in ready:
                ordered.append(self._projects[name])
                sorter.done(name)

        return tuple(ordered)

    @property
    def order(self) -> Tuple[Project, ...]:
        return self._order

    def __iter__(self):
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, project: object) -> bool:
        name = project.name if isinstance(project, Project) else project
        return name in self._projects

    def by_name(self, name: str) -> Project:
        """Look up a project by name, ignoring case."""
        for project in self._order:
            if project.has_name(name):
                return project
        raise ValueError(f"No project named {name} available!")

    def index_of(self, project: Project) -> int:
        try:
            return self._index[project.name]
        except KeyError:
            raise ConfigurationError(f"Project {project.name} is not part of the project graph") from None

    def dependencies_of(self, project: Project, transitive: bool = False) -> FrozenSet[Project]:
        """Direct or transitive dependencies of the given project."""
        known = self._projects.get(project.name)
        if known is None:
            raise ConfigurationError(f"Project {project.name} is not part of the project graph")

        if not transitive:
            return frozenset(self._projects[name] for name in known.dependencies)

        return frozenset(self._projects[name] for name in self._closure(known.name))

    def _closure(self, name: str) -> FrozenSet[str]:
        cached = self._transitive.get(name)
        if cached is not None:
            return cached

        result: Set[str] = set()
        for dependency in self._projects[name].dependencies:
            result.add(dependency)
            result.update(self._closure(dependency))

        self._transitive[name] = frozenset(result)
        return self._transitive[name]

    def depends_on(self, project: Project, other: Project) -> bool:
        """Whether ``project`` depends on ``other`` directly or transitively."""
        return other in self.dependencies_of(project, transitive=True)

    def sort(self, items: Iterable[T], key: Callable[[T], Project]) -> List[T]:
        """Reorder project-aware items into canonical graph order."""
        return sorted(items, key=lambda item: self.index_of(key(item)))
