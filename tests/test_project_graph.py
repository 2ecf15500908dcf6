"""Tests for the project dependency graph."""

import pytest

from releasetrain.exceptions import ConfigurationError, CyclicDependencyError
from releasetrain.model import Project, ProjectGraph


class TestProjectGraph:
    """Canonical order and dependency queries."""

    def test_dependencies_come_first(self, graph):
        assert [project.name for project in graph.order] == ["build", "commons", "jpa", "mongodb", "bom"]

    def test_ties_keep_declaration_order(self):
        graph = ProjectGraph.from_edges({"b": [], "a": [], "c": ["a"]})
        assert [project.name for project in graph] == ["b", "a", "c"]

    def test_dependencies_listed_only_as_targets_become_projects(self):
        graph = ProjectGraph.from_edges({"jpa": ["commons"]})
        assert "commons" in graph
        assert [project.name for project in graph] == ["commons", "jpa"]

    def test_cycle_is_rejected(self):
        with pytest.raises(CyclicDependencyError) as exc_info:
            ProjectGraph.from_edges({"a": ["b"], "b": ["c"], "c": ["a"]})

        assert set(exc_info.value.cycle) == {"a", "b", "c"}
        assert isinstance(exc_info.value, ConfigurationError)

    def test_unknown_dependency_is_rejected(self):
        with pytest.raises(ConfigurationError):
            ProjectGraph([Project("jpa", dependencies=("commons",))])

    def test_duplicate_project_is_rejected(self):
        with pytest.raises(ConfigurationError):
            ProjectGraph([Project("jpa"), Project("jpa")])

    def test_direct_and_transitive_dependencies(self, graph):
        bom = graph.by_name("bom")
        assert {p.name for p in graph.dependencies_of(bom)} == {"jpa", "mongodb"}
        assert {p.name for p in graph.dependencies_of(bom, transitive=True)} == {"jpa", "mongodb", "commons", "build"}
        assert graph.depends_on(bom, graph.by_name("build"))
        assert not graph.depends_on(graph.by_name("build"), bom)

    def test_by_name_ignores_case(self, graph):
        assert graph.by_name("JPA").name == "jpa"

    def test_sort_reorders_items(self, graph):
        names = ["bom", "jpa", "build"]
        assert graph.sort(names, key=graph.by_name) == ["build", "jpa", "bom"]

    def test_index_of_unknown_project(self, graph):
        with pytest.raises(ConfigurationError):
            graph.index_of(Project("redis"))
