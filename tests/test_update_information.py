"""Tests for phase-aware version resolution."""

import pytest

from releasetrain.build import Phase, Repository, UpdateInformation
from releasetrain.constants import Constants
from releasetrain.exceptions import ConfigurationError
from releasetrain.model import ArtifactVersion, Project, Train, Module
from releasetrain.model.iteration import GA, M1, RC1, SR3


class TestProjectVersions:
    """Versions written into descriptors per phase."""

    def test_prepare_keeps_iteration_version(self, train, graph):
        information = UpdateInformation(train.get_iteration(M1), Phase.PREPARE)
        assert str(information.project_version_to_set(graph.by_name("commons"))) == "1.2.0.M1"

    def test_cleanup_after_ga_moves_to_next_minor_snapshot(self, train, graph):
        information = UpdateInformation(train.get_iteration(GA), Phase.CLEANUP)
        assert str(information.project_version_to_set(graph.by_name("commons"))) == "1.3.0.BUILD-SNAPSHOT"

    def test_maintenance_after_service_release_moves_to_next_bugfix_snapshot(self, train, graph):
        information = UpdateInformation(train.get_iteration(SR3), Phase.MAINTENANCE)
        assert str(information.project_version_to_set(graph.by_name("commons"))) == "1.2.4.BUILD-SNAPSHOT"

    def test_cleanup_after_milestone_returns_to_snapshot(self, train, graph):
        information = UpdateInformation(train.get_iteration(M1), "cleanup")
        assert str(information.project_version_to_set(graph.by_name("jpa"))) == "1.10.0.BUILD-SNAPSHOT"

    def test_modifier_format_is_kept(self, calver_train, graph):
        information = UpdateInformation(calver_train.get_iteration(GA), Phase.CLEANUP)
        assert str(information.project_version_to_set(graph.by_name("commons"))) == "1.3.0-SNAPSHOT"

    def test_resolve(self, train):
        information = UpdateInformation(train.get_iteration(GA), Phase.MAINTENANCE)
        assert str(information.resolve(ArtifactVersion.parse("2.0.0.RELEASE"))) == "2.0.1.BUILD-SNAPSHOT"

    def test_parent_version(self, train):
        information = UpdateInformation(train.get_iteration(GA), Phase.CLEANUP)
        assert str(information.parent_version_to_set()) == "1.9.0.BUILD-SNAPSHOT"

    def test_parent_required(self):
        train = Train("Hopper", (Module(Project("commons"), "1.2"),))
        with pytest.raises(ConfigurationError):
            UpdateInformation(train.get_iteration(GA), Phase.PREPARE).parent_version_to_set()


class TestReleaseTrainVersion:
    """Version of the train descriptor itself."""

    def test_prepare(self, train):
        assert UpdateInformation(train.get_iteration(GA), Phase.PREPARE).release_train_version() == "Hopper-RELEASE"

    def test_snapshot_after_release(self, train):
        assert UpdateInformation(train.get_iteration(GA), Phase.CLEANUP).release_train_version() == "Hopper-BUILD-SNAPSHOT"

    @pytest.mark.parametrize("iteration,expected", [
        (M1, "2020.0.0-SNAPSHOT"),
        (RC1, "2020.0.0-SNAPSHOT"),
        (GA, "2020.0.1-SNAPSHOT"),
        (SR3, "2020.0.4-SNAPSHOT"),
    ])
    def test_calver_snapshot(self, calver_train, iteration, expected):
        information = UpdateInformation(calver_train.get_iteration(iteration), Phase.CLEANUP)
        assert information.release_train_version() == expected


class TestPhase:
    """Phase coercion."""

    def test_coerces_names(self):
        assert Phase.of("PREPARE") is Phase.PREPARE
        assert Phase.of("maintenance") is Phase.MAINTENANCE

    def test_unknown_phase(self):
        with pytest.raises(ConfigurationError):
            Phase.of("release")

    def test_phase_required(self, train):
        with pytest.raises(ValueError):
            UpdateInformation(train.get_iteration(GA), None)


class TestRepository:
    """Repository selection."""

    def test_for_iteration(self):
        assert Repository.for_iteration(GA).id == Constants.REPOSITORY_ID_PREFIX + "release"
        assert Repository.for_iteration(M1).id == Constants.REPOSITORY_ID_PREFIX + "milestone"

    def test_for_version(self):
        assert Repository.for_version(ArtifactVersion.parse("1.0.0.BUILD-SNAPSHOT")).url.endswith("snapshot")
        assert Repository.for_version(ArtifactVersion.parse("1.0.0-RC1")).url.endswith("milestone")
        assert Repository.for_version(ArtifactVersion.parse("1.0.0")).url.endswith("release")

    def test_update_information_repository(self, train):
        information = UpdateInformation(train.get_iteration(M1), Phase.PREPARE)
        assert information.repository.id.endswith("milestone")
