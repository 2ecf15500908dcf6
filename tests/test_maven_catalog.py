"""Tests for version catalogs and dependency checks."""

import datetime
from unittest.mock import patch

import pytest

from releasetrain.dependency import (
    Dependency,
    DependencyOperations,
    DependencyUpgradePolicy,
    DependencyVersion,
    MavenCentralCatalog,
    StaticCatalog,
)
from releasetrain.dependency.catalog import parse_creation_dates, parse_metadata_versions
from releasetrain.model.iteration import GA, M1

ASSERTJ = Dependency.of("AssertJ", "org.assertj:assertj-core")

METADATA = """<?xml version="1.0" encoding="UTF-8"?>
<metadata>
  <groupId>org.assertj</groupId>
  <artifactId>assertj-core</artifactId>
  <versioning>
    <latest>3.19.0</latest>
    <release>3.19.0</release>
    <versions>
      <version>3.18.0</version>
      <version>3.18.1</version>
      <version>2.0.0-ALPHA_1</version>
      <version>nightly</version>
      <version>3.19.0</version>
    </versions>
  </versioning>
</metadata>
"""

LISTING = """<html><body><pre>
<a href="../">../</a>
<a href="3.18.1/" title="3.18.1/">3.18.1/</a>                                           2020-11-08 10:15         -
<a href="3.19.0/" title="3.19.0/">3.19.0/</a>                                           2021-01-30 09:01         -
<a href="maven-metadata.xml" title="maven-metadata.xml">maven-metadata.xml</a>          2021-01-30 09:05      1234
</pre></body></html>
"""

BASE = "https://repo1.maven.org/maven2/org/assertj/assertj-core/"


def fake_get(responses):
    def _get(url, **kwargs):
        return responses.get(url, (404, {}, ""))
    return _get


class TestMavenCentralCatalog:
    """Reading versions from a Maven repository."""

    @patch("releasetrain.dependency.catalog.robust_get")
    def test_fetches_versions_with_creation_dates(self, mock_get):
        mock_get.side_effect = fake_get({
            BASE + "maven-metadata.xml": (200, {}, METADATA),
            BASE: (200, {}, LISTING),
        })

        versions = MavenCentralCatalog().fetch(ASSERTJ)

        assert [version.identifier for version in versions] == ["3.18.0", "3.18.1", "2.0.0-ALPHA_1", "3.19.0"]
        assert versions[1].created_at == datetime.datetime(2020, 11, 8, 10, 15)
        assert versions[0].created_at is None

    @patch("releasetrain.dependency.catalog.robust_get")
    def test_applies_exclusions(self, mock_get):
        mock_get.side_effect = fake_get({BASE + "maven-metadata.xml": (200, {}, METADATA)})

        dependency = ASSERTJ.exclude_versions_starting_with("2.")
        versions = MavenCentralCatalog(include_creation_dates=False).fetch(dependency)

        assert "2.0.0-ALPHA_1" not in [version.identifier for version in versions]
        mock_get.assert_called_once_with(BASE + "maven-metadata.xml")

    @patch("releasetrain.dependency.catalog.robust_get")
    def test_http_failure_yields_empty_list(self, mock_get):
        mock_get.return_value = (0, {}, "Request failed after 3 attempts: timeout")
        assert MavenCentralCatalog().fetch(ASSERTJ) == []

    @patch("releasetrain.dependency.catalog.robust_get")
    def test_malformed_metadata_yields_empty_list(self, mock_get):
        mock_get.return_value = (200, {}, "<metadata><versioning>")
        assert MavenCentralCatalog().fetch(ASSERTJ) == []

    def test_custom_base_url(self):
        catalog = MavenCentralCatalog("https://repo.example.com/releases/")
        assert catalog.artifact_url(ASSERTJ) == "https://repo.example.com/releases/org/assertj/assertj-core/"


class TestParsers:
    """Metadata and directory listing parsing."""

    def test_metadata_versions(self):
        assert parse_metadata_versions(METADATA)[-1] == "3.19.0"

    def test_creation_dates(self):
        assert parse_creation_dates(LISTING) == {
            "3.18.1": datetime.datetime(2020, 11, 8, 10, 15),
            "3.19.0": datetime.datetime(2021, 1, 30, 9, 1),
        }


class TestDependencyOperations:
    """Checking a set of dependencies for upgrades."""

    @pytest.fixture
    def operations(self):
        catalog = StaticCatalog({
            "org.assertj:assertj-core": ["3.18.0", "3.18.1", "3.19.0", "3.20.0-M1"],
            "io.reactivex.rxjava3:rxjava": ["3.0.7"],
        })
        return DependencyOperations(catalog, max_workers=2)

    @pytest.fixture
    def current(self):
        return {
            ASSERTJ: DependencyVersion.parse("3.18.0"),
            Dependency.of("RxJava 3", "io.reactivex.rxjava3:rxjava"): DependencyVersion.parse("3.0.7"),
        }

    def test_policy_follows_iteration(self, operations, current, train):
        ga = operations.check(train.get_iteration(GA), current)
        milestone = operations.check(train.get_iteration(M1), current)

        assert str(ga.get(ASSERTJ)) == "3.18.1"
        assert str(milestone.get(ASSERTJ)) == "3.20.0-M1"
        assert list(ga.upgrades()) == [ASSERTJ]

    def test_explicit_policy(self, operations, current, train):
        proposals = operations.check(train.get_iteration(GA), current, DependencyUpgradePolicy.LATEST_STABLE)
        assert str(proposals.get(ASSERTJ)) == "3.19.0"

    def test_no_dependencies(self, operations, train):
        assert len(operations.check(train.get_iteration(GA), {})) == 0

    def test_write_and_load(self, operations, current, train, tmp_path):
        iteration = train.get_iteration(GA)
        path = tmp_path / "upgrades.properties"

        operations.write_proposals(iteration, operations.check(iteration, current), path)
        versions = operations.load_proposals(iteration, current.keys(), path)

        assert versions.as_dict() == {ASSERTJ: DependencyVersion.parse("3.18.1")}
