"""Sources of published dependency versions."""

from __future__ import annotations

import datetime
import logging
import re
import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional

from releasetrain.common.http_client import robust_get
from releasetrain.common.logging_utils import extra_context, is_debug_enabled, Timer
from releasetrain.constants import Constants
from releasetrain.dependency.models import Dependency, DependencyVersion
from releasetrain.exceptions import VersionFormatError

logger = logging.getLogger(__name__)

# Entries of a repository directory listing: <a href="1.2.3/">1.2.3/</a>   2020-11-08 10:15  -
DIRECTORY_LISTING_ENTRY = re.compile(r"<a [^>]+>([^/]+)/</a>\s*(\d{4}-\d{2}-\d{2} \d{2}:\d{2})\s*-")
DIRECTORY_LISTING_TIME_FORMAT = "%Y-%m-%d %H:%M"


class VersionCatalog(ABC):
    """Lists the versions published for a dependency."""

    @abstractmethod
    def fetch(self, dependency: Dependency) -> List[DependencyVersion]:
        """Return all published versions the dependency does not exclude."""


class StaticCatalog(VersionCatalog):
    """In-memory catalog keyed by ``group:artifact`` coordinates."""

    def __init__(self, versions: Mapping[str, Iterable[str]]):
        self._versions: Dict[str, List[str]] = {key: list(value) for key, value in versions.items()}

    def fetch(self, dependency: Dependency) -> List[DependencyVersion]:
        return [DependencyVersion.parse(identifier)
                for identifier in self._versions.get(dependency.coordinates, [])
                if dependency.should_include(identifier)]


class MavenCentralCatalog(VersionCatalog):
    """Reads ``maven-metadata.xml`` of a Maven repository layout.

    Args:
        base_url: Repository root, Maven Central by default.
        include_creation_dates: Also read the artifact's directory listing to
            attach creation dates to the versions.
    """

    def __init__(self, base_url: Optional[str] = None, include_creation_dates: bool = True):
        self.base_url = (base_url or Constants.MAVEN_CENTRAL_URL).rstrip("/")
        self.include_creation_dates = include_creation_dates

    def artifact_url(self, dependency: Dependency) -> str:
        return f"{self.base_url}/{dependency.group_id.replace('.', '/')}/{dependency.artifact_id}/"

    def fetch(self, dependency: Dependency) -> List[DependencyVersion]:
        """Fetch the versions of a dependency.

        Transport or HTTP failures and malformed metadata yield an empty list
        and a warning; unparsable version identifiers are skipped.
        """
        url = self.artifact_url(dependency)

        with Timer() as timer:
            status_code, _, text = robust_get(url + "maven-metadata.xml")

        if status_code != 200 or not text:
            logger.warning(
                "Cannot fetch versions for %s (status %s)",
                dependency,
                status_code,
                extra=extra_context(
                    event="fetch_versions",
                    component="maven_catalog",
                    outcome="failure",
                    dependency=str(dependency),
                    status_code=status_code,
                )
            )
            return []

        try:
            identifiers = parse_metadata_versions(text)
        except ET.ParseError as exc:
            logger.warning("Malformed maven-metadata.xml for %s: %s", dependency, exc)
            return []

        creation_dates = self._creation_dates(url) if self.include_creation_dates else {}

        versions: List[DependencyVersion] = []
        for identifier in identifiers:
            if not dependency.should_include(identifier):
                continue
            try:
                version = DependencyVersion.parse(identifier)
            except VersionFormatError:
                logger.warning("Skipping unparsable version %s of %s", identifier, dependency)
                continue
            versions.append(version.with_created_at(creation_dates.get(identifier)))

        if is_debug_enabled(logger):
            logger.debug(
                "Fetched versions",
                extra=extra_context(
                    event="fetch_versions",
                    component="maven_catalog",
                    outcome="success",
                    dependency=str(dependency),
                    count=len(versions),
                    duration_ms=timer.duration_ms(),
                )
            )
        return versions

    def _creation_dates(self, url: str) -> Dict[str, datetime.datetime]:
        status_code, _, text = robust_get(url)
        if status_code != 200 or not text:
            logger.debug("No directory listing at %s (status %s)", url, status_code)
            return {}
        return parse_creation_dates(text)


def parse_metadata_versions(text: str) -> List[str]:
    """Version identifiers listed under ``metadata/versioning/versions``.

    Raises:
        xml.etree.ElementTree.ParseError: for malformed XML.
    """
    root = ET.fromstring(text)
    versions = []
    for element in root.findall("./versioning/versions/version"):
        if element.text and element.text.strip():
            versions.append(element.text.strip())
    return versions


def parse_creation_dates(listing: str) -> Dict[str, datetime.datetime]:
    """Map version directory names of an HTML listing to their timestamps."""
    dates: Dict[str, datetime.datetime] = {}
    for match in DIRECTORY_LISTING_ENTRY.finditer(listing):
        try:
            dates[match.group(1)] = datetime.datetime.strptime(match.group(2), DIRECTORY_LISTING_TIME_FORMAT)
        except ValueError:
            continue
    return dates
