"""Constants used in the project."""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ExitCodes(Enum):
    """Exit codes for release runs.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    BUILD_FAILED = 1
    CONFIGURATION_ERROR = 2
    VERIFICATION_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    ENV_CONFIG = "RELEASETRAIN_CONFIG"
    ENV_LOG_LEVEL = "RELEASETRAIN_LOG_LEVEL"
    LOG_FORMAT = "[%(levelname)s] %(message)s"

    # Build execution
    PARALLELIZE = True
    MAX_WORKERS = None  # derived from the CPU count when unset

    # Artifact repositories
    MAVEN_CENTRAL_URL = "https://repo1.maven.org/maven2"
    REPOSITORY_BASE_URL = "https://repo.spring.io/libs-"
    REPOSITORY_ID_PREFIX = "spring-libs-"
    DEPLOYMENT_REPOSITORY_PREFIX = ""

    # HTTP client
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3
    HTTP_CACHE_TTL_SEC = 300

    # Dependency checks
    DEPENDENCY_CHECK_CONCURRENCY = 4
    PROPOSAL_FILE = "dependency-upgrade-build.properties"


# YAML keys mapped onto Constants attributes
_CONFIG_KEYS: Dict[str, Dict[str, str]] = {
    "build": {
        "parallelize": "PARALLELIZE",
        "max_workers": "MAX_WORKERS",
    },
    "repository": {
        "maven_central_url": "MAVEN_CENTRAL_URL",
        "base_url": "REPOSITORY_BASE_URL",
        "id_prefix": "REPOSITORY_ID_PREFIX",
        "deployment_prefix": "DEPLOYMENT_REPOSITORY_PREFIX",
    },
    "http": {
        "request_timeout": "REQUEST_TIMEOUT",
        "retry_max": "HTTP_RETRY_MAX",
        "retry_base_delay_sec": "HTTP_RETRY_BASE_DELAY_SEC",
        "cache_ttl_sec": "HTTP_CACHE_TTL_SEC",
    },
    "dependency": {
        "check_concurrency": "DEPENDENCY_CHECK_CONCURRENCY",
        "proposal_file": "PROPOSAL_FILE",
    },
}


def apply_config(config: Dict[str, Any]) -> None:
    """Apply a parsed configuration mapping onto Constants.

    Unknown sections and keys are ignored; values of the wrong shape are
    logged and skipped.
    """
    for section, keys in _CONFIG_KEYS.items():
        values = config.get(section)
        if values is None:
            continue
        if not isinstance(values, dict):
            logger.warning("Ignoring config section '%s': expected a mapping", section)
            continue
        for key, attribute in keys.items():
            if key in values:
                setattr(Constants, attribute, values[key])


def load_yaml_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load YAML configuration and apply it onto Constants.

    The path defaults to the RELEASETRAIN_CONFIG environment variable. A
    missing or malformed file never breaks a run; it is logged and the
    defaults stay in place.

    Returns:
        The parsed configuration mapping (empty when nothing was loaded).
    """
    path = path or os.environ.get(Constants.ENV_CONFIG)
    if not path:
        return {}
    if not os.path.isfile(path):
        logger.warning("Config file not found: %s", path)
        return {}

    import yaml  # pylint: disable=import-outside-toplevel

    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.error("Failed to load config %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        logger.error("Failed to load config %s: top level must be a mapping", path)
        return {}

    apply_config(data)
    return data
