"""Constants used in the project."""

import os
from enum import Enum
from pathlib import Path


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    RESOLUTION_ERROR = 3
    NOT_FOUND = 4


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration defaults; not intended to provide behavior.
    """

    MAVEN_CENTRAL = "https://repo.maven.apache.org/maven2/"
    # FIXME: mvn also honours settings.xml <localRepository>, which is not read here
    MAVEN_LOCAL = Path(os.environ.get("M2_REPO", Path.home() / ".m2" / "repository"))
    DEFAULT_CACHE_DIR = Path.home() / ".cache" / "mvnresolve"

    METADATA_FILE = "maven-metadata.xml"
    NOLOOKUP_SUFFIX = ".nolookup"
    POM_EXTENSION = "pom"
    JAR_EXTENSION = "jar"
    SOURCES_CLASSIFIER = "sources"
    ANNOTATIONS_CLASSIFIER = "annotations"
    ANNOTATIONS_EXTENSION = "zip"

    MAX_RESOLUTION_DEPTH = 128
    MAX_PARENT_DEPTH = 32
    MAX_PLACEHOLDER_PASSES = 32

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "mvnresolve/0.1"

    ENV_CACHE_DIR = "MVNRESOLVE_CACHE_DIR"
    ENV_REPOSITORIES = "MVNRESOLVE_REPOSITORIES"
    ENV_LOG_LEVEL = "MVNRESOLVE_LOG_LEVEL"
    ENV_LOG_FORMAT = "MVNRESOLVE_LOG_FORMAT"
