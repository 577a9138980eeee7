"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    RESOLUTION_ERROR = 1
    CONNECTION_ERROR = 2
    FILE_ERROR = 3


class Registry(Enum):
    """Package registries supported by the program.

    Args:
        Enum (string): Package registries supported by the program.
    """

    NPM = "npm"
    PYPI = "pypi"
    CRATES = "crates"
    MAVEN = "maven"
    NUGET = "nuget"
    PACKAGIST = "packagist"


# Explicit scheme prefixes, matched case-insensitively against raw specifiers.
REGISTRY_PREFIXES = {
    "npm:": Registry.NPM,
    "pypi:": Registry.PYPI,
    "pip:": Registry.PYPI,
    "python:": Registry.PYPI,
    "crates:": Registry.CRATES,
    "cargo:": Registry.CRATES,
    "rust:": Registry.CRATES,
    "maven:": Registry.MAVEN,
    "mvn:": Registry.MAVEN,
    "java:": Registry.MAVEN,
    "nuget:": Registry.NUGET,
    "dotnet:": Registry.NUGET,
    "packagist:": Registry.PACKAGIST,
    "composer:": Registry.PACKAGIST,
    "php:": Registry.PACKAGIST,
}

# Registry used for unprefixed, non-repository input.
DEFAULT_REGISTRY = Registry.NPM


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    REGISTRY_URL_PYPI = "https://pypi.org/pypi/"
    REGISTRY_URL_CRATES = "https://crates.io/api/v1/crates/"
    REGISTRY_URL_MAVEN = "https://search.maven.org/solrsearch/select"
    REGISTRY_URL_MAVEN_REPO = "https://repo1.maven.org/maven2/"
    REGISTRY_URL_NUGET_V3 = "https://api.nuget.org/v3/index.json"
    REGISTRY_URL_PACKAGIST = "https://repo.packagist.org/p2/"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "SRCPIN_LOG_LEVEL"
    ENV_CONFIG = "SRCPIN_CONFIG"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "srcpin (+https://pypi.org/project/srcpin/)"

    # Repository hosting
    ALLOWED_GIT_HOSTS = ["github.com", "gitlab.com", "bitbucket.org"]
    DEFAULT_REPO_HOST = "github.com"
    DEFAULT_BRANCH_FALLBACK = "main"
    GITHUB_API_BASE = "https://api.github.com"
    GITLAB_API_BASE = "https://gitlab.com/api/v4"
    BITBUCKET_API_BASE = "https://api.bitbucket.org/2.0"
    ENV_GITHUB_TOKEN = ["SRCPIN_GITHUB_TOKEN", "GITHUB_TOKEN"]
    ENV_GITLAB_TOKEN = ["SRCPIN_GITLAB_TOKEN", "GITLAB_TOKEN"]

    # Resolution
    NO_TAG_SENTINELS = ["HEAD", ""]
    RECENT_VERSIONS_LIMIT = 5
    MAVEN_VERSION_ROWS = 100
    MAVEN_PARENT_MAX_DEPTH = 8
