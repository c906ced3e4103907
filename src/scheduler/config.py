"""Central configuration constants for the nightly Travis build scheduler."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List

from .errors import ConfigurationError

GITHUB_TOKEN_ENV = "GITHUB_TOKEN"
USER_AGENT = "SonarSource"
CONNECT_TIMEOUT = 90
READ_TIMEOUT = 90
REQUEST_TIMEOUT = (CONNECT_TIMEOUT, READ_TIMEOUT)
THROTTLE_SEC = 15
FAILURE_RATIO_THRESHOLD = 0.3
DEFAULT_BRANCH = "master"
BUILD_MESSAGE = "Nightly build launched from the travis-scheduler job on AppVeyor"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
V3_OWNER_INCLUDE = "user.repositories,organization.repositories,repository.active"

SHAPE_LEGACY = "legacy"
SHAPE_V3 = "v3"

TRAVIS_COM = "https://api.travis-ci.com"
TRAVIS_ORG = "https://api.travis-ci.org"


@dataclass(frozen=True)
class ScheduleEntry:
    """One owner to rebuild on one CI host, with the discovery shape to use."""

    endpoint: str
    owner: str
    shape: str = SHAPE_LEGACY


SCHEDULE: List[ScheduleEntry] = [
    ScheduleEntry(TRAVIS_COM, "SonarSource", SHAPE_V3),
    ScheduleEntry(TRAVIS_ORG, "SonarSource", SHAPE_LEGACY),
    # ScheduleEntry(TRAVIS_ORG, "SonarCommunity", SHAPE_LEGACY),
]


def load_github_token() -> str:
    """Return the GitHub token from the environment or fail before any network call."""
    token = os.getenv(GITHUB_TOKEN_ENV)
    if not token:
        raise ConfigurationError(f"Mandatory environment variable {GITHUB_TOKEN_ENV} is missing!")
    return token


__all__ = [
    "GITHUB_TOKEN_ENV",
    "USER_AGENT",
    "CONNECT_TIMEOUT",
    "READ_TIMEOUT",
    "REQUEST_TIMEOUT",
    "THROTTLE_SEC",
    "FAILURE_RATIO_THRESHOLD",
    "DEFAULT_BRANCH",
    "BUILD_MESSAGE",
    "JSON_CONTENT_TYPE",
    "V3_OWNER_INCLUDE",
    "SHAPE_LEGACY",
    "SHAPE_V3",
    "TRAVIS_COM",
    "TRAVIS_ORG",
    "ScheduleEntry",
    "SCHEDULE",
    "load_github_token",
]
