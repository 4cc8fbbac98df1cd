"""GitHub REST sources for documentation changes and releases."""

from __future__ import annotations

from .client import ChangeEventSource, GitHubChangeSource, GitHubRestClient
from .config import GitHubReleaseConfig, GitHubSourceConfig
from .errors import (
    GitHubAuthError,
    GitHubConfigError,
    GitHubError,
    GitHubFetchError,
    GitHubRateLimitError,
)
from .models import ChangeEvent, ChangeKind, ChangeStatus, ReleaseRecord
from .noise import DEFAULT_NOISE_RULES, NoiseFilter, NoiseRule
from .releases import GitHubReleaseSource, ReleaseSource

__all__ = [
    "DEFAULT_NOISE_RULES",
    "ChangeEvent",
    "ChangeEventSource",
    "ChangeKind",
    "ChangeStatus",
    "GitHubAuthError",
    "GitHubChangeSource",
    "GitHubConfigError",
    "GitHubError",
    "GitHubFetchError",
    "GitHubRateLimitError",
    "GitHubReleaseConfig",
    "GitHubReleaseSource",
    "GitHubRestClient",
    "GitHubSourceConfig",
    "NoiseFilter",
    "NoiseRule",
    "ReleaseRecord",
    "ReleaseSource",
]
