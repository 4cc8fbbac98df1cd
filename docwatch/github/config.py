"""Configuration for the GitHub REST change and release sources."""

from __future__ import annotations

import dataclasses
import os

from docwatch.common.repo import parse_repo_slug

from .errors import GitHubConfigError

_DEFAULT_API_BASE = "https://api.github.com"
_DEFAULT_DOCS_REPO = "MicrosoftDocs/azure-aks-docs"
_DEFAULT_DOCS_ROOT = "articles/aks/"
_DEFAULT_RELEASES_REPO = "Azure/AKS"


def _read_positive_int(env_var: str, default: int) -> int:
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise GitHubConfigError.invalid_value(
            env_var, raw, "Must be a positive integer"
        ) from exc
    if value < 1:
        raise GitHubConfigError.invalid_value(
            env_var, raw, "Must be a positive integer"
        )
    return value


def _read_non_negative_float(env_var: str, default: float) -> float:
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise GitHubConfigError.invalid_value(
            env_var, raw, "Must be a non-negative number"
        ) from exc
    if value < 0:
        raise GitHubConfigError.invalid_value(
            env_var, raw, "Must be a non-negative number"
        )
    return value


def _read_slug(env_var: str, default: str) -> tuple[str, str]:
    raw = os.environ.get(env_var)
    if raw is None:
        return parse_repo_slug(default)
    if not raw.strip():
        raise GitHubConfigError.missing_repository(env_var)
    try:
        return parse_repo_slug(raw)
    except ValueError as exc:
        raise GitHubConfigError.invalid_value(
            env_var, raw, "Expected 'owner/name'"
        ) from exc


def _read_token() -> str | None:
    token = os.environ.get("DOCWATCH_GITHUB_TOKEN", "").strip()
    return token or None


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubSourceConfig:
    """Settings for reading change activity from the GitHub REST API.

    Attributes
    ----------
    owner, name
        Repository holding the documentation sources.
    token
        Optional bearer token. Anonymous access works against public
        repositories at a lower rate limit.
    docs_root
        Path prefix of the documentation tree; files outside it are ignored.
    per_page, max_pages
        Page size and upper bound on listing pages per endpoint.
    detail_delay_s
        Fixed pause between per-item detail requests.
    include_pull_requests
        Also read merged pull requests in addition to direct commits.

    """

    owner: str
    name: str
    token: str | None = None
    docs_root: str = _DEFAULT_DOCS_ROOT
    api_base: str = _DEFAULT_API_BASE
    timeout_s: float = 20.0
    user_agent: str = "docwatch/0.1"
    per_page: int = 30
    max_pages: int = 5
    detail_delay_s: float = 0.1
    include_pull_requests: bool = True

    @property
    def slug(self) -> str:
        """Return the ``owner/name`` slug."""
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_env(cls) -> GitHubSourceConfig:
        """Build configuration from ``DOCWATCH_*`` environment variables.

        Reads ``DOCWATCH_GITHUB_TOKEN``, ``DOCWATCH_DOCS_REPO``,
        ``DOCWATCH_DOCS_ROOT``, ``DOCWATCH_GITHUB_API_BASE``,
        ``DOCWATCH_GITHUB_PER_PAGE``, ``DOCWATCH_GITHUB_MAX_PAGES``,
        ``DOCWATCH_GITHUB_DETAIL_DELAY_S`` and
        ``DOCWATCH_INCLUDE_PULL_REQUESTS`` (``0``/``false`` disables).
        """
        owner, name = _read_slug("DOCWATCH_DOCS_REPO", _DEFAULT_DOCS_REPO)
        include_prs = os.environ.get("DOCWATCH_INCLUDE_PULL_REQUESTS", "true")
        return cls(
            owner=owner,
            name=name,
            token=_read_token(),
            docs_root=os.environ.get("DOCWATCH_DOCS_ROOT", _DEFAULT_DOCS_ROOT),
            api_base=os.environ.get("DOCWATCH_GITHUB_API_BASE", _DEFAULT_API_BASE),
            per_page=_read_positive_int("DOCWATCH_GITHUB_PER_PAGE", 30),
            max_pages=_read_positive_int("DOCWATCH_GITHUB_MAX_PAGES", 5),
            detail_delay_s=_read_non_negative_float(
                "DOCWATCH_GITHUB_DETAIL_DELAY_S", 0.1
            ),
            include_pull_requests=include_prs.strip().lower()
            not in {"0", "false", "no", "off"},
        )


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubReleaseConfig:
    """Settings for reading published releases."""

    owner: str
    name: str
    token: str | None = None
    api_base: str = _DEFAULT_API_BASE
    timeout_s: float = 20.0
    user_agent: str = "docwatch/0.1"
    limit: int = 5

    @classmethod
    def from_env(cls) -> GitHubReleaseConfig:
        """Build configuration from ``DOCWATCH_RELEASES_REPO`` and friends."""
        owner, name = _read_slug("DOCWATCH_RELEASES_REPO", _DEFAULT_RELEASES_REPO)
        return cls(
            owner=owner,
            name=name,
            token=_read_token(),
            api_base=os.environ.get("DOCWATCH_GITHUB_API_BASE", _DEFAULT_API_BASE),
            limit=_read_positive_int("DOCWATCH_RELEASES_LIMIT", 5),
        )
