"""GitHub fetch errors.

``GitHubAuthError`` and ``GitHubRateLimitError`` abort a pipeline run;
``GitHubFetchError`` aborts it only when raised at the top level, as
per-item detail failures are skipped by the change source.
"""

from __future__ import annotations

import datetime as dt


class GitHubError(RuntimeError):
    """Base class for GitHub access failures."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)


class GitHubFetchError(GitHubError):
    """Raised for non-2xx responses and transport failures."""

    @classmethod
    def http_error(cls, status_code: int, endpoint: str) -> GitHubFetchError:
        """Return an error for a generic non-2xx HTTP response."""
        return cls(
            f"GitHub API HTTP {status_code} for {endpoint}", status_code=status_code
        )

    @classmethod
    def network_error(cls, endpoint: str, detail: str) -> GitHubFetchError:
        """Return an error for DNS, connection, TLS and timeout failures."""
        return cls(f"GitHub API request to {endpoint} failed: {detail}")

    @classmethod
    def invalid_json(cls, endpoint: str) -> GitHubFetchError:
        """Return an error for a body that is not the expected JSON shape."""
        return cls(f"GitHub API returned an unexpected body for {endpoint}")


class GitHubAuthError(GitHubError):
    """Raised when the credential is missing, invalid or lacks access."""

    @classmethod
    def rejected(cls, status_code: int) -> GitHubAuthError:
        """Return an error for a 401/403 response without rate-limit signals."""
        return cls(
            f"GitHub rejected the request with HTTP {status_code}; "
            "check DOCWATCH_GITHUB_TOKEN",
            status_code=status_code,
        )


class GitHubRateLimitError(GitHubError):
    """Raised when GitHub reports an exhausted rate limit.

    Attributes
    ----------
    reset_at
        When the limit resets, if the response headers allowed deriving it.

    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reset_at: dt.datetime | None = None,
    ) -> None:
        """Initialise with the reset time when known."""
        self.reset_at = reset_at
        super().__init__(message, status_code=status_code)

    @classmethod
    def exhausted(
        cls, status_code: int, reset_at: dt.datetime | None
    ) -> GitHubRateLimitError:
        """Return an error for an exhausted primary or secondary rate limit."""
        msg = f"GitHub API rate limit exceeded (HTTP {status_code})"
        if reset_at is not None:
            msg = f"{msg}; resets at {reset_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
        return cls(msg, status_code=status_code, reset_at=reset_at)


class GitHubConfigError(RuntimeError):
    """Raised when GitHub source configuration is invalid."""

    @classmethod
    def missing_repository(cls, env_var: str) -> GitHubConfigError:
        """Return an error when no repository slug is configured."""
        return cls(f"{env_var} is required (expected 'owner/name')")

    @classmethod
    def invalid_value(
        cls, env_var: str, value: str, constraint: str
    ) -> GitHubConfigError:
        """Return an error for an invalid numeric setting."""
        return cls(f"Invalid {env_var} {value!r}. {constraint}")
