"""Exceptions raised by summarization backends."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

_CONTENT_PREVIEW_LIMIT = 100


class SummaryError(Exception):
    """Base exception for every summarization failure."""


class EnrichmentUnavailable(SummaryError):  # noqa: N818
    """Raised when the summarization provider cannot produce a result.

    Always recoverable: callers fall back to heuristic summaries.
    """


class OpenAIAPIError(EnrichmentUnavailable):
    """Raised when the chat completions endpoint fails.

    Attributes
    ----------
    status_code
        HTTP status code from the API response, if available.

    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise the error with message and optional status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> OpenAIAPIError:
        """Create error for HTTP error responses."""
        return cls(f"OpenAI API HTTP error {status_code}", status_code=status_code)

    @classmethod
    def rate_limited(cls, retry_after: int | None = None) -> OpenAIAPIError:
        """Create error for rate limit (429) responses.

        Parameters
        ----------
        retry_after
            Seconds to wait before retrying, from the Retry-After header.

        """
        msg = "OpenAI API rate limited"
        if retry_after is not None:
            msg = f"{msg}, retry after {retry_after}s"
        return cls(msg, status_code=429)

    @classmethod
    def timeout(cls) -> OpenAIAPIError:
        """Create error for request timeouts."""
        return cls("OpenAI API request timed out")

    @classmethod
    def network_error(cls, detail: str) -> OpenAIAPIError:
        """Create error for DNS, connection and TLS failures."""
        return cls(f"OpenAI API network error: {detail}")


class OpenAIResponseShapeError(EnrichmentUnavailable):
    """Raised when a completion response is missing fields or malformed."""

    @classmethod
    def missing(cls, field: str) -> OpenAIResponseShapeError:
        """Create error for a missing response field."""
        return cls(f"OpenAI response missing expected field: {field}")

    @classmethod
    def invalid_json(cls, content: str) -> OpenAIResponseShapeError:
        """Create error for a body that is not JSON, with a short preview."""
        if len(content) > _CONTENT_PREVIEW_LIMIT:
            preview = content[:_CONTENT_PREVIEW_LIMIT] + "..."
        else:
            preview = content
        return cls(f"Failed to parse JSON from response: {preview}")


class OpenAIConfigError(SummaryError):
    """Raised when OpenAI client configuration is invalid."""

    @classmethod
    def missing_api_key(cls) -> OpenAIConfigError:
        """Create error for a missing ``DOCWATCH_OPENAI_API_KEY``."""
        return cls("DOCWATCH_OPENAI_API_KEY environment variable is required")

    @classmethod
    def empty_api_key(cls) -> OpenAIConfigError:
        """Create error for a blank API key."""
        return cls("OpenAI API key must be non-empty")


class SummarizerConfigError(SummaryError):
    """Raised when summarizer backend selection or tuning is invalid."""

    @classmethod
    def invalid_backend(
        cls, name: str, valid_backends: cabc.Iterable[str]
    ) -> SummarizerConfigError:
        """Create error for an unrecognised backend name.

        Parameters
        ----------
        name
            The backend name that was provided.
        valid_backends
            Iterable of valid backend names.

        Returns
        -------
        SummarizerConfigError
            Error listing valid backend options.

        """
        valid = ", ".join(f"'{backend}'" for backend in sorted(valid_backends))
        return cls(
            f"Invalid summarizer backend '{name}'. Valid options are: {valid}"
        )

    @classmethod
    def invalid_parameter(
        cls, parameter_name: str, value: str, constraint: str
    ) -> SummarizerConfigError:
        """Create error for a parameter value outside its constraint."""
        return cls(f"Invalid {parameter_name} '{value}'. {constraint}")
