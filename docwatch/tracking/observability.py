"""Structured log events for pipeline runs.

Events are emitted as ``[event.type] key=value`` lines through femtologging
so log aggregators can parse run outcomes without a metrics backend.
"""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

from docwatch.github.errors import (
    GitHubAuthError,
    GitHubConfigError,
    GitHubFetchError,
    GitHubRateLimitError,
)
from docwatch.logging import get_logger, log_error, log_info, log_warning
from docwatch.summary.errors import SummaryError

from .errors import StoreError, TrackerConfigError

if typ.TYPE_CHECKING:
    import datetime as dt

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500


class PipelineEventType(enum.StrEnum):
    """Structured log event types for pipeline runs."""

    RUN_STARTED = "pipeline.run.started"
    RUN_COMPLETED = "pipeline.run.completed"
    RUN_FAILED = "pipeline.run.failed"
    RUN_SKIPPED = "pipeline.run.skipped"
    SESSION_DROPPED = "pipeline.session.dropped"


class ErrorCategory(enum.StrEnum):
    """Categories for error classification in alerts."""

    AUTHENTICATION = "authentication"
    RATE_LIMITED = "rate_limited"
    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    CONFIGURATION = "configuration"
    STORAGE = "storage"
    ENRICHMENT = "enrichment"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubRateLimitError, ErrorCategory.RATE_LIMITED),
    (GitHubAuthError, ErrorCategory.AUTHENTICATION),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (TrackerConfigError, ErrorCategory.CONFIGURATION),
    (StoreError, ErrorCategory.STORAGE),
    (OSError, ErrorCategory.STORAGE),
    (SummaryError, ErrorCategory.ENRICHMENT),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize an exception for alerting purposes.

    Fetch errors without a status code (network failures) and 5xx responses
    are transient; other fetch errors are client errors.
    """
    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    if isinstance(exc, GitHubFetchError):
        if exc.status_code is None or exc.status_code >= _HTTP_SERVER_ERROR_THRESHOLD:
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    return ErrorCategory.UNKNOWN


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineRunContext:
    """Shared context for a single pipeline run."""

    pipeline: str
    repo_slug: str
    started_at: dt.datetime


class PipelineEventLogger:
    """Emit structured pipeline events via femtologging."""

    def log_run_started(self, context: PipelineRunContext, *, forced: bool) -> None:
        """Log pipeline run start."""
        log_info(
            logger,
            "[%s] pipeline=%s repo_slug=%s started_at=%s forced=%s",
            PipelineEventType.RUN_STARTED,
            context.pipeline,
            context.repo_slug,
            context.started_at.isoformat(),
            forced,
        )

    def log_run_skipped(
        self, context: PipelineRunContext, last_fetch: dt.datetime | None
    ) -> None:
        """Log a run skipped by the staleness gate."""
        log_info(
            logger,
            "[%s] pipeline=%s repo_slug=%s last_fetch=%s",
            PipelineEventType.RUN_SKIPPED,
            context.pipeline,
            context.repo_slug,
            last_fetch.isoformat() if last_fetch is not None else None,
        )

    def log_run_completed(  # noqa: PLR0913
        self,
        context: PipelineRunContext,
        *,
        fetched: int,
        added: int,
        evicted: int,
        retained: int,
        duration: dt.timedelta,
    ) -> None:
        """Log successful run completion with counts."""
        log_info(
            logger,
            "[%s] pipeline=%s repo_slug=%s duration_seconds=%.3f "
            "events_fetched=%d updates_added=%d updates_evicted=%d "
            "updates_retained=%d",
            PipelineEventType.RUN_COMPLETED,
            context.pipeline,
            context.repo_slug,
            duration.total_seconds(),
            fetched,
            added,
            evicted,
            retained,
        )

    def log_run_failed(
        self,
        context: PipelineRunContext,
        error: BaseException,
        duration: dt.timedelta,
    ) -> None:
        """Log failed run with error categorization."""
        log_error(
            logger,
            "[%s] pipeline=%s repo_slug=%s duration_seconds=%.3f "
            "error_type=%s error_category=%s error_message=%s",
            PipelineEventType.RUN_FAILED,
            context.pipeline,
            context.repo_slug,
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_session_dropped(
        self, context: PipelineRunContext, session_key: str, error: BaseException
    ) -> None:
        """Log a session dropped because no update could be built."""
        log_warning(
            logger,
            "[%s] pipeline=%s session_key=%s error_type=%s error_message=%s",
            PipelineEventType.SESSION_DROPPED,
            context.pipeline,
            session_key,
            type(error).__name__,
            str(error),
        )
