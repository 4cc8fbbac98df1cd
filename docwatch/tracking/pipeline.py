"""Documentation and release tracking pipelines.

Each run loads the persisted state, consults the staleness gate, fetches
upstream changes, builds new updates and merges them into the stored list.
Top-level failures leave the store untouched and are reported as a
``FAILED`` :class:`PipelineResult` carrying the previously stored updates.
"""

from __future__ import annotations

import abc
import dataclasses
import datetime as dt
import enum
import time
import typing as typ

from docwatch.common.time import utcnow, window_start
from docwatch.github.errors import GitHubError
from docwatch.github.noise import NoiseFilter
from docwatch.logging import get_logger, log_info, log_warning
from docwatch.summary.enrich import enrich_sessions

from .classifier import DocumentLocator
from .config import TrackerConfig
from .errors import TrackingError, UpdateConstructionError
from .grouping import GroupingConfig, group_events
from .merge import merge_updates
from .observability import PipelineEventLogger, PipelineRunContext
from .updates import (
    RELEASE_BODY_THRESHOLD,
    build_release_update,
    build_update,
    disambiguate_row_keys,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.github.client import ChangeEventSource
    from docwatch.github.models import ReleaseRecord
    from docwatch.github.releases import ReleaseSource
    from docwatch.summary.enrich import EnrichedSession
    from docwatch.summary.models import ReleaseAnalysis
    from docwatch.summary.protocol import ReleaseSummarizer, Summarizer

    from .models import StoredState, Update
    from .store import UpdateRepository

logger = get_logger(__name__)

Clock: typ.TypeAlias = "cabc.Callable[[], dt.datetime]"


class PipelineStatus(enum.StrEnum):
    """Outcome of a pipeline run."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclasses.dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outcome of one run plus the updates a caller should display.

    Attributes
    ----------
    status
        Whether the run completed, was skipped by the staleness gate, or
        failed.
    updates
        Stored updates after the run; for skipped and failed runs, the
        updates persisted by the last successful run.
    fetched
        Upstream records read during the run.
    added
        New updates built during the run.
    evicted
        Stored updates removed for falling outside the window.
    error
        The failure, for ``FAILED`` runs.

    """

    status: PipelineStatus
    updates: tuple[Update, ...] = ()
    last_fetch: dt.datetime | None = None
    fetched: int = 0
    added: int = 0
    evicted: int = 0
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Return True unless the run failed."""
        return self.status is not PipelineStatus.FAILED

    @property
    def retained(self) -> int:
        """Number of updates held after the run."""
        return len(self.updates)


def should_run(
    last_fetch: dt.datetime | None,
    now: dt.datetime,
    min_interval: dt.timedelta,
) -> bool:
    """Return True when the last fetch is older than ``min_interval``.

    >>> import datetime as dt
    >>> now = dt.datetime(2025, 1, 2, tzinfo=dt.UTC)
    >>> should_run(None, now, dt.timedelta(hours=12))
    True
    >>> should_run(now - dt.timedelta(hours=1), now, dt.timedelta(hours=12))
    False
    """
    if last_fetch is None:
        return True
    return now - last_fetch >= min_interval


@dataclasses.dataclass(frozen=True, slots=True)
class _RunOutcome:
    updates: list[Update]
    fetched: int
    added: int


class _TrackingPipeline(abc.ABC):
    """Load, gate, execute and save; subclasses supply the execute step."""

    name: typ.ClassVar[str]

    def __init__(
        self,
        store: UpdateRepository,
        *,
        config: TrackerConfig | None,
        repo_slug: str,
        event_logger: PipelineEventLogger | None,
        clock: Clock,
    ) -> None:
        self._store = store
        self._config = config or TrackerConfig()
        self._repo_slug = repo_slug
        self._events = event_logger or PipelineEventLogger()
        self._clock = clock

    @property
    @abc.abstractmethod
    def window_days(self) -> int:
        """Length of the eviction window in days."""

    @abc.abstractmethod
    async def _execute(
        self,
        state: StoredState,
        window: dt.datetime,
        context: PipelineRunContext,
    ) -> _RunOutcome:
        """Fetch, build and merge; raise on top-level failure."""

    async def run(self, *, force: bool = False) -> PipelineResult:
        """Run the pipeline once.

        Parameters
        ----------
        force
            Ignore the staleness gate.

        Returns
        -------
        PipelineResult
            ``SKIPPED`` when the last fetch is recent, ``FAILED`` when
            fetching or persisting failed, ``COMPLETED`` otherwise.

        """
        now = self._clock()
        context = PipelineRunContext(self.name, self._repo_slug, now)
        started = time.monotonic()

        try:
            state = await self._store.load()
        except (TrackingError, OSError) as exc:
            self._events.log_run_failed(context, exc, self._elapsed(started))
            return PipelineResult(status=PipelineStatus.FAILED, error=exc)

        previous = tuple(state.updates)
        if not force and not should_run(
            state.last_fetch, now, self._config.min_fetch_interval
        ):
            self._events.log_run_skipped(context, state.last_fetch)
            return PipelineResult(
                status=PipelineStatus.SKIPPED,
                updates=previous,
                last_fetch=state.last_fetch,
            )

        self._events.log_run_started(context, forced=force)
        window = window_start(now, self.window_days)
        try:
            outcome = await self._execute(state, window, context)
            await self._store.save(outcome.updates, now)
        except (GitHubError, TrackingError, OSError) as exc:
            self._events.log_run_failed(context, exc, self._elapsed(started))
            return PipelineResult(
                status=PipelineStatus.FAILED,
                updates=previous,
                last_fetch=state.last_fetch,
                error=exc,
            )

        evicted = sum(1 for update in previous if update.date < window)
        self._events.log_run_completed(
            context,
            fetched=outcome.fetched,
            added=outcome.added,
            evicted=evicted,
            retained=len(outcome.updates),
            duration=self._elapsed(started),
        )
        return PipelineResult(
            status=PipelineStatus.COMPLETED,
            updates=tuple(outcome.updates),
            last_fetch=now,
            fetched=outcome.fetched,
            added=outcome.added,
            evicted=evicted,
        )

    @staticmethod
    def _elapsed(started: float) -> dt.timedelta:
        return dt.timedelta(seconds=time.monotonic() - started)


class DocsUpdatePipeline(_TrackingPipeline):
    """Turn recent documentation commits and pull requests into updates.

    Examples
    --------
    >>> pipeline = DocsUpdatePipeline(source, store)  # doctest: +SKIP
    >>> result = asyncio.run(pipeline.run(force=True))  # doctest: +SKIP
    >>> result.status  # doctest: +SKIP
    <PipelineStatus.COMPLETED: 'completed'>

    """

    name = "docs"

    def __init__(  # noqa: PLR0913
        self,
        source: ChangeEventSource,
        store: UpdateRepository,
        *,
        config: TrackerConfig | None = None,
        summarizer: Summarizer | None = None,
        noise_filter: NoiseFilter | None = None,
        grouping: GroupingConfig | None = None,
        locator: DocumentLocator | None = None,
        repo_slug: str = "",
        event_logger: PipelineEventLogger | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Wire the pipeline's collaborators; all but source and store default."""
        super().__init__(
            store,
            config=config,
            repo_slug=repo_slug,
            event_logger=event_logger,
            clock=clock,
        )
        self._source = source
        self._summarizer = summarizer
        self._noise = noise_filter or NoiseFilter()
        self._grouping = grouping or GroupingConfig()
        self._locator = locator or DocumentLocator(base_url=self._config.docs_base_url)

    @property
    def window_days(self) -> int:
        """Documentation eviction window in days."""
        return self._config.window_days

    async def _execute(
        self,
        state: StoredState,
        window: dt.datetime,
        context: PipelineRunContext,
    ) -> _RunOutcome:
        events = await self._source.fetch_since(window)
        kept = self._noise.filter_events(events)
        log_info(
            logger,
            "Kept %d of %d change events after noise filtering",
            len(kept),
            len(events),
        )
        sessions = group_events(
            kept, url_for=self._locator.url_for, config=self._grouping
        )
        enriched = await enrich_sessions(
            sessions, self._summarizer, min_confidence=self._config.min_confidence
        )
        new_updates = self._build_updates(enriched, context)
        merged = merge_updates(
            new_updates,
            state.updates,
            window_start=window,
            cap=self._config.max_updates,
        )
        return _RunOutcome(merged, fetched=len(events), added=len(new_updates))

    def _build_updates(
        self,
        enriched: cabc.Iterable[EnrichedSession],
        context: PipelineRunContext,
    ) -> list[Update]:
        updates: list[Update] = []
        for item in enriched:
            try:
                updates.append(build_update(item.session, item.verdict))
            except UpdateConstructionError as exc:
                self._events.log_session_dropped(context, item.session.key, exc)
        return disambiguate_row_keys(updates)


class ReleasesPipeline(_TrackingPipeline):
    """Track the latest published product releases as updates."""

    name = "releases"

    def __init__(  # noqa: PLR0913
        self,
        source: ReleaseSource,
        store: UpdateRepository,
        *,
        config: TrackerConfig | None = None,
        summarizer: ReleaseSummarizer | None = None,
        repo_slug: str = "",
        event_logger: PipelineEventLogger | None = None,
        clock: Clock = utcnow,
    ) -> None:
        """Wire the pipeline's collaborators; all but source and store default."""
        super().__init__(
            store,
            config=config,
            repo_slug=repo_slug,
            event_logger=event_logger,
            clock=clock,
        )
        self._source = source
        self._summarizer = summarizer

    @property
    def window_days(self) -> int:
        """Release eviction window in days."""
        return self._config.releases_window_days

    async def _analyze(
        self, releases: cabc.Sequence[ReleaseRecord]
    ) -> dict[str, ReleaseAnalysis]:
        eligible = [
            release
            for release in releases
            if len(release.body.strip()) > RELEASE_BODY_THRESHOLD
        ]
        if self._summarizer is None or not eligible:
            return {}
        try:
            return await self._summarizer.analyze_releases(eligible)
        except Exception as exc:  # noqa: BLE001
            log_warning(
                logger,
                "Release analysis failed (%s); using fallback summaries",
                type(exc).__name__,
                exc_info=exc,
            )
            return {}

    async def _execute(
        self,
        state: StoredState,
        window: dt.datetime,
        context: PipelineRunContext,
    ) -> _RunOutcome:
        releases = await self._source.fetch_latest()
        analyses = await self._analyze(releases)
        new_updates = [
            build_release_update(release, analyses.get(release.tag_name))
            for release in releases
        ]
        merged = merge_updates(
            new_updates,
            state.updates,
            window_start=window,
            cap=self._config.max_releases,
        )
        return _RunOutcome(merged, fetched=len(releases), added=len(new_updates))
