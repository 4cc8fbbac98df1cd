"""Builders and in-memory collaborators for docwatch tests."""

from __future__ import annotations

import asyncio
import dataclasses
import datetime as dt
import typing as typ

from docwatch.github.models import ChangeEvent, ChangeKind, ChangeStatus, ReleaseRecord
from docwatch.tracking.models import StoredState, Update

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.summary.models import ReleaseAnalysis, Verdict
    from docwatch.tracking.grouping import Session

T = typ.TypeVar("T")

BASE_TIME = dt.datetime(2025, 3, 10, 12, 0, tzinfo=dt.UTC)


def run_async(coro: typ.Coroutine[typ.Any, typ.Any, T]) -> T:
    """Run async coroutines in sync test code and BDD steps."""
    return asyncio.run(coro)


def make_event(  # noqa: PLR0913
    path: str = "articles/aks/networking-overview.md",
    *,
    event_id: str = "c1",
    message: str = "Document the new outbound type",
    author: str = "alice",
    timestamp: dt.datetime = BASE_TIME,
    additions: int = 10,
    deletions: int = 2,
    status: ChangeStatus = ChangeStatus.MODIFIED,
    kind: ChangeKind = ChangeKind.COMMIT,
    patch_sample: str | None = None,
) -> ChangeEvent:
    """Build a change event with sensible defaults."""
    return ChangeEvent(
        path=path,
        status=status,
        additions=additions,
        deletions=deletions,
        timestamp=timestamp,
        author=author,
        message=message,
        source_url=f"https://github.com/MicrosoftDocs/azure-aks-docs/commit/{event_id}",
        event_id=event_id,
        kind=kind,
        patch_sample=patch_sample,
    )


def make_update(  # noqa: PLR0913
    row_key: str,
    *,
    url: str = "https://learn.microsoft.com/azure/aks/a",
    date: dt.datetime = BASE_TIME,
    title: str = "A",
    summary: str = "Summary",
    impact: str = "",
    category: str = "General",
    commits: tuple[str, ...] | None = None,
) -> Update:
    """Build an update record with sensible defaults."""
    return Update(
        partition_key=date.date().isoformat(),
        row_key=row_key,
        title=title,
        category=category,
        date=date,
        url=url,
        summary=summary,
        impact=impact,
        commits=commits if commits is not None else (row_key,),
    )


def make_release(  # noqa: PLR0913
    tag: str = "v20250301",
    *,
    release_id: str = "101",
    body: str = "",
    published_at: dt.datetime = BASE_TIME,
    prerelease: bool = False,
    name: str | None = None,
) -> ReleaseRecord:
    """Build a published release record."""
    return ReleaseRecord(
        release_id=release_id,
        tag_name=tag,
        name=name or f"Release {tag}",
        body=body,
        published_at=published_at,
        html_url=f"https://github.com/Azure/AKS/releases/tag/{tag}",
        prerelease=prerelease,
    )


class InMemoryUpdateStore:
    """UpdateRepository keeping state in memory."""

    def __init__(
        self,
        updates: cabc.Iterable[Update] = (),
        *,
        last_fetch: dt.datetime | None = None,
        load_error: Exception | None = None,
    ) -> None:
        """Seed the store with existing state."""
        self.state = StoredState(updates=list(updates), last_fetch=last_fetch)
        self.saves = 0
        self._load_error = load_error

    async def load(self) -> StoredState:
        """Return a copy of the stored state."""
        if self._load_error is not None:
            raise self._load_error
        return StoredState(
            updates=list(self.state.updates), last_fetch=self.state.last_fetch
        )

    async def save(
        self, updates: cabc.Sequence[Update], last_fetch: dt.datetime
    ) -> None:
        """Replace the stored state."""
        self.saves += 1
        self.state = StoredState(updates=list(updates), last_fetch=last_fetch)


@dataclasses.dataclass(slots=True)
class StaticChangeSource:
    """ChangeEventSource returning fixed events or raising a fixed error."""

    events: list[ChangeEvent] = dataclasses.field(default_factory=list)
    error: Exception | None = None
    cutoffs: list[dt.datetime] = dataclasses.field(default_factory=list)

    async def fetch_since(self, cutoff: dt.datetime) -> list[ChangeEvent]:
        """Record the cutoff and return the configured events."""
        self.cutoffs.append(cutoff)
        if self.error is not None:
            raise self.error
        return list(self.events)


@dataclasses.dataclass(slots=True)
class StaticReleaseSource:
    """ReleaseSource returning fixed releases."""

    releases: list[ReleaseRecord] = dataclasses.field(default_factory=list)
    error: Exception | None = None

    async def fetch_latest(self) -> list[ReleaseRecord]:
        """Return the configured releases."""
        if self.error is not None:
            raise self.error
        return list(self.releases)


@dataclasses.dataclass(slots=True)
class FakeSummarizer:
    """Summarizer returning canned verdicts or raising."""

    verdicts: dict[str, Verdict] = dataclasses.field(default_factory=dict)
    error: Exception | None = None
    calls: list[list[str]] = dataclasses.field(default_factory=list)

    async def classify_sessions(
        self, sessions: cabc.Sequence[Session]
    ) -> dict[str, Verdict]:
        """Record the session keys and return the canned verdicts."""
        self.calls.append([session.key for session in sessions])
        if self.error is not None:
            raise self.error
        return dict(self.verdicts)


@dataclasses.dataclass(slots=True)
class FakeReleaseSummarizer:
    """ReleaseSummarizer returning canned analyses or raising."""

    analyses: dict[str, ReleaseAnalysis] = dataclasses.field(default_factory=dict)
    error: Exception | None = None
    calls: list[list[str]] = dataclasses.field(default_factory=list)

    async def analyze_releases(
        self, releases: cabc.Sequence[ReleaseRecord]
    ) -> dict[str, ReleaseAnalysis]:
        """Record the tags and return the canned analyses."""
        self.calls.append([release.tag_name for release in releases])
        if self.error is not None:
            raise self.error
        return dict(self.analyses)
