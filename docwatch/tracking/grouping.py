"""Group change events into per-document sessions.

Events are matched to sessions in three passes of decreasing precision:

1. the event touches a path already in the session;
2. the event's path resolves to a canonical URL already in the session;
3. the event lands on the same calendar day as the session's first event,
   its message shares enough long words with that event's message, and the
   files live in the same directory.

The third pass only exists to reunite split commits describing one edit, so
its thresholds are conservative and configurable through
:class:`GroupingConfig`.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import re
import typing as typ
from pathlib import PurePosixPath

from .classifier import DocumentLocator
from .config import read_int

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.github.models import ChangeEvent

_WORD_RE = re.compile(r"[a-z0-9]+")


@dataclasses.dataclass(frozen=True, slots=True)
class GroupingConfig:
    """Thresholds for the same-day related-message fallback.

    Attributes
    ----------
    min_shared_words
        Minimum number of distinct message words two events must share.
    min_word_length
        Words shorter than this are ignored when comparing messages.
    require_same_day
        Only match events on the session's first calendar day (UTC).
    require_same_directory
        Only match files whose parent directory equals the session's first.

    """

    min_shared_words: int = 2
    min_word_length: int = 4
    require_same_day: bool = True
    require_same_directory: bool = True

    @classmethod
    def from_env(cls) -> GroupingConfig:
        """Build thresholds from ``DOCWATCH_GROUPING_*`` environment variables."""
        return cls(
            min_shared_words=read_int("DOCWATCH_GROUPING_MIN_SHARED_WORDS", 2),
            min_word_length=read_int("DOCWATCH_GROUPING_MIN_WORD_LENGTH", 4),
        )


@dataclasses.dataclass(slots=True)
class Session:
    """Change events believed to edit one document within a run."""

    key: str
    document_url: str
    events: list[ChangeEvent] = dataclasses.field(default_factory=list)
    _paths: set[str] = dataclasses.field(default_factory=set, repr=False)
    _urls: set[str] = dataclasses.field(default_factory=set, repr=False)

    def add(self, event: ChangeEvent, url: str) -> None:
        """Append ``event`` and remember its path and canonical URL."""
        self.events.append(event)
        self._paths.add(event.path)
        self._urls.add(url)

    def has_path(self, path: str) -> bool:
        """Return True when ``path`` is already part of the session."""
        return path in self._paths

    def has_url(self, url: str) -> bool:
        """Return True when ``url`` is already part of the session."""
        return url in self._urls

    @property
    def first_event(self) -> ChangeEvent:
        """Earliest event of the session."""
        return self.events[0]

    @property
    def latest_event(self) -> ChangeEvent:
        """Most recent event of the session."""
        return self.events[-1]

    @property
    def paths(self) -> list[str]:
        """Distinct paths in first-seen order."""
        return list(dict.fromkeys(event.path for event in self.events))

    @property
    def event_ids(self) -> list[str]:
        """Distinct change ids in first-seen order."""
        return list(dict.fromkeys(event.event_id for event in self.events))

    @property
    def titles(self) -> list[str]:
        """Distinct non-empty commit or PR titles in first-seen order."""
        return list(
            dict.fromkeys(event.message for event in self.events if event.message)
        )

    @property
    def additions(self) -> int:
        """Total added lines across the session."""
        return sum(event.additions for event in self.events)

    @property
    def deletions(self) -> int:
        """Total deleted lines across the session."""
        return sum(event.deletions for event in self.events)


def _message_words(message: str, min_length: int) -> set[str]:
    return {
        word for word in _WORD_RE.findall(message.lower()) if len(word) >= min_length
    }


def _utc_day(event: ChangeEvent) -> dt.date:
    return event.timestamp.astimezone(dt.UTC).date()


def _parent(path: str) -> str:
    return str(PurePosixPath(path).parent)


def _is_related(
    event: ChangeEvent, session: Session, config: GroupingConfig
) -> bool:
    first = session.first_event
    same_day = _utc_day(event) == _utc_day(first)
    if config.require_same_day and not same_day:
        return False
    same_directory = _parent(event.path) == _parent(first.path)
    if config.require_same_directory and not same_directory:
        return False
    words = _message_words(event.message, config.min_word_length)
    shared = words & _message_words(first.message, config.min_word_length)
    return len(shared) >= config.min_shared_words


def _find_session(
    event: ChangeEvent,
    url: str,
    sessions: list[Session],
    config: GroupingConfig,
) -> Session | None:
    for session in sessions:
        if session.has_path(event.path):
            return session
    for session in sessions:
        if session.has_url(url):
            return session
    for session in sessions:
        if _is_related(event, session, config):
            return session
    return None


def group_events(
    events: cabc.Iterable[ChangeEvent],
    *,
    url_for: cabc.Callable[[str], str] | None = None,
    config: GroupingConfig | None = None,
) -> list[Session]:
    """Partition events into sessions, one per document.

    Parameters
    ----------
    events
        Change events in any order; they are sorted chronologically first.
    url_for
        Maps a source path to its canonical document URL; defaults to
        :meth:`DocumentLocator.url_for` with the stock documentation root.
    config
        Thresholds for the related-message fallback.

    Returns
    -------
    list[Session]
        Sessions in the order their first event was encountered. Every input
        event appears in exactly one session.

    """
    grouping = config or GroupingConfig()
    resolve = url_for or DocumentLocator().url_for
    ordered = sorted(events, key=lambda event: (event.timestamp, event.path))
    sessions: list[Session] = []
    for event in ordered:
        url = resolve(event.path)
        session = _find_session(event, url, sessions, grouping)
        if session is None:
            session = Session(key=event.path, document_url=url)
            sessions.append(session)
        session.add(event, url)
    return sessions
