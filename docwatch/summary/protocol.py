"""Summarizer protocols for session and release enrichment."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.github.models import ReleaseRecord
    from docwatch.tracking.grouping import Session

    from .models import ReleaseAnalysis, Verdict


@typ.runtime_checkable
class Summarizer(typ.Protocol):
    """Protocol for classifying documentation sessions.

    Implementations describe every session of a run to a summarization
    service and return verdicts keyed by the canonical session key. Keys the
    service invents are never returned.

    The protocol is runtime_checkable to support isinstance checks in tests.
    """

    async def classify_sessions(
        self,
        sessions: cabc.Sequence[Session],
    ) -> dict[str, Verdict]:
        """Return verdicts for the sessions the service kept or skipped.

        Parameters
        ----------
        sessions
            All sessions of the current run.

        Returns
        -------
        dict[str, Verdict]
            Verdicts keyed by session key. Empty when the service failed or
            produced nothing usable.

        """
        ...


@typ.runtime_checkable
class ReleaseSummarizer(typ.Protocol):
    """Protocol for analysing release notes."""

    async def analyze_releases(
        self,
        releases: cabc.Sequence[ReleaseRecord],
    ) -> dict[str, ReleaseAnalysis]:
        """Return analyses keyed by release tag; empty on failure."""
        ...
