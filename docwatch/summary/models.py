"""Summarizer output structures."""

from __future__ import annotations

import enum
import typing as typ

import msgspec


class Decision(enum.StrEnum):
    """Whether a session deserves a user-visible update."""

    KEEP = "keep"
    SKIP = "skip"


class Verdict(msgspec.Struct, kw_only=True, frozen=True):
    """Summarizer judgement for one session.

    Attributes
    ----------
    decision
        ``keep`` to publish an update, ``skip`` to drop the session.
    category
        Display category; ``General`` when the provider gave none.
    summary
        One or two sentences describing what changed.
    impact
        What readers should do about the change, when known.
    confidence
        Provider confidence in [0, 1].

    """

    decision: Decision
    category: str
    summary: str
    impact: str | None = None
    confidence: float = 1.0


class SummaryItem(msgspec.Struct, kw_only=True):
    """One element of the JSON array returned for a session batch.

    Only ``key`` is required; everything else is decoded leniently and
    defaulted by the caller.
    """

    key: str
    summary: str = ""
    category: str | None = None
    impact: str | None = None
    score: float | None = None
    decision: str | None = None


class ReleaseItem(msgspec.Struct, kw_only=True):
    """One element of the JSON array returned for a release batch."""

    key: str
    summary: str = ""
    breaking_changes: list[typ.Any] = msgspec.field(default_factory=list)
    good_to_know: list[typ.Any] = msgspec.field(default_factory=list)
    key_features: list[typ.Any] = msgspec.field(default_factory=list)


class ReleaseAnalysis(msgspec.Struct, kw_only=True, frozen=True):
    """Structured reading of one release's notes."""

    summary: str
    breaking_changes: tuple[str, ...] = ()
    good_to_know: tuple[str, ...] = ()
    key_features: tuple[str, ...] = ()
