"""Persisted update records."""

from __future__ import annotations

import datetime as dt  # noqa: TC003 - msgspec resolves annotations at runtime
import typing as typ

import msgspec

# Stored timestamps must carry an offset; naive values are rejected on load.
AwareDatetime = typ.Annotated[dt.datetime, msgspec.Meta(tz=True)]


class Update(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    """User-visible record summarising one document's recent changes.

    Serialised with camelCase keys (``partitionKey``, ``rowKey``) so stored
    lists stay readable by the display layer.

    Attributes
    ----------
    partition_key
        ``YYYY-MM-DD`` date of the earliest contributing change.
    row_key
        Identity of the record: the latest contributing change id, or
        ``merged-<rowKey>`` for records collapsed by URL.
    date
        Time of the most recent contributing change.
    commits
        Distinct ids of every contributing change, oldest first.

    """

    partition_key: str
    row_key: str
    title: str
    category: str
    date: AwareDatetime
    url: str
    summary: str
    impact: str = ""
    commits: tuple[str, ...] = ()


class StoredState(msgspec.Struct, kw_only=True, rename="camel"):
    """Persisted list of updates plus the time of the last successful fetch."""

    updates: list[Update] = msgspec.field(default_factory=list)
    last_fetch: AwareDatetime | None = None
