"""Merge freshly built updates into the persisted list.

Merging runs in five steps: evict records older than the window, drop new
records whose ``row_key`` is already stored, collapse records sharing a URL,
sort newest first and truncate to the cap. Re-applying the merge to its own
output with no new records only re-applies eviction and the cap.
"""

from __future__ import annotations

import re
import typing as typ

import msgspec

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .models import Update

BULLET_SEPARATOR = "\n• "
MERGED_PREFIX = "merged-"

_BULLET_RE = re.compile(r"\s*•\s*")
_UPDATE_COUNT_RE = re.compile(r" \((\d+) updates?\)$")


def normalize_bullets(text: str) -> str:
    """Put every ``•`` bullet on its own line.

    >>> normalize_bullets("first • second")
    'first\\n• second'
    """
    return _BULLET_RE.sub(BULLET_SEPARATOR, text).strip()


def _normalized(update: Update) -> Update:
    return msgspec.structs.replace(
        update,
        summary=normalize_bullets(update.summary),
        impact=normalize_bullets(update.impact),
    )


def _join_distinct(values: cabc.Iterable[str]) -> str:
    """Join the distinct bullets of ``values``, splitting merged text first."""
    pieces = (piece.strip() for value in values for piece in _BULLET_RE.split(value))
    distinct = dict.fromkeys(piece for piece in pieces if piece)
    return BULLET_SEPARATOR.join(distinct)


def _base_title(title: str) -> str:
    return _UPDATE_COUNT_RE.sub("", title)


def _contribution_count(update: Update) -> int:
    if not update.row_key.startswith(MERGED_PREFIX):
        return 1
    match = _UPDATE_COUNT_RE.search(update.title)
    return int(match.group(1)) if match else 1


def _merged_row_key(row_key: str) -> str:
    if row_key.startswith(MERGED_PREFIX):
        return row_key
    return f"{MERGED_PREFIX}{row_key}"


def _collapse(group: list[Update]) -> Update:
    """Collapse updates for one URL into a single record.

    The title count sums contributing records (a merged record counts as
    its own running total), not commits.
    """
    ordered = sorted(group, key=lambda u: (u.date, u.row_key))
    earliest = ordered[0]
    latest = ordered[-1]
    commits = dict.fromkeys(c for update in ordered for c in update.commits)
    count = sum(_contribution_count(update) for update in ordered)
    return msgspec.structs.replace(
        earliest,
        row_key=_merged_row_key(latest.row_key),
        title=f"{_base_title(earliest.title)} ({count} updates)",
        date=latest.date,
        summary=_join_distinct(u.summary for u in ordered),
        impact=_join_distinct(u.impact for u in ordered),
        commits=tuple(commits),
    )


def merge_updates(
    new: cabc.Iterable[Update],
    existing: cabc.Iterable[Update],
    *,
    window_start: dt.datetime,
    cap: int,
) -> list[Update]:
    """Merge ``new`` updates into ``existing`` ones.

    Parameters
    ----------
    new
        Updates built during the current run.
    existing
        Updates loaded from the store.
    window_start
        Records dated strictly before this instant are evicted.
    cap
        Maximum number of records returned.

    Returns
    -------
    list[Update]
        Records with unique ``row_key`` and ``url`` values, newest first.

    """
    retained = [update for update in existing if update.date >= window_start]
    known_keys = {update.row_key for update in retained}
    known_keys.update(c for update in retained for c in update.commits)
    fresh = [
        update
        for update in new
        if update.row_key not in known_keys and update.date >= window_start
    ]

    by_url: dict[str, list[Update]] = {}
    for update in (*retained, *fresh):
        by_url.setdefault(update.url, []).append(update)

    merged = [
        _normalized(group[0]) if len(group) == 1 else _collapse(group)
        for group in by_url.values()
    ]
    merged.sort(key=lambda u: u.row_key)
    merged.sort(key=lambda u: u.date, reverse=True)

    # Distinct URLs can still collide on row_key; the newest record wins.
    unique: dict[str, Update] = {}
    for update in merged:
        unique.setdefault(update.row_key, update)
    return list(unique.values())[: max(cap, 0)]
