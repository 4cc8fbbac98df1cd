"""Build :class:`Update` records from sessions and releases."""

from __future__ import annotations

import datetime as dt
import typing as typ

import msgspec

from .classifier import title_for
from .errors import UpdateConstructionError
from .merge import BULLET_SEPARATOR
from .models import Update

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.github.models import ReleaseRecord
    from docwatch.summary.models import ReleaseAnalysis, Verdict

    from .grouping import Session

RELEASE_CATEGORY = "Release"
PRERELEASE_CATEGORY = "Preview"
RELEASE_BODY_THRESHOLD = 50

_RAW_NOTES_LIMIT = 1500


def _partition_key(value: dt.datetime) -> str:
    return value.astimezone(dt.UTC).date().isoformat()


def build_update(session: Session, verdict: Verdict) -> Update:
    """Turn a kept session into an update record.

    Raises
    ------
    UpdateConstructionError
        If the session is empty or lacks a URL, or the verdict lacks a summary.

    """
    if not session.events:
        raise UpdateConstructionError.empty_session(session.key)
    if not session.document_url.strip():
        raise UpdateConstructionError.missing_url(session.key)
    if not verdict.summary.strip():
        raise UpdateConstructionError.missing_summary(session.key)

    first = session.first_event
    latest = session.latest_event
    event_ids = session.event_ids
    title = title_for(session.key)
    if len(event_ids) > 1:
        title = f"{title} ({len(event_ids)} updates)"

    return Update(
        partition_key=_partition_key(first.timestamp),
        row_key=latest.event_id,
        title=title,
        category=verdict.category,
        date=latest.timestamp,
        url=session.document_url,
        summary=verdict.summary.strip(),
        impact=(verdict.impact or "").strip(),
        commits=tuple(event_ids),
    )


def disambiguate_row_keys(updates: cabc.Iterable[Update]) -> list[Update]:
    """Suffix repeated row keys within one batch with ``-2``, ``-3`` and so on.

    One commit touching two documents yields two sessions whose latest
    change id is identical.
    """
    seen: dict[str, int] = {}
    result: list[Update] = []
    for update in updates:
        count = seen.get(update.row_key, 0) + 1
        seen[update.row_key] = count
        if count == 1:
            result.append(update)
            continue
        result.append(_with_row_key(update, f"{update.row_key}-{count}"))
    return result


def _with_row_key(update: Update, row_key: str) -> Update:
    return msgspec.structs.replace(update, row_key=row_key)


def _bullets(heading: str, items: tuple[str, ...]) -> str:
    if not items:
        return ""
    return heading + "".join(f"{BULLET_SEPARATOR}{item}" for item in items)


def release_summary_and_impact(
    release: ReleaseRecord, analysis: ReleaseAnalysis | None
) -> tuple[str, str]:
    """Return summary and impact text for a release.

    Releases with notes of at most 50 characters were never analysed; those
    with longer notes but no analysis fall back to the raw notes.
    """
    body = release.body.strip()
    if len(body) <= RELEASE_BODY_THRESHOLD:
        return f"Release {release.tag_name} - No detailed notes available", ""
    if analysis is None:
        return (
            f"Release {release.tag_name} - See raw notes below for details",
            body[:_RAW_NOTES_LIMIT],
        )
    sections = [
        _bullets("Breaking changes:", analysis.breaking_changes),
        _bullets("Good to know:", analysis.good_to_know),
        _bullets("Key features:", analysis.key_features),
    ]
    return analysis.summary, "\n".join(section for section in sections if section)


def build_release_update(
    release: ReleaseRecord, analysis: ReleaseAnalysis | None
) -> Update:
    """Turn a published release into an update record."""
    summary, impact = release_summary_and_impact(release, analysis)
    return Update(
        partition_key=_partition_key(release.published_at),
        row_key=release.release_id,
        title=release.name,
        category=PRERELEASE_CATEGORY if release.prerelease else RELEASE_CATEGORY,
        date=release.published_at,
        url=release.html_url,
        summary=summary,
        impact=impact,
        commits=(release.tag_name,),
    )
