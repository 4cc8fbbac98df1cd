"""Attach verdicts to sessions, degrading to heuristics on failure."""

from __future__ import annotations

import typing as typ

from docwatch.logging import get_logger, log_info, log_warning

from .heuristic import heuristic_verdict
from .models import Decision, Verdict

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.tracking.grouping import Session

    from .protocol import Summarizer

logger = get_logger(__name__)


class EnrichedSession(typ.NamedTuple):
    """A session paired with the verdict that publishes it."""

    session: Session
    verdict: Verdict


async def _request_verdicts(
    sessions: cabc.Sequence[Session],
    summarizer: Summarizer | None,
) -> dict[str, Verdict]:
    if summarizer is None:
        log_info(logger, "No summarizer configured; using heuristic summaries")
        return {}
    try:
        return await summarizer.classify_sessions(sessions)
    except Exception as exc:  # noqa: BLE001
        log_warning(
            logger,
            "Summarizer failed (%s); using heuristic summaries",
            type(exc).__name__,
            exc_info=exc,
        )
        return {}


async def enrich_sessions(
    sessions: cabc.Sequence[Session],
    summarizer: Summarizer | None,
    *,
    min_confidence: float = 0.5,
) -> list[EnrichedSession]:
    """Return the sessions worth publishing, each with its verdict.

    Parameters
    ----------
    sessions
        Sessions of the current run.
    summarizer
        Provider to consult, or ``None`` when none is configured.
    min_confidence
        Provider verdicts scoring below this are treated as skips.

    Returns
    -------
    list[EnrichedSession]
        Heuristic verdicts for every session when the provider is missing,
        raised, or returned nothing. Otherwise only the sessions the provider
        kept with enough confidence, in input order.

    """
    if not sessions:
        return []

    verdicts = await _request_verdicts(sessions, summarizer)
    if not verdicts:
        return [EnrichedSession(s, heuristic_verdict(s)) for s in sessions]

    enriched: list[EnrichedSession] = []
    for session in sessions:
        verdict = verdicts.get(session.key)
        if verdict is None or verdict.decision is Decision.SKIP:
            log_info(logger, "Summarizer skipped session %s", session.key)
            continue
        if verdict.confidence < min_confidence:
            log_info(
                logger,
                "Skipping session %s: confidence %.2f below %.2f",
                session.key,
                verdict.confidence,
                min_confidence,
            )
            continue
        enriched.append(EnrichedSession(session, verdict))
    return enriched
