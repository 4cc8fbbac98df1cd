"""Release-notes analysis through the chat completions endpoint."""

from __future__ import annotations

import typing as typ

import msgspec

from docwatch.logging import get_logger, log_info, log_warning

from .errors import EnrichmentUnavailable
from .json_extract import extract_json_array
from .models import ReleaseAnalysis, ReleaseItem
from .openai_client import OpenAIChatClient, normalize_key
from .prompts import RELEASES_SYSTEM_PROMPT, build_releases_prompt

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    import httpx

    from docwatch.github.models import ReleaseRecord

    from .config import OpenAISummarizerConfig

logger = get_logger(__name__)


def _strings(values: cabc.Iterable[object]) -> tuple[str, ...]:
    return tuple(
        value.strip() for value in values if isinstance(value, str) and value.strip()
    )


def analyses_from_content(
    content: str,
    tags: cabc.Iterable[str],
) -> dict[str, ReleaseAnalysis]:
    """Decode release analyses keyed by canonical release tag.

    Non-string list entries are dropped; items for unknown tags or without a
    summary are discarded and logged.
    """
    items = extract_json_array(content)
    if items is None:
        log_warning(logger, "Release analysis response contained no JSON array")
        return {}

    canonical = {normalize_key(tag): tag for tag in tags}
    analyses: dict[str, ReleaseAnalysis] = {}
    for raw in items:
        if not isinstance(raw, dict):
            continue
        try:
            item = msgspec.convert(raw, ReleaseItem, strict=False)
        except msgspec.ValidationError as exc:
            log_warning(logger, "Discarding undecodable release item: %s", exc)
            continue
        tag = canonical.get(normalize_key(item.key))
        if tag is None:
            log_warning(logger, "Discarding analysis for unknown release %r", item.key)
            continue
        if not item.summary.strip():
            continue
        analyses[tag] = ReleaseAnalysis(
            summary=item.summary.strip(),
            breaking_changes=_strings(item.breaking_changes),
            good_to_know=_strings(item.good_to_know),
            key_features=_strings(item.key_features),
        )
    return analyses


class OpenAIReleaseSummarizer:
    """Analyse release notes with an OpenAI-compatible model."""

    def __init__(
        self,
        config: OpenAISummarizerConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the summarizer with configuration."""
        self._chat = OpenAIChatClient(config, http_client=http_client)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        await self._chat.aclose()

    async def analyze_releases(
        self,
        releases: cabc.Sequence[ReleaseRecord],
    ) -> dict[str, ReleaseAnalysis]:
        """Return analyses keyed by tag; empty when the call fails."""
        if not releases:
            return {}
        try:
            content = await self._chat.complete(
                RELEASES_SYSTEM_PROMPT, build_releases_prompt(releases)
            )
        except EnrichmentUnavailable as exc:
            log_warning(logger, "Release analysis unavailable: %s", exc)
            return {}
        analyses = analyses_from_content(content, (r.tag_name for r in releases))
        log_info(
            logger, "Analysed %d of %d releases", len(analyses), len(releases)
        )
        return analyses
