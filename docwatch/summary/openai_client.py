"""OpenAI-compatible implementation of the Summarizer protocol."""

from __future__ import annotations

import json
import math
import typing as typ

import httpx
import msgspec

from docwatch.logging import get_logger, log_info, log_warning
from docwatch.tracking.classifier import DEFAULT_CATEGORY

from .errors import (
    EnrichmentUnavailable,
    OpenAIAPIError,
    OpenAIConfigError,
    OpenAIResponseShapeError,
)
from .json_extract import extract_json_array
from .models import Decision, SummaryItem, Verdict
from .prompts import SESSIONS_SYSTEM_PROMPT, build_sessions_prompt

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from docwatch.tracking.grouping import Session

    from .config import OpenAISummarizerConfig

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_RATE_LIMITED = 429


def _get_retry_after(response: httpx.Response) -> int | None:
    """Extract Retry-After header value if present and numeric."""
    retry_after = response.headers.get("Retry-After")
    if retry_after and retry_after.isdigit():
        return int(retry_after)
    return None


def _get_nested(data: dict[str, object], *keys: str) -> object:
    """Traverse nested dict path, returning None for missing keys."""
    current: object = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current_dict = typ.cast("dict[str, object]", current)
        current = current_dict.get(key)
    return current


def normalize_key(key: str) -> str:
    """Return the comparison form of a session key."""
    return key.strip().lower()


def _clamp_score(score: float | None) -> float:
    if score is None or not math.isfinite(score):
        return 1.0
    return min(max(score, 0.0), 1.0)


def _verdict_from_item(item: SummaryItem) -> Verdict | None:
    decision = (
        Decision.SKIP
        if (item.decision or "").strip().lower() == Decision.SKIP
        else Decision.KEEP
    )
    summary = item.summary.strip()
    if decision is Decision.KEEP and not summary:
        return None
    return Verdict(
        decision=decision,
        category=(item.category or "").strip() or DEFAULT_CATEGORY,
        summary=summary,
        impact=(item.impact or "").strip() or None,
        confidence=_clamp_score(item.score),
    )


def verdicts_from_content(
    content: str,
    session_keys: cabc.Iterable[str],
) -> dict[str, Verdict]:
    """Decode summarizer output into verdicts keyed by canonical session key.

    Items whose key does not match a known session after trimming and
    case-folding are discarded and logged. Items that fail to decode, or keep
    a session without a summary, are dropped individually.

    Parameters
    ----------
    content
        Raw assistant message content.
    session_keys
        Canonical keys of the sessions sent in the request.

    Returns
    -------
    dict[str, Verdict]
        Verdicts keyed by the canonical key, never by the response's key.

    """
    items = extract_json_array(content)
    if items is None:
        log_warning(logger, "Summarizer response contained no JSON array")
        return {}

    canonical = {normalize_key(key): key for key in session_keys}
    verdicts: dict[str, Verdict] = {}
    for raw in items:
        if not isinstance(raw, dict):
            continue
        try:
            item = msgspec.convert(raw, SummaryItem, strict=False)
        except msgspec.ValidationError as exc:
            log_warning(logger, "Discarding undecodable summary item: %s", exc)
            continue
        key = canonical.get(normalize_key(item.key))
        if key is None:
            log_warning(
                logger, "Discarding summary for unknown session key %r", item.key
            )
            continue
        verdict = _verdict_from_item(item)
        if verdict is None:
            log_warning(logger, "Discarding empty summary for session %s", key)
            continue
        verdicts[key] = verdict
    return verdicts


class OpenAIChatClient:
    """Minimal chat completions client shared by the summarizers.

    Parameters
    ----------
    config
        Configuration for the OpenAI API client.
    http_client
        Optional httpx.AsyncClient for testing. If not provided,
        the instance creates and owns its own client.

    """

    def __init__(
        self,
        config: OpenAISummarizerConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with configuration."""
        if not config.api_key.strip():
            raise OpenAIConfigError.empty_api_key()

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=config.timeout_s)
        self._headers = {
            "Authorization": f"Bearer {config.api_key}",
            "Content-Type": "application/json",
        }

    @property
    def config(self) -> OpenAISummarizerConfig:
        """Read-only access to the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Call the chat completions endpoint and return assistant content.

        Raises
        ------
        OpenAIAPIError
            If the request fails or returns an error status.
        OpenAIResponseShapeError
            If the response body is not the expected shape.

        """
        payload = self._build_payload(system_prompt, user_prompt)
        response = await self._send_request(payload)
        self._check_response_errors(response)
        return self._parse_json_response(response)

    def _build_payload(self, system_prompt: str, user_prompt: str) -> dict[str, object]:
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }

    async def _send_request(self, payload: dict[str, object]) -> httpx.Response:
        """Perform HTTP POST request to the chat completions endpoint.

        Raises
        ------
        OpenAIAPIError
            If a timeout or network error occurs.

        """
        try:
            return await self._client.post(
                self._config.endpoint,
                json=payload,
                headers=self._headers,
            )
        except httpx.TimeoutException as exc:
            raise OpenAIAPIError.timeout() from exc
        except httpx.RequestError as exc:
            raise OpenAIAPIError.network_error(str(exc)) from exc

    def _check_response_errors(self, response: httpx.Response) -> None:
        if response.status_code == _HTTP_RATE_LIMITED:
            raise OpenAIAPIError.rate_limited(_get_retry_after(response))

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise OpenAIAPIError.http_error(response.status_code)

    def _parse_json_response(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise OpenAIResponseShapeError.invalid_json(response.text) from exc
        if not isinstance(data, dict):
            raise OpenAIResponseShapeError.missing("choices")
        return self._extract_content(typ.cast("dict[str, object]", data))

    def _extract_content(self, data: dict[str, object]) -> str:
        """Extract assistant message content from API response.

        Raises
        ------
        OpenAIResponseShapeError
            If the response is missing expected fields.

        """
        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise OpenAIResponseShapeError.missing("choices")

        first_choice = choices[0]
        if not isinstance(first_choice, dict):
            raise OpenAIResponseShapeError.missing("choices[0]")

        first_choice_dict = typ.cast("dict[str, object]", first_choice)
        content = _get_nested(first_choice_dict, "message", "content")
        if not isinstance(content, str):
            raise OpenAIResponseShapeError.missing("choices[0].message.content")

        return content


class OpenAISummarizer:
    """OpenAI-compatible implementation of the Summarizer protocol.

    Sends one batched request per run describing every session, then decodes
    the first JSON array in the reply. Transport and response-shape failures
    are logged and reported as an empty result so callers fall back to
    heuristic summaries.

    Examples
    --------
    >>> import asyncio
    >>> from docwatch.summary import OpenAISummarizer, OpenAISummarizerConfig
    >>> summarizer = OpenAISummarizer(OpenAISummarizerConfig(api_key="sk-..."))
    >>> asyncio.run(summarizer.aclose())

    """

    def __init__(
        self,
        config: OpenAISummarizerConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the summarizer with configuration."""
        self._chat = OpenAIChatClient(config, http_client=http_client)

    @property
    def config(self) -> OpenAISummarizerConfig:
        """Read-only access to the client configuration."""
        return self._chat.config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        await self._chat.aclose()

    async def classify_sessions(
        self,
        sessions: cabc.Sequence[Session],
    ) -> dict[str, Verdict]:
        """Return verdicts keyed by session key; empty when the call fails."""
        if not sessions:
            return {}
        try:
            content = await self._chat.complete(
                SESSIONS_SYSTEM_PROMPT, build_sessions_prompt(sessions)
            )
        except EnrichmentUnavailable as exc:
            log_warning(logger, "Session summarization unavailable: %s", exc)
            return {}

        verdicts = verdicts_from_content(content, (s.key for s in sessions))
        log_info(
            logger,
            "Summarizer returned %d verdicts for %d sessions",
            len(verdicts),
            len(sessions),
        )
        return verdicts
