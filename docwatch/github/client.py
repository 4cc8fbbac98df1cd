"""GitHub REST client and the change-event source built on it."""

from __future__ import annotations

import asyncio
import datetime as dt
import json
import typing as typ

import httpx

from docwatch.common.time import ensure_utc, utcnow
from docwatch.logging import get_logger, log_debug, log_info, log_warning

from .errors import (
    GitHubAuthError,
    GitHubFetchError,
    GitHubRateLimitError,
)
from .models import ChangeEvent, ChangeKind, coerce_status

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .config import GitHubSourceConfig

    Sleep: typ.TypeAlias = "cabc.Callable[[float], cabc.Awaitable[None]]"

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_HTTP_UNAUTHORIZED = 401
_HTTP_FORBIDDEN = 403
_HTTP_RATE_LIMITED = 429
_PULL_FILES_PAGE_SIZE = 100
_PATCH_SAMPLE_MAX_LINES = 12
_PATCH_SAMPLE_MAX_CHARS = 200


class ChangeEventSource(typ.Protocol):
    """Interface for fetching file-level change events."""

    async def fetch_since(self, cutoff: dt.datetime) -> list[ChangeEvent]:
        """Return change events newer than ``cutoff``, oldest first."""
        ...


def parse_github_datetime(value: object) -> dt.datetime | None:
    """Parse a GitHub ISO 8601 timestamp, returning ``None`` when unusable."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(dt.UTC)


def _format_since(value: dt.datetime) -> str:
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


def _rate_limit_reset(response: httpx.Response) -> tuple[bool, dt.datetime | None]:
    """Return ``(exhausted, reset_at)`` derived from rate-limit headers."""
    headers = response.headers
    remaining = headers.get("X-RateLimit-Remaining")
    retry_after = headers.get("Retry-After")
    exhausted = (
        response.status_code == _HTTP_RATE_LIMITED
        or remaining == "0"
        or retry_after is not None
    )
    if not exhausted:
        return (False, None)

    reset_raw = headers.get("X-RateLimit-Reset")
    if reset_raw and reset_raw.isdigit():
        return (True, dt.datetime.fromtimestamp(int(reset_raw), tz=dt.UTC))
    if retry_after and retry_after.isdigit():
        return (True, utcnow() + dt.timedelta(seconds=int(retry_after)))
    return (True, None)


def _raise_for_status(response: httpx.Response, endpoint: str) -> None:
    status = response.status_code
    if status < _HTTP_ERROR_STATUS_THRESHOLD:
        return
    if status in {_HTTP_UNAUTHORIZED, _HTTP_FORBIDDEN, _HTTP_RATE_LIMITED}:
        exhausted, reset_at = _rate_limit_reset(response)
        if exhausted:
            raise GitHubRateLimitError.exhausted(status, reset_at)
        if status != _HTTP_RATE_LIMITED:
            raise GitHubAuthError.rejected(status)
    raise GitHubFetchError.http_error(status, endpoint)


class GitHubRestClient:
    """Thin async wrapper over the GitHub REST API.

    Maps HTTP failures onto the docwatch error taxonomy and decodes JSON
    bodies. An ``http_client`` may be injected for tests; otherwise the
    instance owns its own ``httpx.AsyncClient``.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        api_base: str,
        token: str | None,
        timeout_s: float,
        user_agent: str,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client, authenticating only when a token is set."""
        self._api_base = api_base.rstrip("/")
        self._owns_client = http_client is None
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": user_agent,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._headers = headers
        self._client = http_client or httpx.AsyncClient(timeout=timeout_s)

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def get_json(
        self, endpoint: str, params: dict[str, typ.Any] | None = None
    ) -> object:
        """GET ``endpoint`` relative to the API base and return decoded JSON."""
        url = f"{self._api_base}{endpoint}"
        try:
            response = await self._client.get(
                url, params=params, headers=self._headers
            )
        except httpx.TimeoutException as exc:
            raise GitHubFetchError.network_error(endpoint, "timed out") from exc
        except httpx.RequestError as exc:
            raise GitHubFetchError.network_error(endpoint, str(exc)) from exc

        _raise_for_status(response, endpoint)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise GitHubFetchError.invalid_json(endpoint) from exc


def _dict_items(payload: object, endpoint: str) -> list[dict[str, typ.Any]]:
    if not isinstance(payload, list):
        raise GitHubFetchError.invalid_json(endpoint)
    return [item for item in payload if isinstance(item, dict)]


def _nested(data: dict[str, typ.Any], *keys: str) -> object:
    current: object = data
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def _count(value: object) -> int:
    return value if isinstance(value, int) and value >= 0 else 0


def patch_sample(patch: object) -> str | None:
    """Return a bounded excerpt of added and removed lines from a patch."""
    if not isinstance(patch, str):
        return None
    lines: list[str] = []
    for line in patch.splitlines():
        if line.startswith(("+++", "---")):
            continue
        if line.startswith(("+", "-")) and line[1:].strip():
            lines.append(line[:_PATCH_SAMPLE_MAX_CHARS])
            if len(lines) >= _PATCH_SAMPLE_MAX_LINES:
                break
    return "\n".join(lines) or None


class _SourceInfo(typ.NamedTuple):
    event_id: str
    kind: ChangeKind
    timestamp: dt.datetime
    author: str
    message: str
    source_url: str


def _file_events(
    info: _SourceInfo,
    files: list[dict[str, typ.Any]],
    docs_root: str,
) -> list[ChangeEvent]:
    events: list[ChangeEvent] = []
    for entry in files:
        path = entry.get("filename")
        status = coerce_status(entry.get("status"))
        if not isinstance(path, str) or not path or status is None:
            log_debug(logger, "Skipping malformed file entry in %s", info.event_id)
            continue
        if docs_root and not path.startswith(docs_root):
            continue
        events.append(
            ChangeEvent(
                path=path,
                status=status,
                additions=_count(entry.get("additions")),
                deletions=_count(entry.get("deletions")),
                timestamp=info.timestamp,
                author=info.author,
                message=info.message,
                source_url=info.source_url,
                event_id=info.event_id,
                kind=info.kind,
                patch_sample=patch_sample(entry.get("patch")),
            )
        )
    return events


def _first_line(message: object) -> str:
    if not isinstance(message, str):
        return ""
    return message.strip().splitlines()[0] if message.strip() else ""


def _commit_info(detail: dict[str, typ.Any]) -> _SourceInfo | None:
    sha = detail.get("sha")
    timestamp = parse_github_datetime(
        _nested(detail, "commit", "committer", "date")
    ) or parse_github_datetime(_nested(detail, "commit", "author", "date"))
    if not isinstance(sha, str) or not sha or timestamp is None:
        return None

    login = _nested(detail, "author", "login")
    name = _nested(detail, "commit", "author", "name")
    if isinstance(login, str):
        author = login
    else:
        author = name if isinstance(name, str) else ""
    html_url = detail.get("html_url")
    return _SourceInfo(
        event_id=sha,
        kind=ChangeKind.COMMIT,
        timestamp=timestamp,
        author=author,
        message=_first_line(_nested(detail, "commit", "message")),
        source_url=html_url if isinstance(html_url, str) else "",
    )


def _pull_request_info(pull: dict[str, typ.Any]) -> _SourceInfo | None:
    number = pull.get("number")
    merged_at = parse_github_datetime(pull.get("merged_at"))
    if not isinstance(number, int) or merged_at is None:
        return None

    merge_sha = pull.get("merge_commit_sha")
    login = _nested(pull, "user", "login")
    title = pull.get("title")
    html_url = pull.get("html_url")
    return _SourceInfo(
        event_id=merge_sha
        if isinstance(merge_sha, str) and merge_sha
        else f"pull/{number}",
        kind=ChangeKind.PULL_REQUEST,
        timestamp=merged_at,
        author=login if isinstance(login, str) else "",
        message=_first_line(title),
        source_url=html_url if isinstance(html_url, str) else "",
    )


def _dedupe_and_sort(events: list[ChangeEvent]) -> list[ChangeEvent]:
    unique: dict[tuple[str, str], ChangeEvent] = {}
    for event in events:
        unique.setdefault((event.event_id, event.path), event)
    return sorted(unique.values(), key=lambda event: (event.timestamp, event.path))


class GitHubChangeSource:
    """GitHub REST implementation of :class:`ChangeEventSource`.

    Direct commits and merged pull requests are both read and unioned into
    file-level :class:`ChangeEvent` records. Detail requests are issued one at
    a time with a fixed pause between them to stay within upstream limits.
    """

    def __init__(
        self,
        config: GitHubSourceConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialise the source with configuration and optional test seams."""
        self._config = config
        self._sleep = sleep
        self._rest = GitHubRestClient(
            api_base=config.api_base,
            token=config.token,
            timeout_s=config.timeout_s,
            user_agent=config.user_agent,
            http_client=http_client,
        )
        self._detail_calls = 0

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        await self._rest.aclose()

    async def fetch_since(self, cutoff: dt.datetime) -> list[ChangeEvent]:
        """Return file-level change events committed or merged after ``cutoff``.

        Raises
        ------
        GitHubAuthError
            If GitHub rejects the credential.
        GitHubRateLimitError
            If the rate limit is exhausted.
        GitHubFetchError
            If a listing request fails.

        """
        cutoff_utc = ensure_utc(cutoff, field="cutoff")
        self._detail_calls = 0
        events = await self._commit_events(cutoff_utc)
        if self._config.include_pull_requests:
            events.extend(await self._pull_request_events(cutoff_utc))
        result = _dedupe_and_sort(events)
        log_info(
            logger,
            "Fetched %d change events from %s since %s",
            len(result),
            self._config.slug,
            cutoff_utc.isoformat(),
        )
        return result

    async def _paginate(
        self,
        endpoint: str,
        params: dict[str, typ.Any],
        *,
        stop_before: cabc.Callable[[dict[str, typ.Any]], bool] | None = None,
    ) -> list[dict[str, typ.Any]]:
        """Collect listing items across at most ``max_pages`` pages.

        ``stop_before`` marks the first boundary item of a recency-sorted
        listing; that item and everything after it are dropped.
        """
        collected: list[dict[str, typ.Any]] = []
        per_page = self._config.per_page
        for page in range(1, self._config.max_pages + 1):
            payload = await self._rest.get_json(
                endpoint, {**params, "per_page": per_page, "page": page}
            )
            batch = _dict_items(payload, endpoint)
            for item in batch:
                if stop_before is not None and stop_before(item):
                    return collected
                collected.append(item)
            if len(batch) < per_page:
                return collected
        log_info(
            logger,
            "Stopped paging %s after %d pages",
            endpoint,
            self._config.max_pages,
        )
        return collected

    async def _detail(
        self, endpoint: str, params: dict[str, typ.Any] | None = None
    ) -> object | None:
        """Fetch one detail resource, skipping it on a transient failure."""
        if self._detail_calls:
            await self._sleep(self._config.detail_delay_s)
        self._detail_calls += 1
        try:
            return await self._rest.get_json(endpoint, params)
        except GitHubFetchError as exc:
            log_warning(logger, "Skipping %s: %s", endpoint, exc)
            return None

    async def _commit_events(self, cutoff: dt.datetime) -> list[ChangeEvent]:
        base = f"/repos/{self._config.slug}/commits"
        params: dict[str, typ.Any] = {"since": _format_since(cutoff)}
        docs_root = self._config.docs_root.rstrip("/")
        if docs_root:
            params["path"] = docs_root
        listed = await self._paginate(base, params)

        events: list[ChangeEvent] = []
        for item in listed:
            sha = item.get("sha")
            if not isinstance(sha, str) or not sha:
                log_debug(logger, "Skipping commit listing entry without sha")
                continue
            detail = await self._detail(f"{base}/{sha}")
            if not isinstance(detail, dict):
                continue
            info = _commit_info(detail)
            if info is None:
                log_warning(logger, "Skipping commit %s with missing fields", sha)
                continue
            if info.timestamp < cutoff:
                continue
            files = detail.get("files")
            events.extend(
                _file_events(
                    info,
                    [f for f in files if isinstance(f, dict)]
                    if isinstance(files, list)
                    else [],
                    self._config.docs_root,
                )
            )
        return events

    async def _pull_request_events(self, cutoff: dt.datetime) -> list[ChangeEvent]:
        base = f"/repos/{self._config.slug}/pulls"

        def _older_than_cutoff(pull: dict[str, typ.Any]) -> bool:
            updated_at = parse_github_datetime(pull.get("updated_at"))
            return updated_at is not None and updated_at < cutoff

        listed = await self._paginate(
            base,
            {"state": "closed", "sort": "updated", "direction": "desc"},
            stop_before=_older_than_cutoff,
        )

        events: list[ChangeEvent] = []
        for pull in listed:
            info = _pull_request_info(pull)
            if info is None or info.timestamp < cutoff:
                continue
            number = pull["number"]
            files = await self._detail(
                f"{base}/{number}/files", {"per_page": _PULL_FILES_PAGE_SIZE}
            )
            if not isinstance(files, list):
                continue
            events.extend(
                _file_events(
                    info,
                    [f for f in files if isinstance(f, dict)],
                    self._config.docs_root,
                )
            )
        return events
