"""Unit tests for the GitHub REST change source."""

from __future__ import annotations

import datetime as dt
import typing as typ

import httpx
import pytest

from docwatch.github.client import (
    GitHubChangeSource,
    parse_github_datetime,
    patch_sample,
)
from docwatch.github.config import GitHubSourceConfig
from docwatch.github.errors import (
    GitHubAuthError,
    GitHubFetchError,
    GitHubRateLimitError,
)
from docwatch.github.models import ChangeKind, ChangeStatus

_API = "https://api.github.test"
_REPO = "/repos/MicrosoftDocs/azure-aks-docs"
_CUTOFF = dt.datetime(2025, 3, 3, tzinfo=dt.UTC)
_RESET_EPOCH = 1741600000

Route: typ.TypeAlias = "typ.Callable[[httpx.Request], httpx.Response] | object"


def _config(**overrides: typ.Any) -> GitHubSourceConfig:  # noqa: ANN401
    settings: dict[str, typ.Any] = {
        "owner": "MicrosoftDocs",
        "name": "azure-aks-docs",
        "api_base": _API,
        "detail_delay_s": 0.5,
        "include_pull_requests": False,
    }
    settings.update(overrides)
    return GitHubSourceConfig(**settings)


def _file(
    filename: str,
    *,
    status: str = "modified",
    additions: int = 5,
    deletions: int = 1,
    patch: str | None = None,
) -> dict[str, typ.Any]:
    entry: dict[str, typ.Any] = {
        "filename": filename,
        "status": status,
        "additions": additions,
        "deletions": deletions,
    }
    if patch is not None:
        entry["patch"] = patch
    return entry


def _commit(  # noqa: PLR0913
    sha: str,
    files: list[dict[str, typ.Any]],
    *,
    date: str = "2025-03-05T10:00:00Z",
    login: str | None = "alice",
    name: str = "Alice Example",
    message: str = "Document outbound types\n\nLonger body",
) -> dict[str, typ.Any]:
    return {
        "sha": sha,
        "html_url": f"https://github.com/MicrosoftDocs/azure-aks-docs/commit/{sha}",
        "author": {"login": login} if login else None,
        "commit": {
            "message": message,
            "author": {"name": name, "date": date},
            "committer": {"date": date},
        },
        "files": files,
    }


class _FakeGitHub:
    """Route requests by URL path and record them."""

    def __init__(self, routes: dict[str, Route]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []
        self.sleeps: list[float] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        return httpx.Response(200, json=route)

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)

    @property
    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def source(
        self, http_client: httpx.AsyncClient, **overrides: typ.Any  # noqa: ANN401
    ) -> GitHubChangeSource:
        return GitHubChangeSource(
            _config(**overrides), http_client=http_client, sleep=self.sleep
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.mark.asyncio
async def test_commit_listing_builds_file_events() -> None:
    """Commit details become one event per file under the docs root."""
    github = _FakeGitHub(
        {
            f"{_REPO}/commits": [{"sha": "abc"}],
            f"{_REPO}/commits/abc": _commit(
                "abc",
                [
                    _file(
                        "articles/aks/localdns.md",
                        status="added",
                        patch="@@ -1 +1 @@\n-old line\n+new line",
                    ),
                    _file("includes/shared.md"),
                    {"status": "modified"},
                ],
                login=None,
            ),
        }
    )

    async with github.client() as http_client:
        events = await github.source(http_client).fetch_since(_CUTOFF)

    assert len(events) == 1
    event = events[0]
    assert event.path == "articles/aks/localdns.md"
    assert event.status is ChangeStatus.ADDED
    assert event.kind is ChangeKind.COMMIT
    assert event.event_id == "abc"
    assert event.author == "Alice Example", "Expected fallback to commit author name"
    assert event.message == "Document outbound types"
    assert event.timestamp == dt.datetime(2025, 3, 5, 10, tzinfo=dt.UTC)
    assert event.patch_sample == "-old line\n+new line"

    params = github.requests[0].url.params
    assert params["since"] == "2025-03-03T00:00:00Z"
    assert params["path"] == "articles/aks"
    assert params["per_page"] == "30"
    assert params["page"] == "1"


@pytest.mark.asyncio
async def test_paginates_and_pauses_between_detail_requests() -> None:
    """Short pages end pagination; detail calls are spaced by the delay."""

    def listing(request: httpx.Request) -> httpx.Response:
        page = request.url.params["page"]
        items = [{"sha": "a"}, {"sha": "b"}] if page == "1" else [{"sha": "c"}]
        return httpx.Response(200, json=items)

    github = _FakeGitHub(
        {
            f"{_REPO}/commits": listing,
            f"{_REPO}/commits/a": _commit(
                "a", [_file("articles/aks/a.md")], date="2025-03-04T00:00:00Z"
            ),
            f"{_REPO}/commits/b": _commit(
                "b", [_file("articles/aks/b.md")], date="2025-03-05T00:00:00Z"
            ),
            f"{_REPO}/commits/c": _commit(
                "c", [_file("articles/aks/c.md")], date="2025-03-06T00:00:00Z"
            ),
        }
    )

    async with github.client() as http_client:
        events = await github.source(http_client, per_page=2).fetch_since(_CUTOFF)

    assert [event.event_id for event in events] == ["a", "b", "c"]
    assert github.paths.count(f"{_REPO}/commits") == 2
    assert github.sleeps == [0.5, 0.5], "Expected no pause before the first detail"


@pytest.mark.asyncio
async def test_failed_detail_request_is_skipped() -> None:
    """One failing commit detail does not abort the fetch."""
    github = _FakeGitHub(
        {
            f"{_REPO}/commits": [{"sha": "good"}, {"sha": "bad"}],
            f"{_REPO}/commits/good": _commit("good", [_file("articles/aks/a.md")]),
            f"{_REPO}/commits/bad": lambda _request: httpx.Response(502),
        }
    )

    async with github.client() as http_client:
        events = await github.source(http_client).fetch_since(_CUTOFF)

    assert [event.event_id for event in events] == ["good"]


@pytest.mark.asyncio
async def test_merged_pull_requests_stop_at_cutoff() -> None:
    """Pull requests are read newest first until one predates the cutoff."""
    github = _FakeGitHub(
        {
            f"{_REPO}/commits": [],
            f"{_REPO}/pulls": [
                {
                    "number": 7,
                    "merged_at": "2025-03-06T09:00:00Z",
                    "updated_at": "2025-03-06T09:00:00Z",
                    "merge_commit_sha": "m7",
                    "title": "Add LocalDNS guide",
                    "user": {"login": "bob"},
                    "html_url": "https://github.com/o/r/pull/7",
                },
                {
                    "number": 8,
                    "merged_at": None,
                    "updated_at": "2025-03-05T09:00:00Z",
                },
                {
                    "number": 6,
                    "merged_at": "2025-03-01T09:00:00Z",
                    "updated_at": "2025-03-01T09:00:00Z",
                },
            ],
            f"{_REPO}/pulls/7/files": [_file("articles/aks/localdns.md")],
        }
    )

    async with github.client() as http_client:
        source = github.source(http_client, include_pull_requests=True)
        events = await source.fetch_since(_CUTOFF)

    assert len(events) == 1
    event = events[0]
    assert event.kind is ChangeKind.PULL_REQUEST
    assert event.event_id == "m7"
    assert event.author == "bob"
    assert event.message == "Add LocalDNS guide"
    assert f"{_REPO}/pulls/8/files" not in github.paths
    assert f"{_REPO}/pulls/6/files" not in github.paths
    pulls_request = github.requests[github.paths.index(f"{_REPO}/pulls")]
    assert pulls_request.url.params["state"] == "closed"
    assert pulls_request.url.params["sort"] == "updated"
    assert pulls_request.url.params["direction"] == "desc"


@pytest.mark.asyncio
async def test_commit_and_pull_request_for_same_change_are_deduplicated() -> None:
    """A merge commit and its pull request yield one event per path."""
    github = _FakeGitHub(
        {
            f"{_REPO}/commits": [{"sha": "m7"}],
            f"{_REPO}/commits/m7": _commit("m7", [_file("articles/aks/a.md")]),
            f"{_REPO}/pulls": [
                {
                    "number": 7,
                    "merged_at": "2025-03-05T10:00:00Z",
                    "updated_at": "2025-03-05T10:00:00Z",
                    "merge_commit_sha": "m7",
                    "title": "Document outbound types",
                }
            ],
            f"{_REPO}/pulls/7/files": [_file("articles/aks/a.md")],
        }
    )

    async with github.client() as http_client:
        source = github.source(http_client, include_pull_requests=True)
        events = await source.fetch_since(_CUTOFF)

    assert [(event.event_id, event.path) for event in events] == [
        ("m7", "articles/aks/a.md")
    ]


class TestErrorMapping:
    """HTTP and transport failures on listing requests."""

    @pytest.mark.asyncio
    async def test_exhausted_rate_limit(self) -> None:
        """403 with zero remaining quota is a rate-limit error with reset time."""
        github = _FakeGitHub(
            {
                f"{_REPO}/commits": lambda _request: httpx.Response(
                    403,
                    headers={
                        "X-RateLimit-Remaining": "0",
                        "X-RateLimit-Reset": str(_RESET_EPOCH),
                    },
                )
            }
        )

        async with github.client() as http_client:
            with pytest.raises(GitHubRateLimitError) as excinfo:
                await github.source(http_client).fetch_since(_CUTOFF)

        assert excinfo.value.status_code == 403
        assert excinfo.value.reset_at == dt.datetime.fromtimestamp(
            _RESET_EPOCH, tz=dt.UTC
        )

    @pytest.mark.asyncio
    async def test_too_many_requests_without_headers(self) -> None:
        """429 is always a rate-limit error even when the reset is unknown."""
        github = _FakeGitHub(
            {f"{_REPO}/commits": lambda _request: httpx.Response(429)}
        )

        async with github.client() as http_client:
            with pytest.raises(GitHubRateLimitError) as excinfo:
                await github.source(http_client).fetch_since(_CUTOFF)

        assert excinfo.value.reset_at is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_rejected_credentials(self, status: int) -> None:
        """401 and plain 403 responses are authentication failures."""
        github = _FakeGitHub(
            {f"{_REPO}/commits": lambda _request: httpx.Response(status)}
        )

        async with github.client() as http_client:
            with pytest.raises(GitHubAuthError) as excinfo:
                await github.source(http_client).fetch_since(_CUTOFF)

        assert excinfo.value.status_code == status

    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        """Transport errors surface as fetch errors without a status code."""

        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        github = _FakeGitHub({f"{_REPO}/commits": refuse})

        async with github.client() as http_client:
            with pytest.raises(GitHubFetchError) as excinfo:
                await github.source(http_client).fetch_since(_CUTOFF)

        assert excinfo.value.status_code is None

    @pytest.mark.asyncio
    async def test_unexpected_listing_shape(self) -> None:
        """A listing that is not a JSON array is rejected."""
        github = _FakeGitHub({f"{_REPO}/commits": {"message": "nope"}})

        async with github.client() as http_client:
            with pytest.raises(GitHubFetchError, match="unexpected body"):
                await github.source(http_client).fetch_since(_CUTOFF)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("token", "expected"),
    [
        pytest.param("ghp_test", "Bearer ghp_test", id="token"),
        pytest.param(None, None, id="anonymous"),
    ],
)
async def test_authorization_header_only_sent_with_token(
    token: str | None, expected: str | None
) -> None:
    """Anonymous access sends no Authorization header."""
    github = _FakeGitHub({f"{_REPO}/commits": []})

    async with github.client() as http_client:
        await github.source(http_client, token=token).fetch_since(_CUTOFF)

    assert github.requests[0].headers.get("Authorization") == expected
    assert github.requests[0].headers["Accept"] == "application/vnd.github+json"


@pytest.mark.asyncio
async def test_rejects_naive_cutoff() -> None:
    """The cutoff must be timezone-aware."""
    github = _FakeGitHub({})

    async with github.client() as http_client:
        with pytest.raises(ValueError, match="cutoff"):
            await github.source(http_client).fetch_since(
                dt.datetime(2025, 3, 3)  # noqa: DTZ001
            )


class TestPatchSample:
    """Bounded excerpts of changed lines."""

    def test_skips_headers_and_context(self) -> None:
        """File headers, hunk markers, context and blank changes are dropped."""
        patch = "--- a/x.md\n+++ b/x.md\n@@ -1,3 +1,3 @@\n same\n-gone\n+\n+added"

        assert patch_sample(patch) == "-gone\n+added"

    def test_caps_line_count(self) -> None:
        """At most twelve lines are kept."""
        patch = "\n".join(f"+line {index}" for index in range(30))

        sample = patch_sample(patch)

        assert sample is not None
        assert len(sample.splitlines()) == 12

    @pytest.mark.parametrize("patch", [None, "", "@@ -1 +1 @@\n context"])
    def test_returns_none_without_changes(self, patch: str | None) -> None:
        """Missing or change-free patches yield no sample."""
        assert patch_sample(patch) is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        pytest.param(
            "2025-03-05T10:00:00Z",
            dt.datetime(2025, 3, 5, 10, tzinfo=dt.UTC),
            id="zulu",
        ),
        pytest.param("2025-03-05T10:00:00", None, id="naive"),
        pytest.param("yesterday", None, id="garbage"),
        pytest.param(None, None, id="missing"),
    ],
)
def test_parse_github_datetime(raw: object, expected: dt.datetime | None) -> None:
    """Only aware ISO 8601 timestamps are accepted."""
    assert parse_github_datetime(raw) == expected
