"""Unit tests for the published-release source."""

from __future__ import annotations

import datetime as dt
import typing as typ

import httpx
import pytest

from docwatch.github.config import GitHubReleaseConfig
from docwatch.github.errors import GitHubFetchError
from docwatch.github.releases import GitHubReleaseSource, release_from_payload

_API = "https://api.github.test"


def _payload(
    release_id: int, tag: str, published_at: str, **extra: typ.Any  # noqa: ANN401
) -> dict[str, typ.Any]:
    payload: dict[str, typ.Any] = {
        "id": release_id,
        "tag_name": tag,
        "name": f"Release {tag}",
        "body": "Notes",
        "published_at": published_at,
        "html_url": f"https://github.com/Azure/AKS/releases/tag/{tag}",
        "draft": False,
        "prerelease": False,
    }
    payload.update(extra)
    return payload


class TestReleaseFromPayload:
    """Validation of individual release payloads."""

    def test_builds_record(self) -> None:
        """Identifiers are stringified and timestamps parsed."""
        release = release_from_payload(
            _payload(101, "v20250301", "2025-03-01T08:00:00Z", prerelease=True)
        )

        assert release is not None
        assert release.release_id == "101"
        assert release.tag_name == "v20250301"
        assert release.published_at == dt.datetime(2025, 3, 1, 8, tzinfo=dt.UTC)
        assert release.prerelease is True

    def test_blank_name_falls_back_to_tag(self) -> None:
        """Releases without a title display their tag."""
        release = release_from_payload(
            _payload(1, "v1", "2025-03-01T08:00:00Z", name="  ", body=None)
        )

        assert release is not None
        assert release.name == "v1"
        assert release.body == ""

    @pytest.mark.parametrize(
        "overrides",
        [
            pytest.param({"draft": True}, id="draft"),
            pytest.param({"tag_name": ""}, id="blank-tag"),
            pytest.param({"published_at": None}, id="unpublished"),
            pytest.param({"id": "101"}, id="string-id"),
            pytest.param({"html_url": None}, id="no-url"),
        ],
    )
    def test_rejects_drafts_and_malformed(self, overrides: dict[str, object]) -> None:
        """Drafts and records missing required fields are skipped."""
        payload = _payload(101, "v1", "2025-03-01T08:00:00Z")
        payload.update(overrides)

        assert release_from_payload(payload) is None


@pytest.mark.asyncio
async def test_fetch_latest_returns_published_releases_newest_first() -> None:
    """Drafts and malformed entries are dropped; the rest sort newest first."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200,
            json=[
                _payload(1, "v1", "2025-02-01T00:00:00Z"),
                _payload(3, "v3", "2025-03-01T00:00:00Z", draft=True),
                _payload(2, "v2", "2025-02-15T00:00:00Z"),
                {"id": 4},
                "not-a-release",
            ],
        )

    config = GitHubReleaseConfig(owner="Azure", name="AKS", api_base=_API, limit=3)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        releases = await GitHubReleaseSource(config, http_client=client).fetch_latest()

    assert [release.tag_name for release in releases] == ["v2", "v1"]
    assert requests[0].url.path == "/repos/Azure/AKS/releases"
    assert requests[0].url.params["per_page"] == "3"


@pytest.mark.asyncio
async def test_fetch_latest_rejects_non_list_body() -> None:
    """A body that is not a JSON array is a fetch error."""
    transport = httpx.MockTransport(
        lambda _request: httpx.Response(200, json={"message": "moved"})
    )
    config = GitHubReleaseConfig(owner="Azure", name="AKS", api_base=_API)

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(GitHubFetchError):
            await GitHubReleaseSource(config, http_client=client).fetch_latest()
