"""Published-release source for the releases tracking pipeline."""

from __future__ import annotations

import typing as typ

from docwatch.logging import get_logger, log_info, log_warning

from .client import GitHubRestClient, parse_github_datetime
from .errors import GitHubFetchError
from .models import ReleaseRecord

if typ.TYPE_CHECKING:
    import httpx

    from .config import GitHubReleaseConfig

logger = get_logger(__name__)


class ReleaseSource(typ.Protocol):
    """Interface for fetching recent releases."""

    async def fetch_latest(self) -> list[ReleaseRecord]:
        """Return the most recent non-draft releases, newest first."""
        ...


def release_from_payload(payload: dict[str, typ.Any]) -> ReleaseRecord | None:
    """Build a :class:`ReleaseRecord`, or ``None`` for drafts and bad records."""
    if payload.get("draft"):
        return None
    release_id = payload.get("id")
    tag_name = payload.get("tag_name")
    published_at = parse_github_datetime(payload.get("published_at"))
    html_url = payload.get("html_url")
    if (
        not isinstance(release_id, int)
        or not isinstance(tag_name, str)
        or not tag_name
        or published_at is None
        or not isinstance(html_url, str)
    ):
        return None

    name = payload.get("name")
    body = payload.get("body")
    return ReleaseRecord(
        release_id=str(release_id),
        tag_name=tag_name,
        name=name if isinstance(name, str) and name.strip() else tag_name,
        body=body if isinstance(body, str) else "",
        published_at=published_at,
        html_url=html_url,
        prerelease=bool(payload.get("prerelease", False)),
    )


class GitHubReleaseSource:
    """Read the latest published releases of a repository."""

    def __init__(
        self,
        config: GitHubReleaseConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the source with configuration."""
        self._config = config
        self._rest = GitHubRestClient(
            api_base=config.api_base,
            token=config.token,
            timeout_s=config.timeout_s,
            user_agent=config.user_agent,
            http_client=http_client,
        )

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        await self._rest.aclose()

    async def fetch_latest(self) -> list[ReleaseRecord]:
        """Return up to ``limit`` published releases, newest first."""
        endpoint = f"/repos/{self._config.owner}/{self._config.name}/releases"
        payload = await self._rest.get_json(
            endpoint, {"per_page": self._config.limit}
        )
        if not isinstance(payload, list):
            raise GitHubFetchError.invalid_json(endpoint)

        releases: list[ReleaseRecord] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            release = release_from_payload(item)
            if release is None:
                if not item.get("draft"):
                    log_warning(logger, "Skipping malformed release in %s", endpoint)
                continue
            releases.append(release)

        log_info(
            logger,
            "Fetched %d published releases (%d listed)",
            len(releases),
            len(payload),
        )
        return sorted(releases, key=lambda r: r.published_at, reverse=True)
