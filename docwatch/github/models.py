"""Typed change records produced at the GitHub boundary."""

from __future__ import annotations

import dataclasses
import enum
import typing as typ

if typ.TYPE_CHECKING:
    import datetime as dt


class ChangeStatus(enum.StrEnum):
    """File-level change status."""

    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class ChangeKind(enum.StrEnum):
    """Upstream shape a change event was read from."""

    COMMIT = "commit"
    PULL_REQUEST = "pull_request"


# GitHub reports renames, copies and mode changes separately; all of them
# leave a live document behind, so they count as modifications here.
_STATUS_ALIASES: dict[str, ChangeStatus] = {
    "added": ChangeStatus.ADDED,
    "modified": ChangeStatus.MODIFIED,
    "changed": ChangeStatus.MODIFIED,
    "renamed": ChangeStatus.MODIFIED,
    "copied": ChangeStatus.MODIFIED,
    "unchanged": ChangeStatus.MODIFIED,
    "removed": ChangeStatus.REMOVED,
}


def coerce_status(raw: object) -> ChangeStatus | None:
    """Map a GitHub file status onto :class:`ChangeStatus`."""
    if not isinstance(raw, str):
        return None
    return _STATUS_ALIASES.get(raw.strip().lower())


@dataclasses.dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One file touched by one commit or pull request."""

    path: str
    status: ChangeStatus
    additions: int
    deletions: int
    timestamp: dt.datetime
    author: str
    message: str
    source_url: str
    event_id: str
    kind: ChangeKind = ChangeKind.COMMIT
    patch_sample: str | None = None

    def __post_init__(self) -> None:
        """Reject negative line counts and naive timestamps."""
        if self.additions < 0 or self.deletions < 0:
            msg = f"line counts must be non-negative for {self.path}"
            raise ValueError(msg)
        if self.timestamp.tzinfo is None:
            msg = f"timestamp must be timezone-aware for {self.path}"
            raise ValueError(msg)

    @property
    def lines_changed(self) -> int:
        """Total added plus deleted lines."""
        return self.additions + self.deletions


@dataclasses.dataclass(frozen=True, slots=True)
class ReleaseRecord:
    """A published GitHub release."""

    release_id: str
    tag_name: str
    name: str
    body: str
    published_at: dt.datetime
    html_url: str
    prerelease: bool = False
