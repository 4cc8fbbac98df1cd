"""Render stored updates as a Markdown fragment and publish it.

The fragment carries a SHA-256 digest of its UTF-8 bytes. Publishers compare
digests and skip writes when nothing changed, so the rendering itself holds
no wall-clock timestamp.

Usage
-----
>>> fragment = render_fragment(updates, heading="AKS documentation updates")
>>> asyncio.run(FilesystemFragmentSink(Path("out/updates.md")).publish(fragment))

"""

from __future__ import annotations

import asyncio
import dataclasses
import hashlib
import typing as typ

from docwatch.logging import get_logger, log_debug, log_info

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt
    from pathlib import Path

    from .models import Update

logger = get_logger(__name__)


def _format_date(value: dt.datetime) -> str:
    """Format a datetime as an ISO date string (YYYY-MM-DD)."""
    return value.strftime("%Y-%m-%d")


def _indent_continuation(text: str) -> str:
    """Keep multi-line text inside its list item."""
    return text.replace("\n", "\n  ")


def _render_update(lines: list[str], update: Update) -> None:
    lines.append(f"## [{update.title}]({update.url})")
    lines.append("")
    lines.append(f"*{update.category} | {_format_date(update.date)}*")
    lines.append("")
    lines.append(update.summary)
    lines.append("")
    if update.impact:
        lines.append(f"- **Impact:** {_indent_continuation(update.impact)}")
        lines.append("")


def render_updates_markdown(
    updates: cabc.Sequence[Update],
    *,
    heading: str,
) -> str:
    """Render updates, newest first as given, under a level-1 heading.

    Parameters
    ----------
    updates
        Updates in display order.
    heading
        Document title.

    Returns
    -------
    str
        A complete Markdown document ending in a newline.

    """
    lines: list[str] = [f"# {heading}", ""]
    if not updates:
        lines.append("No updates in the current window.")
        lines.append("")
    for update in updates:
        _render_update(lines, update)
    return "\n".join(lines).rstrip("\n") + "\n"


def content_hash(text: str) -> str:
    """Return the hex SHA-256 digest of ``text`` encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclasses.dataclass(frozen=True, slots=True)
class RenderedFragment:
    """Rendered Markdown plus the digest publishers compare."""

    markdown: str
    digest: str

    @classmethod
    def from_markdown(cls, markdown: str) -> RenderedFragment:
        """Wrap ``markdown`` with its content hash."""
        return cls(markdown=markdown, digest=content_hash(markdown))


def render_fragment(
    updates: cabc.Sequence[Update], *, heading: str
) -> RenderedFragment:
    """Render ``updates`` and hash the result."""
    return RenderedFragment.from_markdown(
        render_updates_markdown(updates, heading=heading)
    )


@typ.runtime_checkable
class FragmentSink(typ.Protocol):
    """Port for publishing rendered fragments."""

    async def publish(self, fragment: RenderedFragment) -> bool:
        """Publish ``fragment``; return False when the write was skipped."""
        ...


class FilesystemFragmentSink:
    """Write a fragment to one file, skipping writes of identical content.

    Parameters
    ----------
    path
        Destination file; parent directories are created on demand.

    """

    def __init__(self, path: Path) -> None:
        """Initialise the sink with its destination path."""
        self._path = path

    async def _current_digest(self) -> str | None:
        try:
            existing = await asyncio.to_thread(self._path.read_text, "utf-8")
        except FileNotFoundError:
            return None
        return content_hash(existing)

    async def publish(self, fragment: RenderedFragment) -> bool:
        """Write the fragment unless the file already holds the same digest."""
        if await self._current_digest() == fragment.digest:
            log_debug(logger, "Fragment at %s unchanged; skipping write", self._path)
            return False
        await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(self._path.write_text, fragment.markdown, "utf-8")
        log_info(
            logger, "Published fragment %s to %s", fragment.digest[:12], self._path
        )
        return True
