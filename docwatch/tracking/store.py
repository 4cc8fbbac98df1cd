"""Persistence of update lists and the last successful fetch time.

Each pipeline owns one key. :class:`JsonFileUpdateStore` keeps one JSON
document per key and replaces it atomically, so readers never observe a
partially written list.
"""

from __future__ import annotations

import asyncio
import os
import typing as typ
from pathlib import Path

import msgspec

from docwatch.logging import get_logger, log_debug

from .errors import StoreError
from .models import StoredState

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    import datetime as dt

    from .models import Update

logger = get_logger(__name__)

DOCS_STORE_KEY = "docs-updates"
RELEASES_STORE_KEY = "releases-updates"


@typ.runtime_checkable
class UpdateRepository(typ.Protocol):
    """Storage port for one pipeline's persisted state."""

    async def load(self) -> StoredState:
        """Return the stored state, or an empty state when none exists."""
        ...

    async def save(
        self, updates: cabc.Sequence[Update], last_fetch: dt.datetime
    ) -> None:
        """Replace the stored state."""
        ...


class JsonFileUpdateStore:
    """Store state as ``{directory}/{key}.json``.

    Parameters
    ----------
    directory
        Directory holding one document per key; created on first save.
    key
        Stable name of the pipeline's state.

    """

    def __init__(self, directory: Path | str, key: str) -> None:
        """Initialise the store for ``key`` under ``directory``."""
        if not key or "/" in key or key.startswith("."):
            msg = f"invalid store key {key!r}"
            raise ValueError(msg)
        self._directory = Path(directory)
        self._key = key

    @property
    def path(self) -> Path:
        """Location of the JSON document."""
        return self._directory / f"{self._key}.json"

    async def load(self) -> StoredState:
        """Read the stored state; a missing document yields an empty state.

        Raises
        ------
        StoreError
            If the document exists but is not a valid state document.

        """
        try:
            raw = await asyncio.to_thread(self.path.read_bytes)
        except FileNotFoundError:
            return StoredState()
        try:
            return msgspec.json.decode(raw, type=StoredState)
        except msgspec.DecodeError as exc:
            raise StoreError.corrupt(str(self.path), str(exc)) from exc

    async def save(
        self, updates: cabc.Sequence[Update], last_fetch: dt.datetime
    ) -> None:
        """Atomically replace the stored document."""
        state = StoredState(updates=list(updates), last_fetch=last_fetch)
        payload = msgspec.json.encode(state)
        await asyncio.to_thread(self._write_atomic, payload)
        log_debug(logger, "Saved %d updates to %s", len(updates), self.path)

    def _write_atomic(self, payload: bytes) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_bytes(payload)
        os.replace(tmp_path, self.path)
