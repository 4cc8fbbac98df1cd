"""Configuration for the tracking pipelines."""

from __future__ import annotations

import dataclasses
import datetime as dt
import os
from pathlib import Path

from .errors import TrackerConfigError

_DEFAULT_STATE_DIR = ".docwatch"
_DEFAULT_BASE_URL = "https://learn.microsoft.com/azure/aks/"


def read_int(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Read an integer of at least ``minimum`` from ``env_var``."""
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return default
    constraint = f"Must be an integer of at least {minimum}"
    try:
        value = int(raw)
    except ValueError as exc:
        raise TrackerConfigError.invalid_value(env_var, raw, constraint) from exc
    if value < minimum:
        raise TrackerConfigError.invalid_value(env_var, raw, constraint)
    return value


def _read_fraction(env_var: str, default: float) -> float:
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return default
    constraint = "Must be a number between 0 and 1"
    try:
        value = float(raw)
    except ValueError as exc:
        raise TrackerConfigError.invalid_value(env_var, raw, constraint) from exc
    if not 0.0 <= value <= 1.0:
        raise TrackerConfigError.invalid_value(env_var, raw, constraint)
    return value


def _read_optional_path(env_var: str) -> Path | None:
    raw = os.environ.get(env_var, "").strip()
    return Path(raw) if raw else None


@dataclasses.dataclass(frozen=True, slots=True)
class TrackerConfig:
    """Windowing, caps and locations shared by both pipelines.

    Attributes
    ----------
    window_days
        Documentation updates older than this many days (floored to
        midnight UTC) are evicted.
    releases_window_days
        Eviction window for release updates.
    max_updates
        Cap on stored documentation updates.
    max_releases
        Cap on stored release updates.
    min_fetch_interval
        Runs started sooner than this after the last fetch are skipped
        unless forced.
    min_confidence
        Summarizer verdicts scoring below this are discarded.
    state_dir
        Directory of the JSON state documents.
    output_path
        Optional Markdown fragment written after each successful run.
    docs_base_url
        Base URL of the published documentation site.

    """

    window_days: int = 7
    releases_window_days: int = 90
    max_updates: int = 100
    max_releases: int = 5
    min_fetch_interval: dt.timedelta = dt.timedelta(hours=12)
    min_confidence: float = 0.5
    state_dir: Path = Path(_DEFAULT_STATE_DIR)
    output_path: Path | None = None
    docs_base_url: str = _DEFAULT_BASE_URL

    @classmethod
    def from_env(cls) -> TrackerConfig:
        """Build configuration from ``DOCWATCH_*`` environment variables.

        Reads ``DOCWATCH_WINDOW_DAYS``, ``DOCWATCH_RELEASES_WINDOW_DAYS``,
        ``DOCWATCH_MAX_UPDATES``, ``DOCWATCH_MAX_RELEASES``,
        ``DOCWATCH_MIN_FETCH_INTERVAL_HOURS`` (0 disables the gate),
        ``DOCWATCH_MIN_CONFIDENCE``, ``DOCWATCH_STATE_DIR``,
        ``DOCWATCH_OUTPUT_PATH`` and ``DOCWATCH_DOCS_BASE_URL``.

        Raises
        ------
        TrackerConfigError
            If a numeric value is malformed or out of range.

        """
        interval_hours = read_int(
            "DOCWATCH_MIN_FETCH_INTERVAL_HOURS", 12, minimum=0
        )
        return cls(
            window_days=read_int("DOCWATCH_WINDOW_DAYS", 7),
            releases_window_days=read_int("DOCWATCH_RELEASES_WINDOW_DAYS", 90),
            max_updates=read_int("DOCWATCH_MAX_UPDATES", 100),
            max_releases=read_int("DOCWATCH_MAX_RELEASES", 5),
            min_fetch_interval=dt.timedelta(hours=interval_hours),
            min_confidence=_read_fraction("DOCWATCH_MIN_CONFIDENCE", 0.5),
            state_dir=Path(
                os.environ.get("DOCWATCH_STATE_DIR", "").strip() or _DEFAULT_STATE_DIR
            ),
            output_path=_read_optional_path("DOCWATCH_OUTPUT_PATH"),
            docs_base_url=(
                os.environ.get("DOCWATCH_DOCS_BASE_URL", "").strip()
                or _DEFAULT_BASE_URL
            ),
        )
