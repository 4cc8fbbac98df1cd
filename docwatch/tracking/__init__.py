"""Turn documentation change events into a capped list of updates.

The submodules are layered: :mod:`classifier`, :mod:`grouping`,
:mod:`merge` and :mod:`updates` are pure; :mod:`store` and :mod:`render`
perform I/O; :mod:`pipeline` wires them to the GitHub sources and the
summarizers and is imported explicitly by callers.
"""

from __future__ import annotations

from .classifier import DocumentLocator, category_of, docs_url_for, title_for
from .grouping import GroupingConfig, Session, group_events
from .merge import merge_updates, normalize_bullets
from .models import StoredState, Update

__all__ = [
    "DocumentLocator",
    "GroupingConfig",
    "Session",
    "StoredState",
    "Update",
    "category_of",
    "docs_url_for",
    "group_events",
    "merge_updates",
    "normalize_bullets",
    "title_for",
]
