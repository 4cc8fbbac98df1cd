"""docwatch: track documentation changes and product releases on GitHub."""

from __future__ import annotations

__version__ = "0.1.0"
