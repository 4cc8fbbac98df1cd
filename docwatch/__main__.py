"""Allow ``python -m docwatch``."""

from __future__ import annotations

from docwatch.cli import main

raise SystemExit(main())
