"""Category, title and canonical URL rules for documentation paths."""

from __future__ import annotations

import dataclasses
from pathlib import PurePosixPath

import msgspec


class CategoryRule(msgspec.Struct, frozen=True):
    """Map paths containing ``pattern`` (lower-case substring) to ``category``."""

    pattern: str
    category: str


# First match wins, so more specific fragments precede generic ones
# (``localdns`` before ``networking``, ``concepts-lifecycle`` before
# ``concepts-``).
DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("reliability-", "Reliability"),
    CategoryRule("localdns", "Networking/DNS"),
    CategoryRule("networking", "Networking"),
    CategoryRule("production-upgrade", "Upgrade"),
    CategoryRule("upgrade", "Upgrade"),
    CategoryRule("concepts-lifecycle", "Fleet Manager"),
    CategoryRule("lifecycle", "Fleet Manager"),
    CategoryRule("security", "Security"),
    CategoryRule("monitoring", "Monitoring"),
    CategoryRule("troubleshoot", "Troubleshooting"),
    CategoryRule("concepts-", "Concepts"),
    CategoryRule("tutorial-", "Tutorial"),
    CategoryRule("quickstart", "Quickstart"),
    CategoryRule("best-practices", "Best Practices"),
    CategoryRule("cluster-", "Cluster Management"),
    CategoryRule("node-", "Node Management"),
    CategoryRule("workload-", "Workloads"),
    CategoryRule("storage", "Storage"),
    CategoryRule("ingress", "Ingress"),
    CategoryRule("autoscal", "Autoscaling"),
    CategoryRule("gpu", "GPU/Compute"),
    CategoryRule("windows", "Windows Containers"),
)

DIRECTORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("/concepts/", "Concepts"),
    CategoryRule("/tutorial/", "Tutorial"),
    CategoryRule("/how-to/", "How-to Guide"),
    CategoryRule("/reference/", "Reference"),
)

DEFAULT_CATEGORY = "General"

_MARKDOWN_SUFFIXES = (".md", ".markdown")


def _normalise_path(path: str) -> str:
    return path.strip().replace("\\", "/")


def category_of(
    path: str,
    rules: tuple[CategoryRule, ...] = DEFAULT_CATEGORY_RULES,
) -> str:
    """Return the category of a documentation path.

    Parameters
    ----------
    path
        Repository-relative file path.
    rules
        Ordered substring rules checked against the lower-cased path before
        the directory-shape fallbacks.

    Returns
    -------
    str
        The first matching category, or ``General``.

    """
    lowered = _normalise_path(path).lower()
    for rule in (*rules, *DIRECTORY_RULES):
        if rule.pattern in lowered:
            return rule.category
    return DEFAULT_CATEGORY


def title_for(path: str) -> str:
    """Derive a display title from a file name.

    ``articles/aks/localdns-custom.md`` becomes ``Localdns-custom``; index
    pages take their directory name instead.
    """
    pure = PurePosixPath(_normalise_path(path))
    stem = pure.stem if pure.suffix.lower() in _MARKDOWN_SUFFIXES else pure.name
    if stem.lower() == "index" and pure.parent.name:
        stem = pure.parent.name
    if not stem:
        return "Documentation"
    return stem[0].upper() + stem[1:]


@dataclasses.dataclass(frozen=True, slots=True)
class DocumentLocator:
    """Resolve source paths to the URL of the published document.

    Two source paths can render to one live page (``foo.md`` and
    ``foo/index.md``, or paths differing only by case); both resolve to the
    same canonical URL here.
    """

    docs_root: str = "articles/aks/"
    base_url: str = "https://learn.microsoft.com/azure/aks/"

    def url_for(self, path: str) -> str:
        """Return the canonical published URL for ``path``."""
        relative = _normalise_path(path)
        root = _normalise_path(self.docs_root)
        if root and relative.lower().startswith(root.lower()):
            relative = relative[len(root) :]
        relative = relative.strip("/")

        lowered = relative.lower()
        for suffix in _MARKDOWN_SUFFIXES:
            if lowered.endswith(suffix):
                lowered = lowered[: -len(suffix)]
                break
        if lowered == "index":
            lowered = ""
        elif lowered.endswith("/index"):
            lowered = lowered[: -len("/index")]

        base = self.base_url.rstrip("/")
        return f"{base}/{lowered}" if lowered else base


def docs_url_for(
    path: str,
    docs_root: str = "articles/aks/",
    base_url: str = "https://learn.microsoft.com/azure/aks/",
) -> str:
    """Return the canonical published URL for ``path``."""
    return DocumentLocator(docs_root=docs_root, base_url=base_url).url_for(path)
