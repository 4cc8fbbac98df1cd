"""Repository slug utilities.

Repository slugs are GitHub identifiers in ``owner/name`` format. They are not
filesystem paths, so they are parsed with these helpers rather than
``pathlib``.
"""

from __future__ import annotations


def repo_slug(owner: str, name: str) -> str:
    """Build an ``owner/name`` slug.

    >>> repo_slug("MicrosoftDocs", "azure-aks-docs")
    'MicrosoftDocs/azure-aks-docs'

    """
    return f"{owner}/{name}"


def parse_repo_slug(slug: str) -> tuple[str, str]:
    """Split an ``owner/name`` slug, raising ``ValueError`` when malformed.

    >>> parse_repo_slug("Azure/AKS")
    ('Azure', 'AKS')

    """
    owner, sep, name = slug.strip().partition("/")
    if not sep or not owner or not name or "/" in name:
        msg = f"repository slug must look like 'owner/name', got: {slug!r}"
        raise ValueError(msg)
    return owner, name
