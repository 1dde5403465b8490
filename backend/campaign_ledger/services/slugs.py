"""
Slug derivation for public campaign and template URLs
"""

import re
from typing import Optional

from campaign_ledger.core.exceptions import EmptyDerivedSlug

_WHITESPACE_RUN = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9-]")
_ALPHANUMERIC = re.compile(r"[a-z0-9]")


def derive_slug(name: str, field: str = "name", index: Optional[int] = None) -> str:
    """
    Derive a URL-safe slug from a display name.

    Lower-cases the name, replaces each whitespace run with a single hyphen
    and drops every character outside ``[a-z0-9-]``. The same name always
    yields the same slug. Collisions are never resolved here; callers check
    the target namespace and report ``SlugCollision``.

    Raises:
        EmptyDerivedSlug: if no letter or digit remains
    """
    slug = _WHITESPACE_RUN.sub("-", (name or "").lower())
    slug = _DISALLOWED.sub("", slug)
    if not _ALPHANUMERIC.search(slug):
        raise EmptyDerivedSlug(name or "", field=field, index=index)
    return slug
