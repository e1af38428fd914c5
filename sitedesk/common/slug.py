"""Page slug derivation.

Page identifiers are derived once, from the name a page is created with, and
never change afterwards.
"""

from __future__ import annotations

import re

_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")


def page_slug(name: str) -> str:
    """Derive a page identifier from a page name.

    The name is lowercased and every maximal run of characters outside
    ``[a-z0-9]`` becomes a single ``-``. Leading and trailing hyphens are
    kept, so the function is total: any non-empty name yields a non-empty
    slug. Non-ASCII letters are treated like punctuation.

    Parameters
    ----------
    name:
        Human-readable page name.

    Returns
    -------
    str
        Slug made of ``[a-z0-9-]``.

    Examples
    --------
    >>> page_slug("Landing Page")
    'landing-page'
    >>> page_slug("landing page!!")
    'landing-page-'

    """
    return _NON_SLUG_RUN.sub("-", name.lower())


def short_sha(sha: str) -> str:
    """Return the seven-character abbreviation of a commit SHA."""
    return sha[:7]
