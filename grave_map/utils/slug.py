"""
Slug generation for grave URLs.

Slugs are the sanitized title plus a short random suffix drawn from an
alphabet without look-alike characters (no l, 0 or 1).
"""

import re
import secrets

SLUG_ALPHABET = "abcdefghijkmnopqrstuvwxyz23456789"
SLUG_ID_LENGTH = 6
MAX_BASE_LENGTH = 40

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def make_slug_id(length: int = SLUG_ID_LENGTH) -> str:
    return "".join(secrets.choice(SLUG_ALPHABET) for _ in range(length))


def generate_slug(title: str) -> str:
    """
    Build a URL slug for a title.

    Args:
        title: Grave title, any text

    Returns:
        "{sanitized-title}-{id}", or "grave-{id}" when nothing survives
    """
    sanitized = _NON_ALNUM.sub("-", title.lower()).strip("-")[:MAX_BASE_LENGTH]
    base = sanitized or "grave"
    return f"{base}-{make_slug_id()}"
