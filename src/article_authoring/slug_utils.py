"""
Slug formatting and format validation.

A slug is the URL-path segment of an article within its site:
- lowercase letters, digits and hyphens only
- no leading, trailing or repeated hyphens
- at least 3 characters
"""

import random
import re
from typing import Optional

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

SLUG_REQUIRED_MESSAGE = "Slug is required"
SLUG_CHARSET_MESSAGE = "Only lowercase letters, numbers, and hyphens are allowed"


def format_as_slug(text: Optional[str]) -> str:
    """
    Format arbitrary text as a slug.

    Args:
        text: Raw user input or a title.

    Returns:
        Canonical slug, or "" if nothing usable remains.

    Examples:
        >>> format_as_slug("How to Bake Bread")
        'how-to-bake-bread'

        >>> format_as_slug("  Hello,   World! ")
        'hello-world'
    """
    if not text:
        return ""

    slug = text.lower()
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def validate_slug_format(slug: Optional[str], min_length: int = 3) -> Optional[str]:
    """
    Check a slug's format without contacting the server.

    Args:
        slug: Slug to check (expected to be already formatted).
        min_length: Minimum number of characters.

    Returns:
        Error message if invalid, None if valid.
    """
    if not slug:
        return SLUG_REQUIRED_MESSAGE

    if len(slug) < min_length:
        return f"Slug must be at least {min_length} characters"

    if not SLUG_PATTERN.match(slug):
        return SLUG_CHARSET_MESSAGE

    return None


def with_numeric_suffix(
    slug: str,
    max_suffix: int = 999,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Append a random numeric suffix to a slug.

    Args:
        slug: Base slug.
        max_suffix: Largest suffix value (inclusive).
        rng: Random source, for reproducible tests.

    Returns:
        ``f"{slug}-{n}"`` with 0 <= n <= max_suffix.
    """
    rng = rng or random
    return f"{slug}-{rng.randint(0, max_suffix)}"
