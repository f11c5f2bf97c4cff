"""Slug generation for post titles"""

import re
import unicodedata
from collections.abc import Awaitable, Callable
from uuid import uuid4

from pydantic import BaseModel, Field

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")

SLUG_PREFIX_PATTERN = r"^[a-z0-9]+(-[a-z0-9]+)*$"


class SlugPolicy(BaseModel):
    """Knobs for slug generation and uniqueness checks"""

    exclude_self_on_update: bool = Field(
        default=False,
        description="Ignore the updated post's own row when checking for a free slug",
    )
    fallback_prefix: str = Field(
        default="post",
        pattern=SLUG_PREFIX_PATTERN,
        description="Prefix of the slug used for symbol-only titles",
    )


def generate_base_slug(title: str, fallback_prefix: str = "post") -> str:
    """Map a title to a lowercase, hyphen-separated slug.

    Accented letters are reduced to ASCII, anything other than letters,
    digits, whitespace and hyphens is dropped. A title with nothing left
    gets ``<fallback_prefix>-<8 hex chars>``.
    """
    text = unicodedata.normalize("NFKD", title)
    text = text.encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = _DISALLOWED.sub("", text)
    text = _WHITESPACE.sub("-", text)
    text = _HYPHENS.sub("-", text)
    text = text.strip("-")
    if not text:
        return f"{fallback_prefix}-{uuid4().hex[:8]}"
    return text


async def ensure_unique_slug(
    base_slug: str, exists: Callable[[str], Awaitable[bool]]
) -> str:
    """Return base_slug, or base_slug-1, base_slug-2, ... whichever is free first."""
    slug = base_slug
    counter = 1
    while await exists(slug):
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
