"""URL slug normalization shared by service and area naming."""

from __future__ import annotations

import re

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")
SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


def slugify(text: str) -> str:
    """Turn a free-text label into a URL-safe slug.

    Lower-cases and trims, drops anything outside ``[a-z0-9\\s-]``, turns
    whitespace runs into one hyphen and collapses repeated hyphens. Hyphens
    left at either end are stripped so the result is either empty or matches
    ``SLUG_PATTERN``. An empty result means the label is unusable.
    """
    value = (text or "").lower().strip()
    value = _DISALLOWED_CHARS.sub("", value)
    value = _WHITESPACE_RUN.sub("-", value)
    value = _HYPHEN_RUN.sub("-", value)
    return value.strip("-")


def is_valid_slug(value: str) -> bool:
    return bool(SLUG_PATTERN.match(value or ""))
