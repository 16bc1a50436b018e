"""Unit tests for slug normalization."""

from __future__ import annotations

import pytest

from rankrent.core.slugs import SLUG_PATTERN, is_valid_slug, slugify


def test_slugify_lowercases_and_hyphenates_whitespace() -> None:
    assert slugify("  Emergency   Plumber ") == "emergency-plumber"


def test_slugify_strips_symbols_and_collapses_hyphens() -> None:
    assert slugify("Boiler & Radiator -- Repair!") == "boiler-radiator-repair"


def test_slugify_symbol_only_input_is_empty() -> None:
    assert slugify("!!! ???") == ""
    assert slugify("") == ""
    assert is_valid_slug(slugify("&&&")) is False


def test_slugify_drops_non_ascii_letters() -> None:
    assert slugify("Café Plumbing") == "caf-plumbing"


@pytest.mark.parametrize(
    "raw",
    [
        "Drain Cleaning",
        "  -leading and trailing- ",
        "Sutton Coldfield",
        "M1 1AA Area 3",
        "a---b   c",
        "--",
        "Tap\tRepair\nService",
        "ÉÀ only",
    ],
)
def test_slugify_is_idempotent_and_matches_slug_shape(raw: str) -> None:
    slug = slugify(raw)

    assert slugify(slug) == slug
    assert slug == "" or SLUG_PATTERN.match(slug)
