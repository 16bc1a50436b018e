"""Tier plan limits for site builds."""

from __future__ import annotations

from dataclasses import dataclass

from rankrent.schemas.build import Tier


@dataclass(frozen=True)
class TierOption:
    """Limits attached to one build tier."""

    value: Tier
    label: str
    min_radius_miles: int
    max_radius_miles: int
    default_service_count: int
    max_areas: int


TIER_OPTIONS: tuple[TierOption, ...] = (
    TierOption(
        value="tier_1",
        label="Tier 1 (5-15 mi, 8 services, 5 locations)",
        min_radius_miles=5,
        max_radius_miles=15,
        default_service_count=8,
        max_areas=5,
    ),
    TierOption(
        value="tier_2",
        label="Tier 2 (10-25 mi, 12 services, 15 locations)",
        min_radius_miles=10,
        max_radius_miles=25,
        default_service_count=12,
        max_areas=15,
    ),
    TierOption(
        value="tier_3",
        label="Tier 3 (15-50 mi, 16 services, no locations)",
        min_radius_miles=15,
        max_radius_miles=50,
        default_service_count=16,
        max_areas=0,
    ),
)
TIER_VALUES = frozenset(option.value for option in TIER_OPTIONS)


def resolve_tier_option(tier: str | None) -> TierOption | None:
    for option in TIER_OPTIONS:
        if option.value == tier:
            return option
    return None


def max_areas(tier: str | None) -> int:
    """Return the saved-area cap for a tier (0 disables location pages)."""
    option = resolve_tier_option(tier)
    return option.max_areas if option else 0


def slots_remaining(tier: str | None, saved_count: int) -> int:
    return max(max_areas(tier) - saved_count, 0)


def areas_enabled(tier: str | None) -> bool:
    return max_areas(tier) > 0


def format_tier(tier: str) -> str:
    option = resolve_tier_option(tier)
    return option.label if option else tier
