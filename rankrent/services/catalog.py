"""Service catalog selection.

Catalog and custom services share one ordered set keyed by slug; a service
counts as custom only because its slug is missing from ``SERVICE_CATALOG``.
"""

from __future__ import annotations

from rankrent.core.slugs import slugify
from rankrent.schemas.build import Service

SERVICE_CATALOG: tuple[Service, ...] = (
    Service(slug="emergency-plumber", name="Emergency Plumber"),
    Service(slug="drain-cleaning", name="Drain Cleaning"),
    Service(slug="blocked-drains", name="Blocked Drains"),
    Service(slug="boiler-repair", name="Boiler Repair"),
    Service(slug="leak-detection", name="Leak Detection"),
    Service(slug="bathroom-plumbing", name="Bathroom Plumbing"),
    Service(slug="radiator-repair", name="Radiator Repair"),
    Service(slug="tap-repair", name="Tap Repair"),
    Service(slug="toilet-repair", name="Toilet Repair"),
    Service(slug="water-heater-repair", name="Water Heater Repair"),
    Service(slug="pipe-repair", name="Pipe Repair"),
    Service(slug="central-heating", name="Central Heating"),
)
CATALOG_SLUGS = frozenset(service.slug for service in SERVICE_CATALOG)


def has_service(selected: tuple[Service, ...], slug: str) -> bool:
    return any(service.slug == slug for service in selected)


def toggle_service(selected: tuple[Service, ...], service: Service) -> tuple[Service, ...]:
    """Remove ``service`` when its slug is selected, otherwise append it."""
    if has_service(selected, service.slug):
        return tuple(entry for entry in selected if entry.slug != service.slug)
    return (*selected, service)


def add_custom_service(selected: tuple[Service, ...], name: str) -> tuple[Service, ...]:
    """Append a user-named service.

    Blank names, names that slugify to nothing and names whose slug is already
    selected leave the set unchanged.
    """
    cleaned = (name or "").strip()
    slug = slugify(cleaned)
    if not slug or has_service(selected, slug):
        return selected
    return (*selected, Service(slug=slug, name=cleaned))


def custom_services(selected: tuple[Service, ...]) -> list[Service]:
    return [service for service in selected if service.slug not in CATALOG_SLUGS]
