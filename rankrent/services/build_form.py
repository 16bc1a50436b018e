"""Build form validation and create-payload assembly."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from rankrent.schemas.build import Service
from rankrent.services.tiers import TIER_VALUES


@dataclass(frozen=True)
class BuildForm:
    """Raw build form inputs as typed by the operator."""

    brand_name: str = ""
    city: str = ""
    address: str = ""
    phone: str = ""
    tier: str = ""
    radius_miles: str = ""
    override_service_count: str = ""


def _parse_number(value: str) -> float | None:
    try:
        parsed = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def validate_build_form(form: BuildForm, services: tuple[Service, ...] | list[Service]) -> dict[str, str]:
    """Return field-keyed errors; an empty dict means the form may be submitted."""
    errors: dict[str, str] = {}
    if not form.brand_name.strip():
        errors["brandName"] = "Brand name is required"
    if not form.city.strip():
        errors["city"] = "City is required"
    if not form.address.strip():
        errors["address"] = "Address is required"
    if not form.phone.strip():
        errors["phone"] = "Phone is required"
    if form.tier not in TIER_VALUES:
        errors["tier"] = "Tier is required"

    radius = _parse_number(form.radius_miles)
    if radius is None or radius <= 0:
        errors["radiusMiles"] = "Radius is required"

    if form.override_service_count.strip():
        override = _parse_number(form.override_service_count)
        if override is None or override <= 0:
            errors["overrideServiceCount"] = "Service count must be positive"
        elif not override.is_integer():
            errors["overrideServiceCount"] = "Service count must be a whole number"

    if not services:
        errors["services"] = "Select at least one service"
    return errors


def build_create_payload(form: BuildForm, services: tuple[Service, ...] | list[Service]) -> dict[str, Any]:
    """Assemble the build-create body from an already validated form."""
    override = form.override_service_count.strip()
    return {
        "brandName": form.brand_name.strip(),
        "city": form.city.strip(),
        "address": form.address.strip(),
        "phone": form.phone.strip(),
        "tier": form.tier,
        "radiusMiles": float(form.radius_miles),
        "overrideServiceCount": int(float(override)) if override else None,
        "services": [service.model_dump(mode="json") for service in services],
    }


def form_radius(form: BuildForm) -> float:
    radius = _parse_number(form.radius_miles)
    return radius if radius is not None and radius > 0 else 0.0
