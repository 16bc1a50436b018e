"""Location area allocation.

Areas move through two stages. A preview is an ephemeral candidate list from
one input mode. Confirming it persists the list and makes it the saved set,
which counts against the tier quota.
"""

from __future__ import annotations

import logging

from rankrent.core.exceptions import AreaQuotaExceededError, WorkflowPreconditionError
from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import Area, BuildRecord
from rankrent.services.tiers import areas_enabled, max_areas

logger = logging.getLogger(__name__)

PRESET_PACKS: dict[str, tuple[str, ...]] = {
    "Austin": ("Round Rock", "Cedar Park", "Pflugerville", "Georgetown", "Leander", "Kyle", "Buda", "Lakeway", "Bee Cave", "Dripping Springs"),
    "Dallas": ("Fort Worth", "Plano", "Arlington", "Irving", "Garland", "Frisco", "McKinney", "Grand Prairie", "Denton", "Richardson"),
    "Houston": ("Sugar Land", "Katy", "The Woodlands", "Pearland", "League City", "Pasadena", "Baytown", "Missouri City", "Conroe", "Spring"),
    "Phoenix": ("Scottsdale", "Mesa", "Chandler", "Gilbert", "Tempe", "Glendale", "Peoria", "Surprise", "Goodyear", "Avondale"),
    "Denver": ("Aurora", "Lakewood", "Arvada", "Westminster", "Thornton", "Centennial", "Boulder", "Littleton", "Broomfield", "Castle Rock"),
    "London": ("Croydon", "Bromley", "Barnet", "Ealing", "Enfield", "Hounslow", "Redbridge", "Brent", "Waltham Forest", "Haringey"),
    "Manchester": ("Salford", "Stockport", "Bolton", "Wigan", "Oldham", "Rochdale", "Bury", "Tameside", "Trafford", "Altrincham"),
    "Birmingham": ("Solihull", "Wolverhampton", "Dudley", "Walsall", "Sandwell", "Sutton Coldfield", "Edgbaston", "Erdington", "Moseley", "Kings Heath"),
}


def parse_manual_area_names(text: str) -> list[str]:
    """Split newline-separated input into trimmed, non-blank names."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def resolve_preset_pack(pack: str) -> list[str]:
    return list(PRESET_PACKS.get(pack, ()))


def check_area_quota(tier: str, requested: int) -> None:
    """Raise when ``requested`` saved areas would exceed the tier cap."""
    limit = max_areas(tier)
    if requested > limit:
        logger.warning(
            "Area confirm rejected by tier quota",
            extra={"tier": tier, "max_areas": limit, "requested": requested},
        )
        raise AreaQuotaExceededError(tier, limit, requested)


def _require_areas_enabled(tier: str | None) -> None:
    if not areas_enabled(tier):
        raise WorkflowPreconditionError(
            "Location pages are disabled for this tier",
            details={"tier": tier},
        )


class AreaAllocator:
    """Runs the preview/confirm exchange with build-areas."""

    def __init__(self, backend: BuildBackend) -> None:
        self.backend = backend

    async def preview_manual(self, build_id: str | None, tier: str | None, text: str) -> list[Area]:
        _require_areas_enabled(tier)
        names = parse_manual_area_names(text)
        if not names:
            raise WorkflowPreconditionError("Enter at least one area name")
        return await self.backend.preview_areas(build_id, "manual", names=names)

    async def preview_postcode(
        self,
        build_id: str | None,
        tier: str | None,
        postcode: str,
        radius_miles: float,
    ) -> list[Area]:
        _require_areas_enabled(tier)
        cleaned = (postcode or "").strip()
        if not cleaned:
            raise WorkflowPreconditionError("Enter a central postcode")
        return await self.backend.preview_areas(
            build_id,
            "postcode",
            postcode=cleaned,
            radiusMiles=radius_miles,
        )

    async def preview_preset(self, build_id: str | None, tier: str | None, pack: str) -> list[Area]:
        _require_areas_enabled(tier)
        names = resolve_preset_pack(pack)
        if not names:
            raise WorkflowPreconditionError(f"Unknown preset pack: {pack or '(none)'}")
        return await self.backend.preview_areas(build_id, "preset", presetPack=names)

    async def confirm(self, build: BuildRecord, preview: list[Area]) -> list[Area]:
        """Persist ``preview`` and return the new saved set.

        Confirm replaces the saved set, so the quota is checked against the
        preview size before any call is made.
        """
        if not preview:
            raise WorkflowPreconditionError("Preview areas before saving")
        check_area_quota(build.tier, len(preview))
        saved = await self.backend.confirm_areas(build.id, preview)
        # Backend may omit the echo; the confirmed preview is then authoritative
        result = saved if saved is not None else list(preview)
        logger.info("Areas saved", extra={"build_id": build.id, "count": len(result)})
        return result
