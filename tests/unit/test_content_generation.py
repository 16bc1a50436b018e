"""Unit tests for the content generation gateway."""

from __future__ import annotations

from typing import Any

import pytest

from rankrent.core.exceptions import WorkflowPreconditionError
from rankrent.schemas.build import BuildRecord, GeneratedContent, Service
from rankrent.services.content_generation import ContentGenerationGateway

BUILD = BuildRecord(
    id="build-1",
    brand_name="Pro Plumbing",
    city="Austin",
    address="1 Main St",
    phone="512-555-0100",
    tier="tier_1",
    radius_miles=10,
)


class _FakeGenerateBackend:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def generate(self, build: Any, services: Any, areas: Any) -> GeneratedContent:
        self.calls.append({"build": build.id, "services": len(services), "areas": len(areas)})
        return GeneratedContent.model_validate(
            {
                "pages": [],
                "schema": {"@type": "LocalBusiness", "name": build.brand_name},
                "sitemap": [{"loc": "/home", "priority": "1.0"}],
                "robots": "User-agent: *\nAllow: /",
            }
        )


@pytest.mark.asyncio
async def test_generate_stamps_next_version() -> None:
    backend = _FakeGenerateBackend()
    gateway = ContentGenerationGateway(backend)  # type: ignore[arg-type]

    content = await gateway.generate(
        BUILD,
        [Service(slug="drain-cleaning", name="Drain Cleaning")],
        [],
        previous_version=2,
    )

    assert content.version == 3
    assert content.json_ld["@type"] == "LocalBusiness"
    assert backend.calls == [{"build": "build-1", "services": 1, "areas": 0}]


@pytest.mark.asyncio
async def test_generate_without_services_is_rejected_locally() -> None:
    backend = _FakeGenerateBackend()
    gateway = ContentGenerationGateway(backend)  # type: ignore[arg-type]

    with pytest.raises(WorkflowPreconditionError, match="Add services first"):
        await gateway.generate(BUILD, [], [])

    assert backend.calls == []


def test_version_is_not_serialized() -> None:
    content = GeneratedContent(version=5)

    assert "version" not in content.model_dump(by_alias=True)
    assert "schema" in content.model_dump(by_alias=True)
