"""Content generation gateway for build pages, schema, sitemap and robots."""

from __future__ import annotations

import logging

from rankrent.core.exceptions import WorkflowPreconditionError
from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import Area, BuildRecord, GeneratedContent, Service

logger = logging.getLogger(__name__)


class ContentGenerationGateway:
    """Generates the full content bundle; each call replaces the last one."""

    def __init__(self, backend: BuildBackend) -> None:
        self.backend = backend

    async def generate(
        self,
        build: BuildRecord,
        services: list[Service],
        areas: list[Area],
        previous_version: int = 0,
    ) -> GeneratedContent:
        if not services:
            raise WorkflowPreconditionError("Add services first")

        content = await self.backend.generate(build, services, areas)
        stamped = content.model_copy(update={"version": previous_version + 1})
        logger.info(
            "Content generated",
            extra={
                "build_id": build.id,
                "pages": len(stamped.pages),
                "version": stamped.version,
            },
        )
        return stamped
