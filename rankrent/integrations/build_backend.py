"""Typed wrappers for the build-* remote functions."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from rankrent.core.exceptions import EdgeFunctionError, UnexpectedResponseError
from rankrent.integrations.edge_functions import EdgeFunctionClient, EdgeFunctionResult
from rankrent.schemas.build import (
    Area,
    AreaMode,
    AreasResponse,
    BuildCreateResponse,
    BuildRecord,
    DeployPrompt,
    DeployResponse,
    GeneratedContent,
    GeneratedPage,
    GenerateResponse,
    RewriteDirective,
    RewriteResponse,
    Service,
    VarianceResponse,
    VarianceResult,
)

logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

BUILD_CREATE = "build-create"
BUILD_SERVICES = "build-services"
BUILD_AREAS = "build-areas"
BUILD_GENERATE = "build-generate"
BUILD_VARIANCE = "build-variance"
BUILD_REWRITE = "build-rewrite"
BUILD_DEPLOY = "build-deploy"


def _dump(items: list[BaseModel]) -> list[dict[str, Any]]:
    return [item.model_dump(mode="json", by_alias=True) for item in items]


class BuildBackend:
    """One method per remote function; raises on any non-2xx result."""

    def __init__(self, client: EdgeFunctionClient) -> None:
        self.client = client

    async def _call(
        self,
        function_name: str,
        body: dict[str, Any],
        response_model: type[ResponseT],
    ) -> ResponseT:
        result: EdgeFunctionResult = await self.client.call(function_name, body)
        if not result.ok:
            raise EdgeFunctionError(function_name, result.status, result.body_text)
        if not isinstance(result.json, dict):
            raise UnexpectedResponseError(function_name, result.status)
        try:
            return response_model.model_validate(result.json)
        except ValidationError as e:
            logger.warning(
                "Remote function payload rejected",
                extra={"function": function_name, "errors": e.error_count()},
            )
            raise UnexpectedResponseError(function_name, result.status) from e

    async def create_build(self, payload: dict[str, Any]) -> BuildRecord:
        response = await self._call(BUILD_CREATE, payload, BuildCreateResponse)
        if response.build is None:
            raise UnexpectedResponseError(BUILD_CREATE)
        return response.build

    async def save_services(self, build_id: str, services: list[Service]) -> None:
        """Replace the build's service set; any 2xx counts as the ack."""
        result: EdgeFunctionResult = await self.client.call(
            BUILD_SERVICES,
            {"buildId": build_id, "services": _dump(services)},
        )
        if not result.ok:
            raise EdgeFunctionError(BUILD_SERVICES, result.status, result.body_text)

    async def preview_areas(
        self,
        build_id: str | None,
        mode: AreaMode,
        **mode_payload: Any,
    ) -> list[Area]:
        """Request ephemeral candidate areas for one input mode."""
        response = await self._call(
            BUILD_AREAS,
            {"buildId": build_id, "previewOnly": True, "mode": mode, **mode_payload},
            AreasResponse,
        )
        return response.areas or []

    async def confirm_areas(self, build_id: str, areas: list[Area]) -> list[Area] | None:
        """Persist the previewed areas; None when the backend echoes nothing."""
        response = await self._call(
            BUILD_AREAS,
            {"buildId": build_id, "previewOnly": False, "areas": _dump(areas)},
            AreasResponse,
        )
        return response.areas

    async def generate(
        self,
        build: BuildRecord,
        services: list[Service],
        areas: list[Area],
    ) -> GeneratedContent:
        response = await self._call(
            BUILD_GENERATE,
            {
                "build": build.model_dump(mode="json"),
                "services": _dump(services),
                "areas": _dump(areas),
            },
            GenerateResponse,
        )
        if response.content is None:
            raise UnexpectedResponseError(BUILD_GENERATE)
        return response.content

    async def variance(self, pages: list[GeneratedPage]) -> list[VarianceResult]:
        response = await self._call(BUILD_VARIANCE, {"pages": _dump(pages)}, VarianceResponse)
        return response.results

    async def rewrite(
        self,
        source_page: GeneratedPage,
        matched_page: GeneratedPage,
        similarity_score: float,
    ) -> RewriteDirective:
        response = await self._call(
            BUILD_REWRITE,
            {
                "sourcePage": source_page.model_dump(mode="json"),
                "matchedPage": matched_page.model_dump(mode="json"),
                "similarityScore": similarity_score,
            },
            RewriteResponse,
        )
        if response.directives is None:
            raise UnexpectedResponseError(BUILD_REWRITE)
        return response.directives

    async def deploy(
        self,
        build: BuildRecord,
        areas: list[Area],
        services: list[Service],
        content: GeneratedContent,
    ) -> list[DeployPrompt]:
        response = await self._call(
            BUILD_DEPLOY,
            {
                "build": build.model_dump(mode="json"),
                "areas": _dump(areas),
                "services": _dump(services),
                "content": content.model_dump(mode="json", by_alias=True),
            },
            DeployResponse,
        )
        return response.prompts
