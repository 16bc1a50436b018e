"""Ordered deployment prompts (A, B, C) for a generated build."""

from __future__ import annotations

import logging

from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import Area, BuildRecord, DeployPrompt, GeneratedContent, Service

logger = logging.getLogger(__name__)

DISABLED_PROMPT_NOTICE = "No location areas configured."


def prompt_body(prompt: DeployPrompt) -> str | None:
    """Return the copyable body, or None when the prompt is unavailable."""
    if prompt.disabled:
        return None
    return prompt.prompt


def render_prompt_summary(prompt: DeployPrompt) -> str:
    lines = [f"[{prompt.id}] {prompt.title}", prompt.description]
    body = prompt_body(prompt)
    if body is None:
        lines.append(DISABLED_PROMPT_NOTICE)
        return "\n".join(lines)
    lines.append(f"When to paste: {prompt.when_to_paste}")
    lines.extend(f"  - verify: {item}" for item in prompt.what_to_verify)
    lines.append(body)
    return "\n".join(lines)


class DeployPromptSequencer:
    """Fetches deploy prompts fresh on every request, keeping server order."""

    def __init__(self, backend: BuildBackend) -> None:
        self.backend = backend

    async def load(
        self,
        build: BuildRecord,
        areas: list[Area],
        services: list[Service],
        content: GeneratedContent,
    ) -> list[DeployPrompt]:
        prompts = await self.backend.deploy(build, areas, services, content)
        logger.info(
            "Deploy prompts loaded",
            extra={
                "build_id": build.id,
                "prompts": [prompt.id for prompt in prompts],
                "disabled": [prompt.id for prompt in prompts if prompt.disabled],
            },
        )
        return prompts
