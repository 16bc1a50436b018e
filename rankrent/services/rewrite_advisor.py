"""Rewrite directives for pages flagged by the variance check."""

from __future__ import annotations

import logging

from rankrent.core.exceptions import StaleContentError, WorkflowPreconditionError
from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import GeneratedContent, RewriteDirective, VarianceResult
from rankrent.services.variance import rewrite_available

logger = logging.getLogger(__name__)


def current_directives(
    directives: dict[str, RewriteDirective],
    content: GeneratedContent | None,
) -> dict[str, RewriteDirective]:
    """Return cached directives that still match the current content version."""
    if content is None:
        return {}
    return {
        slug: directive
        for slug, directive in directives.items()
        if directive.content_version == content.version
    }


class RewriteAdvisor:
    """Requests differentiation advice for one warn/fail page."""

    def __init__(self, backend: BuildBackend) -> None:
        self.backend = backend

    async def advise(self, result: VarianceResult, content: GeneratedContent) -> RewriteDirective:
        if not rewrite_available(result):
            raise WorkflowPreconditionError(
                f"Rewrite directives are only available for warn or fail pages: {result.slug}"
            )
        if result.content_version != content.version:
            raise StaleContentError(result.slug)

        source = content.page_by_slug(result.slug)
        if source is None:
            raise StaleContentError(result.slug)
        matched = content.page_by_slug(result.matched_slug)
        if matched is None:
            raise StaleContentError(result.matched_slug)

        directive = await self.backend.rewrite(source, matched, result.score)
        logger.info(
            "Rewrite directives generated",
            extra={"slug": result.slug, "matched_slug": result.matched_slug, "score": result.score},
        )
        return directive.model_copy(update={"content_version": content.version})
