"""Duplicate-content variance scoring and bucketing."""

from __future__ import annotations

import logging

from rankrent.core.exceptions import WorkflowPreconditionError
from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import GeneratedContent, VarianceResult, VarianceStatus

logger = logging.getLogger(__name__)

VARIANCE_WARN_THRESHOLD = 0.50
VARIANCE_FAIL_THRESHOLD = 0.70
REWRITE_STATUSES: frozenset[VarianceStatus] = frozenset({"warn", "fail"})


def classify_variance(score: float) -> VarianceStatus:
    """Bucket a similarity score: below 0.50 passes, above 0.70 fails."""
    if score < VARIANCE_WARN_THRESHOLD:
        return "pass"
    if score <= VARIANCE_FAIL_THRESHOLD:
        return "warn"
    return "fail"


def rewrite_available(result: VarianceResult) -> bool:
    return result.status in REWRITE_STATUSES


def current_results(
    results: list[VarianceResult],
    content: GeneratedContent | None,
) -> list[VarianceResult]:
    """Drop results computed against an older content version."""
    if content is None:
        return []
    return [result for result in results if result.content_version == content.version]


class VarianceEvaluator:
    """Scores the current pages; every run replaces the previous results."""

    def __init__(self, backend: BuildBackend) -> None:
        self.backend = backend

    async def evaluate(self, content: GeneratedContent) -> list[VarianceResult]:
        if not content.pages:
            raise WorkflowPreconditionError("Generate content before checking variance")

        raw_results = await self.backend.variance(content.pages)
        results = [
            result.model_copy(
                update={
                    "status": classify_variance(result.score),
                    "content_version": content.version,
                }
            )
            for result in raw_results
        ]
        flagged = sum(1 for result in results if rewrite_available(result))
        logger.info(
            "Variance recalculated",
            extra={"pages": len(results), "flagged": flagged, "version": content.version},
        )
        return results
