"""Unit tests for variance bucketing and evaluation."""

from __future__ import annotations

from typing import Any

import pytest

from rankrent.core.exceptions import WorkflowPreconditionError
from rankrent.schemas.build import GeneratedContent, VarianceResult
from rankrent.services.variance import (
    VarianceEvaluator,
    classify_variance,
    current_results,
    rewrite_available,
)


def _page(slug: str) -> dict[str, Any]:
    return {
        "page_type": "Service",
        "display_name": slug.replace("-", " ").title(),
        "slug": slug,
        "content": {"h1": slug, "intro": "intro", "cta": "cta", "sections": []},
        "images": [],
    }


def _content(*slugs: str, version: int = 1) -> GeneratedContent:
    content = GeneratedContent.model_validate({"pages": [_page(slug) for slug in slugs]})
    return content.model_copy(update={"version": version})


def _result(slug: str, score: float, status: str = "pass", version: int = 1) -> VarianceResult:
    return VarianceResult(
        slug=slug,
        displayName=slug,
        matchedSlug="home",
        matchedDisplayName="Home",
        score=score,
        status=status,
        content_version=version,
    )


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (0.0, "pass"),
        (0.49, "pass"),
        (0.4999, "pass"),
        (0.50, "warn"),
        (0.70, "warn"),
        (0.7001, "fail"),
        (0.71, "fail"),
        (1.0, "fail"),
    ],
)
def test_classify_variance_thresholds(score: float, expected: str) -> None:
    assert classify_variance(score) == expected


def test_rewrite_available_only_for_warn_and_fail() -> None:
    assert rewrite_available(_result("a", 0.2, "pass")) is False
    assert rewrite_available(_result("a", 0.6, "warn")) is True
    assert rewrite_available(_result("a", 0.9, "fail")) is True


def test_current_results_drops_other_versions() -> None:
    results = [_result("a", 0.1, version=1), _result("b", 0.2, version=2)]

    assert [r.slug for r in current_results(results, _content("a", "b", version=2))] == ["b"]
    assert current_results(results, None) == []


class _FakeVarianceBackend:
    def __init__(self, results: list[VarianceResult]) -> None:
        self.results = results
        self.calls: list[list[str]] = []

    async def variance(self, pages: list[Any]) -> list[VarianceResult]:
        self.calls.append([page.slug for page in pages])
        return self.results


@pytest.mark.asyncio
async def test_evaluate_rebuckets_backend_status_and_stamps_version() -> None:
    # Backend buckets 0.70 as fail; the client treats it as warn.
    backend = _FakeVarianceBackend(
        [_result("home", 0.70, "fail", version=0), _result("drains", 0.3, "warn", version=0)]
    )
    evaluator = VarianceEvaluator(backend)  # type: ignore[arg-type]

    results = await evaluator.evaluate(_content("home", "drains", version=4))

    assert [(r.slug, r.status, r.content_version) for r in results] == [
        ("home", "warn", 4),
        ("drains", "pass", 4),
    ]
    assert backend.calls == [["home", "drains"]]


@pytest.mark.asyncio
async def test_evaluate_requires_pages() -> None:
    backend = _FakeVarianceBackend([])
    evaluator = VarianceEvaluator(backend)  # type: ignore[arg-type]

    with pytest.raises(WorkflowPreconditionError):
        await evaluator.evaluate(_content())

    assert backend.calls == []
