"""Unit tests for rewrite directive requests."""

from __future__ import annotations

from typing import Any

import pytest

from rankrent.core.exceptions import StaleContentError, WorkflowPreconditionError
from rankrent.schemas.build import GeneratedContent, RewriteDirective, VarianceResult
from rankrent.services.rewrite_advisor import RewriteAdvisor, current_directives


def _page(slug: str) -> dict[str, Any]:
    return {
        "page_type": "Location",
        "display_name": slug.title(),
        "slug": slug,
        "content": {"h1": slug, "intro": "intro", "cta": "cta", "sections": []},
        "images": [],
    }


def _content(*slugs: str, version: int = 1) -> GeneratedContent:
    content = GeneratedContent.model_validate({"pages": [_page(slug) for slug in slugs]})
    return content.model_copy(update={"version": version})


def _entry(slug: str, matched: str, status: str = "warn", version: int = 1) -> VarianceResult:
    return VarianceResult(
        slug=slug,
        displayName=slug.title(),
        matchedSlug=matched,
        matchedDisplayName=matched.title(),
        score=0.62,
        status=status,
        content_version=version,
    )


def _directive(summary: str = "Differentiate", version: int = 0) -> RewriteDirective:
    return RewriteDirective(
        summary=summary,
        differentiation_strategy="Reorder sections",
        directives=[],
        content_version=version,
    )


class _FakeRewriteBackend:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, float]] = []

    async def rewrite(self, source: Any, matched: Any, score: float) -> RewriteDirective:
        self.calls.append((source.slug, matched.slug, score))
        return _directive()


@pytest.mark.asyncio
async def test_advise_resolves_pages_and_stamps_version() -> None:
    backend = _FakeRewriteBackend()
    advisor = RewriteAdvisor(backend)  # type: ignore[arg-type]

    directive = await advisor.advise(_entry("kyle", "buda", version=3), _content("kyle", "buda", version=3))

    assert backend.calls == [("kyle", "buda", 0.62)]
    assert directive.content_version == 3


@pytest.mark.asyncio
async def test_advise_rejects_pass_entries() -> None:
    backend = _FakeRewriteBackend()
    advisor = RewriteAdvisor(backend)  # type: ignore[arg-type]

    with pytest.raises(WorkflowPreconditionError):
        await advisor.advise(_entry("kyle", "buda", status="pass"), _content("kyle", "buda"))

    assert backend.calls == []


@pytest.mark.asyncio
async def test_advise_rejects_missing_matched_page() -> None:
    backend = _FakeRewriteBackend()
    advisor = RewriteAdvisor(backend)  # type: ignore[arg-type]

    with pytest.raises(StaleContentError) as exc_info:
        await advisor.advise(_entry("kyle", "buda"), _content("kyle"))

    assert exc_info.value.slug == "buda"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_advise_rejects_entry_from_older_content_version() -> None:
    backend = _FakeRewriteBackend()
    advisor = RewriteAdvisor(backend)  # type: ignore[arg-type]

    # Same slugs exist, but the entry was scored against version 1.
    with pytest.raises(StaleContentError):
        await advisor.advise(_entry("kyle", "buda", version=1), _content("kyle", "buda", version=2))

    assert backend.calls == []


def test_current_directives_filters_by_version() -> None:
    cached = {"kyle": _directive(version=1), "buda": _directive(version=2)}

    assert list(current_directives(cached, _content("kyle", "buda", version=2))) == ["buda"]
    assert current_directives(cached, None) == {}
