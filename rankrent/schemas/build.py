"""Build workflow schemas exchanged with the remote build functions."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Tier = Literal["tier_1", "tier_2", "tier_3"]
AreaMode = Literal["manual", "postcode", "preset"]
VarianceStatus = Literal["pass", "warn", "fail"]


class WireModel(BaseModel):
    """Base for payloads that may arrive with camelCase keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Service(WireModel):
    """One service offered by the build (catalog or custom)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    slug: str
    name: str


class Area(WireModel):
    """A location page target."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    slug: str


class BuildRecord(WireModel):
    """One site-build project as returned by build-create.

    Immutable once created; editing means discarding and recreating.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    brand_name: str
    city: str
    address: str
    phone: str
    tier: Tier
    radius_miles: float
    override_service_count: int | None = None
    services: list[Service] = Field(default_factory=list)


class PageSection(WireModel):
    title: str
    intent: str


class PageContent(WireModel):
    h1: str
    intro: str
    cta: str
    sections: list[PageSection] = Field(default_factory=list)


class PageImage(WireModel):
    placement: str
    prompt: str


class GeneratedPage(WireModel):
    """One generated page with its content blocks and image prompts."""

    page_type: str
    display_name: str
    slug: str
    content: PageContent
    images: list[PageImage] = Field(default_factory=list)


class SitemapEntry(WireModel):
    loc: str
    priority: str


class GeneratedContent(WireModel):
    """Page/schema/sitemap/robots bundle for one build.

    ``version`` is stamped on the client each time content is generated and
    never sent over the wire.
    """

    pages: list[GeneratedPage] = Field(default_factory=list)
    json_ld: dict[str, Any] = Field(default_factory=dict, alias="schema")
    sitemap: list[SitemapEntry] = Field(default_factory=list)
    robots: str = ""
    version: int = Field(default=0, exclude=True)

    def page_by_slug(self, slug: str) -> GeneratedPage | None:
        for page in self.pages:
            if page.slug == slug:
                return page
        return None


class VarianceResult(WireModel):
    """Most-similar match for one page."""

    slug: str
    display_name: str = Field(alias="displayName")
    matched_slug: str = Field(alias="matchedSlug")
    matched_display_name: str = Field(alias="matchedDisplayName")
    score: float = Field(ge=0.0, le=1.0)
    status: VarianceStatus
    content_version: int = Field(default=0, exclude=True)


class RewriteInstruction(WireModel):
    section: str
    current_issue: str
    rewrite_instruction: str
    suggested_angle: str


class RewriteDirective(WireModel):
    """Differentiation advice for one flagged page."""

    summary: str
    differentiation_strategy: str
    directives: list[RewriteInstruction] = Field(default_factory=list)
    content_version: int = Field(default=0, exclude=True)


class DeployPrompt(WireModel):
    """One copy-pasteable deployment instruction set."""

    id: str
    title: str
    description: str
    disabled: bool = False
    when_to_paste: str = Field(alias="whenToPaste")
    what_to_verify: list[str] = Field(default_factory=list, alias="whatToVerify")
    prompt: str = ""


class QaChecklistItem(WireModel):
    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    description: str


# Response envelopes


class BuildCreateResponse(WireModel):
    build: BuildRecord | None = None


class AreasResponse(WireModel):
    build_id: str | None = Field(default=None, alias="buildId")
    areas: list[Area] | None = None


class GenerateResponse(WireModel):
    content: GeneratedContent | None = None


class VarianceResponse(WireModel):
    results: list[VarianceResult] = Field(default_factory=list)


class RewriteResponse(WireModel):
    directives: RewriteDirective | None = None


class DeployResponse(WireModel):
    prompts: list[DeployPrompt] = Field(default_factory=list)
