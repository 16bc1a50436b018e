"""Session-scoped build workflow state and its pure transitions.

``WorkflowState`` is immutable; every transition returns a new state via
``dataclasses.replace`` so the tab-gating rules can be checked without any
I/O. The async controller in ``build_workflow`` is the only writer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Literal

from rankrent.schemas.build import (
    Area,
    AreaMode,
    BuildRecord,
    DeployPrompt,
    GeneratedContent,
    RewriteDirective,
    Service,
    VarianceResult,
)
from rankrent.services.build_form import BuildForm
from rankrent.services.qa_checklist import toggle_qa_check
from rankrent.services.rewrite_advisor import current_directives
from rankrent.services.tiers import max_areas, slots_remaining
from rankrent.services.variance import current_results


class WorkflowTab(str, Enum):
    BUILD = "build"
    SERVICES = "services"
    AREAS = "areas"
    GENERATE = "generate"
    VARIANCE = "variance"
    DEPLOY = "deploy"
    QA = "qa"


SETUP_TABS = frozenset({WorkflowTab.SERVICES, WorkflowTab.AREAS, WorkflowTab.GENERATE})
CONTENT_TABS = frozenset({WorkflowTab.VARIANCE, WorkflowTab.DEPLOY, WorkflowTab.QA})


@dataclass(frozen=True)
class BuildTabView:
    """Always reachable."""

    tab: Literal[WorkflowTab.BUILD] = WorkflowTab.BUILD


@dataclass(frozen=True)
class SetupTabView:
    """Services, areas and generate: need a saved build."""

    tab: WorkflowTab
    build: BuildRecord


@dataclass(frozen=True)
class ContentTabView:
    """Variance, deploy and QA: need a saved build and generated content."""

    tab: WorkflowTab
    build: BuildRecord
    content: GeneratedContent


TabView = BuildTabView | SetupTabView | ContentTabView

# In-flight guard keys, one per mutating action
SAVE_BUILD = "save-build"
SAVE_SERVICES = "save-services"
SAVE_AREAS = "save-areas"
GENERATE_CONTENT = "generate"
RECALC_VARIANCE = "recalc-variance"
LOAD_DEPLOY_PROMPTS = "load-deploy-prompts"


def rewrite_action(slug: str) -> str:
    return f"rewrite:{slug}"


def preview_action(request_id: int) -> str:
    """Previews are keyed per request; the latest request wins."""
    return f"preview-areas:{request_id}"


@dataclass(frozen=True)
class Feedback:
    """Transient banner shown after an action."""

    kind: Literal["success", "error"]
    message: str
    expires_at: float

    def active(self, now: float) -> bool:
        return now < self.expires_at


@dataclass(frozen=True)
class WorkflowState:
    form: BuildForm = field(default_factory=BuildForm)
    errors: dict[str, str] = field(default_factory=dict)
    services: tuple[Service, ...] = ()
    build: BuildRecord | None = None
    areas: tuple[Area, ...] = ()
    preview_areas: tuple[Area, ...] = ()
    area_mode: AreaMode = "manual"
    content: GeneratedContent | None = None
    variance: tuple[VarianceResult, ...] = ()
    directives: dict[str, RewriteDirective] = field(default_factory=dict)
    deploy_prompts: tuple[DeployPrompt, ...] = ()
    qa_checks: frozenset[str] = frozenset()
    active_tab: TabView = field(default_factory=BuildTabView)
    in_flight: frozenset[str] = frozenset()
    feedback: Feedback | None = None
    # Bumped by discard; results from an earlier session are dropped
    session: int = 0
    preview_request: int = 0

    @property
    def tier(self) -> str:
        return self.build.tier if self.build else self.form.tier

    @property
    def max_areas(self) -> int:
        return max_areas(self.tier)

    @property
    def slots_remaining(self) -> int:
        return slots_remaining(self.tier, len(self.areas))

    @property
    def content_version(self) -> int:
        return self.content.version if self.content else 0

    @property
    def current_variance(self) -> list[VarianceResult]:
        return current_results(list(self.variance), self.content)

    @property
    def current_directives(self) -> dict[str, RewriteDirective]:
        return current_directives(self.directives, self.content)

    def is_busy(self, action: str) -> bool:
        return action in self.in_flight


# Tab gating


def resolve_tab(state: WorkflowState, tab: WorkflowTab | str) -> TabView | None:
    """Return the view for ``tab`` or None when its precondition is unmet."""
    try:
        target = WorkflowTab(tab)
    except ValueError:
        return None

    if target is WorkflowTab.BUILD:
        return BuildTabView()
    if state.build is None:
        return None
    if target in SETUP_TABS:
        return SetupTabView(tab=target, build=state.build)
    if state.content is None:
        return None
    return ContentTabView(tab=target, build=state.build, content=state.content)


def is_tab_enabled(state: WorkflowState, tab: WorkflowTab | str) -> bool:
    return resolve_tab(state, tab) is not None


def activate_tab(state: WorkflowState, tab: WorkflowTab | str) -> WorkflowState:
    """Switch tabs; a gated tab leaves the state untouched."""
    view = resolve_tab(state, tab)
    if view is None:
        return state
    return replace(state, active_tab=view)


# Build lifecycle


def update_form(state: WorkflowState, **changes: str) -> WorkflowState:
    return replace(state, form=replace(state.form, **changes))


def select_services(state: WorkflowState, services: tuple[Service, ...]) -> WorkflowState:
    return replace(state, services=tuple(services))


def build_validation_failed(state: WorkflowState, errors: dict[str, str]) -> WorkflowState:
    return replace(state, errors=dict(errors))


def build_created(state: WorkflowState, build: BuildRecord) -> WorkflowState:
    return replace(state, build=build, errors={})


def discard_build(state: WorkflowState) -> WorkflowState:
    """Drop the build and everything derived from it in one step."""
    return replace(
        state,
        build=None,
        content=None,
        variance=(),
        directives={},
        areas=(),
        preview_areas=(),
        deploy_prompts=(),
        active_tab=BuildTabView(),
        session=state.session + 1,
        preview_request=state.preview_request + 1,
    )


# Areas


def set_area_mode(state: WorkflowState, mode: AreaMode) -> WorkflowState:
    """Switching input mode always discards the unconfirmed preview."""
    return replace(
        state,
        area_mode=mode,
        preview_areas=(),
        preview_request=state.preview_request + 1,
    )


def preview_requested(state: WorkflowState, mode: AreaMode) -> WorkflowState:
    """A new preview replaces the unconfirmed one and supersedes any in flight."""
    return set_area_mode(state, mode)


def areas_previewed(state: WorkflowState, areas: list[Area]) -> WorkflowState:
    return replace(state, preview_areas=tuple(areas))


def areas_confirmed(state: WorkflowState, areas: list[Area]) -> WorkflowState:
    return replace(state, areas=tuple(areas), preview_areas=())


# Content and derived results


def content_generated(state: WorkflowState, content: GeneratedContent) -> WorkflowState:
    return replace(state, content=content)


def variance_computed(state: WorkflowState, results: list[VarianceResult]) -> WorkflowState:
    return replace(state, variance=tuple(results))


def directive_cached(state: WorkflowState, slug: str, directive: RewriteDirective) -> WorkflowState:
    return replace(state, directives={**state.directives, slug: directive})


def deploy_prompts_loaded(state: WorkflowState, prompts: list[DeployPrompt]) -> WorkflowState:
    return replace(state, deploy_prompts=tuple(prompts))


def toggle_qa(state: WorkflowState, item_id: str) -> WorkflowState:
    return replace(state, qa_checks=toggle_qa_check(state.qa_checks, item_id))


# Action bookkeeping


def action_started(state: WorkflowState, action: str) -> WorkflowState:
    return replace(state, in_flight=state.in_flight | {action})


def action_finished(state: WorkflowState, action: str) -> WorkflowState:
    return replace(state, in_flight=state.in_flight - {action})


def show_feedback(
    state: WorkflowState,
    kind: Literal["success", "error"],
    message: str,
    *,
    now: float,
    ttl_seconds: float,
) -> WorkflowState:
    return replace(state, feedback=Feedback(kind=kind, message=message, expires_at=now + ttl_seconds))


def visible_feedback(state: WorkflowState, now: float) -> Feedback | None:
    if state.feedback is None or not state.feedback.active(now):
        return None
    return state.feedback
