"""Build workflow controller.

Drives brand -> services -> areas -> generate -> variance -> deploy -> QA
for one operator session. Each public action is all-or-nothing: on failure
the prior state is kept, a transient error banner is set and the action
returns ``False`` so the operator can retry it. Starting a preview is the
exception: it discards the unconfirmed preview up front.

Results that arrive after ``discard_build`` belong to a dead session and are
dropped, as are previews superseded by a later request.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Literal

from rankrent.config import settings
from rankrent.core.exceptions import (
    ActionInProgressError,
    RankRentError,
    WorkflowPreconditionError,
)
from rankrent.integrations.build_backend import BuildBackend
from rankrent.schemas.build import Area, AreaMode, Service, VarianceResult
from rankrent.services import workflow_state as wf
from rankrent.services.area_allocator import AreaAllocator
from rankrent.services.build_form import build_create_payload, form_radius, validate_build_form
from rankrent.services.catalog import add_custom_service, toggle_service
from rankrent.services.content_generation import ContentGenerationGateway
from rankrent.services.deploy_prompts import DeployPromptSequencer
from rankrent.services.rewrite_advisor import RewriteAdvisor
from rankrent.services.variance import VarianceEvaluator

logger = logging.getLogger(__name__)


class BuildWorkflow:
    """Owns the session state and sequences calls to the build backend."""

    def __init__(
        self,
        backend: BuildBackend,
        *,
        state: wf.WorkflowState | None = None,
        clock: Callable[[], float] = time.monotonic,
        feedback_seconds: float | None = None,
    ) -> None:
        self.backend = backend
        self.state = state or wf.WorkflowState()
        self.clock = clock
        self.feedback_seconds = feedback_seconds or settings.feedback_dismiss_seconds

        self.allocator = AreaAllocator(backend)
        self.generator = ContentGenerationGateway(backend)
        self.evaluator = VarianceEvaluator(backend)
        self.advisor = RewriteAdvisor(backend)
        self.sequencer = DeployPromptSequencer(backend)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _guard(self, action: str) -> AsyncIterator[None]:
        if self.state.is_busy(action):
            raise ActionInProgressError(action)
        self.state = wf.action_started(self.state, action)
        try:
            yield
        finally:
            self.state = wf.action_finished(self.state, action)

    def _notify(self, kind: Literal["success", "error"], message: str) -> None:
        self.state = wf.show_feedback(
            self.state,
            kind,
            message,
            now=self.clock(),
            ttl_seconds=self.feedback_seconds,
        )

    def _fail(
        self,
        action: str,
        error: RankRentError,
        fallback: str,
        *,
        session: int | None = None,
    ) -> bool:
        if session is not None and self._discarded_since(session, action):
            return False
        if isinstance(error, ActionInProgressError):
            logger.info("Duplicate submission ignored", extra={"action": action})
            return False
        logger.warning(
            "Workflow action failed",
            extra={"action": action, "error": error.message, "details": error.details},
        )
        self._notify("error", error.message or fallback)
        return False

    def _succeed(self, message: str) -> bool:
        self._notify("success", message)
        return True

    def _discarded_since(self, session: int, action: str) -> bool:
        """True when the build was discarded while ``action`` was awaiting."""
        if self.state.session == session:
            return False
        logger.info("Result dropped after build discard", extra={"action": action})
        return True

    def current_feedback(self, now: float | None = None) -> wf.Feedback | None:
        return wf.visible_feedback(self.state, self.clock() if now is None else now)

    # ------------------------------------------------------------------
    # Local edits (no network)
    # ------------------------------------------------------------------

    def update_form(self, **changes: str) -> None:
        self.state = wf.update_form(self.state, **changes)

    def toggle_service(self, service: Service) -> None:
        self.state = wf.select_services(self.state, toggle_service(self.state.services, service))

    def add_custom_service(self, name: str) -> bool:
        """Return True when a new service was appended."""
        updated = add_custom_service(self.state.services, name)
        if updated == self.state.services:
            return False
        self.state = wf.select_services(self.state, updated)
        return True

    def toggle_qa_check(self, item_id: str) -> None:
        self.state = wf.toggle_qa(self.state, item_id)

    def set_area_mode(self, mode: AreaMode) -> None:
        self.state = wf.set_area_mode(self.state, mode)

    def discard_build(self) -> None:
        logger.info(
            "Build discarded",
            extra={"build_id": self.state.build.id if self.state.build else None},
        )
        self.state = wf.discard_build(self.state)

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    async def save_build(self) -> bool:
        if self.state.build is not None:
            return self._fail(
                wf.SAVE_BUILD,
                WorkflowPreconditionError("Discard the current build before creating a new one"),
                "Failed to save build",
            )

        errors = validate_build_form(self.state.form, self.state.services)
        self.state = wf.build_validation_failed(self.state, errors)
        if errors:
            logger.info("Build form rejected", extra={"fields": sorted(errors)})
            return False

        payload = build_create_payload(self.state.form, self.state.services)
        session = self.state.session
        try:
            async with self._guard(wf.SAVE_BUILD):
                build = await self.backend.create_build(payload)
        except RankRentError as e:
            return self._fail(wf.SAVE_BUILD, e, "Failed to save build", session=session)

        if self._discarded_since(session, wf.SAVE_BUILD):
            return False

        self.state = wf.build_created(self.state, build)
        logger.info("Build created", extra={"build_id": build.id, "tier": build.tier})
        return self._succeed("Build saved")

    async def save_services(self) -> bool:
        build = self.state.build
        session = self.state.session
        try:
            if build is None:
                raise WorkflowPreconditionError("Save the build first")
            async with self._guard(wf.SAVE_SERVICES):
                await self.backend.save_services(build.id, list(self.state.services))
        except RankRentError as e:
            return self._fail(wf.SAVE_SERVICES, e, "Failed to save services", session=session)

        if self._discarded_since(session, wf.SAVE_SERVICES):
            return False

        return self._succeed("Services saved")

    # ------------------------------------------------------------------
    # Areas
    # ------------------------------------------------------------------

    def _superseded_preview(self, request_id: int, mode: AreaMode) -> bool:
        if self.state.preview_request == request_id:
            return False
        logger.info("Superseded area preview dropped", extra={"mode": mode, "request": request_id})
        return True

    async def _preview(
        self,
        mode: AreaMode,
        request: Callable[[str | None, str], Awaitable[list[Area]]],
    ) -> bool:
        """Run one preview request; any later request or mode switch supersedes it."""
        self.state = wf.preview_requested(self.state, mode)
        request_id = self.state.preview_request
        action = wf.preview_action(request_id)
        build_id = self.state.build.id if self.state.build else None
        try:
            async with self._guard(action):
                areas = await request(build_id, self.state.tier)
        except RankRentError as e:
            if self._superseded_preview(request_id, mode):
                return False
            return self._fail(action, e, "Failed to preview areas")

        if self._superseded_preview(request_id, mode):
            return False
        self.state = wf.areas_previewed(self.state, areas)
        return True

    async def preview_manual_areas(self, text: str) -> bool:
        return await self._preview(
            "manual",
            lambda build_id, tier: self.allocator.preview_manual(build_id, tier, text),
        )

    async def preview_postcode_areas(self, postcode: str) -> bool:
        build = self.state.build
        radius = build.radius_miles if build else form_radius(self.state.form)
        return await self._preview(
            "postcode",
            lambda build_id, tier: self.allocator.preview_postcode(build_id, tier, postcode, radius),
        )

    async def preview_preset_areas(self, pack: str) -> bool:
        return await self._preview(
            "preset",
            lambda build_id, tier: self.allocator.preview_preset(build_id, tier, pack),
        )

    async def confirm_areas(self) -> bool:
        build = self.state.build
        preview = list(self.state.preview_areas)
        session = self.state.session
        try:
            if build is None:
                raise WorkflowPreconditionError("Save the build first")
            async with self._guard(wf.SAVE_AREAS):
                saved = await self.allocator.confirm(build, preview)
        except RankRentError as e:
            return self._fail(wf.SAVE_AREAS, e, "Failed to save areas", session=session)

        if self._discarded_since(session, wf.SAVE_AREAS):
            return False

        self.state = wf.areas_confirmed(self.state, saved)
        return self._succeed("Areas saved")

    # ------------------------------------------------------------------
    # Content, variance, rewrites
    # ------------------------------------------------------------------

    async def generate_content(self) -> bool:
        build = self.state.build
        session = self.state.session
        try:
            if build is None:
                raise WorkflowPreconditionError("Save the build first")
            async with self._guard(wf.GENERATE_CONTENT):
                content = await self.generator.generate(
                    build,
                    list(self.state.services),
                    list(self.state.areas),
                    previous_version=self.state.content_version,
                )
        except RankRentError as e:
            return self._fail(wf.GENERATE_CONTENT, e, "Failed to generate content", session=session)

        if self._discarded_since(session, wf.GENERATE_CONTENT):
            return False

        self.state = wf.content_generated(self.state, content)
        return self._succeed("Content generated")

    async def recalculate_variance(self) -> bool:
        content = self.state.content
        session = self.state.session
        try:
            if content is None:
                raise WorkflowPreconditionError("Generate content first")
            async with self._guard(wf.RECALC_VARIANCE):
                results = await self.evaluator.evaluate(content)
        except RankRentError as e:
            return self._fail(wf.RECALC_VARIANCE, e, "Failed to recalculate variance", session=session)

        if self._discarded_since(session, wf.RECALC_VARIANCE):
            return False

        self.state = wf.variance_computed(self.state, results)
        return True

    async def generate_rewrite_directives(self, entry: VarianceResult) -> bool:
        content = self.state.content
        action = wf.rewrite_action(entry.slug)
        session = self.state.session
        try:
            if content is None:
                raise WorkflowPreconditionError("Generate content first")
            async with self._guard(action):
                directive = await self.advisor.advise(entry, content)
        except RankRentError as e:
            return self._fail(action, e, "Failed to generate directives", session=session)

        if self._discarded_since(session, action):
            return False

        self.state = wf.directive_cached(self.state, entry.slug, directive)
        return self._succeed("Rewrite directives generated")

    # ------------------------------------------------------------------
    # Tabs and deploy
    # ------------------------------------------------------------------

    async def activate_tab(self, tab: wf.WorkflowTab | str) -> bool:
        """Switch tabs; entering deploy always refetches the prompts."""
        view = wf.resolve_tab(self.state, tab)
        if view is None:
            logger.info("Gated tab activation ignored", extra={"tab": str(tab)})
            return False

        self.state = wf.activate_tab(self.state, tab)
        if isinstance(view, wf.ContentTabView) and view.tab is wf.WorkflowTab.DEPLOY:
            await self.load_deploy_prompts()
        return True

    async def load_deploy_prompts(self) -> bool:
        build = self.state.build
        content = self.state.content
        session = self.state.session
        try:
            if build is None or content is None:
                raise WorkflowPreconditionError("Generate content first")
            async with self._guard(wf.LOAD_DEPLOY_PROMPTS):
                prompts = await self.sequencer.load(
                    build,
                    list(self.state.areas),
                    list(self.state.services),
                    content,
                )
        except RankRentError as e:
            return self._fail(wf.LOAD_DEPLOY_PROMPTS, e, "Failed to load deploy prompts", session=session)

        if self._discarded_since(session, wf.LOAD_DEPLOY_PROMPTS):
            return False

        self.state = wf.deploy_prompts_loaded(self.state, prompts)
        return True
