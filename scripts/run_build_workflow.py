"""Drive one rank-to-rent build end to end from a YAML/JSON definition."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from rankrent.core.exceptions import AreaQuotaExceededError, BuildValidationError
from rankrent.core.logging import setup_logging
from rankrent.integrations.build_backend import BuildBackend
from rankrent.integrations.edge_functions import EdgeFunctionClient
from rankrent.schemas.build import Service
from rankrent.services.area_allocator import check_area_quota, parse_manual_area_names, resolve_preset_pack
from rankrent.services.build_form import BuildForm, validate_build_form
from rankrent.services.build_workflow import BuildWorkflow
from rankrent.services.catalog import SERVICE_CATALOG, add_custom_service, toggle_service
from rankrent.services.deploy_prompts import render_prompt_summary
from rankrent.services.workflow_state import WorkflowTab

logger = logging.getLogger(__name__)

CATALOG_BY_SLUG = {service.slug: service for service in SERVICE_CATALOG}


@dataclass(slots=True)
class BuildDefinition:
    """Parsed build definition file."""

    form: BuildForm
    services: tuple[Service, ...]
    areas: dict[str, Any] = field(default_factory=dict)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("definition", help="Path to build definition (YAML or JSON)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the form and area quota locally without calling the backend",
    )
    parser.add_argument(
        "--skip-variance",
        action="store_true",
        help="Do not run the variance check after generating content",
    )
    return parser.parse_args(argv)


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def load_build_definition(path: Path) -> BuildDefinition:
    """Load and normalize a build definition file."""
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("build definition must be a mapping")

    form = BuildForm(
        brand_name=_as_text(payload.get("brand_name")),
        city=_as_text(payload.get("city")),
        address=_as_text(payload.get("address")),
        phone=_as_text(payload.get("phone")),
        tier=_as_text(payload.get("tier")),
        radius_miles=_as_text(payload.get("radius_miles")),
        override_service_count=_as_text(payload.get("override_service_count")),
    )

    services: tuple[Service, ...] = ()
    for entry in payload.get("services") or []:
        if isinstance(entry, str) and entry in CATALOG_BY_SLUG:
            services = toggle_service(services, CATALOG_BY_SLUG[entry])
        elif isinstance(entry, dict):
            services = add_custom_service(services, _as_text(entry.get("name")))
        else:
            services = add_custom_service(services, _as_text(entry))

    areas = payload.get("areas") or {}
    if not isinstance(areas, dict):
        raise ValueError("'areas' must be a mapping with a 'mode' key")
    return BuildDefinition(form=form, services=services, areas=areas)


def planned_area_names(areas: dict[str, Any]) -> list[str] | None:
    """Names a manual or preset request would submit; None for postcode mode."""
    mode = areas.get("mode")
    if mode == "manual":
        return parse_manual_area_names("\n".join(_as_text(name) for name in areas.get("names") or []))
    if mode == "preset":
        return resolve_preset_pack(_as_text(areas.get("pack")))
    return None


def dry_run(definition: BuildDefinition) -> int:
    """Run the local checks only."""
    errors = validate_build_form(definition.form, definition.services)
    if errors:
        error = BuildValidationError(errors)
        print(f"{error.message}:", file=sys.stderr)
        for field_name, message in errors.items():
            print(f"  {field_name}: {message}", file=sys.stderr)
        return 1

    names = planned_area_names(definition.areas)
    if names:
        try:
            check_area_quota(definition.form.tier, len(names))
        except AreaQuotaExceededError as exc:
            print(f"Area quota check failed: {exc.message}", file=sys.stderr)
            return 1

    print(
        "DRY RUN build definition OK: "
        f"tier={definition.form.tier} services={len(definition.services)} "
        f"areas={len(names) if names is not None else 'postcode'}"
    )
    return 0


async def _allocate_areas(workflow: BuildWorkflow, areas: dict[str, Any]) -> bool:
    mode = areas.get("mode")
    if mode is None:
        return True
    if mode == "manual":
        previewed = await workflow.preview_manual_areas(
            "\n".join(_as_text(name) for name in areas.get("names") or [])
        )
    elif mode == "postcode":
        previewed = await workflow.preview_postcode_areas(_as_text(areas.get("postcode")))
    elif mode == "preset":
        previewed = await workflow.preview_preset_areas(_as_text(areas.get("pack")))
    else:
        print(f"Unknown area mode: {mode}", file=sys.stderr)
        return False
    return previewed and await workflow.confirm_areas()


def _report_failure(workflow: BuildWorkflow, step: str) -> int:
    feedback = workflow.current_feedback()
    message = feedback.message if feedback else "; ".join(workflow.state.errors.values())
    print(f"{step} failed: {message or 'unknown error'}", file=sys.stderr)
    return 1


async def run_workflow(workflow: BuildWorkflow, definition: BuildDefinition, *, skip_variance: bool) -> int:
    """Run build -> areas -> generate -> variance -> deploy and print the prompts."""
    workflow.update_form(**asdict(definition.form))
    for service in definition.services:
        workflow.toggle_service(service)

    if not await workflow.save_build():
        return _report_failure(workflow, "Build")
    if not await _allocate_areas(workflow, definition.areas):
        return _report_failure(workflow, "Areas")
    if not await workflow.generate_content():
        return _report_failure(workflow, "Generate")

    if not skip_variance:
        if not await workflow.recalculate_variance():
            return _report_failure(workflow, "Variance")
        for result in workflow.state.current_variance:
            print(
                f"{result.status.upper():<4} /{result.slug} "
                f"{result.score * 100:.1f}% vs /{result.matched_slug}"
            )

    await workflow.activate_tab(WorkflowTab.DEPLOY)
    if not workflow.state.deploy_prompts:
        return _report_failure(workflow, "Deploy")
    for prompt in workflow.state.deploy_prompts:
        print(render_prompt_summary(prompt))
        print()
    return 0


async def async_main(argv: list[str] | None = None) -> int:
    """Async entrypoint."""
    args = parse_args(argv)
    setup_logging()

    try:
        definition = load_build_definition(Path(args.definition))
    except (OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Failed to load build definition: {exc}", file=sys.stderr)
        return 1

    if args.dry_run:
        return dry_run(definition)

    async with EdgeFunctionClient() as client:
        workflow = BuildWorkflow(BuildBackend(client))
        return await run_workflow(workflow, definition, skip_variance=args.skip_variance)


def main() -> int:
    """Sync wrapper."""
    return asyncio.run(async_main())


if __name__ == "__main__":
    raise SystemExit(main())
