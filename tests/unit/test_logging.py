"""Unit tests for the workflow log formatter."""

from __future__ import annotations

import json
import logging

from rankrent.core.logging import WorkflowLogFormatter, workflow_extras


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="rankrent.services.build_workflow",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Workflow action failed",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_action_and_build_id_become_a_tag() -> None:
    line = WorkflowLogFormatter().format(_record(action="save-areas", build_id="b1"))

    assert line.endswith("| WARNING  | rankrent.services.build_workflow | [save-areas build=b1] Workflow action failed")


def test_error_details_are_folded_into_extras() -> None:
    line = WorkflowLogFormatter().format(
        _record(
            action="save-areas",
            error="10 areas exceeds the tier_1 limit of 5",
            details={"tier": "tier_1", "max_areas": 5, "requested": 10},
        )
    )

    _, _, payload = line.partition("[save-areas] Workflow action failed ")
    assert json.loads(payload) == {
        "error": "10 areas exceeds the tier_1 limit of 5",
        "tier": "tier_1",
        "max_areas": 5,
        "requested": 10,
    }


def test_details_do_not_override_explicit_extras() -> None:
    extras = workflow_extras(_record(function="build-areas", details={"function": "build-create", "status": 500}))

    assert extras == {"function": "build-areas", "status": 500}


def test_null_build_id_is_dropped() -> None:
    line = WorkflowLogFormatter().format(_record(build_id=None))

    assert line.endswith("| Workflow action failed")


def test_private_attributes_are_not_emitted() -> None:
    line = WorkflowLogFormatter().format(_record(_internal="x", count=3))

    assert line.endswith('Workflow action failed {"count": 3}')
    assert "_internal" not in line
