"""Logging setup for workflow runs.

Lines read ``timestamp | LEVEL | logger | [action build=<id>] message {...}``.
The bracketed tag is built from the ``action`` and ``build_id`` extras the
controller attaches; remaining extras are emitted as one JSON object, with a
``details`` dict from a ``RankRentError`` folded in at the top level.
"""

import json
import logging
import sys
from typing import Any

from rankrent.config import settings

# Attributes every LogRecord carries, plus the two Formatter.format fills in
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
    "taskName",
}
_TAG_KEYS = ("action", "build_id")


def workflow_extras(record: logging.LogRecord) -> dict[str, Any]:
    """Return the caller-supplied extras, with ``details`` flattened."""
    extras = {
        key: value
        for key, value in vars(record).items()
        if key not in _RECORD_ATTRS and not key.startswith("_")
    }
    details = extras.pop("details", None)
    if isinstance(details, dict):
        for key, value in details.items():
            extras.setdefault(key, value)
    elif details is not None:
        extras["details"] = details
    return extras


class WorkflowLogFormatter(logging.Formatter):
    """Readable line with an action/build tag and JSON extras."""

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        extras = workflow_extras(record)

        tag_parts = []
        if extras.get("action"):
            tag_parts.append(str(extras.pop("action")))
        if extras.get("build_id"):
            tag_parts.append(f"build={extras.pop('build_id')}")
        for key in _TAG_KEYS:
            if key in extras and extras[key] is None:
                extras.pop(key)

        message = f"[{' '.join(tag_parts)}] {record.message}" if tag_parts else record.message
        line = f"{self.formatTime(record, self.datefmt)} | {record.levelname:<8} | {record.name} | {message}"
        if extras:
            line = f"{line} {json.dumps(extras, default=str, ensure_ascii=False)}"

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            line = f"{line}\n{record.exc_text}"
        return line


def setup_logging(level: str | int | None = None) -> None:
    """Attach a stdout handler to the ``rankrent`` logger once."""
    logger = logging.getLogger("rankrent")
    logger.setLevel(level or settings.log_level)

    if logger.handlers:
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(WorkflowLogFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)
    logger.propagate = False
