"""Custom exception classes for the build workflow."""

from typing import Any


class RankRentError(Exception):
    """Base exception for all workflow errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


# Local validation
class BuildValidationError(RankRentError):
    """Build form failed validation; nothing was submitted."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__(
            "Build form is invalid",
            details={"fields": sorted(self.errors)},
        )


# Workflow gating
class WorkflowPreconditionError(RankRentError):
    """A gated action was attempted while its precondition is unmet."""

    pass


class AreaQuotaExceededError(WorkflowPreconditionError):
    """Confirming the preview would push saved areas above the tier cap."""

    def __init__(self, tier: str, max_areas: int, requested: int) -> None:
        self.tier = tier
        self.max_areas = max_areas
        self.requested = requested
        if max_areas == 0:
            message = f"Location areas are disabled for {tier}"
        else:
            message = (
                f"{requested} areas exceeds the {tier} limit of {max_areas}"
            )
        super().__init__(
            message,
            details={"tier": tier, "max_areas": max_areas, "requested": requested},
        )


class StaleContentError(WorkflowPreconditionError):
    """Derived data refers to pages missing from the current content."""

    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(f"Page no longer exists in current content: {slug}")


class ActionInProgressError(RankRentError):
    """The same action is already in flight."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"{action} is already in progress")


# Remote function errors
class EdgeFunctionError(RankRentError):
    """Non-2xx response or transport failure from a remote function."""

    def __init__(self, function_name: str, status: int, body_text: str) -> None:
        self.function_name = function_name
        self.status = status
        self.body_text = body_text
        super().__init__(
            body_text or f"{function_name} failed",
            details={"function": function_name, "status": status},
        )


class UnexpectedResponseError(EdgeFunctionError):
    """A 2xx response did not carry the expected payload."""

    def __init__(self, function_name: str, status: int = 200) -> None:
        super().__init__(
            function_name,
            status,
            f"Unexpected response from {function_name}",
        )
