"""Unit tests for workflow client settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rankrent.config import Settings


def test_functions_base_url_uses_project_origin() -> None:
    settings = Settings(_env_file=None, supabase_url="https://demo.supabase.co/rest/v1/")

    assert settings.functions_base_url == "https://demo.supabase.co/functions/v1"


def test_functions_base_url_requires_absolute_url() -> None:
    assert Settings(_env_file=None, supabase_url="demo.supabase.co").functions_base_url is None
    assert Settings(_env_file=None, supabase_url=None).functions_base_url is None


def test_blank_credentials_are_treated_as_unset() -> None:
    settings = Settings(_env_file=None, supabase_anon_key="   ", session_access_token="")

    assert settings.supabase_anon_key is None
    assert settings.session_access_token is None


def test_defaults_match_workflow_timings() -> None:
    settings = Settings(_env_file=None)

    assert settings.edge_function_timeout_seconds == 20.0
    assert settings.feedback_dismiss_seconds == 3.0


@pytest.mark.parametrize("field_name", ["edge_function_timeout_seconds", "feedback_dismiss_seconds"])
def test_non_positive_durations_are_rejected(field_name: str) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{field_name: 0})
